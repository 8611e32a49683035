from django.urls import path
from .views import booking_list_create, booking_detail

urlpatterns = [
    path('bookings/', booking_list_create, name='booking-list-create'),
    path('bookings/<int:pk>/', booking_detail, name='booking-detail'),
]
