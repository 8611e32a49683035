from django.urls import path
from .views import (
    client_list_create, client_detail, client_communications,
    office_list_create, office_detail
)

urlpatterns = [
    path('clients/', client_list_create, name='client-list-create'),
    path('clients/<int:pk>/', client_detail, name='client-detail'),
    path('clients/<int:pk>/communications/', client_communications, name='client-communications'),
    path('offices/', office_list_create, name='office-list-create'),
    path('offices/<int:pk>/', office_detail, name='office-detail'),
]
