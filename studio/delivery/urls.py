from django.urls import path
from . import views

urlpatterns = [
    path('delivery/url/<slug:slug>/', views.delivery_page_by_url, name='delivery-page-by-url'),
    path('delivery/<int:job_card_id>/', views.delivery_page, name='delivery-page'),
    path('delivery/<int:job_card_id>/comments/', views.delivery_comments, name='delivery-comments'),
    path('delivery/<int:job_card_id>/comment/', views.delivery_comments, name='delivery-comment'),
    path('delivery/<int:job_card_id>/download/', views.delivery_download, name='delivery-download'),
    path('jobs/<int:pk>/delivery-settings/', views.delivery_settings_view, name='delivery-settings'),
]
