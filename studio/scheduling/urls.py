from django.urls import path
from . import views

urlpatterns = [
    path('calendar/events/', views.calendar_event_list_create, name='calendar-event-list-create'),
    path('calendar/events/<int:pk>/', views.calendar_event_detail, name='calendar-event-detail'),
    path('business-settings/', views.business_settings_view, name='business-settings'),
    path('auth/google/', views.google_auth, name='google-auth'),
    path('auth/google/callback/', views.google_auth_callback, name='google-auth-callback'),
    path('google-calendar/status/', views.google_calendar_status, name='google-calendar-status'),
    path('google-calendar/disconnect/', views.google_calendar_disconnect, name='google-calendar-disconnect'),
    path('google-calendar/sync/', views.google_calendar_sync, name='google-calendar-sync'),
]
