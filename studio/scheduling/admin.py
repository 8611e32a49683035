from django.contrib import admin
from .models import CalendarEvent, BusinessSettings, GoogleCalendarIntegration, CalendarSyncLog


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'photographer', 'start', 'end', 'is_all_day']
    list_filter = ['type', 'is_all_day']
    search_fields = ['title', 'description']
    raw_id_fields = ['licensee', 'photographer', 'booking', 'created_by']


@admin.register(BusinessSettings)
class BusinessSettingsAdmin(admin.ModelAdmin):
    list_display = ['licensee', 'timezone', 'default_job_duration', 'minimum_notice_hours', 'updated_at']


@admin.register(GoogleCalendarIntegration)
class GoogleCalendarIntegrationAdmin(admin.ModelAdmin):
    list_display = ['user', 'google_calendar_id', 'is_active', 'sync_direction', 'last_sync_at']
    exclude = ['access_token', 'refresh_token']


@admin.register(CalendarSyncLog)
class CalendarSyncLogAdmin(admin.ModelAdmin):
    list_display = ['integration', 'sync_type', 'status', 'google_event_id', 'created_at']
    list_filter = ['sync_type', 'status']
