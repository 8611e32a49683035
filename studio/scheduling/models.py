from django.conf import settings
from django.db import models


DEFAULT_BUSINESS_HOURS = {
    'mon': {'start': '08:00', 'end': '18:00'},
    'tue': {'start': '08:00', 'end': '18:00'},
    'wed': {'start': '08:00', 'end': '18:00'},
    'thu': {'start': '08:00', 'end': '18:00'},
    'fri': {'start': '08:00', 'end': '18:00'},
    'sat': {'start': '09:00', 'end': '17:00'},
    'sun': {'start': '09:00', 'end': '17:00'},
}

EVENT_TYPE_COLORS = {
    'job': '#3b82f6',
    'unavailable': '#ef4444',
    'external': '#8b5cf6',
    'holiday': '#10b981',
}


def default_business_hours():
    return {day: dict(hours) for day, hours in DEFAULT_BUSINESS_HOURS.items()}


class CalendarEvent(models.Model):
    """Photographer calendar entries: shoots, unavailability, holidays and imported events"""
    TYPE_CHOICES = [
        ('job', 'Job'),
        ('unavailable', 'Unavailable'),
        ('external', 'External'),
        ('holiday', 'Holiday'),
    ]

    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='calendar_events')
    photographer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name='photographer_events'
    )
    booking = models.ForeignKey(
        'bookings.Booking', on_delete=models.CASCADE, null=True, blank=True, related_name='calendar_events'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='job')
    start = models.DateTimeField()
    end = models.DateTimeField()
    is_all_day = models.BooleanField(default=False)
    color = models.CharField(max_length=20, blank=True)
    # Google Calendar event id for imported events
    external_id = models.CharField(max_length=255, blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_events'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'calendar_events'
        ordering = ['start']
        indexes = [
            models.Index(fields=['licensee', 'start'], name='events_lic_start_idx'),
            models.Index(fields=['photographer', 'start'], name='events_photog_start_idx'),
            models.Index(fields=['external_id'], name='events_external_idx'),
        ]

    def __str__(self):
        return f'{self.title} ({self.start:%Y-%m-%d %H:%M})'

    def save(self, *args, **kwargs):
        if not self.color:
            self.color = EVENT_TYPE_COLORS.get(self.type, EVENT_TYPE_COLORS['job'])
        super().save(*args, **kwargs)


class BusinessSettings(models.Model):
    """Per-licensee working hours and scheduling rules"""
    licensee = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='business_settings')
    business_hours = models.JSONField(default=default_business_hours)
    minimum_notice_hours = models.PositiveIntegerField(default=24)
    buffer_time_between_jobs = models.PositiveIntegerField(default=30, help_text="Minutes")
    default_job_duration = models.PositiveIntegerField(default=120, help_text="Minutes")
    timezone = models.CharField(max_length=64, default='America/New_York')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'business_settings'
        verbose_name_plural = 'Business settings'

    def __str__(self):
        return f'Business settings for {self.licensee}'


class GoogleCalendarIntegration(models.Model):
    """OAuth tokens for a user's connected Google calendar"""
    SYNC_DIRECTION_CHOICES = [
        ('inbound', 'Inbound'),
        ('outbound', 'Outbound'),
        ('both', 'Both'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='google_calendar')
    google_calendar_id = models.CharField(max_length=255, default='primary')
    access_token = models.TextField()
    refresh_token = models.TextField(blank=True)
    token_expiry = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    sync_direction = models.CharField(max_length=10, choices=SYNC_DIRECTION_CHOICES, default='both')
    last_sync_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'google_calendar_integrations'

    def __str__(self):
        return f'Google Calendar for {self.user}'


class CalendarSyncLog(models.Model):
    """Outcome of each Google Calendar sync attempt"""
    SYNC_TYPE_CHOICES = [
        ('pull', 'Pull'),
        ('push', 'Push'),
        ('update', 'Update'),
        ('delete', 'Delete'),
    ]
    STATUS_CHOICES = [
        ('success', 'Success'),
        ('error', 'Error'),
    ]

    integration = models.ForeignKey(GoogleCalendarIntegration, on_delete=models.CASCADE, related_name='sync_logs')
    event = models.ForeignKey(CalendarEvent, on_delete=models.SET_NULL, null=True, blank=True, related_name='sync_logs')
    google_event_id = models.CharField(max_length=255, blank=True, null=True)
    sync_type = models.CharField(max_length=10, choices=SYNC_TYPE_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES)
    error_message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'calendar_sync_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.sync_type} {self.status} at {self.created_at}'
