import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rest_framework import serializers
from .models import CalendarEvent, BusinessSettings, GoogleCalendarIntegration

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
WEEKDAYS = ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')


class CalendarEventSerializer(serializers.ModelSerializer):
    photographer_name = serializers.CharField(source='photographer.display_name', read_only=True)

    class Meta:
        model = CalendarEvent
        fields = [
            'id', 'photographer', 'photographer_name', 'booking', 'title', 'description', 'type',
            'start', 'end', 'is_all_day', 'color', 'external_id', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['external_id', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {'color': {'required': False}}

    def validate(self, attrs):
        start = attrs.get('start', getattr(self.instance, 'start', None))
        end = attrs.get('end', getattr(self.instance, 'end', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end': 'End time cannot be before start time'})
        return attrs

    def validate_photographer(self, value):
        request = self.context.get('request')
        if value and request and value.get_licensee_id() != request.user.get_licensee_id():
            raise serializers.ValidationError('Photographer not found')
        return value

    def validate_booking(self, value):
        request = self.context.get('request')
        if value and request and value.licensee_id != request.user.get_licensee_id():
            raise serializers.ValidationError('Booking not found')
        return value


class BusinessSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = BusinessSettings
        fields = [
            'business_hours', 'minimum_notice_hours', 'buffer_time_between_jobs',
            'default_job_duration', 'timezone', 'updated_at'
        ]
        read_only_fields = ['updated_at']

    def validate_business_hours(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Business hours must be an object keyed by weekday')
        for day, hours in value.items():
            if day not in WEEKDAYS:
                raise serializers.ValidationError(f'Unknown weekday: {day}')
            if hours is None:
                continue  # closed
            if not isinstance(hours, dict) or not TIME_PATTERN.match(str(hours.get('start', ''))) \
                    or not TIME_PATTERN.match(str(hours.get('end', ''))):
                raise serializers.ValidationError(f'{day} needs start and end times as HH:MM')
            if hours['end'] <= hours['start']:
                raise serializers.ValidationError(f'{day} must end after it starts')
        return value

    def validate_default_job_duration(self, value):
        if value < 15:
            raise serializers.ValidationError('Job duration must be at least 15 minutes')
        return value

    def validate_timezone(self, value):
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise serializers.ValidationError('Unknown timezone')
        return value


class GoogleCalendarStatusSerializer(serializers.ModelSerializer):
    connected = serializers.BooleanField(source='is_active', read_only=True)
    last_sync = serializers.DateTimeField(source='last_sync_at', read_only=True)

    class Meta:
        model = GoogleCalendarIntegration
        fields = ['connected', 'last_sync', 'sync_direction', 'google_calendar_id']
