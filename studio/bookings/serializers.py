import re

from rest_framework import serializers
from .models import Booking, SERVICE_TYPES

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class BookingSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)
    photographer_name = serializers.CharField(source='photographer.display_name', read_only=True)
    job_card_id = serializers.IntegerField(source='job_card.id', read_only=True)
    job_id = serializers.CharField(source='job_card.job_id', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'client', 'client_name', 'property_address', 'scheduled_date', 'scheduled_time',
            'services', 'status', 'photographer', 'photographer_name', 'notes', 'price',
            'job_card_id', 'job_id', 'created_at', 'updated_at'
        ]

    def _licensee_id(self):
        request = self.context.get('request')
        return request.user.get_licensee_id() if request else None

    def validate_property_address(self, value):
        if not value.strip():
            raise serializers.ValidationError('Property address is required')
        return value.strip()

    def validate_scheduled_time(self, value):
        if not TIME_PATTERN.match(value):
            raise serializers.ValidationError('Time must be in HH:MM format')
        return value

    def validate_services(self, value):
        if not isinstance(value, list) or not value:
            raise serializers.ValidationError('Select at least one service')
        unknown = [service for service in value if service not in SERVICE_TYPES]
        if unknown:
            raise serializers.ValidationError(f"Unknown services: {', '.join(map(str, unknown))}")
        # Keep request order, drop duplicates
        return list(dict.fromkeys(value))

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate_client(self, value):
        licensee_id = self._licensee_id()
        if licensee_id and value.licensee_id != licensee_id:
            raise serializers.ValidationError('Client not found')
        return value

    def validate_photographer(self, value):
        if value is None:
            return value
        if value.role != 'photographer':
            raise serializers.ValidationError('Selected user is not a photographer')
        licensee_id = self._licensee_id()
        if licensee_id and value.get_licensee_id() != licensee_id:
            raise serializers.ValidationError('Photographer not found')
        return value
