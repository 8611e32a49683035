from rest_framework import serializers
from .models import Client, Office, Communication


class OfficeSerializer(serializers.ModelSerializer):
    client_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Office
        fields = ['id', 'name', 'contact_name', 'email', 'phone', 'address', 'website', 'notes',
                  'client_count', 'created_at', 'updated_at']


class ClientSerializer(serializers.ModelSerializer):
    office_name = serializers.CharField(source='office.name', read_only=True)

    class Meta:
        model = Client
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'contact_name', 'office', 'office_name',
            'editing_preferences', 'created_at', 'updated_at'
        ]

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Client name is required')
        return value.strip()

    def validate_editing_preferences(self, value):
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError('Editing preferences must be an object keyed by service')
        return value

    def validate_office(self, value):
        request = self.context.get('request')
        if value and request and value.licensee_id != request.user.get_licensee_id():
            raise serializers.ValidationError('Office not found')
        return value


class CommunicationSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.display_name', read_only=True)

    class Meta:
        model = Communication
        fields = ['id', 'client', 'booking', 'type', 'subject', 'message', 'user', 'user_name', 'timestamp']
        read_only_fields = ['client', 'user', 'timestamp']
