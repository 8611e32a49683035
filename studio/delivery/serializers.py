import re

from rest_framework import serializers
from .models import DeliverySettings, DeliveryComment, DEFAULT_SECTION_ORDER


class DeliverySettingsSerializer(serializers.ModelSerializer):
    header_image_file = serializers.ImageField(write_only=True, required=False)

    class Meta:
        model = DeliverySettings
        fields = [
            'id', 'job_card', 'delivery_url', 'header_image', 'header_image_file', 'enable_comments',
            'enable_downloads', 'section_order', 'created_at', 'updated_at'
        ]
        read_only_fields = ['job_card', 'header_image', 'created_at', 'updated_at']
        extra_kwargs = {'delivery_url': {'required': False}}

    def validate_delivery_url(self, value):
        value = value.strip().lower()
        if not re.match(r'^[a-z0-9][a-z0-9-]*$', value):
            raise serializers.ValidationError('Use lowercase letters, numbers and hyphens only')
        return value

    def validate_section_order(self, value):
        if not isinstance(value, list) or any(section not in DEFAULT_SECTION_ORDER for section in value):
            raise serializers.ValidationError(f'Sections must be drawn from: {", ".join(DEFAULT_SECTION_ORDER)}')
        if len(set(value)) != len(value):
            raise serializers.ValidationError('Sections cannot repeat')
        return value


class DeliveryCommentSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryComment
        fields = ['id', 'job_card', 'client_name', 'client_email', 'comment', 'request_revision', 'created_at']
        read_only_fields = ['job_card', 'created_at']

    def validate_client_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Name is required')
        return value.strip()

    def validate_comment(self, value):
        if not value.strip():
            raise serializers.ValidationError('Comment is required')
        return value.strip()


class DownloadTrackingSerializer(serializers.Serializer):
    file_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    file_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
