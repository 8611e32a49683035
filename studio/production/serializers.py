from django.contrib.auth import get_user_model
from rest_framework import serializers
from .models import (
    JobCard, ProductionFile, ContentItem, JobActivityLog, OrderStatusAudit,
    ProductionNotification, EmailDeliveryLog, JOB_CARD_STATUSES, SERVICE_CATEGORY_CHOICES,
)
from .status import get_status_label, get_available_actions
from . import storage

User = get_user_model()


class ProductionFileSerializer(serializers.ModelSerializer):
    uploaded_by_name = serializers.CharField(source='uploaded_by.display_name', read_only=True)
    download_url = serializers.SerializerMethodField()
    thumbnail_url = serializers.SerializerMethodField()

    class Meta:
        model = ProductionFile
        fields = [
            'id', 'job_card', 'file_name', 'original_name', 'file_size', 'mime_type', 'media_type',
            'service_category', 'instructions', 'export_type', 'custom_description',
            'uploaded_by', 'uploaded_by_name', 'uploaded_at', 'is_active', 'download_url', 'thumbnail_url'
        ]

    def get_download_url(self, obj):
        return storage.signed_download_url(self.context.get('request'), obj.file_path, obj.original_name)

    def get_thumbnail_url(self, obj):
        return storage.signed_download_url(self.context.get('request'), obj.thumbnail_path)


class ContentItemSerializer(serializers.ModelSerializer):
    file_url = serializers.SerializerMethodField()
    thumb_url = serializers.SerializerMethodField()

    class Meta:
        model = ContentItem
        fields = [
            'id', 'job_card', 'content_id', 'name', 'description', 'category', 'media_type', 'status',
            'file', 'file_key', 'thumb_key', 'file_size', 'file_count', 'uploader_role', 'sort_order',
            'file_url', 'thumb_url', 'created_at', 'updated_at'
        ]
        read_only_fields = ['job_card', 'content_id', 'file_key', 'thumb_key', 'uploader_role']

    def get_file_url(self, obj):
        return storage.signed_download_url(self.context.get('request'), obj.file_key, obj.name)

    def get_thumb_url(self, obj):
        return storage.signed_download_url(self.context.get('request'), obj.thumb_key)


class JobActivityLogSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.display_name', read_only=True)

    class Meta:
        model = JobActivityLog
        fields = ['id', 'job_card', 'user', 'user_name', 'action', 'description', 'metadata', 'created_at']
        read_only_fields = ['job_card', 'user', 'created_at']


class OrderStatusAuditSerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source='changed_by.display_name', read_only=True)

    class Meta:
        model = OrderStatusAudit
        fields = ['id', 'job_card', 'previous_status', 'new_status', 'reason', 'changed_by', 'changed_by_name', 'changed_at']


class ProductionNotificationSerializer(serializers.ModelSerializer):
    job_id = serializers.CharField(source='job_card.job_id', read_only=True)

    class Meta:
        model = ProductionNotification
        fields = ['id', 'job_card', 'job_id', 'recipient', 'type', 'message', 'is_read', 'created_at']


class EmailDeliveryLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailDeliveryLog
        fields = ['id', 'job_card', 'recipient_email', 'subject', 'status', 'error_message', 'sent_by', 'sent_at']


class JobCardSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)
    property_address = serializers.CharField(source='booking.property_address', read_only=True)
    scheduled_date = serializers.DateField(source='booking.scheduled_date', read_only=True)
    photographer_name = serializers.CharField(source='photographer.display_name', read_only=True)
    editor_name = serializers.CharField(source='editor.display_name', read_only=True)
    status_label = serializers.SerializerMethodField()

    class Meta:
        model = JobCard
        fields = [
            'id', 'job_id', 'booking', 'client', 'client_name', 'property_address', 'scheduled_date',
            'photographer', 'photographer_name', 'editor', 'editor_name', 'status', 'status_label',
            'requested_services', 'editing_notes', 'revision_notes', 'editor_instructions', 'service_blocks',
            'history', 'assigned_at', 'completed_at', 'delivered_at', 'uploaded_at', 'accepted_at',
            'ready_for_qc_at', 'revision_requested_at', 'created_at', 'updated_at'
        ]

    def get_status_label(self, obj):
        return get_status_label(obj.status)


class JobCardDetailSerializer(JobCardSerializer):
    """Job card with booking, files, content and the caller's available actions"""
    booking_details = serializers.SerializerMethodField()
    client_details = serializers.SerializerMethodField()
    files = serializers.SerializerMethodField()
    content_items = ContentItemSerializer(many=True, read_only=True)
    available_actions = serializers.SerializerMethodField()

    class Meta(JobCardSerializer.Meta):
        fields = JobCardSerializer.Meta.fields + [
            'booking_details', 'client_details', 'files', 'content_items', 'available_actions'
        ]

    def get_booking_details(self, obj):
        from studio.bookings.serializers import BookingSerializer
        return BookingSerializer(obj.booking).data

    def get_client_details(self, obj):
        from studio.clients.serializers import ClientSerializer
        return ClientSerializer(obj.client).data

    def get_files(self, obj):
        files = [f for f in obj.files.all() if f.is_active]
        return ProductionFileSerializer(files, many=True, context=self.context).data

    def get_available_actions(self, obj):
        request = self.context.get('request')
        if not request:
            return []
        return get_available_actions(obj, request.user.role, request.user.id)


class JobCardUpdateSerializer(serializers.ModelSerializer):
    editor = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role='editor'), required=False, allow_null=True)
    photographer = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role='photographer'), required=False, allow_null=True)

    class Meta:
        model = JobCard
        fields = ['status', 'editor', 'photographer', 'requested_services', 'editing_notes',
                  'revision_notes', 'editor_instructions']

    def validate(self, attrs):
        request = self.context.get('request')
        if request:
            licensee_id = request.user.get_licensee_id()
            for field in ('editor', 'photographer'):
                user = attrs.get(field)
                if user and user.get_licensee_id() != licensee_id:
                    raise serializers.ValidationError({field: 'User not found'})
        return attrs


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=JOB_CARD_STATUSES)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    changed_by = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)


class QuickStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=JOB_CARD_STATUSES, error_messages={'required': 'Status is required'})
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ActionSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ServiceBlockSerializer(serializers.Serializer):
    category_id = serializers.IntegerField()
    option_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    instructions = serializers.CharField(required=False, allow_blank=True, default='')
    export_type = serializers.CharField(required=False, allow_blank=True, default='')
    custom_description = serializers.CharField(required=False, allow_blank=True, default='')


class SubmitToEditorSerializer(serializers.Serializer):
    editor_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(role='editor'), source='editor')
    service_blocks = ServiceBlockSerializer(many=True)
    instructions = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_service_blocks(self, value):
        if not value:
            raise serializers.ValidationError('Add at least one service block')
        return value

    def validate(self, attrs):
        """Resolve each block against the editor's price list"""
        from studio.editor_services.models import EditorServiceCategory, EditorServiceOption
        editor = attrs['editor']
        request = self.context.get('request')
        if request and editor.get_licensee_id() != request.user.get_licensee_id():
            raise serializers.ValidationError({'editor_id': 'Editor not found'})

        resolved = []
        for block in attrs['service_blocks']:
            category = EditorServiceCategory.objects.filter(pk=block['category_id'], editor=editor).first()
            if category is None:
                raise serializers.ValidationError({'service_blocks': f"Unknown service category {block['category_id']}"})
            option = None
            if block.get('option_id'):
                option = EditorServiceOption.objects.filter(pk=block['option_id'], category=category).first()
                if option is None:
                    raise serializers.ValidationError({'service_blocks': f"Unknown service option {block['option_id']}"})
            resolved.append({
                **block,
                'category_name': category.category_name,
                'option_name': option.option_name if option else None,
                'price': str(option.price) if option else None,
                'currency': option.currency if option else None,
            })
        attrs['service_blocks'] = resolved
        return attrs


class RevisionReplySerializer(serializers.Serializer):
    reply = serializers.CharField()
    status = serializers.ChoiceField(choices=JOB_CARD_STATUSES, default='editing')


class FileUploadSerializer(serializers.Serializer):
    files = serializers.ListField(child=serializers.FileField(), allow_empty=False)
    media_type = serializers.ChoiceField(choices=ProductionFile.MEDIA_TYPE_CHOICES, default='raw')
    service_category = serializers.ChoiceField(choices=SERVICE_CATEGORY_CHOICES, default='photography')
    instructions = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    export_type = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    custom_description = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_files(self, value):
        max_files = self.context.get('max_files', 10)
        if len(value) > max_files:
            raise serializers.ValidationError(f'Upload at most {max_files} files at a time')
        return value


class UploadUrlSerializer(serializers.Serializer):
    file_name = serializers.CharField(max_length=255)
    content_type = serializers.CharField(max_length=100)
    file_size = serializers.IntegerField(min_value=0, required=False, default=0)
    media_type = serializers.ChoiceField(choices=ProductionFile.MEDIA_TYPE_CHOICES, default='raw')


class FileMetadataSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=500)
    file_name = serializers.CharField(max_length=255)
    content_type = serializers.CharField(max_length=100)
    file_size = serializers.IntegerField(min_value=0)
    media_type = serializers.ChoiceField(choices=ProductionFile.MEDIA_TYPE_CHOICES, default='final')
    category = serializers.ChoiceField(choices=SERVICE_CATEGORY_CHOICES, default='photography')

