from django.contrib import admin
from .models import DeliverySettings, DeliveryComment, DeliveryTracking


@admin.register(DeliverySettings)
class DeliverySettingsAdmin(admin.ModelAdmin):
    list_display = ['delivery_url', 'job_card', 'enable_comments', 'enable_downloads', 'updated_at']
    search_fields = ['delivery_url', 'job_card__job_id']
    raw_id_fields = ['job_card']


@admin.register(DeliveryComment)
class DeliveryCommentAdmin(admin.ModelAdmin):
    list_display = ['job_card', 'client_name', 'client_email', 'request_revision', 'created_at']
    list_filter = ['request_revision']
    search_fields = ['client_name', 'client_email', 'comment']


@admin.register(DeliveryTracking)
class DeliveryTrackingAdmin(admin.ModelAdmin):
    list_display = ['job_card', 'action_type', 'file_name', 'created_at']
    list_filter = ['action_type']
