from django.contrib import admin
from .models import (
    JobCard, JobIdCounter, ProductionFile, ContentItem, JobActivityLog, OrderStatusAudit,
    ProductionNotification, EmailDeliveryLog,
)


class ProductionFileInline(admin.TabularInline):
    model = ProductionFile
    extra = 0
    fields = ['original_name', 'media_type', 'service_category', 'file_size', 'uploaded_by', 'is_active']
    readonly_fields = ['original_name', 'file_size', 'uploaded_by']


class ContentItemInline(admin.TabularInline):
    model = ContentItem
    extra = 0
    fields = ['name', 'category', 'status', 'sort_order']


@admin.register(JobCard)
class JobCardAdmin(admin.ModelAdmin):
    list_display = ['job_id', 'client', 'status', 'photographer', 'editor', 'assigned_at', 'delivered_at', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['job_id', 'client__name', 'booking__property_address']
    ordering = ['-created_at']
    raw_id_fields = ['licensee', 'booking', 'client', 'photographer', 'editor']
    inlines = [ProductionFileInline, ContentItemInline]


@admin.register(JobIdCounter)
class JobIdCounterAdmin(admin.ModelAdmin):
    list_display = ['name', 'current_value', 'last_updated']


@admin.register(JobActivityLog)
class JobActivityLogAdmin(admin.ModelAdmin):
    list_display = ['job_card', 'action', 'user', 'created_at']
    list_filter = ['action', 'created_at']
    search_fields = ['job_card__job_id', 'description']
    ordering = ['-created_at']


@admin.register(OrderStatusAudit)
class OrderStatusAuditAdmin(admin.ModelAdmin):
    list_display = ['job_card', 'previous_status', 'new_status', 'changed_by', 'changed_at']
    list_filter = ['new_status']
    readonly_fields = ['job_card', 'previous_status', 'new_status', 'reason', 'changed_by', 'changed_at']


@admin.register(ProductionNotification)
class ProductionNotificationAdmin(admin.ModelAdmin):
    list_display = ['recipient', 'type', 'job_card', 'is_read', 'created_at']
    list_filter = ['type', 'is_read']


@admin.register(EmailDeliveryLog)
class EmailDeliveryLogAdmin(admin.ModelAdmin):
    list_display = ['job_card', 'recipient_email', 'status', 'sent_by', 'sent_at']
    list_filter = ['status']
