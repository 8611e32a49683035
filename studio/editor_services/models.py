from decimal import Decimal

from django.conf import settings
from django.db import models


class EditorServiceCategory(models.Model):
    """A group of priced editing options offered by one editor"""
    licensee = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='editor_service_categories'
    )
    editor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='service_categories')
    category_name = models.CharField(max_length=255)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'editor_service_categories'
        ordering = ['display_order', 'id']
        verbose_name_plural = 'Editor service categories'
        indexes = [
            models.Index(fields=['editor', 'display_order'], name='svc_cat_editor_order_idx'),
        ]

    def __str__(self):
        return self.category_name


class EditorServiceOption(models.Model):
    category = models.ForeignKey(EditorServiceCategory, on_delete=models.CASCADE, related_name='options')
    option_name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='AUD')
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'editor_service_options'
        ordering = ['display_order', 'id']

    def __str__(self):
        return f'{self.option_name} ({self.price} {self.currency})'


class ServiceTemplate(models.Model):
    """Reusable category/option structure that can be stamped onto an editor"""
    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='service_templates')
    template_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    # {"categories": [{"category_name": ..., "display_order": 0, "options": [{"option_name": ..., "price": ...}]}]}
    template_data = models.JSONField(default=dict)
    is_default = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_templates'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'service_templates'
        ordering = ['-is_default', '-created_at']

    def __str__(self):
        return self.template_name


class EditorServiceChangeLog(models.Model):
    """History of changes to an editor's services and prices"""
    CHANGE_TYPE_CHOICES = [
        ('category_added', 'Category Added'),
        ('category_updated', 'Category Updated'),
        ('category_deleted', 'Category Deleted'),
        ('option_added', 'Option Added'),
        ('option_updated', 'Option Updated'),
        ('option_deleted', 'Option Deleted'),
        ('template_applied', 'Template Applied'),
    ]

    editor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='service_change_logs')
    change_type = models.CharField(max_length=20, choices=CHANGE_TYPE_CHOICES)
    # Plain ids: the rows may be gone by the time the log is read
    category_id = models.IntegerField(null=True, blank=True)
    option_id = models.IntegerField(null=True, blank=True)
    old_value = models.JSONField(null=True, blank=True)
    new_value = models.JSONField(null=True, blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='service_changes_made'
    )
    change_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'editor_service_change_logs'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['editor', '-created_at'], name='svc_log_editor_created_idx'),
        ]

    def __str__(self):
        return f'{self.change_type} for editor {self.editor_id}'
