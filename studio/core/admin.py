from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'first_name', 'last_name', 'role', 'licensee', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff', 'is_superuser', 'date_joined']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    ordering = ['username']
    raw_id_fields = ['licensee']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Studio', {'fields': ('role', 'licensee', 'phone', 'profile_image_url')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Studio', {'fields': ('role', 'licensee', 'phone')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'object_reference', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'model_name', 'object_id', 'object_reference']
    ordering = ['-created_at']
    readonly_fields = ['user', 'licensee', 'action', 'model_name', 'object_id', 'changes', 'ip_address', 'created_at']
