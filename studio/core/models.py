from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Studio staff member or licensee account"""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('photographer', 'Photographer'),
        ('va', 'Virtual Assistant'),
        ('licensee', 'Licensee'),
        ('editor', 'Editor'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='licensee')
    # Staff belong to a licensee; a licensee (or standalone admin) leaves this empty
    licensee = models.ForeignKey(
        'self', on_delete=models.CASCADE, null=True, blank=True, related_name='staff_members'
    )
    phone = models.CharField(max_length=20, blank=True, null=True)
    profile_image_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['role'], name='users_role_idx'),
            models.Index(fields=['licensee', 'role'], name='users_lic_role_idx'),
        ]

    def get_licensee_id(self):
        """Return the licensee whose data this user can see"""
        return self.licensee_id or self.id

    @property
    def display_name(self):
        full_name = f'{self.first_name} {self.last_name}'.strip()
        return full_name or self.username

    @property
    def is_editor(self):
        return self.role == 'editor'

    @property
    def is_admin_or_va(self):
        return self.role in ('admin', 'va', 'licensee') or self.is_superuser

    @property
    def can_assign_roles(self):
        return self.role in ('admin', 'licensee') or self.is_superuser

    @property
    def is_production_staff(self):
        return self.role in ('admin', 'va', 'licensee', 'photographer') or self.is_superuser


class AuditLog(models.Model):
    """Audit log for client, booking and catalogue mutations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('view', 'View'),
        ('status_change', 'Status Change'),
        ('assign', 'Assignment'),
        ('upload', 'File Upload'),
        ('deliver', 'Delivery'),
        ('email_sent', 'Email Sent'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    licensee = models.ForeignKey(
        User, on_delete=models.CASCADE, null=True, blank=True, related_name='licensee_audit_logs'
    )
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., client name, property address)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., job ID)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_created_idx'),
            models.Index(fields=['action'], name='audit_action_idx'),
            models.Index(fields=['model_name'], name='audit_model_idx'),
            models.Index(fields=['object_reference'], name='audit_reference_idx'),
        ]

    def __str__(self):
        return f'{self.action} {self.model_name}#{self.object_id}'
