from django.conf import settings
from django.db import models


class Office(models.Model):
    """Real-estate agency offices that group clients"""
    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='offices')
    name = models.CharField(max_length=255)
    contact_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    website = models.URLField(max_length=500, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'offices'
        ordering = ['name']
        indexes = [
            models.Index(fields=['licensee', 'name'], name='offices_lic_name_idx'),
        ]

    def __str__(self):
        return self.name


class Client(models.Model):
    """Agents and agencies who book property shoots"""
    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='clients')
    office = models.ForeignKey(Office, on_delete=models.SET_NULL, null=True, blank=True, related_name='clients')
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    contact_name = models.CharField(max_length=255, blank=True, null=True)
    # Per-service editing instructions, e.g. {"photography": "Bright, warm tones"}
    editing_preferences = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['licensee', '-created_at'], name='clients_lic_created_idx'),
            models.Index(fields=['email'], name='clients_email_idx'),
        ]

    def __str__(self):
        return self.name

    def editing_notes(self):
        """Flatten editing preferences into notes for a new job card"""
        if not self.editing_preferences:
            return ''
        if isinstance(self.editing_preferences, dict):
            lines = []
            for service, preference in self.editing_preferences.items():
                if preference:
                    lines.append(f"{service.replace('_', ' ').title()}: {preference}")
            return '\n'.join(lines)
        return str(self.editing_preferences)


class Communication(models.Model):
    """Logged contact with a client"""
    TYPE_CHOICES = [
        ('email', 'Email'),
        ('phone', 'Phone'),
        ('meeting', 'Meeting'),
        ('sms', 'SMS'),
        ('note', 'Note'),
    ]

    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='+')
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='communications')
    booking = models.ForeignKey('bookings.Booking', on_delete=models.SET_NULL, null=True, blank=True, related_name='communications')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField()
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='communications')
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'communications'
        ordering = ['-timestamp']

    def __str__(self):
        return f'{self.type} with {self.client_id}'
