from decimal import Decimal

from django.conf import settings
from django.db import models


SERVICE_CHOICES = [
    ('photography', 'Photography'),
    ('drone', 'Drone'),
    ('floor_plans', 'Floor Plans'),
    ('video', 'Video'),
    ('virtual_tour', 'Virtual Tour'),
]
SERVICE_TYPES = [choice[0] for choice in SERVICE_CHOICES]


class Booking(models.Model):
    """Scheduled property shoot for a client"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='bookings')
    client = models.ForeignKey('clients.Client', on_delete=models.PROTECT, related_name='bookings')
    property_address = models.TextField()
    scheduled_date = models.DateField()
    scheduled_time = models.CharField(max_length=5, help_text="Local start time as HH:MM")
    services = models.JSONField(default=list)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    photographer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='photography_bookings'
    )
    notes = models.TextField(blank=True, null=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['-scheduled_date', '-scheduled_time']
        indexes = [
            models.Index(fields=['licensee', 'status'], name='bookings_lic_status_idx'),
            models.Index(fields=['licensee', 'scheduled_date'], name='bookings_lic_date_idx'),
            models.Index(fields=['photographer', 'scheduled_date'], name='bookings_photog_date_idx'),
        ]

    def __str__(self):
        return f'{self.property_address} on {self.scheduled_date}'
