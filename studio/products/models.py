from decimal import Decimal

from django.conf import settings
from django.db import models


class Product(models.Model):
    """Services, packages and add-ons a licensee sells"""
    TYPE_CHOICES = [
        ('product', 'Product'),
        ('package', 'Package'),
        ('addon', 'Add-on'),
    ]

    licensee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='products')
    title = models.CharField(max_length=255)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='product')
    description = models.TextField(blank=True, null=True)
    image = models.URLField(max_length=500, blank=True, null=True)
    category = models.CharField(max_length=100, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    tax_rate = models.CharField(max_length=50, default='GST 10%')
    # [{"name": "Up to 20 photos", "price": "199.00"}, ...]
    variations = models.JSONField(default=list, blank=True)
    is_digital = models.BooleanField(default=False)
    requires_onsite = models.BooleanField(default=True)
    # When set, only these clients may order the product
    exclusive_clients = models.ManyToManyField('clients.Client', blank=True, related_name='exclusive_products')
    is_active = models.BooleanField(default=True)
    show_on_booking_form = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['title']
        indexes = [
            models.Index(fields=['licensee', 'type'], name='products_lic_type_idx'),
            models.Index(fields=['licensee', 'is_active'], name='products_lic_active_idx'),
        ]

    def __str__(self):
        return self.title
