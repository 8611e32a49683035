from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'category', 'price', 'tax_rate', 'is_active', 'show_on_booking_form']
    list_filter = ['type', 'is_active', 'show_on_booking_form', 'is_digital']
    search_fields = ['title', 'category', 'description']
    filter_horizontal = ['exclusive_clients']
    raw_id_fields = ['licensee']
