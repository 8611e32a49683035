from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['property_address', 'client', 'scheduled_date', 'scheduled_time', 'status', 'photographer', 'price']
    list_filter = ['status', 'scheduled_date']
    search_fields = ['property_address', 'client__name']
    ordering = ['-scheduled_date']
    raw_id_fields = ['licensee', 'client', 'photographer']
