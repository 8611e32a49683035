from django.contrib import admin
from .models import Client, Office, Communication


@admin.register(Office)
class OfficeAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_name', 'email', 'phone', 'licensee', 'created_at']
    search_fields = ['name', 'contact_name', 'email']
    ordering = ['name']


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'contact_name', 'office', 'licensee', 'created_at']
    list_filter = ['office', 'created_at']
    search_fields = ['name', 'email', 'phone', 'contact_name']
    ordering = ['-created_at']
    raw_id_fields = ['licensee', 'office']


@admin.register(Communication)
class CommunicationAdmin(admin.ModelAdmin):
    list_display = ['client', 'type', 'subject', 'user', 'timestamp']
    list_filter = ['type', 'timestamp']
    search_fields = ['client__name', 'subject', 'message']
    ordering = ['-timestamp']
