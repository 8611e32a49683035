from django.contrib import admin
from .models import EditorServiceCategory, EditorServiceOption, ServiceTemplate, EditorServiceChangeLog


class EditorServiceOptionInline(admin.TabularInline):
    model = EditorServiceOption
    extra = 0
    fields = ['option_name', 'price', 'currency', 'display_order', 'is_active']


@admin.register(EditorServiceCategory)
class EditorServiceCategoryAdmin(admin.ModelAdmin):
    list_display = ['category_name', 'editor', 'display_order', 'is_active']
    search_fields = ['category_name', 'editor__username']
    raw_id_fields = ['licensee', 'editor']
    inlines = [EditorServiceOptionInline]


@admin.register(ServiceTemplate)
class ServiceTemplateAdmin(admin.ModelAdmin):
    list_display = ['template_name', 'licensee', 'is_default', 'created_at']
    list_filter = ['is_default']


@admin.register(EditorServiceChangeLog)
class EditorServiceChangeLogAdmin(admin.ModelAdmin):
    list_display = ['editor', 'change_type', 'changed_by', 'created_at']
    list_filter = ['change_type']
    readonly_fields = ['editor', 'change_type', 'category_id', 'option_id', 'old_value', 'new_value',
                       'changed_by', 'change_reason', 'created_at']
