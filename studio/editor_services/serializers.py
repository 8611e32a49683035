from decimal import Decimal, InvalidOperation

from rest_framework import serializers
from .models import EditorServiceCategory, EditorServiceOption, ServiceTemplate, EditorServiceChangeLog


class EditorServiceOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = EditorServiceOption
        fields = ['id', 'category', 'option_name', 'price', 'currency', 'display_order', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['category', 'created_at', 'updated_at']

    def validate_option_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Option name is required')
        return value.strip()

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate_currency(self, value):
        return value.upper()


class EditorServiceCategorySerializer(serializers.ModelSerializer):
    options = EditorServiceOptionSerializer(many=True, read_only=True)

    class Meta:
        model = EditorServiceCategory
        fields = ['id', 'editor', 'category_name', 'display_order', 'is_active', 'options',
                  'created_at', 'updated_at']
        read_only_fields = ['editor', 'created_at', 'updated_at']

    def validate_category_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Category name is required')
        return value.strip()


class ReorderSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)

    def to_internal_value(self, data):
        # Accept {"category_ids": [...]} / {"option_ids": [...]} as well as {"ids": [...]}
        if hasattr(data, 'get') and 'ids' not in data:
            for key in ('category_ids', 'option_ids', 'categoryIds', 'optionIds'):
                if key in data:
                    data = {'ids': data.get(key)}
                    break
        return super().to_internal_value(data)


class ServiceTemplateSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True)

    class Meta:
        model = ServiceTemplate
        fields = ['id', 'template_name', 'description', 'template_data', 'is_default', 'created_by',
                  'created_by_name', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_template_data(self, value):
        if not isinstance(value, dict) or not isinstance(value.get('categories'), list):
            raise serializers.ValidationError('Template data needs a "categories" list')
        for category in value['categories']:
            if not isinstance(category, dict) or not str(category.get('category_name', '')).strip():
                raise serializers.ValidationError('Each category needs a category_name')
            options = category.get('options', [])
            if not isinstance(options, list):
                raise serializers.ValidationError('Category options must be a list')
            for option in options:
                if not isinstance(option, dict) or not str(option.get('option_name', '')).strip():
                    raise serializers.ValidationError('Each option needs an option_name')
                try:
                    price = Decimal(str(option.get('price', '0')))
                except InvalidOperation:
                    raise serializers.ValidationError(f"Invalid price for option {option['option_name']}")
                if price < 0:
                    raise serializers.ValidationError('Option prices cannot be negative')
        return value


class EditorServiceChangeLogSerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source='changed_by.display_name', read_only=True)

    class Meta:
        model = EditorServiceChangeLog
        fields = ['id', 'editor', 'change_type', 'category_id', 'option_id', 'old_value', 'new_value',
                  'changed_by', 'changed_by_name', 'change_reason', 'created_at']
