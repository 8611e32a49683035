from decimal import Decimal, InvalidOperation

from rest_framework import serializers
from studio.clients.models import Client
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    exclusive_clients = serializers.PrimaryKeyRelatedField(
        many=True, required=False, queryset=Client.objects.all()
    )

    class Meta:
        model = Product
        fields = [
            'id', 'title', 'type', 'description', 'image', 'category', 'price', 'tax_rate', 'variations',
            'is_digital', 'requires_onsite', 'exclusive_clients', 'is_active', 'show_on_booking_form',
            'created_at', 'updated_at'
        ]

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError('Title is required')
        return value.strip()

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate_variations(self, value):
        if value in (None, ''):
            return []
        if not isinstance(value, list):
            raise serializers.ValidationError('Variations must be a list')
        cleaned = []
        for variation in value:
            if not isinstance(variation, dict) or not str(variation.get('name', '')).strip():
                raise serializers.ValidationError('Each variation needs a name')
            try:
                price = Decimal(str(variation.get('price', '0')))
            except InvalidOperation:
                raise serializers.ValidationError(f"Invalid price for variation {variation['name']}")
            if price < 0:
                raise serializers.ValidationError('Variation prices cannot be negative')
            cleaned.append({**variation, 'name': str(variation['name']).strip(), 'price': str(price)})
        return cleaned

    def validate_exclusive_clients(self, value):
        request = self.context.get('request')
        if request:
            licensee_id = request.user.get_licensee_id()
            if any(client.licensee_id != licensee_id for client in value):
                raise serializers.ValidationError('Client not found')
        return value
