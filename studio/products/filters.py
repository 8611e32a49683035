import django_filters
from django.db.models import Q

from .models import Product

TRUE_VALUES = ('true', '1', 'yes')


class ProductFilter(django_filters.FilterSet):
    """Product list filters"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    type = django_filters.ChoiceFilter(field_name='type', choices=Product.TYPE_CHOICES)
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    active = django_filters.CharFilter(method='filter_active', label='Active')
    booking_form = django_filters.CharFilter(method='filter_booking_form', label='Show on booking form')
    client = django_filters.NumberFilter(method='filter_client', label='Available to client')

    class Meta:
        model = Product
        fields = ['search', 'type', 'category', 'active', 'booking_form', 'client']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value) | Q(description__icontains=value) | Q(category__icontains=value)
        )

    def filter_active(self, queryset, name, value):
        return queryset.filter(is_active=value.lower() in TRUE_VALUES)

    def filter_booking_form(self, queryset, name, value):
        return queryset.filter(show_on_booking_form=value.lower() in TRUE_VALUES)

    def filter_client(self, queryset, name, value):
        """Products open to everyone plus those reserved for this client"""
        return queryset.filter(Q(exclusive_clients__isnull=True) | Q(exclusive_clients=value)).distinct()
