import django_filters
from django.db.models import Q
from .models import Motorcycle


class MotorcycleFilter(django_filters.FilterSet):
    """Filters for the motorcycle listing"""

    # Comma separated list, e.g. ?state=STOCK,PAUSADO
    state = django_filters.CharFilter(method='filter_state', label='State')
    brand = django_filters.NumberFilter(field_name='brand_id', lookup_expr='exact')
    model = django_filters.NumberFilter(field_name='model_id', lookup_expr='exact')
    branch = django_filters.NumberFilter(field_name='branch_id', lookup_expr='exact')
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    color = django_filters.NumberFilter(field_name='color_id', lookup_expr='exact')
    currency = django_filters.CharFilter(field_name='currency', lookup_expr='iexact')
    year_min = django_filters.NumberFilter(field_name='year', lookup_expr='gte')
    year_max = django_filters.NumberFilter(field_name='year', lookup_expr='lte')
    price_min = django_filters.NumberFilter(field_name='retail_price', lookup_expr='gte')
    price_max = django_filters.NumberFilter(field_name='retail_price', lookup_expr='lte')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Motorcycle
        fields = ['state', 'brand', 'model', 'branch', 'supplier', 'color', 'currency',
                  'year_min', 'year_max', 'price_min', 'price_max', 'search']

    def filter_state(self, queryset, name, value):
        states = [state.strip().upper() for state in value.split(',') if state.strip()]
        if not states:
            return queryset
        return queryset.filter(state__in=states)

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        query = (
            Q(brand__name__icontains=value) |
            Q(model__name__icontains=value) |
            Q(chassis_number__icontains=value) |
            Q(engine_number__icontains=value) |
            Q(license_plate__icontains=value)
        )
        if value.isdigit():
            query |= Q(year=int(value))
        return queryset.filter(query)
