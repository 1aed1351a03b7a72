import django_filters
from .models import MotorcycleTransfer


class MotorcycleTransferFilter(django_filters.FilterSet):
    # Comma separated list, e.g. ?status=REQUESTED,IN_TRANSIT
    status = django_filters.CharFilter(method='filter_status')
    from_branch = django_filters.NumberFilter(field_name='from_branch_id')
    to_branch = django_filters.NumberFilter(field_name='to_branch_id')
    logistic_provider = django_filters.NumberFilter(field_name='logistic_provider_id')
    date_from = django_filters.DateFilter(field_name='request_date', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='request_date', lookup_expr='date__lte')
    motorcycle = django_filters.NumberFilter(field_name='motorcycle_id')

    class Meta:
        model = MotorcycleTransfer
        fields = ['status', 'from_branch', 'to_branch', 'logistic_provider', 'date_from', 'date_to', 'motorcycle']

    def filter_status(self, queryset, name, value):
        statuses = [item.strip().upper() for item in value.split(',') if item.strip()]
        if not statuses:
            return queryset
        return queryset.filter(status__in=statuses)
