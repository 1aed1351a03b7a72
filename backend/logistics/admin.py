from django.contrib import admin
from .models import LogisticProvider, MotorcycleTransfer


@admin.register(LogisticProvider)
class LogisticProviderAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'contact_name', 'contact_phone', 'rating', 'status']
    list_filter = ['organization', 'status', 'insurance']
    search_fields = ['name', 'contact_name', 'contact_email']


@admin.register(MotorcycleTransfer)
class MotorcycleTransferAdmin(admin.ModelAdmin):
    list_display = ['id', 'motorcycle', 'from_branch', 'to_branch', 'logistic_provider', 'status', 'request_date']
    list_filter = ['organization', 'status', 'from_branch', 'to_branch']
    search_fields = ['motorcycle__chassis_number', 'tracking_number']
    raw_id_fields = ['motorcycle']
