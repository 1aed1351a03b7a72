from django.contrib import admin
from .models import Client, Supplier


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'type', 'tax_id', 'mobile', 'email', 'status', 'organization', 'created_at']
    list_filter = ['organization', 'type', 'status', 'vat_status']
    search_fields = ['first_name', 'last_name', 'company_name', 'tax_id', 'email']
    ordering = ['last_name', 'first_name']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['legal_name', 'commercial_name', 'tax_identification', 'contact_name', 'status', 'organization']
    list_filter = ['organization', 'status', 'payment_currency']
    search_fields = ['legal_name', 'commercial_name', 'tax_identification', 'contact_name']
    ordering = ['legal_name']
