from django.contrib import admin
from .models import Reservation, Sale


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ['id', 'motorcycle', 'client', 'amount', 'currency', 'status', 'expiration_date', 'created_at']
    list_filter = ['organization', 'status', 'currency']
    search_fields = ['motorcycle__chassis_number', 'client__last_name', 'client__company_name']
    raw_id_fields = ['motorcycle', 'client']


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['id', 'motorcycle', 'client', 'seller', 'price', 'currency', 'payment_method', 'sold_at']
    list_filter = ['organization', 'currency', 'branch']
    search_fields = ['motorcycle__chassis_number', 'client__last_name', 'client__company_name']
    raw_id_fields = ['motorcycle', 'client', 'current_account']
    ordering = ['-sold_at']
