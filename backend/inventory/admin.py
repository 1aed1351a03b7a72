from django.contrib import admin
from .models import Motorcycle


@admin.register(Motorcycle)
class MotorcycleAdmin(admin.ModelAdmin):
    list_display = ['chassis_number', 'brand', 'model', 'year', 'state', 'branch', 'retail_price', 'currency', 'organization']
    list_filter = ['organization', 'state', 'brand', 'branch', 'currency']
    search_fields = ['chassis_number', 'engine_number', 'license_plate', 'brand__name', 'model__name']
    raw_id_fields = ['client', 'seller', 'supplier']
    ordering = ['-created_at']
