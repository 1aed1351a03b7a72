from django.contrib import admin
from .models import Branch


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'order', 'phone', 'is_active', 'created_at']
    list_filter = ['organization', 'is_active']
    search_fields = ['name', 'address']
    ordering = ['organization', 'order']
