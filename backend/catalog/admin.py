from django.contrib import admin
from .models import Brand, MotorcycleModel, OrganizationBrand, Color, ModelFile


class MotorcycleModelInline(admin.TabularInline):
    model = MotorcycleModel
    extra = 0
    fields = ['name', 'image_url', 'is_active']


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['name', 'color', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']
    ordering = ['name']
    inlines = [MotorcycleModelInline]


@admin.register(MotorcycleModel)
class MotorcycleModelAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand', 'is_active', 'created_at']
    list_filter = ['brand', 'is_active']
    search_fields = ['name', 'brand__name']


@admin.register(OrganizationBrand)
class OrganizationBrandAdmin(admin.ModelAdmin):
    list_display = ['organization', 'brand', 'order', 'color']
    list_filter = ['organization']


@admin.register(Color)
class ColorAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'color_one', 'color_two', 'organization', 'order']
    list_filter = ['type', 'organization']
    search_fields = ['name']


@admin.register(ModelFile)
class ModelFileAdmin(admin.ModelAdmin):
    list_display = ['name', 'model', 'organization', 'file_type', 'size', 'created_at']
    list_filter = ['organization', 'file_type']
    search_fields = ['name', 'model__name']
