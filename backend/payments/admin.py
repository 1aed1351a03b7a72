from django.contrib import admin
from .models import (
    PaymentMethod, OrganizationPaymentMethod, PaymentMethodConfiguration,
    MercadoPagoOAuth, PaymentNotification
)


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'created_at']
    search_fields = ['name', 'type']


class PaymentMethodConfigurationInline(admin.TabularInline):
    model = PaymentMethodConfiguration
    extra = 0


@admin.register(OrganizationPaymentMethod)
class OrganizationPaymentMethodAdmin(admin.ModelAdmin):
    list_display = ['organization', 'method', 'is_enabled', 'order']
    list_filter = ['organization', 'is_enabled', 'method']
    inlines = [PaymentMethodConfigurationInline]


@admin.register(MercadoPagoOAuth)
class MercadoPagoOAuthAdmin(admin.ModelAdmin):
    list_display = ['organization', 'mercadopago_user_id', 'email', 'expires_at', 'updated_at']
    readonly_fields = ['access_token', 'refresh_token', 'created_at', 'updated_at']
    search_fields = ['email', 'mercadopago_user_id']


@admin.register(PaymentNotification)
class PaymentNotificationAdmin(admin.ModelAdmin):
    list_display = ['organization', 'mercadopago_payment_id', 'amount', 'is_read', 'expires_at', 'created_at']
    list_filter = ['organization', 'is_read']
