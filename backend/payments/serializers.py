from decimal import Decimal
from rest_framework import serializers
from .models import PaymentMethod, OrganizationPaymentMethod, MercadoPagoOAuth, PaymentNotification


class PaymentMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentMethod
        fields = ['id', 'name', 'type', 'description', 'icon_url']


class OrganizationPaymentMethodSerializer(serializers.ModelSerializer):
    method = PaymentMethodSerializer(read_only=True)

    class Meta:
        model = OrganizationPaymentMethod
        fields = ['id', 'method', 'is_enabled', 'order', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class MercadoPagoOAuthSerializer(serializers.ModelSerializer):
    """Connection status; tokens are never exposed"""
    environment = serializers.CharField(read_only=True)

    class Meta:
        model = MercadoPagoOAuth
        fields = ['mercadopago_user_id', 'email', 'public_key', 'scopes', 'expires_at',
                  'environment', 'created_at', 'updated_at']


class PaymentNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentNotification
        fields = ['id', 'payment', 'mercadopago_payment_id', 'amount', 'message',
                  'is_read', 'expires_at', 'created_at']


class MercadoPagoConfigSerializer(serializers.Serializer):
    access_token = serializers.CharField(required=False)
    public_key = serializers.CharField(required=False)


class PayWayConfigSerializer(serializers.Serializer):
    merchant_id = serializers.CharField(required=False)
    api_key = serializers.CharField(required=False)
    secret_key = serializers.CharField(required=False)
    site_id = serializers.CharField(required=False)
    environment = serializers.ChoiceField(choices=['sandbox', 'production'], required=False)


class PreferenceSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=255)
    motorcycle_id = serializers.IntegerField(required=False, allow_null=True)
    sale_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    additional_info = serializers.DictField(required=False)


class PointIntentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    device_id = serializers.CharField(max_length=100)
    external_reference = serializers.CharField(required=False, allow_blank=True)


class ProcessOrderSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=255)
    form_data = serializers.DictField()
    payer = serializers.DictField()

    def validate_form_data(self, value):
        missing = [key for key in ('token', 'payment_method_id') if not value.get(key)]
        if missing:
            raise serializers.ValidationError(f"Faltan datos de la tarjeta: {', '.join(missing)}")
        return value

    def validate_payer(self, value):
        if not value.get('email'):
            raise serializers.ValidationError('El email del pagador es requerido.')
        return value
