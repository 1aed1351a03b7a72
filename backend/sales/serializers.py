from rest_framework import serializers
from .models import Reservation, Sale


class ReservationSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.display_name', read_only=True)
    motorcycle_chassis = serializers.CharField(source='motorcycle.chassis_number', read_only=True)
    motorcycle_title = serializers.CharField(source='motorcycle.title', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'motorcycle', 'motorcycle_chassis', 'motorcycle_title', 'client', 'client_name',
            'amount', 'currency', 'payment_method', 'expiration_date', 'notes', 'status',
            'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = ['status', 'created_by', 'created_at', 'updated_at']


class ReservationCreateSerializer(serializers.Serializer):
    motorcycle = serializers.IntegerField()
    client = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    currency = serializers.CharField(max_length=10, required=False, default='ARS')
    payment_method = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    expiration_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class SaleSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.display_name', read_only=True)
    seller_name = serializers.CharField(source='seller.display_name', read_only=True)
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    motorcycle_chassis = serializers.CharField(source='motorcycle.chassis_number', read_only=True)
    motorcycle_title = serializers.CharField(source='motorcycle.title', read_only=True)
    promotion_name = serializers.CharField(source='promotion.name', read_only=True)
    profit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id', 'motorcycle', 'motorcycle_chassis', 'motorcycle_title', 'client', 'client_name',
            'seller', 'seller_name', 'branch', 'branch_name', 'price', 'cost_price', 'profit',
            'currency', 'payment_method', 'installments', 'promotion', 'promotion_name',
            'current_account', 'reservation', 'notes', 'sold_at', 'created_at'
        ]
        read_only_fields = fields


class SaleCreateSerializer(serializers.Serializer):
    motorcycle = serializers.IntegerField()
    client = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True)
    currency = serializers.CharField(max_length=10, required=False, allow_blank=True)
    payment_method = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    installments = serializers.IntegerField(min_value=1, required=False, default=1)
    promotion = serializers.IntegerField(required=False, allow_null=True)
    current_account = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
