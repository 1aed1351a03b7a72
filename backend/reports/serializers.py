from decimal import Decimal
from rest_framework import serializers
from backend.current_accounts.models import CurrentAccount


class QuoteSerializer(serializers.Serializer):
    motorcycle = serializers.IntegerField()
    client = serializers.IntegerField(required=False, allow_null=True)
    client_name = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, min_value=Decimal('0.01'))
    down_payment = serializers.DecimalField(max_digits=14, decimal_places=2, required=False,
                                            min_value=Decimal('0'), default=Decimal('0'))
    installments = serializers.IntegerField(required=False, min_value=1)
    interest_rate = serializers.DecimalField(max_digits=7, decimal_places=2, required=False,
                                             min_value=Decimal('0'), default=Decimal('0'))
    payment_frequency = serializers.ChoiceField(choices=CurrentAccount.FREQUENCY_CHOICES, default='MONTHLY')
    promotion = serializers.IntegerField(required=False, allow_null=True)
    promotion_installments = serializers.IntegerField(required=False, min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        price = data.get('price')
        if price is not None and data['down_payment'] > price:
            raise serializers.ValidationError({'down_payment': 'El anticipo no puede superar el precio.'})
        return data
