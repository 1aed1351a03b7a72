from rest_framework import serializers
from .models import Bank, CardType, BankCard, BankingPromotion, InstallmentPlan, WEEKDAYS


class BankSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bank
        fields = ['id', 'name', 'logo_url', 'is_enabled', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class CardTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = CardType
        fields = ['id', 'name', 'type', 'logo_url', 'created_at']
        read_only_fields = ['created_at']


class BankCardSerializer(serializers.ModelSerializer):
    bank_name = serializers.CharField(source='bank.name', read_only=True)
    card_type_name = serializers.CharField(source='card_type.name', read_only=True)
    card_type_type = serializers.CharField(source='card_type.type', read_only=True)

    class Meta:
        model = BankCard
        fields = ['id', 'bank', 'bank_name', 'card_type', 'card_type_name', 'card_type_type',
                  'is_enabled', 'order', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class InstallmentPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = InstallmentPlan
        fields = ['id', 'installments', 'interest_rate', 'is_enabled']


class BankingPromotionSerializer(serializers.ModelSerializer):
    installment_plans = InstallmentPlanSerializer(many=True, required=False)
    bank_name = serializers.CharField(source='bank.name', read_only=True)
    bank_card_name = serializers.StringRelatedField(source='bank_card', read_only=True)

    class Meta:
        model = BankingPromotion
        fields = [
            'id', 'name', 'description', 'discount_rate', 'surcharge_rate', 'active_days',
            'payment_method', 'bank', 'bank_name', 'bank_card', 'bank_card_name', 'is_enabled',
            'start_date', 'end_date', 'installment_plans', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_active_days(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Debe ser una lista de días.')
        invalid = [day for day in value if day not in WEEKDAYS]
        if invalid:
            raise serializers.ValidationError(f"Días inválidos: {', '.join(map(str, invalid))}")
        return value

    def validate_bank_card(self, value):
        organization = self.context.get('organization')
        if value is not None and organization is not None and value.organization_id != organization.id:
            raise serializers.ValidationError('La tarjeta no pertenece a la organización.')
        return value

    def validate(self, attrs):
        for field in ('discount_rate', 'surcharge_rate'):
            value = attrs.get(field)
            if value is not None and not 0 <= value <= 100:
                raise serializers.ValidationError({field: 'El porcentaje debe estar entre 0 y 100.'})
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': 'La fecha de fin no puede ser anterior a la de inicio.'})
        return attrs


class PromotionCalculateSerializer(serializers.Serializer):
    promotion = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    installments = serializers.IntegerField(min_value=1, required=False, allow_null=True)
