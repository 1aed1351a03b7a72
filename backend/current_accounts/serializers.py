from rest_framework import serializers
from .models import CurrentAccount, Payment


class PaymentSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'current_account', 'amount_paid', 'currency', 'payment_date', 'payment_method',
            'transaction_reference', 'installment_number', 'installment_version', 'is_down_payment',
            'surplus_action', 'status', 'notes', 'created_by', 'created_by_username',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class CurrentAccountSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.display_name', read_only=True)
    motorcycle_title = serializers.CharField(source='motorcycle.title', read_only=True)
    motorcycle_chassis = serializers.CharField(source='motorcycle.chassis_number', read_only=True)
    paid_installments = serializers.IntegerField(read_only=True)

    class Meta:
        model = CurrentAccount
        fields = [
            'id', 'client', 'client_name', 'motorcycle', 'motorcycle_title', 'motorcycle_chassis',
            'total_amount', 'down_payment', 'financed_amount', 'remaining_amount',
            'number_of_installments', 'installment_amount', 'payment_frequency', 'start_date',
            'next_due_date', 'end_date', 'interest_rate', 'currency', 'reminder_lead_time_days',
            'status', 'notes', 'paid_installments', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'client', 'motorcycle', 'total_amount', 'down_payment', 'financed_amount',
            'remaining_amount', 'number_of_installments', 'start_date', 'end_date',
            'created_by', 'created_at', 'updated_at'
        ]


class CurrentAccountCreateSerializer(serializers.Serializer):
    client = serializers.IntegerField()
    motorcycle = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    down_payment = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, default=0)
    number_of_installments = serializers.IntegerField(min_value=1)
    installment_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True)
    payment_frequency = serializers.ChoiceField(choices=CurrentAccount.FREQUENCY_CHOICES, default='MONTHLY')
    start_date = serializers.DateField()
    interest_rate = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=0, required=False, default=0)
    currency = serializers.CharField(max_length=10, required=False, default='ARS')
    reminder_lead_time_days = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=CurrentAccount.STATUS_CHOICES, default='ACTIVE')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentCreateSerializer(serializers.Serializer):
    amount_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_date = serializers.DateTimeField(required=False, allow_null=True)
    payment_method = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    transaction_reference = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    installment_number = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    surplus_action = serializers.ChoiceField(choices=Payment.SURPLUS_CHOICES, required=False, allow_null=True)
    is_down_payment = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_amount_paid(self, value):
        if value <= 0:
            raise serializers.ValidationError('El monto pagado debe ser positivo.')
        return value
