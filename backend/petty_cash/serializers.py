from rest_framework import serializers
from .models import PettyCashDeposit, PettyCashWithdrawal, PettyCashSpend


class PettyCashSpendSerializer(serializers.ModelSerializer):
    class Meta:
        model = PettyCashSpend
        fields = [
            'id', 'withdrawal', 'motive', 'description', 'amount', 'date', 'ticket_url',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PettyCashWithdrawalSerializer(serializers.ModelSerializer):
    amount_pending = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    spends = PettyCashSpendSerializer(many=True, read_only=True)

    class Meta:
        model = PettyCashWithdrawal
        fields = [
            'id', 'deposit', 'user', 'user_name', 'amount_given', 'amount_justified', 'amount_pending',
            'date', 'status', 'spends', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PettyCashDepositSerializer(serializers.ModelSerializer):
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    withdrawals = PettyCashWithdrawalSerializer(many=True, read_only=True)

    class Meta:
        model = PettyCashDeposit
        fields = [
            'id', 'branch', 'branch_name', 'amount', 'date', 'description', 'reference', 'status',
            'withdrawals', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class DepositCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    date = serializers.DateField()
    description = serializers.CharField(max_length=255)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    branch = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('El monto debe ser positivo.')
        return value


class WithdrawalCreateSerializer(serializers.Serializer):
    user_name = serializers.CharField(max_length=200)
    user = serializers.IntegerField(required=False, allow_null=True)
    amount_given = serializers.DecimalField(max_digits=14, decimal_places=2)
    date = serializers.DateField()
    deposit = serializers.IntegerField(required=False, allow_null=True)
    branch = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_amount_given(self, value):
        if value <= 0:
            raise serializers.ValidationError('El monto debe ser positivo.')
        return value


class SpendCreateSerializer(serializers.Serializer):
    withdrawal = serializers.IntegerField()
    motive = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    date = serializers.DateField()
    ticket = serializers.FileField(required=False, allow_null=True)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('El monto del gasto debe ser positivo.')
        return value

    def validate(self, attrs):
        if attrs.get('motive') == 'otros' and not (attrs.get('description') or '').strip():
            raise serializers.ValidationError({
                'description': ["La descripción es requerida cuando el motivo es 'Otros'."]
            })
        return attrs
