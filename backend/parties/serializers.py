from rest_framework import serializers
from backend.core.utils import normalize_name
from .models import Client, Supplier


class ClientSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = Client
        fields = [
            'id', 'type', 'first_name', 'last_name', 'company_name', 'display_name',
            'tax_id', 'email', 'phone', 'mobile', 'address', 'vat_status',
            'status', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_tax_id(self, value):
        value = (value or '').strip() or None
        organization = self.context.get('organization')
        if value and organization is not None:
            queryset = Client.objects.filter(organization=organization, tax_id=value)
            if self.instance is not None:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError(f'Ya existe un cliente con el documento {value} en esta organización.')
        return value

    def validate(self, attrs):
        client_type = attrs.get('type', getattr(self.instance, 'type', 'Individual'))
        for field in ('first_name', 'last_name', 'company_name'):
            if field in attrs:
                attrs[field] = normalize_name(attrs[field])

        if client_type == 'LegalEntity':
            company_name = attrs.get('company_name', getattr(self.instance, 'company_name', ''))
            if not company_name:
                raise serializers.ValidationError({'company_name': 'La razón social es requerida para personas jurídicas.'})
        else:
            first_name = attrs.get('first_name', getattr(self.instance, 'first_name', ''))
            last_name = attrs.get('last_name', getattr(self.instance, 'last_name', ''))
            if not first_name or not last_name:
                raise serializers.ValidationError({'first_name': 'Nombre y apellido son requeridos.'})
        return attrs


class SupplierSerializer(serializers.ModelSerializer):
    motorcycles_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Supplier
        fields = [
            'id', 'legal_name', 'commercial_name', 'tax_identification', 'vat_condition',
            'voucher_type', 'gross_income', 'local_tax_registration',
            'contact_name', 'contact_position', 'landline_number', 'mobile_number',
            'email', 'website', 'legal_address', 'commercial_address', 'delivery_address',
            'bank', 'account_type_number', 'cbu', 'bank_alias', 'swift_bic',
            'payment_currency', 'payment_term_days', 'credit_limit', 'payment_methods',
            'status', 'notes', 'motorcycles_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_legal_name(self, value):
        value = normalize_name(value)
        if not value:
            raise serializers.ValidationError('La razón social es requerida.')
        return value

    def validate_tax_identification(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('El CUIT es requerido.')
        organization = self.context.get('organization')
        if organization is not None:
            queryset = Supplier.objects.filter(organization=organization, tax_identification=value)
            if self.instance is not None:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError(f'Ya existe un proveedor con CUIT {value} en esta organización.')
        return value

    def validate_payment_methods(self, value):
        if value is None:
            return []
        if not isinstance(value, list):
            raise serializers.ValidationError('Los medios de pago deben ser una lista.')
        return [str(item) for item in value]
