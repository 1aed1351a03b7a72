from rest_framework import serializers
from .models import LogisticProvider, MotorcycleTransfer


class LogisticProviderSerializer(serializers.ModelSerializer):
    class Meta:
        model = LogisticProvider
        fields = [
            'id', 'name', 'contact_name', 'contact_phone', 'contact_email', 'address',
            'transport_types', 'vehicle_types', 'coverage_zones', 'price_per_km', 'base_fee',
            'currency', 'insurance', 'max_weight', 'max_volume', 'special_requirements',
            'rating', 'status', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def _validate_choice_list(self, value, allowed, message):
        if not isinstance(value, list) or not value:
            raise serializers.ValidationError(message)
        invalid = [item for item in value if item not in allowed]
        if invalid:
            raise serializers.ValidationError(f"Valores inválidos: {', '.join(map(str, invalid))}")
        return value

    def validate_transport_types(self, value):
        return self._validate_choice_list(value, LogisticProvider.TRANSPORT_TYPES,
                                          'Debe seleccionar al menos un tipo de transporte')

    def validate_vehicle_types(self, value):
        return self._validate_choice_list(value, LogisticProvider.VEHICLE_TYPES,
                                          'Debe seleccionar al menos un tipo de vehículo')

    def validate_coverage_zones(self, value):
        return self._validate_choice_list(value, LogisticProvider.COVERAGE_ZONES,
                                          'Debe seleccionar al menos una zona de cobertura')

    def validate_rating(self, value):
        if value is not None and not 1 <= value <= 5:
            raise serializers.ValidationError('La calificación debe estar entre 1 y 5.')
        return value

    def validate(self, attrs):
        for field, label in (('price_per_km', 'El precio por km'), ('base_fee', 'La tarifa base'),
                             ('max_weight', 'El peso máximo'), ('max_volume', 'El volumen máximo')):
            value = attrs.get(field)
            if value is not None and value <= 0:
                raise serializers.ValidationError({field: f'{label} debe ser positivo.'})
        return attrs


class MotorcycleTransferSerializer(serializers.ModelSerializer):
    motorcycle_title = serializers.CharField(source='motorcycle.title', read_only=True)
    motorcycle_chassis = serializers.CharField(source='motorcycle.chassis_number', read_only=True)
    from_branch_name = serializers.CharField(source='from_branch.name', read_only=True)
    to_branch_name = serializers.CharField(source='to_branch.name', read_only=True)
    logistic_provider_name = serializers.CharField(source='logistic_provider.name', read_only=True)
    requested_by_username = serializers.CharField(source='requested_by.username', read_only=True)
    confirmed_by_username = serializers.CharField(source='confirmed_by.username', read_only=True)

    class Meta:
        model = MotorcycleTransfer
        fields = [
            'id', 'motorcycle', 'motorcycle_title', 'motorcycle_chassis',
            'from_branch', 'from_branch_name', 'to_branch', 'to_branch_name',
            'logistic_provider', 'logistic_provider_name', 'status', 'request_date',
            'scheduled_pickup_date', 'actual_pickup_date', 'estimated_delivery_date',
            'actual_delivery_date', 'cost', 'currency', 'tracking_number', 'notes',
            'requested_by', 'requested_by_username', 'confirmed_by', 'confirmed_by_username',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class TransferCreateSerializer(serializers.Serializer):
    motorcycle = serializers.IntegerField()
    from_branch = serializers.IntegerField()
    to_branch = serializers.IntegerField()
    logistic_provider = serializers.IntegerField(required=False, allow_null=True)
    scheduled_pickup_date = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['from_branch'] == attrs['to_branch']:
            raise serializers.ValidationError({
                'to_branch': ['La sucursal de origen no puede ser la misma que la de destino']
            })
        return attrs


class TransferStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MotorcycleTransfer.STATUS_CHOICES)
    actual_pickup_date = serializers.DateTimeField(required=False, allow_null=True)
    actual_delivery_date = serializers.DateTimeField(required=False, allow_null=True)
    estimated_delivery_date = serializers.DateTimeField(required=False, allow_null=True)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
