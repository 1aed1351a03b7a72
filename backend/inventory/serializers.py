from rest_framework import serializers
from .models import Motorcycle


class MotorcycleListSerializer(serializers.ModelSerializer):
    """Lightweight representation for tables and search results"""
    brand_name = serializers.CharField(source='brand.name', read_only=True)
    model_name = serializers.CharField(source='model.name', read_only=True)
    color_name = serializers.CharField(source='color.name', read_only=True)
    color_one = serializers.CharField(source='color.color_one', read_only=True)
    color_two = serializers.CharField(source='color.color_two', read_only=True)
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    state_display = serializers.CharField(source='get_state_display', read_only=True)

    class Meta:
        model = Motorcycle
        fields = [
            'id', 'brand', 'brand_name', 'model', 'model_name', 'year', 'displacement',
            'color', 'color_name', 'color_one', 'color_two', 'chassis_number', 'engine_number',
            'mileage', 'retail_price', 'wholesale_price', 'cost_price', 'currency',
            'branch', 'branch_name', 'state', 'state_display', 'image_url'
        ]


class MotorcycleSerializer(serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True)
    model_name = serializers.CharField(source='model.name', read_only=True)
    color_name = serializers.CharField(source='color.name', read_only=True)
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.legal_name', read_only=True)
    client_name = serializers.CharField(source='client.display_name', read_only=True)
    seller_name = serializers.CharField(source='seller.display_name', read_only=True)

    class Meta:
        model = Motorcycle
        fields = [
            'id', 'brand', 'brand_name', 'model', 'model_name', 'year', 'displacement',
            'color', 'color_name', 'chassis_number', 'engine_number', 'mileage',
            'cost_price', 'retail_price', 'wholesale_price', 'currency', 'license_plate',
            'image_url', 'supplier', 'supplier_name', 'branch', 'branch_name', 'state',
            'client', 'client_name', 'seller', 'seller_name', 'sold_at', 'observations',
            'created_at', 'updated_at'
        ]
        # State, client and sale data only change through their dedicated operations
        read_only_fields = ['state', 'client', 'seller', 'sold_at', 'created_at', 'updated_at']

    def validate_chassis_number(self, value):
        value = (value or '').strip().upper()
        if not value:
            raise serializers.ValidationError('El número de chasis es requerido.')
        organization = self.context.get('organization')
        if organization is not None:
            queryset = Motorcycle.objects.filter(organization=organization, chassis_number=value)
            if self.instance is not None:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError(f'Ya existe una moto con chasis {value}.')
        return value

    def validate_engine_number(self, value):
        value = (value or '').strip().upper() or None
        organization = self.context.get('organization')
        if value and organization is not None:
            queryset = Motorcycle.objects.filter(organization=organization, engine_number=value)
            if self.instance is not None:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError(f'Ya existe una moto con motor {value}.')
        return value

    def _check_organization(self, value, label):
        organization = self.context.get('organization')
        if value is not None and organization is not None and value.organization_id != organization.id:
            raise serializers.ValidationError(f'{label} seleccionado no existe.')
        return value

    def validate_branch(self, value):
        return self._check_organization(value, 'La sucursal')

    def validate_supplier(self, value):
        return self._check_organization(value, 'El proveedor')

    def validate_color(self, value):
        # Global colors have no organization
        if value is not None and value.organization_id is None:
            return value
        return self._check_organization(value, 'El color')

    def validate(self, attrs):
        brand = attrs.get('brand', getattr(self.instance, 'brand', None))
        model = attrs.get('model', getattr(self.instance, 'model', None))
        if brand is not None and model is not None and model.brand_id != brand.id:
            raise serializers.ValidationError({'model': 'El modelo no pertenece a la marca seleccionada.'})
        for field in ('retail_price', 'cost_price', 'wholesale_price'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'El precio no puede ser negativo.'})
        return attrs


class BatchUnitSerializer(serializers.Serializer):
    chassis_number = serializers.CharField(max_length=100)
    engine_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    color = serializers.IntegerField(required=False, allow_null=True)
    mileage = serializers.IntegerField(required=False, min_value=0, default=0)
    branch = serializers.IntegerField(required=False, allow_null=True)
    state = serializers.ChoiceField(
        choices=[Motorcycle.STATE_STOCK, Motorcycle.STATE_PAUSED],
        required=False,
        default=Motorcycle.STATE_STOCK
    )


class MotorcycleBatchSerializer(serializers.Serializer):
    brand = serializers.IntegerField()
    model = serializers.IntegerField()
    year = serializers.IntegerField(min_value=1900, max_value=2100)
    displacement = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    cost_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True, min_value=0)
    retail_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    wholesale_price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True, min_value=0)
    currency = serializers.CharField(max_length=10, required=False, default='ARS')
    supplier = serializers.IntegerField(required=False, allow_null=True)
    image_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    license_plate = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    observations = serializers.CharField(required=False, allow_blank=True)
    units = BatchUnitSerializer(many=True)

    def validate_units(self, value):
        if not value:
            raise serializers.ValidationError('El lote debe contener al menos una unidad.')
        return value


class MotorcycleStatusSerializer(serializers.Serializer):
    state = serializers.ChoiceField(choices=[choice for choice, _ in Motorcycle.STATE_CHOICES])
