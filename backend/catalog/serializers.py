from rest_framework import serializers
from backend.core.utils import normalize_name
from .models import Brand, MotorcycleModel, OrganizationBrand, Color, ModelFile


class MotorcycleModelSerializer(serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True)

    class Meta:
        model = MotorcycleModel
        fields = ['id', 'brand', 'brand_name', 'name', 'image_url', 'is_active', 'created_at', 'updated_at']

    def validate_name(self, value):
        name = normalize_name(value)
        if not name:
            raise serializers.ValidationError('El nombre del modelo es requerido.')
        return name


class BrandSerializer(serializers.ModelSerializer):
    models = MotorcycleModelSerializer(many=True, read_only=True)

    class Meta:
        model = Brand
        fields = ['id', 'name', 'color', 'logo_url', 'is_active', 'models', 'created_at', 'updated_at']

    def validate_name(self, value):
        name = normalize_name(value)
        if not name:
            raise serializers.ValidationError('El nombre de la marca es requerido.')
        queryset = Brand.objects.filter(name__iexact=name)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('Ya existe una marca con ese nombre.')
        return name


class OrganizationBrandSerializer(serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True)
    models = MotorcycleModelSerializer(source='brand.models', many=True, read_only=True)

    class Meta:
        model = OrganizationBrand
        fields = ['id', 'brand', 'brand_name', 'order', 'color', 'models', 'created_at']
        read_only_fields = ['order', 'created_at']


class ColorSerializer(serializers.ModelSerializer):
    is_global = serializers.SerializerMethodField()

    class Meta:
        model = Color
        fields = ['id', 'name', 'type', 'color_one', 'color_two', 'order', 'is_global', 'created_at', 'updated_at']
        read_only_fields = ['order', 'created_at', 'updated_at']

    def get_is_global(self, obj):
        return obj.organization_id is None

    def validate(self, attrs):
        color_type = attrs.get('type', getattr(self.instance, 'type', 'SOLIDO'))
        color_two = attrs.get('color_two', getattr(self.instance, 'color_two', None))
        if color_type in ('BITONO', 'PATRON') and not color_two:
            raise serializers.ValidationError({'color_two': 'Los colores bitono y patrón requieren un segundo color.'})
        if color_type == 'SOLIDO':
            attrs['color_two'] = None
        return attrs


class ModelFileSerializer(serializers.ModelSerializer):
    uploaded_by_username = serializers.CharField(source='uploaded_by.username', read_only=True)

    class Meta:
        model = ModelFile
        fields = ['id', 'model', 'name', 'file_type', 'blob_key', 'url', 'size', 'uploaded_by', 'uploaded_by_username', 'created_at']
        read_only_fields = fields
