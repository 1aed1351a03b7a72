from rest_framework import serializers
from backend.core.utils import normalize_name
from .models import Branch


class BranchSerializer(serializers.ModelSerializer):
    class Meta:
        model = Branch
        fields = ['id', 'name', 'order', 'address', 'phone', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['order', 'created_at', 'updated_at']

    def validate_name(self, value):
        name = normalize_name(value)
        if not name:
            raise serializers.ValidationError('El nombre de la sucursal es requerido.')
        organization = self.context.get('organization')
        if organization is not None:
            queryset = Branch.objects.filter(organization=organization, name__iexact=name)
            if self.instance is not None:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError('La sucursal ya existe en tu organización.')
        return name
