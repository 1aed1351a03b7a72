from django.db import models
from backend.core.models import Organization, User


class Brand(models.Model):
    """Motorcycle brands (shared by every organization)"""
    name = models.CharField(max_length=200, unique=True)
    color = models.CharField(max_length=20, blank=True, null=True, help_text="Hex color used to tag the brand in listings")
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'brands'
        ordering = ['name']


class MotorcycleModel(models.Model):
    """Model line of a brand (e.g. Honda -> XR 150L)"""
    brand = models.ForeignKey(Brand, on_delete=models.CASCADE, related_name='models')
    name = models.CharField(max_length=200)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.brand.name} {self.name}"

    class Meta:
        db_table = 'motorcycle_models'
        ordering = ['brand__name', 'name']
        unique_together = [['brand', 'name']]


class OrganizationBrand(models.Model):
    """Brands an organization works with, in display order"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='organization_brands')
    brand = models.ForeignKey(Brand, on_delete=models.CASCADE, related_name='organization_brands')
    order = models.PositiveIntegerField(default=0)
    color = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.organization} - {self.brand}"

    class Meta:
        db_table = 'organization_brands'
        ordering = ['order']
        unique_together = [['organization', 'brand']]


class Color(models.Model):
    """Vehicle colors; organization null means a global color"""
    TYPE_CHOICES = [
        ('SOLIDO', 'Sólido'),
        ('BITONO', 'Bitono'),
        ('PATRON', 'Patrón'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, null=True, blank=True, related_name='colors')
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='SOLIDO')
    color_one = models.CharField(max_length=20)
    color_two = models.CharField(max_length=20, blank=True, null=True)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'colors'
        ordering = ['order', 'name']
        unique_together = [['organization', 'name']]


class ModelFile(models.Model):
    """Brochures, spec sheets and images attached to a model"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='model_files')
    model = models.ForeignKey(MotorcycleModel, on_delete=models.CASCADE, related_name='files')
    name = models.CharField(max_length=255)
    file_type = models.CharField(max_length=100, blank=True)
    blob_key = models.CharField(max_length=500)
    url = models.URLField(max_length=1000, blank=True)
    size = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='model_files')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'model_files'
        ordering = ['-created_at']
