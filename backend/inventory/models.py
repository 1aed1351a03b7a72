from django.db import models
from decimal import Decimal
from backend.core.models import Organization, User
from backend.catalog.models import Brand, MotorcycleModel, Color
from backend.locations.models import Branch
from backend.parties.models import Client, Supplier


class Motorcycle(models.Model):
    """A single motorcycle unit identified by its chassis number"""
    STATE_STOCK = 'STOCK'
    STATE_PAUSED = 'PAUSADO'
    STATE_RESERVED = 'RESERVADO'
    STATE_PROCESSING = 'PROCESANDO'
    STATE_DELETED = 'ELIMINADO'
    STATE_SOLD = 'VENDIDO'
    STATE_IN_TRANSIT = 'EN_TRANSITO'

    STATE_CHOICES = [
        (STATE_STOCK, 'En stock'),
        (STATE_PAUSED, 'Pausado'),
        (STATE_RESERVED, 'Reservado'),
        (STATE_PROCESSING, 'Procesando'),
        (STATE_DELETED, 'Eliminado'),
        (STATE_SOLD, 'Vendido'),
        (STATE_IN_TRANSIT, 'En tránsito'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='motorcycles')
    brand = models.ForeignKey(Brand, on_delete=models.PROTECT, related_name='motorcycles')
    model = models.ForeignKey(MotorcycleModel, on_delete=models.PROTECT, related_name='motorcycles')
    year = models.PositiveIntegerField()
    displacement = models.PositiveIntegerField(null=True, blank=True, help_text="Cilindrada (cc)")
    color = models.ForeignKey(Color, on_delete=models.SET_NULL, null=True, blank=True, related_name='motorcycles')
    chassis_number = models.CharField(max_length=100)
    engine_number = models.CharField(max_length=100, blank=True, null=True)
    mileage = models.PositiveIntegerField(default=0)
    cost_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    retail_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    wholesale_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default='ARS')
    license_plate = models.CharField(max_length=20, blank=True, null=True)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='motorcycles')
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, null=True, blank=True, related_name='motorcycles')
    state = models.CharField(max_length=20, choices=STATE_CHOICES, default=STATE_STOCK)
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='motorcycles')
    seller = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sold_motorcycles')
    sold_at = models.DateTimeField(null=True, blank=True)
    observations = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.brand.name} {self.model.name} ({self.chassis_number})"

    @property
    def title(self):
        return f"{self.brand.name} {self.model.name} {self.year}"

    class Meta:
        db_table = 'motorcycles'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'chassis_number'], name='unique_chassis_per_organization'),
            models.UniqueConstraint(
                fields=['organization', 'engine_number'],
                condition=models.Q(engine_number__isnull=False),
                name='unique_engine_per_organization'
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'state'], name='motorcycle_org_state_idx'),
        ]
