from django.db import models
from backend.core.models import Organization, User
from backend.inventory.models import Motorcycle
from backend.locations.models import Branch


class LogisticProvider(models.Model):
    """Carrier used to move motorcycles between branches"""
    TRANSPORT_TYPES = ['terrestre', 'aereo', 'maritimo', 'multimodal']
    VEHICLE_TYPES = ['camion', 'camioneta', 'trailer', 'grua', 'moto']
    COVERAGE_ZONES = ['local', 'provincial', 'regional', 'nacional', 'internacional']

    STATUS_CHOICES = [
        ('activo', 'Activo'),
        ('inactivo', 'Inactivo'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='logistic_providers')
    name = models.CharField(max_length=200)
    contact_name = models.CharField(max_length=200, blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)
    contact_email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    transport_types = models.JSONField(default=list)
    vehicle_types = models.JSONField(default=list)
    coverage_zones = models.JSONField(default=list)
    price_per_km = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    base_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default='ARS')
    insurance = models.BooleanField(default=False)
    max_weight = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    max_volume = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    special_requirements = models.TextField(blank=True)
    rating = models.PositiveSmallIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='activo')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'logistic_providers'
        ordering = ['name']


class MotorcycleTransfer(models.Model):
    """Movement of a motorcycle from one branch to another"""
    STATUS_REQUESTED = 'REQUESTED'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_IN_TRANSIT = 'IN_TRANSIT'
    STATUS_DELIVERED = 'DELIVERED'
    STATUS_CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (STATUS_REQUESTED, 'Solicitada'),
        (STATUS_CONFIRMED, 'Confirmada'),
        (STATUS_IN_TRANSIT, 'En tránsito'),
        (STATUS_DELIVERED, 'Entregada'),
        (STATUS_CANCELLED, 'Cancelada'),
    ]

    ACTIVE_STATUSES = (STATUS_REQUESTED, STATUS_CONFIRMED, STATUS_IN_TRANSIT)

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='motorcycle_transfers')
    motorcycle = models.ForeignKey(Motorcycle, on_delete=models.CASCADE, related_name='transfers')
    from_branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='outgoing_transfers')
    to_branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='incoming_transfers')
    logistic_provider = models.ForeignKey(LogisticProvider, on_delete=models.SET_NULL, null=True, blank=True, related_name='transfers')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_REQUESTED)
    request_date = models.DateTimeField(auto_now_add=True)
    scheduled_pickup_date = models.DateTimeField(null=True, blank=True)
    actual_pickup_date = models.DateTimeField(null=True, blank=True)
    estimated_delivery_date = models.DateTimeField(null=True, blank=True)
    actual_delivery_date = models.DateTimeField(null=True, blank=True)
    cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default='ARS')
    tracking_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    requested_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='requested_transfers')
    confirmed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='confirmed_transfers')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Transferencia #{self.id} - {self.motorcycle.chassis_number}"

    class Meta:
        db_table = 'motorcycle_transfers'
        ordering = ['-request_date']
        indexes = [
            models.Index(fields=['organization', 'status'], name='transfer_org_status_idx'),
        ]
