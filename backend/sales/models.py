from django.db import models
from decimal import Decimal
from backend.core.models import Organization, User
from backend.inventory.models import Motorcycle
from backend.parties.models import Client


class Reservation(models.Model):
    """Deposit paid by a client to hold a motorcycle"""
    STATUS_CHOICES = [
        ('active', 'Activa'),
        ('completed', 'Completada'),
        ('cancelled', 'Cancelada'),
        ('expired', 'Vencida'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='reservations')
    motorcycle = models.ForeignKey(Motorcycle, on_delete=models.CASCADE, related_name='reservations')
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name='reservations')
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=10, default='ARS')
    payment_method = models.CharField(max_length=100, blank=True)
    expiration_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reservations')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Reserva #{self.id} - {self.motorcycle.chassis_number}"

    class Meta:
        db_table = 'reservations'
        ordering = ['-created_at']


class Sale(models.Model):
    """A completed sale of a motorcycle"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='sales')
    motorcycle = models.ForeignKey(Motorcycle, on_delete=models.PROTECT, related_name='sales')
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name='sales')
    seller = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    branch = models.ForeignKey('locations.Branch', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    price = models.DecimalField(max_digits=14, decimal_places=2)
    cost_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default='ARS')
    payment_method = models.CharField(max_length=100, blank=True)
    installments = models.PositiveIntegerField(default=1)
    promotion = models.ForeignKey('pricing.BankingPromotion', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    current_account = models.OneToOneField('current_accounts.CurrentAccount', on_delete=models.SET_NULL, null=True, blank=True, related_name='sale')
    reservation = models.ForeignKey(Reservation, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    notes = models.TextField(blank=True)
    sold_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Venta #{self.id} - {self.motorcycle.chassis_number}"

    @property
    def profit(self):
        if self.cost_price is None:
            return None
        return self.price - self.cost_price

    class Meta:
        db_table = 'sales'
        ordering = ['-sold_at']
