from django.db import models
from decimal import Decimal
from backend.core.models import Organization, User
from backend.inventory.models import Motorcycle
from backend.parties.models import Client


class CurrentAccount(models.Model):
    """Installment plan (cuenta corriente) of a client for a motorcycle"""
    FREQUENCY_CHOICES = [
        ('WEEKLY', 'Semanal'),
        ('BIWEEKLY', 'Quincenal'),
        ('MONTHLY', 'Mensual'),
        ('QUARTERLY', 'Trimestral'),
        ('ANNUALLY', 'Anual'),
    ]

    STATUS_CHOICES = [
        ('ACTIVE', 'Activa'),
        ('PAID_OFF', 'Saldada'),
        ('OVERDUE', 'Vencida'),
        ('DEFAULTED', 'Incobrable'),
        ('CANCELLED', 'Cancelada'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='current_accounts')
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name='current_accounts')
    motorcycle = models.ForeignKey(Motorcycle, on_delete=models.PROTECT, related_name='current_accounts')
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    down_payment = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    financed_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    remaining_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    number_of_installments = models.PositiveIntegerField()
    installment_amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_frequency = models.CharField(max_length=20, choices=FREQUENCY_CHOICES, default='MONTHLY')
    start_date = models.DateField()
    next_due_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    interest_rate = models.DecimalField(max_digits=7, decimal_places=2, default=Decimal('0.00'), help_text="TNA (%)")
    currency = models.CharField(max_length=10, default='ARS')
    reminder_lead_time_days = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ACTIVE')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_current_accounts')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"CC #{self.id} - {self.client}"

    class Meta:
        db_table = 'current_accounts'
        ordering = ['-created_at']


class Payment(models.Model):
    """
    Payment received for a current account installment, or an online
    payment confirmed by a gateway (current_account empty).
    installment_version: None for normal payments, D for a voided payment
    and H for its reversal entry.
    """
    VERSION_CHOICES = [
        ('D', 'Debe'),
        ('H', 'Haber'),
    ]

    STATUS_CHOICES = [
        ('PENDING', 'Pendiente'),
        ('COMPLETED', 'Completado'),
        ('FAILED', 'Fallido'),
        ('REFUNDED', 'Reintegrado'),
    ]

    SURPLUS_CHOICES = [
        ('RECALCULATE', 'Recalcular cuotas'),
        ('REDUCE_INSTALLMENTS', 'Reducir cantidad de cuotas'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='payments')
    current_account = models.ForeignKey(CurrentAccount, on_delete=models.CASCADE, null=True, blank=True, related_name='payments')
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=10, default='ARS')
    payment_date = models.DateTimeField(null=True, blank=True)
    payment_method = models.CharField(max_length=100, blank=True, null=True)
    transaction_reference = models.CharField(max_length=200, blank=True, null=True)
    installment_number = models.PositiveIntegerField(null=True, blank=True)
    installment_version = models.CharField(max_length=1, choices=VERSION_CHOICES, null=True, blank=True)
    is_down_payment = models.BooleanField(default=False)
    surplus_action = models.CharField(max_length=30, choices=SURPLUS_CHOICES, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='COMPLETED')
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='recorded_payments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Pago #{self.id} - {self.amount_paid}"

    class Meta:
        db_table = 'payments'
        ordering = ['installment_number', 'created_at']
        indexes = [
            models.Index(fields=['current_account', 'installment_version'], name='payment_account_version_idx'),
        ]
