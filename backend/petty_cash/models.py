from django.db import models
from decimal import Decimal
from backend.core.models import Organization, User
from backend.locations.models import Branch


class PettyCashDeposit(models.Model):
    """Money put into the petty cash of a branch (or the general account when branch is empty)"""
    STATUS_CHOICES = [
        ('OPEN', 'Abierto'),
        ('CLOSED', 'Cerrado'),
        ('PENDING_FUNDING', 'Pendiente de fondeo'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='petty_cash_deposits')
    branch = models.ForeignKey(Branch, on_delete=models.SET_NULL, null=True, blank=True, related_name='petty_cash_deposits')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    date = models.DateField()
    description = models.CharField(max_length=255)
    reference = models.CharField(max_length=100, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='OPEN')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='petty_cash_deposits')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Depósito #{self.id} - {self.amount}"

    class Meta:
        db_table = 'petty_cash_deposits'
        ordering = ['-date', '-created_at']


class PettyCashWithdrawal(models.Model):
    """Cash handed to an employee out of a deposit, to be justified with spends"""
    STATUS_CHOICES = [
        ('PENDING_JUSTIFICATION', 'Pendiente de justificación'),
        ('PARTIALLY_JUSTIFIED', 'Parcialmente justificado'),
        ('JUSTIFIED', 'Justificado'),
        ('NOT_CLOSED', 'No cerrado'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='petty_cash_withdrawals')
    deposit = models.ForeignKey(PettyCashDeposit, on_delete=models.PROTECT, related_name='withdrawals')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='petty_cash_withdrawals')
    user_name = models.CharField(max_length=200)
    amount_given = models.DecimalField(max_digits=14, decimal_places=2)
    amount_justified = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    date = models.DateField()
    status = models.CharField(max_length=25, choices=STATUS_CHOICES, default='PENDING_JUSTIFICATION')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Retiro #{self.id} - {self.user_name} - {self.amount_given}"

    @property
    def amount_pending(self):
        return self.amount_given - self.amount_justified

    class Meta:
        db_table = 'petty_cash_withdrawals'
        ordering = ['-date', '-created_at']


class PettyCashSpend(models.Model):
    """Expense justifying part of a withdrawal, optionally with a ticket in blob storage"""
    MOTIVE_CHOICES = [
        ('combustible', 'Combustible'),
        ('viaticos', 'Viáticos'),
        ('libreria', 'Librería'),
        ('limpieza', 'Limpieza'),
        ('mantenimiento', 'Mantenimiento'),
        ('otros', 'Otros'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='petty_cash_spends')
    withdrawal = models.ForeignKey(PettyCashWithdrawal, on_delete=models.PROTECT, related_name='spends')
    motive = models.CharField(max_length=50)
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    date = models.DateField()
    ticket_url = models.URLField(max_length=1000, blank=True, null=True)
    ticket_key = models.CharField(max_length=500, blank=True, null=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='petty_cash_spends')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Gasto #{self.id} - {self.motive} - {self.amount}"

    class Meta:
        db_table = 'petty_cash_spends'
        ordering = ['-date', '-created_at']
