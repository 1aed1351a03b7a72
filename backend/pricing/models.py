from django.db import models
from decimal import Decimal
from backend.core.models import Organization

WEEKDAYS = ['lunes', 'martes', 'miércoles', 'jueves', 'viernes', 'sábado', 'domingo']


class Bank(models.Model):
    """Issuing bank, shared by every organization"""
    name = models.CharField(max_length=200, unique=True)
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    is_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'banks'
        ordering = ['name']


class CardType(models.Model):
    """Card brand (Visa, Mastercard...) and whether it is credit or debit"""
    TYPE_CHOICES = [
        ('credit', 'Crédito'),
        ('debit', 'Débito'),
    ]

    name = models.CharField(max_length=100)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} {self.get_type_display()}"

    class Meta:
        db_table = 'card_types'
        ordering = ['name', 'type']
        unique_together = [['name', 'type']]


class BankCard(models.Model):
    """Bank and card combination accepted by an organization"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='bank_cards')
    bank = models.ForeignKey(Bank, on_delete=models.CASCADE, related_name='bank_cards')
    card_type = models.ForeignKey(CardType, on_delete=models.CASCADE, related_name='bank_cards')
    is_enabled = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.bank.name} - {self.card_type}"

    class Meta:
        db_table = 'bank_cards'
        ordering = ['order', 'id']
        unique_together = [['organization', 'bank', 'card_type']]


class BankingPromotion(models.Model):
    """Discount or surcharge applied to a payment method/bank/card on given weekdays"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='banking_promotions')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    discount_rate = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    surcharge_rate = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    active_days = models.JSONField(default=list, blank=True)  # e.g. ["lunes", "viernes"]; empty means every day
    payment_method = models.CharField(max_length=50, blank=True)
    bank = models.ForeignKey(Bank, on_delete=models.SET_NULL, null=True, blank=True, related_name='promotions')
    bank_card = models.ForeignKey(BankCard, on_delete=models.SET_NULL, null=True, blank=True, related_name='promotions')
    is_enabled = models.BooleanField(default=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def is_active_on(self, day):
        return not self.active_days or day in self.active_days

    class Meta:
        db_table = 'banking_promotions'
        ordering = ['name']


class InstallmentPlan(models.Model):
    """Installment option of a promotion with its total interest (%)"""
    promotion = models.ForeignKey(BankingPromotion, on_delete=models.CASCADE, related_name='installment_plans')
    installments = models.PositiveIntegerField()
    interest_rate = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    is_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.installments} cuotas ({self.interest_rate}%)"

    class Meta:
        db_table = 'installment_plans'
        ordering = ['installments']
        unique_together = [['promotion', 'installments']]
