from django.db import models
from backend.core.models import Organization


class PaymentMethod(models.Model):
    """Global catalog of payment methods (cash, transfer, mercadopago, payway...)"""
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    icon_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'payment_methods'
        ordering = ['name']


class OrganizationPaymentMethod(models.Model):
    """Payment method enabled for an organization, in display order"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='payment_methods')
    method = models.ForeignKey(PaymentMethod, on_delete=models.CASCADE, related_name='organization_methods')
    is_enabled = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.organization} - {self.method}"

    class Meta:
        db_table = 'organization_payment_methods'
        ordering = ['order', 'id']
        unique_together = [['organization', 'method']]


class PaymentMethodConfiguration(models.Model):
    """Key/value settings of an organization payment method (gateway credentials)"""
    organization_payment_method = models.ForeignKey(
        OrganizationPaymentMethod, on_delete=models.CASCADE, related_name='configurations'
    )
    config_key = models.CharField(max_length=100)
    config_value = models.TextField(blank=True)
    is_encrypted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.organization_payment_method} - {self.config_key}"

    class Meta:
        db_table = 'payment_method_configurations'
        unique_together = [['organization_payment_method', 'config_key']]


class MercadoPagoOAuth(models.Model):
    """MercadoPago account connected to an organization through OAuth"""
    organization = models.OneToOneField(Organization, on_delete=models.CASCADE, related_name='mercadopago_oauth')
    mercadopago_user_id = models.CharField(max_length=50)
    access_token = models.TextField()
    refresh_token = models.TextField(blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    public_key = models.CharField(max_length=200, blank=True, null=True)
    scopes = models.JSONField(default=list, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"MercadoPago {self.mercadopago_user_id} - {self.organization}"

    @property
    def environment(self):
        return 'TEST' if (self.access_token or '').startswith('TEST-') else 'PROD'

    class Meta:
        db_table = 'mercadopago_oauth'


class PaymentNotification(models.Model):
    """Short lived notice of a gateway confirmed payment, shown to the organization users"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='payment_notifications')
    payment = models.ForeignKey('current_accounts.Payment', on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    mercadopago_payment_id = models.CharField(max_length=50)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    message = models.CharField(max_length=255)
    is_read = models.BooleanField(default=False)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.message

    class Meta:
        db_table = 'payment_notifications'
        ordering = ['-created_at']
