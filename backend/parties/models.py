from django.db import models
from backend.core.models import Organization


class Client(models.Model):
    """Clients of a dealership (individuals or legal entities)"""
    TYPE_CHOICES = [
        ('Individual', 'Persona física'),
        ('LegalEntity', 'Persona jurídica'),
    ]

    STATUS_CHOICES = [
        ('active', 'Activo'),
        ('inactive', 'Inactivo'),
    ]

    VAT_STATUS_CHOICES = [
        ('consumidor_final', 'Consumidor final'),
        ('responsable_inscripto', 'Responsable inscripto'),
        ('monotributista', 'Monotributista'),
        ('exento', 'Exento'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='clients')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='Individual')
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    company_name = models.CharField(max_length=200, blank=True)
    tax_id = models.CharField(max_length=20, blank=True, null=True, help_text="DNI / CUIT / CUIL")
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    mobile = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    vat_status = models.CharField(max_length=30, choices=VAT_STATUS_CHOICES, default='consumidor_final')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def display_name(self):
        if self.type == 'LegalEntity' and self.company_name:
            return self.company_name
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.company_name or f"Cliente #{self.pk}"

    def __str__(self):
        return self.display_name

    class Meta:
        db_table = 'clients'
        ordering = ['last_name', 'first_name']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'tax_id'], name='unique_client_tax_id_per_organization'),
        ]


class Supplier(models.Model):
    """Suppliers (proveedores) of motorcycles and services"""
    STATUS_CHOICES = [
        ('activo', 'Activo'),
        ('inactivo', 'Inactivo'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='suppliers')
    legal_name = models.CharField(max_length=200)
    commercial_name = models.CharField(max_length=200, blank=True)
    tax_identification = models.CharField(max_length=20, help_text="CUIT")
    vat_condition = models.CharField(max_length=50, blank=True)
    voucher_type = models.CharField(max_length=20, blank=True)
    gross_income = models.CharField(max_length=50, blank=True, help_text="Ingresos brutos")
    local_tax_registration = models.CharField(max_length=50, blank=True)

    contact_name = models.CharField(max_length=200, blank=True)
    contact_position = models.CharField(max_length=100, blank=True)
    landline_number = models.CharField(max_length=30, blank=True)
    mobile_number = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    website = models.CharField(max_length=200, blank=True)

    legal_address = models.TextField(blank=True)
    commercial_address = models.TextField(blank=True)
    delivery_address = models.TextField(blank=True)

    bank = models.CharField(max_length=100, blank=True)
    account_type_number = models.CharField(max_length=100, blank=True)
    cbu = models.CharField(max_length=22, blank=True)
    bank_alias = models.CharField(max_length=100, blank=True)
    swift_bic = models.CharField(max_length=20, blank=True)

    payment_currency = models.CharField(max_length=10, default='ARS')
    payment_term_days = models.PositiveIntegerField(null=True, blank=True)
    credit_limit = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    payment_methods = models.JSONField(default=list, blank=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='activo')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.legal_name

    class Meta:
        db_table = 'suppliers'
        ordering = ['legal_name']
        constraints = [
            models.UniqueConstraint(fields=['organization', 'tax_identification'], name='unique_supplier_tax_id_per_organization'),
        ]
