from django.contrib.auth.models import AbstractUser
from django.db import models


class Organization(models.Model):
    """Tenant: every business record belongs to one organization"""
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    # Secure mode: destructive petty cash operations require a TOTP token
    secure_mode_enabled = models.BooleanField(default=False)
    otp_secret = models.CharField(max_length=64, blank=True, null=True)
    otp_auth_url = models.CharField(max_length=500, blank=True, null=True)
    otp_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'organizations'
        ordering = ['name']


class User(AbstractUser):
    """Extended user model with organization and role"""
    ROLE_CHOICES = [
        ('user', 'User'),
        ('admin', 'Admin'),
        ('root', 'Root'),
        ('cash-manager', 'Cash Manager'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    organization = models.ForeignKey(Organization, on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def display_name(self):
        full_name = self.get_full_name()
        return full_name or self.username

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """Key/value preferences of an organization (default currency, reminder lead time, ...)"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='settings')
    key = models.CharField(max_length=100)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'
        unique_together = [['organization', 'key']]


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Status Change'),
        ('reservation', 'Reservation'),
        ('sale', 'Sale'),
        ('payment_add', 'Payment Added'),
        ('payment_undo', 'Payment Undone'),
        ('payment_cancel', 'Payment Cancelled'),
        ('transfer', 'Transfer'),
        ('deposit', 'Petty Cash Deposit'),
        ('withdrawal', 'Petty Cash Withdrawal'),
        ('spend', 'Petty Cash Spend'),
        ('oauth_connect', 'OAuth Connected'),
        ('secure_mode', 'Secure Mode Changed'),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, null=True, blank=True, related_name='audit_logs')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., motorcycle, client)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., chassis number, receipt number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_9f1c2a_idx'),
            models.Index(fields=['action'], name='audit_logs_action_4b7e1d_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_2c8d5e_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__7a3f6b_idx'),
        ]
