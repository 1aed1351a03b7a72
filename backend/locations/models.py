from django.db import models
from backend.core.models import Organization


class Branch(models.Model):
    """Dealership branch (sucursal)"""
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='branches')
    name = models.CharField(max_length=200)
    order = models.PositiveIntegerField(default=0)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'branches'
        ordering = ['order', 'name']
        unique_together = [['organization', 'name']]
