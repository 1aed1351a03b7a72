# Generated manually
from decimal import Decimal
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Motorcycle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField()),
                ('displacement', models.PositiveIntegerField(blank=True, help_text='Cilindrada (cc)', null=True)),
                ('chassis_number', models.CharField(max_length=100)),
                ('engine_number', models.CharField(blank=True, max_length=100, null=True)),
                ('mileage', models.PositiveIntegerField(default=0)),
                ('cost_price', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('retail_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('wholesale_price', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('currency', models.CharField(default='ARS', max_length=10)),
                ('license_plate', models.CharField(blank=True, max_length=20, null=True)),
                ('image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('state', models.CharField(choices=[('STOCK', 'En stock'), ('PAUSADO', 'Pausado'), ('RESERVADO', 'Reservado'), ('PROCESANDO', 'Procesando'), ('ELIMINADO', 'Eliminado'), ('VENDIDO', 'Vendido'), ('EN_TRANSITO', 'En tránsito')], default='STOCK', max_length=20)),
                ('sold_at', models.DateTimeField(blank=True, null=True)),
                ('observations', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='motorcycles', to='locations.branch')),
                ('brand', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='motorcycles', to='catalog.brand')),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='motorcycles', to='parties.client')),
                ('color', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='motorcycles', to='catalog.color')),
                ('model', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='motorcycles', to='catalog.motorcyclemodel')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='motorcycles', to='core.organization')),
                ('seller', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sold_motorcycles', to=settings.AUTH_USER_MODEL)),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='motorcycles', to='parties.supplier')),
            ],
            options={
                'db_table': 'motorcycles',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['organization', 'state'], name='motorcycle_org_state_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('organization', 'chassis_number'), name='unique_chassis_per_organization'),
                    models.UniqueConstraint(condition=models.Q(('engine_number__isnull', False)), fields=('organization', 'engine_number'), name='unique_engine_per_organization'),
                ],
            },
        ),
    ]
