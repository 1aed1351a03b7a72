# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('inventory', '0001_initial'),
        ('locations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='LogisticProvider',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('contact_name', models.CharField(blank=True, max_length=200)),
                ('contact_phone', models.CharField(blank=True, max_length=50)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('address', models.TextField(blank=True)),
                ('transport_types', models.JSONField(default=list)),
                ('vehicle_types', models.JSONField(default=list)),
                ('coverage_zones', models.JSONField(default=list)),
                ('price_per_km', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('base_fee', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('currency', models.CharField(default='ARS', max_length=10)),
                ('insurance', models.BooleanField(default=False)),
                ('max_weight', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('max_volume', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('special_requirements', models.TextField(blank=True)),
                ('rating', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('activo', 'Activo'), ('inactivo', 'Inactivo')], default='activo', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='logistic_providers', to='core.organization')),
            ],
            options={
                'db_table': 'logistic_providers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='MotorcycleTransfer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('REQUESTED', 'Solicitada'), ('CONFIRMED', 'Confirmada'), ('IN_TRANSIT', 'En tránsito'), ('DELIVERED', 'Entregada'), ('CANCELLED', 'Cancelada')], default='REQUESTED', max_length=20)),
                ('request_date', models.DateTimeField(auto_now_add=True)),
                ('scheduled_pickup_date', models.DateTimeField(blank=True, null=True)),
                ('actual_pickup_date', models.DateTimeField(blank=True, null=True)),
                ('estimated_delivery_date', models.DateTimeField(blank=True, null=True)),
                ('actual_delivery_date', models.DateTimeField(blank=True, null=True)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('currency', models.CharField(default='ARS', max_length=10)),
                ('tracking_number', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('confirmed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='confirmed_transfers', to=settings.AUTH_USER_MODEL)),
                ('from_branch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='outgoing_transfers', to='locations.branch')),
                ('logistic_provider', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transfers', to='logistics.logisticprovider')),
                ('motorcycle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transfers', to='inventory.motorcycle')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='motorcycle_transfers', to='core.organization')),
                ('requested_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='requested_transfers', to=settings.AUTH_USER_MODEL)),
                ('to_branch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='incoming_transfers', to='locations.branch')),
            ],
            options={
                'db_table': 'motorcycle_transfers',
                'ordering': ['-request_date'],
                'indexes': [models.Index(fields=['organization', 'status'], name='transfer_org_status_idx')],
            },
        ),
    ]
