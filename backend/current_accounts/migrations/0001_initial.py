# Generated manually
from decimal import Decimal
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('inventory', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CurrentAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('down_payment', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('financed_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('remaining_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('number_of_installments', models.PositiveIntegerField()),
                ('installment_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('payment_frequency', models.CharField(choices=[('WEEKLY', 'Semanal'), ('BIWEEKLY', 'Quincenal'), ('MONTHLY', 'Mensual'), ('QUARTERLY', 'Trimestral'), ('ANNUALLY', 'Anual')], default='MONTHLY', max_length=20)),
                ('start_date', models.DateField()),
                ('next_due_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('interest_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='TNA (%)', max_digits=7)),
                ('currency', models.CharField(default='ARS', max_length=10)),
                ('reminder_lead_time_days', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('ACTIVE', 'Activa'), ('PAID_OFF', 'Saldada'), ('OVERDUE', 'Vencida'), ('DEFAULTED', 'Incobrable'), ('CANCELLED', 'Cancelada')], default='ACTIVE', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='current_accounts', to='parties.client')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_current_accounts', to=settings.AUTH_USER_MODEL)),
                ('motorcycle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='current_accounts', to='inventory.motorcycle')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='current_accounts', to='core.organization')),
            ],
            options={
                'db_table': 'current_accounts',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount_paid', models.DecimalField(decimal_places=2, max_digits=14)),
                ('currency', models.CharField(default='ARS', max_length=10)),
                ('payment_date', models.DateTimeField(blank=True, null=True)),
                ('payment_method', models.CharField(blank=True, max_length=100, null=True)),
                ('transaction_reference', models.CharField(blank=True, max_length=200, null=True)),
                ('installment_number', models.PositiveIntegerField(blank=True, null=True)),
                ('installment_version', models.CharField(blank=True, choices=[('D', 'Debe'), ('H', 'Haber')], max_length=1, null=True)),
                ('is_down_payment', models.BooleanField(default=False)),
                ('surplus_action', models.CharField(blank=True, choices=[('RECALCULATE', 'Recalcular cuotas'), ('REDUCE_INSTALLMENTS', 'Reducir cantidad de cuotas')], max_length=30, null=True)),
                ('status', models.CharField(choices=[('PENDING', 'Pendiente'), ('COMPLETED', 'Completado'), ('FAILED', 'Fallido'), ('REFUNDED', 'Reintegrado')], default='COMPLETED', max_length=20)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_payments', to=settings.AUTH_USER_MODEL)),
                ('current_account', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='current_accounts.currentaccount')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='core.organization')),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['installment_number', 'created_at'],
                'indexes': [models.Index(fields=['current_account', 'installment_version'], name='payment_account_version_idx')],
            },
        ),
    ]
