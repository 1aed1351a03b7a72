# Generated manually
from decimal import Decimal
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('locations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PettyCashDeposit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('date', models.DateField()),
                ('description', models.CharField(max_length=255)),
                ('reference', models.CharField(blank=True, max_length=100, null=True)),
                ('status', models.CharField(choices=[('OPEN', 'Abierto'), ('CLOSED', 'Cerrado'), ('PENDING_FUNDING', 'Pendiente de fondeo')], default='OPEN', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('branch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='petty_cash_deposits', to='locations.branch')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='petty_cash_deposits', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='petty_cash_deposits', to='core.organization')),
            ],
            options={
                'db_table': 'petty_cash_deposits',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PettyCashWithdrawal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_name', models.CharField(max_length=200)),
                ('amount_given', models.DecimalField(decimal_places=2, max_digits=14)),
                ('amount_justified', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('date', models.DateField()),
                ('status', models.CharField(choices=[('PENDING_JUSTIFICATION', 'Pendiente de justificación'), ('PARTIALLY_JUSTIFIED', 'Parcialmente justificado'), ('JUSTIFIED', 'Justificado'), ('NOT_CLOSED', 'No cerrado')], default='PENDING_JUSTIFICATION', max_length=25)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deposit', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='withdrawals', to='petty_cash.pettycashdeposit')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='petty_cash_withdrawals', to='core.organization')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='petty_cash_withdrawals', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'petty_cash_withdrawals',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PettyCashSpend',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('motive', models.CharField(max_length=50)),
                ('description', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('date', models.DateField()),
                ('ticket_url', models.URLField(blank=True, max_length=1000, null=True)),
                ('ticket_key', models.CharField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='petty_cash_spends', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='petty_cash_spends', to='core.organization')),
                ('withdrawal', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='spends', to='petty_cash.pettycashwithdrawal')),
            ],
            options={
                'db_table': 'petty_cash_spends',
                'ordering': ['-date', '-created_at'],
            },
        ),
    ]
