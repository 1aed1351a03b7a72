# Generated manually
from decimal import Decimal
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Bank',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True)),
                ('logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('is_enabled', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'banks',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CardType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('type', models.CharField(choices=[('credit', 'Crédito'), ('debit', 'Débito')], max_length=10)),
                ('logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'card_types',
                'ordering': ['name', 'type'],
                'unique_together': {('name', 'type')},
            },
        ),
        migrations.CreateModel(
            name='BankCard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_enabled', models.BooleanField(default=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('bank', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_cards', to='pricing.bank')),
                ('card_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_cards', to='pricing.cardtype')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bank_cards', to='core.organization')),
            ],
            options={
                'db_table': 'bank_cards',
                'ordering': ['order', 'id'],
                'unique_together': {('organization', 'bank', 'card_type')},
            },
        ),
        migrations.CreateModel(
            name='BankingPromotion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('discount_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('surcharge_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('active_days', models.JSONField(blank=True, default=list)),
                ('payment_method', models.CharField(blank=True, max_length=50)),
                ('is_enabled', models.BooleanField(default=True)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('bank', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='promotions', to='pricing.bank')),
                ('bank_card', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='promotions', to='pricing.bankcard')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='banking_promotions', to='core.organization')),
            ],
            options={
                'db_table': 'banking_promotions',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='InstallmentPlan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('installments', models.PositiveIntegerField()),
                ('interest_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=6)),
                ('is_enabled', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('promotion', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='installment_plans', to='pricing.bankingpromotion')),
            ],
            options={
                'db_table': 'installment_plans',
                'ordering': ['installments'],
                'unique_together': {('promotion', 'installments')},
            },
        ),
    ]
