# Generated manually
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('Individual', 'Persona física'), ('LegalEntity', 'Persona jurídica')], default='Individual', max_length=20)),
                ('first_name', models.CharField(blank=True, max_length=100)),
                ('last_name', models.CharField(blank=True, max_length=100)),
                ('company_name', models.CharField(blank=True, max_length=200)),
                ('tax_id', models.CharField(blank=True, help_text='DNI / CUIT / CUIL', max_length=20, null=True)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('mobile', models.CharField(blank=True, max_length=30)),
                ('address', models.TextField(blank=True)),
                ('vat_status', models.CharField(choices=[('consumidor_final', 'Consumidor final'), ('responsable_inscripto', 'Responsable inscripto'), ('monotributista', 'Monotributista'), ('exento', 'Exento')], default='consumidor_final', max_length=30)),
                ('status', models.CharField(choices=[('active', 'Activo'), ('inactive', 'Inactivo')], default='active', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='clients', to='core.organization')),
            ],
            options={
                'db_table': 'clients',
                'ordering': ['last_name', 'first_name'],
                'constraints': [models.UniqueConstraint(fields=('organization', 'tax_id'), name='unique_client_tax_id_per_organization')],
            },
        ),
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('legal_name', models.CharField(max_length=200)),
                ('commercial_name', models.CharField(blank=True, max_length=200)),
                ('tax_identification', models.CharField(help_text='CUIT', max_length=20)),
                ('vat_condition', models.CharField(blank=True, max_length=50)),
                ('voucher_type', models.CharField(blank=True, max_length=20)),
                ('gross_income', models.CharField(blank=True, help_text='Ingresos brutos', max_length=50)),
                ('local_tax_registration', models.CharField(blank=True, max_length=50)),
                ('contact_name', models.CharField(blank=True, max_length=200)),
                ('contact_position', models.CharField(blank=True, max_length=100)),
                ('landline_number', models.CharField(blank=True, max_length=30)),
                ('mobile_number', models.CharField(blank=True, max_length=30)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('website', models.CharField(blank=True, max_length=200)),
                ('legal_address', models.TextField(blank=True)),
                ('commercial_address', models.TextField(blank=True)),
                ('delivery_address', models.TextField(blank=True)),
                ('bank', models.CharField(blank=True, max_length=100)),
                ('account_type_number', models.CharField(blank=True, max_length=100)),
                ('cbu', models.CharField(blank=True, max_length=22)),
                ('bank_alias', models.CharField(blank=True, max_length=100)),
                ('swift_bic', models.CharField(blank=True, max_length=20)),
                ('payment_currency', models.CharField(default='ARS', max_length=10)),
                ('payment_term_days', models.PositiveIntegerField(blank=True, null=True)),
                ('credit_limit', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('payment_methods', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('activo', 'Activo'), ('inactivo', 'Inactivo')], default='activo', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='suppliers', to='core.organization')),
            ],
            options={
                'db_table': 'suppliers',
                'ordering': ['legal_name'],
                'constraints': [models.UniqueConstraint(fields=('organization', 'tax_identification'), name='unique_supplier_tax_id_per_organization')],
            },
        ),
    ]
