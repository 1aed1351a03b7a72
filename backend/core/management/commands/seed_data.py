"""
Management command to load the reference data of a new installation:
brands with their models, global colors, card types, banks and payment
methods. With --organization it also creates the organization, its admin
user and sample banking promotions. Safe to run more than once.
"""
from decimal import Decimal
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.text import slugify
from backend.catalog.models import Brand, MotorcycleModel, Color
from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import invalidate_catalog_cache, invalidate_promotions_cache
from backend.core.models import Organization, User
from backend.locations.models import Branch
from backend.payments.models import PaymentMethod, OrganizationPaymentMethod
from backend.pricing.models import Bank, CardType, BankCard, BankingPromotion, InstallmentPlan

DEFAULT_BRAND_COLOR = '#CCCCCC'

BRANDS = {
    'Honda': ('#e60012', ['XR150L', 'CB1', 'Wave 110', 'Biz 125', 'CB125F Twister', 'CB190R',
                          'CB250 Twister', 'CB300F Twister', 'XR250 Tornado', 'XRE 300', 'Africa Twin']),
    'Yamaha': ('#d90000', ['Crypton 110', 'FZ 16', 'FZ-S', 'YBR 125', 'XTZ 125', 'XTZ 250', 'MT-03', 'R3', 'Tenere 700']),
    'Bajaj': ('#005baa', ['Boxer 150', 'Rouser NS 160', 'Rouser NS 200', 'Dominar 250', 'Dominar 400']),
    'KTM': ('#ff6600', ['Duke 200', 'Duke 390', 'RC 390', '390 Adventure', '790 Adventure']),
    'Suzuki': ('#005bac', ['AX 100', 'Gixxer 150', 'GN 125', 'V-Strom 650']),
    'BMW': ('#1c69d4', ['G 310 R', 'G 310 GS', 'F 850 GS', 'R 1250 GS']),
    'Kawasaki': ('#66ff00', ['Ninja 400', 'Z400', 'Versys 650', 'KLR 650']),
    'Royal Enfield': ('#d9230f', ['Meteor 350', 'Classic 350', 'Himalayan', 'Interceptor 650']),
    'Benelli': (DEFAULT_BRAND_COLOR, ['Tnt 15', '180 S', '302S', 'TRK 502', 'TRK 502X', 'Leoncino 250', 'Imperiale']),
    'Zanella': ('#9e0b0f', ['ZB 110 Z1', 'RX 150 G3', 'ZR 250 LT', 'Patagonian Eagle 250']),
    'Motomel': ('#003399', ['Blitz 110', 'CG 150 Serie 2', 'Sirius 200', 'Skua 250']),
    'Corven': ('#f25c00', ['Energy 110', 'Triax 150', 'Mirage 110', 'TXR 250']),
    'Gilera': ('#bd0000', ['Smash 110', 'VC 150', 'Sahel 150']),
    'TVS': ('#004aad', ['Apache RTR 160 4V', 'Apache RTR 200 4V', 'RR 310']),
}

GLOBAL_COLORS = [
    ('Negro', 'SOLIDO', '#000000', None),
    ('Blanco', 'SOLIDO', '#FFFFFF', None),
    ('Gris', 'SOLIDO', '#808080', None),
    ('Rojo', 'SOLIDO', '#FF0000', None),
    ('Azul', 'SOLIDO', '#0000FF', None),
    ('Verde', 'SOLIDO', '#008000', None),
    ('Amarillo', 'SOLIDO', '#FFFF00', None),
    ('Naranja', 'SOLIDO', '#FFA500', None),
    ('Plateado', 'SOLIDO', '#C0C0C0', None),
    ('Negro y Rojo', 'BITONO', '#000000', '#FF0000'),
    ('Negro y Azul', 'BITONO', '#000000', '#0000FF'),
    ('Rojo y Blanco', 'BITONO', '#FF0000', '#FFFFFF'),
    ('Azul y Blanco', 'BITONO', '#0000FF', '#FFFFFF'),
    ('Camuflaje Gris', 'PATRON', '#808080', '#404040'),
    ('Racing Stripe', 'PATRON', '#FFFFFF', '#FF0000'),
]

CARD_TYPES = [
    ('Visa', 'credit'),
    ('Mastercard', 'credit'),
    ('American Express', 'credit'),
    ('Naranja', 'credit'),
    ('Cabal', 'credit'),
    ('Visa Débito', 'debit'),
    ('Maestro', 'debit'),
    ('Cabal Débito', 'debit'),
]

BANKS = [
    'Banco de la Nación Argentina',
    'Banco Provincia',
    'Banco Ciudad',
    'Banco Santander',
    'Banco Galicia',
    'BBVA',
    'HSBC',
    'Banco Macro',
    'Banco Patagonia',
    'Banco Credicoop',
    'ICBC',
    'Banco Supervielle',
]

PAYMENT_METHODS = [
    ('Efectivo', 'cash', 'Pago en efectivo'),
    ('Tarjeta de Crédito', 'credit', 'Pago con tarjeta de crédito'),
    ('Tarjeta de Débito', 'debit', 'Pago con tarjeta de débito'),
    ('Transferencia Bancaria', 'transfer', 'Pago por transferencia bancaria'),
    ('Cheque', 'check', 'Pago con cheque'),
    ('Depósito Bancario', 'deposit', 'Pago por depósito bancario'),
    ('MercadoPago', 'mercadopago', 'Pago a través de MercadoPago'),
    ('PayWay', 'payway', 'Pago con tarjeta a través de PayWay'),
    ('QR', 'qr', 'Pago con código QR'),
]

SAMPLE_PROMOTIONS = [
    {
        'name': 'Miércoles Galicia 20% off',
        'description': 'Descuento del 20% pagando con tarjeta de crédito Galicia',
        'discount_rate': Decimal('20'),
        'active_days': ['miércoles'],
        'payment_method': 'credit',
        'bank': 'Banco Galicia',
        'plans': [(3, Decimal('0')), (6, Decimal('10'))],
    },
    {
        'name': 'Fin de semana Nación',
        'description': 'Hasta 12 cuotas con Banco Nación sábados y domingos',
        'surcharge_rate': Decimal('5'),
        'active_days': ['sábado', 'domingo'],
        'payment_method': 'credit',
        'bank': 'Banco de la Nación Argentina',
        'plans': [(3, Decimal('0')), (6, Decimal('8')), (12, Decimal('20'))],
    },
    {
        'name': 'Débito todos los días',
        'description': '5% de descuento con tarjeta de débito',
        'discount_rate': Decimal('5'),
        'active_days': [],
        'payment_method': 'debit',
        'bank': None,
        'plans': [],
    },
]


class Command(BaseCommand):
    help = "Loads reference data (brands, colors, banks, cards, payment methods) and optionally a demo organization"

    def add_arguments(self, parser):
        parser.add_argument('--organization', help='Name of an organization to create with sample data')
        parser.add_argument('--admin-username', default='admin', help='Username of the organization admin')
        parser.add_argument('--admin-email', default='admin@example.com')
        parser.add_argument('--admin-password', help='Password of the organization admin (required with --organization)')

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING REFERENCE DATA"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        if options['organization'] and not options['admin_password']:
            raise CommandError('--admin-password is required together with --organization')

        with suspend_cache_signals(), transaction.atomic():
            self.seed_brands()
            self.seed_colors()
            self.seed_card_types()
            self.seed_banks()
            self.seed_payment_methods()
            if options['organization']:
                organization = self.seed_organization(
                    options['organization'], options['admin_username'],
                    options['admin_email'], options['admin_password'],
                )
                self.seed_promotions(organization)

        invalidate_catalog_cache()
        invalidate_promotions_cache()
        self.stdout.write(self.style.SUCCESS("Seed completed."))

    def _report(self, label, created, existing):
        self.stdout.write(f"  {label}: {created} created, {existing} already present")

    def seed_brands(self):
        brands_created = 0
        models_created = 0
        for name, (color, models) in BRANDS.items():
            brand, created = Brand.objects.get_or_create(name=name, defaults={'color': color})
            brands_created += created
            for model_name in models:
                _, created = MotorcycleModel.objects.get_or_create(brand=brand, name=model_name)
                models_created += created
        self._report('Brands', brands_created, len(BRANDS) - brands_created)
        self.stdout.write(f"  Models: {models_created} created")

    def seed_colors(self):
        created_count = 0
        for order, (name, color_type, color_one, color_two) in enumerate(GLOBAL_COLORS):
            _, created = Color.objects.get_or_create(
                organization=None, name=name,
                defaults={'type': color_type, 'color_one': color_one, 'color_two': color_two, 'order': order},
            )
            created_count += created
        self._report('Global colors', created_count, len(GLOBAL_COLORS) - created_count)

    def seed_card_types(self):
        created_count = 0
        for name, card_type in CARD_TYPES:
            _, created = CardType.objects.get_or_create(name=name, type=card_type)
            created_count += created
        self._report('Card types', created_count, len(CARD_TYPES) - created_count)

    def seed_banks(self):
        created_count = 0
        for name in BANKS:
            _, created = Bank.objects.get_or_create(name=name)
            created_count += created
        self._report('Banks', created_count, len(BANKS) - created_count)

    def seed_payment_methods(self):
        created_count = 0
        for name, method_type, description in PAYMENT_METHODS:
            _, created = PaymentMethod.objects.get_or_create(
                type=method_type, defaults={'name': name, 'description': description}
            )
            created_count += created
        self._report('Payment methods', created_count, len(PAYMENT_METHODS) - created_count)

    def seed_organization(self, name, username, email, password):
        organization, created = Organization.objects.get_or_create(slug=slugify(name), defaults={'name': name})
        self.stdout.write(f"  Organization '{organization.name}' {'created' if created else 'already present'}")

        Branch.objects.get_or_create(organization=organization, name='Casa Central', defaults={'order': 0})

        user = User.objects.filter(username=username).first()
        if user is None:
            user = User.objects.create_user(
                username=username, email=email, password=password,
                organization=organization, role='admin',
            )
            self.stdout.write(f"  Admin user '{username}' created")
        elif user.organization_id != organization.id:
            self.stdout.write(self.style.WARNING(f"  User '{username}' exists in another organization; left unchanged"))

        for order, method in enumerate(PaymentMethod.objects.all()):
            OrganizationPaymentMethod.objects.get_or_create(
                organization=organization, method=method, defaults={'order': order}
            )

        visa = CardType.objects.filter(name='Visa', type='credit').first()
        for order, bank in enumerate(Bank.objects.filter(name__in=['Banco Galicia', 'Banco de la Nación Argentina'])):
            if visa is not None:
                BankCard.objects.get_or_create(
                    organization=organization, bank=bank, card_type=visa, defaults={'order': order}
                )
        return organization

    def seed_promotions(self, organization):
        created_count = 0
        for data in SAMPLE_PROMOTIONS:
            bank = Bank.objects.filter(name=data['bank']).first() if data['bank'] else None
            promotion, created = BankingPromotion.objects.get_or_create(
                organization=organization, name=data['name'],
                defaults={
                    'description': data['description'],
                    'discount_rate': data.get('discount_rate'),
                    'surcharge_rate': data.get('surcharge_rate'),
                    'active_days': data['active_days'],
                    'payment_method': data['payment_method'],
                    'bank': bank,
                },
            )
            created_count += created
            for installments, interest_rate in data['plans']:
                InstallmentPlan.objects.get_or_create(
                    promotion=promotion, installments=installments,
                    defaults={'interest_rate': interest_rate},
                )
        self._report('Sample promotions', created_count, len(SAMPLE_PROMOTIONS) - created_count)
