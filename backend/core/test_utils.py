"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.core.models import Organization
from backend.locations.models import Branch
from backend.catalog.models import Brand, MotorcycleModel, Color
from backend.parties.models import Client, Supplier
from backend.inventory.models import Motorcycle
from backend.current_accounts.models import CurrentAccount
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_organization(name=None):
        if not name:
            name = f'Org_{TestDataFactory.random_string(6)}'
        return Organization.objects.create(name=name, slug=name.lower())

    @staticmethod
    def create_user(organization=None, username=None, email=None, password='testpass123', role='admin'):
        """Create a test user, attached to a new organization unless one is given"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        if organization is None:
            organization = TestDataFactory.create_organization()
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            organization=organization,
            role=role
        )

    @staticmethod
    def create_branch(organization, name=None, order=0):
        if not name:
            name = f'Sucursal_{TestDataFactory.random_string(6)}'
        return Branch.objects.create(organization=organization, name=name, order=order)

    @staticmethod
    def create_brand(name=None):
        if not name:
            name = f'Brand_{TestDataFactory.random_string(6)}'
        return Brand.objects.create(name=name, color='#FF0000')

    @staticmethod
    def create_model(brand=None, name=None):
        if not brand:
            brand = TestDataFactory.create_brand()
        if not name:
            name = f'Model_{TestDataFactory.random_string(6)}'
        return MotorcycleModel.objects.create(brand=brand, name=name)

    @staticmethod
    def create_color(organization=None, name=None):
        if not name:
            name = f'Color_{TestDataFactory.random_string(6)}'
        return Color.objects.create(organization=organization, name=name, color_one='#000000')

    @staticmethod
    def create_client(organization, first_name='Juan', last_name=None, tax_id=None, email=None):
        """Create a test client"""
        if not last_name:
            last_name = f'Perez{TestDataFactory.random_string(4)}'
        if not tax_id:
            tax_id = str(random.randint(20000000, 45000000))
        return Client.objects.create(
            organization=organization,
            first_name=first_name,
            last_name=last_name,
            tax_id=tax_id,
            email=email or f'{last_name.lower()}@test.com',
            phone='1155554444'
        )

    @staticmethod
    def create_supplier(organization, legal_name=None, tax_identification=None):
        """Create a test supplier"""
        if not legal_name:
            legal_name = f'Supplier_{TestDataFactory.random_string(6)}'
        if not tax_identification:
            tax_identification = f'30{random.randint(10000000, 99999999)}9'
        return Supplier.objects.create(
            organization=organization,
            legal_name=legal_name,
            tax_identification=tax_identification
        )

    @staticmethod
    def create_motorcycle(organization, branch=None, brand=None, model=None, chassis_number=None,
                          retail_price=Decimal('1500000.00'), cost_price=Decimal('1000000.00'),
                          state=Motorcycle.STATE_STOCK, currency='ARS', supplier=None):
        """Create a test motorcycle unit"""
        if not model:
            model = TestDataFactory.create_model(brand=brand)
        if not chassis_number:
            chassis_number = f'CH{TestDataFactory.random_string(10).upper()}'
        return Motorcycle.objects.create(
            organization=organization,
            brand=model.brand,
            model=model,
            year=timezone.now().year,
            chassis_number=chassis_number,
            engine_number=f'EN{TestDataFactory.random_string(8).upper()}',
            retail_price=retail_price,
            cost_price=cost_price,
            currency=currency,
            branch=branch,
            supplier=supplier,
            state=state
        )

    @staticmethod
    def create_current_account(organization, client=None, motorcycle=None, total_amount=Decimal('1200.00'),
                               down_payment=Decimal('0.00'), installments=12, interest_rate=Decimal('0.00'),
                               start_date=None, user=None):
        """Create an active current account with an even installment amount"""
        if not client:
            client = TestDataFactory.create_client(organization)
        if not motorcycle:
            motorcycle = TestDataFactory.create_motorcycle(organization, state=Motorcycle.STATE_SOLD)
        financed = total_amount - down_payment
        return CurrentAccount.objects.create(
            organization=organization,
            client=client,
            motorcycle=motorcycle,
            total_amount=total_amount,
            down_payment=down_payment,
            financed_amount=financed,
            remaining_amount=financed,
            number_of_installments=installments,
            installment_amount=(financed / installments).quantize(Decimal('0.01')),
            interest_rate=interest_rate,
            start_date=start_date or timezone.now().date(),
            next_due_date=start_date or timezone.now().date(),
            created_by=user
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
