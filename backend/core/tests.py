"""
Test suite for core: registration, users, organizations, secure mode,
settings, audit logs, global search, signed URLs and the seed command
"""
from io import StringIO
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework import status
from backend.catalog.models import Brand, Color
from backend.core.models import AuditLog, Organization, Setting, User
from backend.payments.models import OrganizationPaymentMethod, PaymentMethod
from backend.pricing.models import Bank, BankingPromotion, CardType, InstallmentPlan
from backend.core.otp import build_totp, check_secure_mode_token, generate_secret, verify_token
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log


class AuthTests(TestCase):
    """Test registration and login"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_with_organization(self):
        """Registering with an organization name makes the user its admin"""
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'vendedor1',
            'email': 'vendedor1@test.com',
            'password': 'Motos#2024segura',
            'password_confirm': 'Motos#2024segura',
            'organization_name': 'Motos del Sur',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        organization = Organization.objects.get(name='Motos del Sur')
        self.assertEqual(organization.slug, 'motos-del-sur')
        self.assertEqual(organization.users.get().role, 'admin')

    def test_register_duplicate_organization_gets_unique_slug(self):
        Organization.objects.create(name='Motos del Sur', slug='motos-del-sur')
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'vendedor2',
            'password': 'Motos#2024segura',
            'password_confirm': 'Motos#2024segura',
            'organization_name': 'Motos del Sur',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Organization.objects.filter(slug='motos-del-sur-2').exists())

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'vendedor3',
            'password': 'Motos#2024segura',
            'password_confirm': 'otra',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_returns_tokens(self):
        TestDataFactory.create_user(username='cajero', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'cajero', 'password': 'testpass123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserTests(TestCase):
    """Test user management scoped to the organization"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.organization = self.admin.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_me_flags(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_admin'])
        self.assertTrue(response.data['can_manage_petty_cash'])
        self.assertEqual(response.data['organization']['id'], self.organization.id)

    def test_user_list_only_own_organization(self):
        TestDataFactory.create_user(organization=self.organization, role='user')
        TestDataFactory.create_user()
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_regular_user_cannot_list_users(self):
        user = TestDataFactory.create_user(organization=self.organization, role='user')
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_other_user_is_audited(self):
        user = TestDataFactory.create_user(organization=self.organization, role='user')
        response = self.client.delete(f'/api/v1/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='User', object_id=str(user.id)).exists())

    def test_update_organization_requires_admin(self):
        user = TestDataFactory.create_user(organization=self.organization, role='user')
        self.client.authenticate_user(user)
        response = self.client.patch('/api/v1/organizations/current/', {'name': 'Nuevo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_without_organization_is_rejected(self):
        user = TestDataFactory.create_user()
        user.organization = None
        user.save()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/organizations/current/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class SecureModeTests(TestCase):
    """Test secure mode activation and OTP verification"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.organization = self.admin.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_enable_issues_secret(self):
        response = self.client.post('/api/v1/security/secure-mode/', {'enabled': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['otp_auth_url'].startswith('otpauth://totp/'))
        self.organization.refresh_from_db()
        self.assertTrue(self.organization.secure_mode_enabled)
        self.assertFalse(self.organization.otp_verified)

    def test_enabled_must_be_boolean(self):
        response = self.client.post('/api/v1/security/secure-mode/', {'enabled': 'yes'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_and_keep_secret_on_reenable(self):
        self.client.post('/api/v1/security/secure-mode/', {'enabled': True}, format='json')
        self.organization.refresh_from_db()
        token = build_totp(self.organization.otp_secret).now()

        response = self.client.post('/api/v1/security/verify-otp/', {'token': token}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.organization.refresh_from_db()
        self.assertTrue(self.organization.otp_verified)

        secret = self.organization.otp_secret
        response = self.client.post('/api/v1/security/secure-mode/', {'enabled': True}, format='json')
        self.assertIsNone(response.data['otp_auth_url'])
        self.organization.refresh_from_db()
        self.assertEqual(self.organization.otp_secret, secret)

    def test_disable_clears_secret(self):
        self.client.post('/api/v1/security/secure-mode/', {'enabled': True}, format='json')
        response = self.client.post('/api/v1/security/secure-mode/', {'enabled': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.organization.refresh_from_db()
        self.assertIsNone(self.organization.otp_secret)
        self.assertFalse(self.organization.secure_mode_enabled)

    def test_verify_rejects_malformed_token(self):
        self.client.post('/api/v1/security/secure-mode/', {'enabled': True}, format='json')
        response = self.client.post('/api/v1/security/verify-otp/', {'token': '12ab'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_check_secure_mode_token(self):
        self.assertIsNone(check_secure_mode_token(self.organization, None))

        secret = generate_secret()
        self.organization.secure_mode_enabled = True
        self.organization.otp_secret = secret
        self.organization.otp_verified = True
        self.organization.save()

        self.assertIsNotNone(check_secure_mode_token(self.organization, None))
        self.assertIsNotNone(check_secure_mode_token(self.organization, '000'))
        self.assertIsNone(check_secure_mode_token(self.organization, build_totp(secret).now()))

    def test_verify_token_rejects_empty_secret(self):
        self.assertFalse(verify_token(None, '123456'))


class SettingTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_settings_scoped_by_organization(self):
        response = self.client.post('/api/v1/settings/', {'key': 'default_currency', 'value': 'ARS'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        Setting.objects.create(organization=TestDataFactory.create_organization(), key='default_currency', value='USD')

        response = self.client.get('/api/v1/settings/')
        self.assertEqual([item['value'] for item in response.data], ['ARS'])

    def test_duplicate_key(self):
        self.client.post('/api/v1/settings/', {'key': 'reminder_days', 'value': '3'}, format='json')
        response = self.client.post('/api/v1/settings/', {'key': 'reminder_days', 'value': '5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_admins_modify(self):
        setting = Setting.objects.create(organization=self.admin.organization, key='reminder_days', value='3')
        user = TestDataFactory.create_user(organization=self.admin.organization, role='user')
        self.client.authenticate_user(user)
        response = self.client.post('/api/v1/settings/', {'key': 'x', 'value': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.patch(f'/api/v1/settings/{setting.id}/', {'value': '9'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/settings/{setting.id}/', {'value': '9'}, format='json')
        self.assertEqual(response.data['value'], '9')

    def test_foreign_setting_not_found(self):
        foreign = Setting.objects.create(organization=TestDataFactory.create_organization(), key='k', value='v')
        response = self.client.delete(f'/api/v1/settings/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AuditLogTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.organization = self.admin.organization
        self.user = TestDataFactory.create_user(organization=self.organization, role='user')
        self.client = AuthenticatedAPIClient()

    def test_non_admin_sees_only_own_entries(self):
        create_audit_log(user=self.admin, action='create', model_name='Client', object_id='1')
        create_audit_log(user=self.user, action='create', model_name='Client', object_id='2')

        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['object_id'] for entry in response.data], ['2'])

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?model=Client')
        self.assertEqual(len(response.data), 2)

    def test_audit_log_takes_user_organization(self):
        create_audit_log(user=self.user, action='update', model_name='Client', object_id='5')
        self.assertEqual(AuditLog.objects.get(object_id='5').organization, self.organization)


class GlobalSearchTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_empty_query(self):
        response = self.client.get('/api/v1/search/')
        self.assertEqual(response.data['motorcycles'], [])

    def test_search_scoped_to_organization(self):
        TestDataFactory.create_motorcycle(self.organization, chassis_number='9C2KC1670AR000111')
        TestDataFactory.create_motorcycle(TestDataFactory.create_organization(), chassis_number='9C2KC1670AR000222')
        TestDataFactory.create_client(self.organization, last_name='Gonzalez')

        response = self.client.get('/api/v1/search/?q=9C2KC')
        self.assertEqual(len(response.data['motorcycles']), 1)

        response = self.client.get('/api/v1/search/?q=gonzalez')
        self.assertEqual(len(response.data['clients']), 1)


@override_settings(AZURE_STORAGE_ACCOUNT_NAME='', AZURE_STORAGE_ACCOUNT_KEY='')
class SignedUrlTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_key_required(self):
        response = self.client.get('/api/v1/storage/signed-url/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_organization_ticket_denied(self):
        other_id = self.user.organization_id + 1000
        response = self.client.get(f'/api/v1/storage/signed-url/?key=uploads/tickets/petty-cash/{other_id}/t.jpg')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_storage_not_configured(self):
        key = f'uploads/tickets/petty-cash/{self.user.organization_id}/t.jpg'
        response = self.client.get(f'/api/v1/storage/signed-url/?key={key}')
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)


class SeedDataTests(TestCase):

    def _seed(self, *args):
        out = StringIO()
        call_command('seed_data', *args, stdout=out)
        return out.getvalue()

    def test_reference_data_is_idempotent(self):
        output = self._seed()
        self.assertIn('Seed completed.', output)
        counts = (Brand.objects.count(), Color.objects.count(), CardType.objects.count(),
                  Bank.objects.count(), PaymentMethod.objects.count())
        self.assertTrue(Brand.objects.filter(name='Honda', models__name='XR150L').exists())
        self.assertTrue(Color.objects.filter(organization__isnull=True, name='Negro y Rojo', type='BITONO').exists())
        self.assertTrue(PaymentMethod.objects.filter(type='mercadopago').exists())

        self._seed()
        self.assertEqual(counts, (Brand.objects.count(), Color.objects.count(), CardType.objects.count(),
                                  Bank.objects.count(), PaymentMethod.objects.count()))

    def test_organization_requires_admin_password(self):
        with self.assertRaises(CommandError):
            self._seed('--organization', 'Motos Sur')
        self.assertFalse(Organization.objects.filter(slug='motos-sur').exists())

    def test_demo_organization(self):
        self._seed('--organization', 'Motos Sur', '--admin-username', 'duenio', '--admin-password', 's3cret!')

        organization = Organization.objects.get(slug='motos-sur')
        admin = User.objects.get(username='duenio')
        self.assertEqual(admin.organization, organization)
        self.assertEqual(admin.role, 'admin')
        self.assertTrue(admin.check_password('s3cret!'))
        self.assertEqual(organization.branches.count(), 1)
        self.assertEqual(OrganizationPaymentMethod.objects.filter(organization=organization).count(),
                         PaymentMethod.objects.count())
        self.assertEqual(BankingPromotion.objects.filter(organization=organization).count(), 3)
        self.assertEqual(InstallmentPlan.objects.filter(promotion__organization=organization).count(), 5)

        self._seed('--organization', 'Motos Sur', '--admin-username', 'duenio', '--admin-password', 'otra')
        self.assertEqual(BankingPromotion.objects.filter(organization=organization).count(), 3)
        admin.refresh_from_db()
        self.assertTrue(admin.check_password('s3cret!'))
