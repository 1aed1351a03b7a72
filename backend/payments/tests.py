"""
Test suite for payment methods, gateway configuration, MercadoPago OAuth,
payments API calls and webhooks
"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock
import requests
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.current_accounts.models import Payment
from backend.payments import mercadopago, services
from backend.payments.models import (
    PaymentMethod, OrganizationPaymentMethod, MercadoPagoOAuth, PaymentNotification
)
from backend.payments.views import _configuration_redirect


def _response(status_code=200, data=None):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = data if data is not None else {}
    response.text = ''
    return response


class MercadoPagoClientTests(TestCase):

    def test_code_challenge(self):
        self.assertEqual(
            mercadopago.code_challenge('dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk'),
            'E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuxQIUp7UT4'
        )

    def test_code_verifier(self):
        verifier = mercadopago.generate_code_verifier()
        self.assertEqual(len(verifier), 128)
        self.assertTrue(set(verifier) <= set(mercadopago.PKCE_ALPHABET))

    @override_settings(MERCADOPAGO_CLIENT_ID='4412', BASE_URL='https://motos.example.com/')
    def test_authorization_url(self):
        url, state, verifier = mercadopago.build_authorization_url(7, use_pkce=True, force_logout=True)
        self.assertTrue(url.startswith(mercadopago.AUTHORIZATION_URL))
        self.assertIn('code_challenge_method=S256', url)
        self.assertIn('prompt=login', url)
        self.assertIn('redirect_uri=https%3A%2F%2Fmotos.example.com%2Fapi%2Fv1%2Fmercadopago%2Foauth%2Fcallback%2F', url)
        self.assertEqual(mercadopago.organization_id_from_state(state), 7)
        self.assertIsNotNone(verifier)

        url, _, verifier = mercadopago.build_authorization_url(7, use_pkce=False)
        self.assertNotIn('code_challenge', url)
        self.assertIsNone(verifier)

    def test_organization_id_from_state(self):
        self.assertIsNone(mercadopago.organization_id_from_state(''))
        self.assertIsNone(mercadopago.organization_id_from_state('abc-123'))

    def test_public_key_validation(self):
        self.assertTrue(mercadopago.is_valid_public_key('APP_USR-abc'))
        self.assertTrue(mercadopago.is_valid_public_key('TEST-abc'))
        self.assertFalse(mercadopago.is_valid_public_key('PLACEHOLDER_TOKEN'))
        self.assertFalse(mercadopago.is_valid_public_key(None))

    def test_card_type(self):
        self.assertEqual(mercadopago.card_type('debvisa'), 'debit_card')
        self.assertEqual(mercadopago.card_type('visa'), 'credit_card')

    def test_select_credentials(self):
        prod_oauth = MercadoPagoOAuth(access_token='APP_USR-oauth')
        test_oauth = MercadoPagoOAuth(access_token='TEST-oauth')
        with override_settings(MERCADOPAGO_ACCESS_TOKEN='TEST-global'):
            self.assertEqual(mercadopago.select_credentials(prod_oauth), ('TEST-global', 'global-test'))
        with override_settings(MERCADOPAGO_ACCESS_TOKEN='APP_USR-global'):
            self.assertEqual(mercadopago.select_credentials(test_oauth), ('TEST-oauth', 'oauth-test'))
            self.assertEqual(mercadopago.select_credentials(prod_oauth), ('APP_USR-oauth', 'oauth-prod'))
            self.assertEqual(mercadopago.select_credentials(None), ('APP_USR-global', 'global-prod'))
        with override_settings(MERCADOPAGO_ACCESS_TOKEN=''):
            self.assertEqual(mercadopago.select_credentials(None), (None, 'none'))

    @mock.patch('backend.payments.mercadopago.requests.request')
    def test_error_response_raises(self, mock_request):
        mock_request.return_value = _response(401, {'message': 'invalid access token'})
        with self.assertRaises(mercadopago.MercadoPagoError) as ctx:
            mercadopago.get_payment('99', 'APP_USR-x')
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(str(ctx.exception), 'invalid access token')
        _, kwargs = mock_request.call_args
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer APP_USR-x')

    @mock.patch('backend.payments.mercadopago.requests.request',
                side_effect=requests.exceptions.ConnectionError('down'))
    def test_connection_error_raises(self, mock_request):
        with self.assertRaises(mercadopago.MercadoPagoError) as ctx:
            mercadopago.get_user_info('APP_USR-x')
        self.assertIsNone(ctx.exception.status_code)

    def test_point_minimum_amount(self):
        with mock.patch('backend.payments.mercadopago.requests.request') as mock_request:
            with self.assertRaises(ValueError):
                mercadopago.create_point_intent('APP_USR-x', Decimal('10'), 'PAX_A910__SMARTPOS1')
            mock_request.assert_not_called()

    @mock.patch('backend.payments.mercadopago.requests.request')
    def test_preference_payload(self, mock_request):
        mock_request.return_value = _response(201, {'id': 'pref-1'})
        mercadopago.create_preference('APP_USR-x', 3, Decimal('1500000'), 'Honda Wave',
                                      motorcycle_id=8, additional_info={'brand': 'Honda', 'model': 'Wave'})
        payload = mock_request.call_args[1]['json']
        self.assertEqual(payload['metadata']['organization_id'], 3)
        self.assertEqual(payload['items'][0]['id'], 'motorcycle-8')
        self.assertEqual(payload['items'][0]['description'], 'Honda Wave')
        self.assertTrue(payload['notification_url'].endswith('/api/v1/mercadopago/webhook/'))


class ConfigurationTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        PaymentMethod.objects.create(name='MercadoPago', type='mercadopago')
        PaymentMethod.objects.create(name='PayWay', type='payway')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_mercadopago_config_masks_token(self):
        response = self.client.put('/api/v1/payment-methods/mercadopago/config/', {
            'access_token': 'APP_USR-123456789', 'public_key': 'APP_USR-public'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['configuration']['access_token'], 'APP_US...')
        self.assertEqual(response.data['configuration']['public_key'], 'APP_USR-public')

        response = self.client.get('/api/v1/payment-methods/mercadopago/config/')
        self.assertTrue(response.data['is_valid'])
        self.assertEqual(services.get_configuration(self.organization, 'mercadopago')['access_token'],
                         'APP_USR-123456789')

    def test_placeholder_values_are_missing(self):
        services.update_configuration(self.organization, 'mercadopago',
                                      {'access_token': 'YOUR_ACCESS_TOKEN', 'public_key': 'APP_USR-x'})
        config = services.get_configuration(self.organization, 'mercadopago')
        self.assertEqual(services.missing_fields(config, 'mercadopago'), ['access_token'])
        self.assertFalse(services.is_configuration_valid(config, 'mercadopago'))

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            services.update_configuration(self.organization, 'bitcoin', {'key': 'value'})

    def test_payway_validation(self):
        response = self.client.get('/api/v1/payment-methods/payway/validate/')
        self.assertFalse(response.data['is_valid'])
        self.assertEqual(len(response.data['missing_fields']), 4)

        response = self.client.put('/api/v1/payment-methods/payway/config/', {
            'merchant_id': 'M-1', 'api_key': 'ak', 'secret_key': 'sk', 'environment': 'sandbox'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get('/api/v1/payment-methods/payway/validate/')
        self.assertTrue(response.data['is_valid'])
        self.assertEqual(response.data['environment'], 'sandbox')

    def test_payway_rejects_unknown_environment(self):
        response = self.client.put('/api/v1/payment-methods/payway/config/', {'environment': 'staging'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_associate_and_toggle_method(self):
        method = PaymentMethod.objects.get(type='payway')
        response = self.client.post('/api/v1/payment-methods/organization/', {'method': method.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/payment-methods/organization/', {'method': method.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        org_method = OrganizationPaymentMethod.objects.get(organization=self.organization, method=method)
        response = self.client.post(f'/api/v1/payment-methods/organization/{org_method.id}/toggle/')
        self.assertFalse(response.data['is_enabled'])
        response = self.client.get('/api/v1/payment-methods/organization/?enabled=true')
        self.assertEqual(response.data, [])


@override_settings(MERCADOPAGO_CLIENT_ID='4412', MERCADOPAGO_CLIENT_SECRET='secret',
                   BASE_URL='https://motos.example.com')
class OAuthFlowTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _connect(self, query=''):
        return self.client.get(f'/api/v1/mercadopago/oauth/connect/{query}')

    @mock.patch('backend.payments.mercadopago.get_user_info')
    @mock.patch('backend.payments.mercadopago.exchange_code')
    def test_callback_stores_tokens(self, mock_exchange, mock_user_info):
        mock_exchange.return_value = {
            'access_token': 'APP_USR-token', 'refresh_token': 'TG-refresh',
            'expires_in': 15552000, 'scope': 'offline_access payments read write',
            'public_key': 'APP_USR-public',
        }
        mock_user_info.return_value = {'id': 555, 'email': 'ventas@motos.com'}

        connect = self._connect()
        self.assertEqual(connect.status_code, status.HTTP_200_OK)
        self.assertTrue(connect.data['pkce'])
        state = connect.data['state']

        self.client.logout()
        response = self.client.get(f'/api/v1/mercadopago/oauth/callback/?code=TG-code&state={state}')
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], 'https://motos.example.com/configuration?mp_success=true')

        verifier = mock_exchange.call_args[0][1]
        self.assertIn(mercadopago.code_challenge(verifier), connect.data['authorization_url'])

        oauth = MercadoPagoOAuth.objects.get(organization=self.organization)
        self.assertEqual(oauth.mercadopago_user_id, '555')
        self.assertEqual(oauth.scopes, ['offline_access', 'payments', 'read', 'write'])
        self.assertIsNotNone(oauth.expires_at)

        # state is single use
        response = self.client.get(f'/api/v1/mercadopago/oauth/callback/?code=TG-code&state={state}')
        self.assertIn('mp_error=invalid_state', response['Location'])

    def test_callback_rejects_unknown_state(self):
        response = self.client.get(
            f'/api/v1/mercadopago/oauth/callback/?code=TG-code&state={self.organization.id}-deadbeef'
        )
        self.assertEqual(response.status_code, 302)
        self.assertIn('mp_error=invalid_state', response['Location'])

    def test_callback_missing_params(self):
        response = self.client.get('/api/v1/mercadopago/oauth/callback/')
        self.assertIn('mp_error=missing_params', response['Location'])

    def test_configuration_redirect_encodes_params(self):
        response = _configuration_redirect(mp_error='token failed&mp_success=true')
        self.assertEqual(response['Location'],
                         'https://motos.example.com/configuration?mp_error=token+failed%26mp_success%3Dtrue')

    @mock.patch('backend.payments.mercadopago.exchange_code',
                side_effect=mercadopago.MercadoPagoError('invalid_grant', status_code=400))
    def test_callback_exchange_failure(self, mock_exchange):
        state = self._connect('?pkce=false').data['state']
        response = self.client.get(f'/api/v1/mercadopago/oauth/callback/?code=TG-code&state={state}')
        self.assertIn('mp_error=token_exchange_failed', response['Location'])
        self.assertIsNone(mock_exchange.call_args[0][1])
        self.assertFalse(MercadoPagoOAuth.objects.exists())

    @override_settings(MERCADOPAGO_CLIENT_ID='')
    def test_connect_requires_client_id(self):
        response = self._connect()
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_status_and_disconnect(self):
        response = self.client.get('/api/v1/mercadopago/oauth/status/')
        self.assertFalse(response.data['connected'])

        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='TEST-abc')
        response = self.client.get('/api/v1/mercadopago/oauth/status/')
        self.assertTrue(response.data['connected'])
        self.assertEqual(response.data['environment'], 'TEST')
        self.assertNotIn('access_token', response.data)

        response = self.client.delete('/api/v1/mercadopago/oauth/disconnect/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(MercadoPagoOAuth.objects.exists())

    @mock.patch('backend.payments.mercadopago.get_user_info',
                side_effect=mercadopago.MercadoPagoError('timeout'))
    @mock.patch('backend.payments.mercadopago.refresh_access_token')
    def test_refresh_keeps_refresh_token(self, mock_refresh, mock_user_info):
        mock_refresh.return_value = {'access_token': 'APP_USR-new', 'expires_in': 3600}
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-old', refresh_token='TG-keep',
                                        scopes=['read'])
        response = self.client.post('/api/v1/mercadopago/oauth/refresh/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        oauth = MercadoPagoOAuth.objects.get(organization=self.organization)
        self.assertEqual(oauth.access_token, 'APP_USR-new')
        self.assertEqual(oauth.refresh_token, 'TG-keep')
        self.assertEqual(oauth.scopes, ['read'])

    def test_refresh_without_refresh_token(self):
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-old')
        response = self.client.post('/api/v1/mercadopago/oauth/refresh/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_auto_detect_existing_key(self):
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-token', public_key='APP_USR-public')
        response = self.client.post('/api/v1/mercadopago/oauth/auto-detect/')
        self.assertEqual(response.data['method'], 'EXISTING')
        self.assertEqual(response.data['environment'], 'PROD')

    @override_settings(MERCADOPAGO_FALLBACK_PUBLIC_KEY='', MERCADOPAGO_PUBLIC_KEY='')
    @mock.patch('backend.payments.mercadopago.detect_public_key', return_value=None)
    @mock.patch('backend.payments.mercadopago.get_user_info', return_value={'id': 77})
    def test_auto_detect_not_found(self, mock_user_info, mock_detect):
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='77',
                                        access_token='APP_USR-token')
        response = self.client.post('/api/v1/mercadopago/oauth/auto-detect/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['user_id'], 77)

    @mock.patch('backend.payments.mercadopago.detect_public_key', return_value='APP_USR-detected')
    @mock.patch('backend.payments.mercadopago.get_user_info', return_value={'id': 77})
    def test_auto_detect_stores_key(self, mock_user_info, mock_detect):
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='77',
                                        access_token='APP_USR-token')
        response = self.client.post('/api/v1/mercadopago/oauth/auto-detect/')
        self.assertEqual(response.data['method'], 'AUTO_DETECTED')
        self.assertEqual(MercadoPagoOAuth.objects.get().public_key, 'APP_USR-detected')


@override_settings(MERCADOPAGO_ACCESS_TOKEN='TEST-global')
class MercadoPagoPaymentAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    @mock.patch('backend.payments.mercadopago.create_preference')
    def test_preference_uses_oauth_token(self, mock_preference):
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-oauth')
        mock_preference.return_value = {'id': 'pref-1', 'init_point': 'https://mp/init'}
        response = self.client.post('/api/v1/mercadopago/preferences/', {
            'amount': '250000.00', 'description': 'Seña Honda Wave', 'motorcycle_id': 4
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['preference_id'], 'pref-1')
        self.assertEqual(mock_preference.call_args[0][0], 'APP_USR-oauth')
        self.assertTrue(mock_preference.call_args[1]['per_organization_webhook'])

    @mock.patch('backend.payments.mercadopago.requests.request')
    def test_preference_notification_url(self, mock_request):
        mock_request.return_value = _response(201, {'id': 'pref-1', 'init_point': 'https://mp/init'})
        payload = {'amount': '250000.00', 'description': 'Seña Honda Wave'}

        self.client.post('/api/v1/mercadopago/preferences/', payload, format='json')
        notification_url = mock_request.call_args[1]['json']['notification_url']
        self.assertTrue(notification_url.endswith('/api/v1/mercadopago/webhook/'))

        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-oauth')
        self.client.post('/api/v1/mercadopago/preferences/', payload, format='json')
        notification_url = mock_request.call_args[1]['json']['notification_url']
        self.assertTrue(notification_url.endswith(f'/api/v1/mercadopago/webhook/{self.organization.id}/'))

    def test_point_intent_below_minimum(self):
        response = self.client.post('/api/v1/mercadopago/point/intents/', {
            'amount': '10.00', 'device_id': 'PAX_A910__SMARTPOS1'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.payments.mercadopago.requests.request')
    def test_process_order(self, mock_request):
        mock_request.return_value = _response(201, {'id': 'ORD01', 'status': 'processed'})
        response = self.client.post('/api/v1/mercadopago/orders/', {
            'amount': '1000.00',
            'description': 'Cuota 3 de 12 - Motocicleta Honda',
            'form_data': {'token': 'card-token', 'payment_method_id': 'debmaster', 'installments': 1},
            'payer': {'email': 'cliente@test.com'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        payload = mock_request.call_args[1]['json']
        payment_method = payload['transactions']['payments'][0]['payment_method']
        self.assertEqual(payment_method['type'], 'debit_card')
        self.assertEqual(len(payment_method['statement_descriptor']), 22)
        self.assertTrue(payload['external_reference'].startswith(f'org-{self.organization.id}-process-'))

    @mock.patch('backend.payments.mercadopago.requests.request')
    def test_payment_detail_gateway_errors(self, mock_request):
        mock_request.return_value = _response(404, {'message': 'Payment not found'})
        response = self.client.get('/api/v1/mercadopago/payments/123/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        mock_request.return_value = _response(500, {'message': 'boom'})
        response = self.client.get('/api/v1/mercadopago/payments/123/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)


@override_settings(MERCADOPAGO_ACCESS_TOKEN='TEST-global')
class WebhookTests(TestCase):

    def setUp(self):
        self.organization = TestDataFactory.create_organization()
        self.client = AuthenticatedAPIClient()
        self.payment_data = {
            'id': 1234567,
            'status': 'approved',
            'status_detail': 'accredited',
            'transaction_amount': 150000.5,
            'currency_id': 'ARS',
            'payment_method_id': 'visa',
            'installments': 3,
            'date_approved': '2024-05-06T10:15:00.000-03:00',
            'payer': {'email': 'cliente@test.com'},
            'metadata': {'organization_id': self.organization.id},
        }

    def _notify(self, body=None):
        body = body or {'type': 'payment', 'data': {'id': '1234567'}}
        return self.client.post('/api/v1/mercadopago/webhook/', body, format='json')

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_approved_payment_is_recorded_once(self, mock_get_payment):
        mock_get_payment.return_value = self.payment_data

        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['credential_source'], 'global-test')
        mock_get_payment.assert_called_once_with('1234567', 'TEST-global')

        payment = Payment.objects.get(transaction_reference='1234567')
        self.assertEqual(payment.amount_paid, Decimal('150000.50'))
        self.assertIsNone(payment.current_account)
        self.assertEqual(payment.payment_method, 'MercadoPago - visa')
        notification = PaymentNotification.objects.get(payment=payment)
        self.assertGreater(notification.expires_at, timezone.now() + timedelta(minutes=55))

        self._notify()
        self.assertEqual(Payment.objects.filter(transaction_reference='1234567').count(), 1)

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_pending_payment_not_recorded(self, mock_get_payment):
        mock_get_payment.return_value = dict(self.payment_data, status='pending')
        response = self._notify()
        self.assertEqual(response.data['status'], 'processed')
        self.assertFalse(Payment.objects.exists())

    @override_settings(MERCADOPAGO_ACCESS_TOKEN='APP_USR-global')
    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_refetches_with_organization_credentials(self, mock_get_payment):
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-oauth')
        mock_get_payment.return_value = self.payment_data
        response = self._notify()
        self.assertEqual(response.data['credential_source'], 'oauth-prod')
        self.assertEqual(mock_get_payment.call_count, 2)
        self.assertEqual(mock_get_payment.call_args[0][1], 'APP_USR-oauth')

    def test_other_topics_ignored(self):
        response = self._notify({'type': 'merchant_order', 'data': {'id': '1'}})
        self.assertEqual(response.data, {'status': 'ignored'})

    def test_missing_payment_id(self):
        response = self._notify({'type': 'payment', 'data': {}})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_missing_organization_metadata(self, mock_get_payment):
        mock_get_payment.return_value = dict(self.payment_data, metadata={})
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.payments.mercadopago.get_payment',
                side_effect=mercadopago.MercadoPagoError('unauthorized', status_code=401))
    def test_lookup_failure(self, mock_get_payment):
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


@override_settings(MERCADOPAGO_ACCESS_TOKEN='')
class OrganizationWebhookTests(TestCase):
    """Notifications addressed to an OAuth connected organization"""

    def setUp(self):
        self.organization = TestDataFactory.create_organization()
        MercadoPagoOAuth.objects.create(organization=self.organization, mercadopago_user_id='1',
                                        access_token='APP_USR-oauth')
        self.client = AuthenticatedAPIClient()
        self.payment_data = {
            'id': 7654321,
            'status': 'approved',
            'transaction_amount': 98000,
            'payment_method_id': 'master',
            'installments': 1,
            'date_approved': '2024-05-06T10:15:00.000-03:00',
            'payer': {'email': 'cliente@test.com'},
            'metadata': {'organization_id': self.organization.id},
        }

    def _notify(self, body=None, organization_id=None):
        body = body or {'type': 'payment', 'data': {'id': '7654321'}}
        organization_id = organization_id or self.organization.id
        return self.client.post(f'/api/v1/mercadopago/webhook/{organization_id}/', body, format='json')

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_approved_payment_uses_organization_token(self, mock_get_payment):
        mock_get_payment.return_value = self.payment_data

        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['credential_source'], 'oauth-prod')
        self.assertEqual(response.data['organization_id'], self.organization.id)
        mock_get_payment.assert_called_once_with('7654321', 'APP_USR-oauth')

        payment = Payment.objects.get(transaction_reference='7654321')
        self.assertEqual(payment.amount_paid, Decimal('98000'))
        self.assertTrue(PaymentNotification.objects.filter(organization=self.organization).exists())

        self._notify()
        self.assertEqual(Payment.objects.filter(transaction_reference='7654321').count(), 1)

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_payment_without_metadata_recorded_for_url_organization(self, mock_get_payment):
        mock_get_payment.return_value = dict(self.payment_data, metadata={})
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Payment.objects.get(transaction_reference='7654321').organization, self.organization)

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_payment_of_other_organization_rejected(self, mock_get_payment):
        other = TestDataFactory.create_organization()
        mock_get_payment.return_value = dict(self.payment_data, metadata={'organization_id': other.id})
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Payment.objects.exists())

    @mock.patch('backend.payments.mercadopago.get_payment')
    def test_organization_without_credentials(self, mock_get_payment):
        MercadoPagoOAuth.objects.all().delete()
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_get_payment.assert_not_called()

    def test_unknown_organization(self):
        response = self._notify(organization_id=999999)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_health_check(self):
        response = self.client.get(f'/api/v1/mercadopago/webhook/{self.organization.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['organization_id'], self.organization.id)

    def test_other_topics_and_missing_id(self):
        response = self._notify({'type': 'merchant_order', 'data': {'id': '1'}})
        self.assertEqual(response.data, {'status': 'ignored'})
        response = self._notify({'type': 'payment', 'data': {}})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.payments.mercadopago.get_payment',
                side_effect=mercadopago.MercadoPagoError('not found', status_code=404))
    def test_unknown_payment(self, mock_get_payment):
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @mock.patch('backend.payments.mercadopago.get_payment',
                side_effect=mercadopago.MercadoPagoError('boom', status_code=500))
    def test_gateway_failure(self, mock_get_payment):
        response = self._notify()
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


class NotificationTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _notification(self, expires_at, is_read=False):
        payment = Payment.objects.create(organization=self.organization, amount_paid=Decimal('100'),
                                         transaction_reference=TestDataFactory.random_string())
        return PaymentNotification.objects.create(
            organization=self.organization, payment=payment, mercadopago_payment_id=payment.transaction_reference,
            amount=Decimal('100'), message='MercadoPago confirmó su pago de $100', expires_at=expires_at,
            is_read=is_read,
        )

    def test_expired_notifications_hidden(self):
        active = self._notification(timezone.now() + timedelta(minutes=30))
        self._notification(timezone.now() - timedelta(minutes=1))
        response = self.client.get('/api/v1/payment-notifications/')
        self.assertEqual([item['id'] for item in response.data], [active.id])

    def test_mark_read(self):
        notification = self._notification(timezone.now() + timedelta(minutes=30))
        response = self.client.post(f'/api/v1/payment-notifications/{notification.id}/read/')
        self.assertTrue(response.data['is_read'])
        response = self.client.get('/api/v1/payment-notifications/?unread=true')
        self.assertEqual(response.data, [])
