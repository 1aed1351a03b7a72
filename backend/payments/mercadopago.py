"""
MercadoPago REST client: OAuth (with optional PKCE), public key detection,
checkout preferences, Point intents, online orders and payment lookups.
"""
import base64
import hashlib
import logging
import os
import secrets
import time
from decimal import Decimal
from urllib.parse import urlencode

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

API_BASE = 'https://api.mercadopago.com'
AUTHORIZATION_URL = 'https://auth.mercadopago.com.ar/authorization'
DEFAULT_TIMEOUT = 15
QUICK_TIMEOUT = 5
PKCE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~'
PKCE_VERIFIER_LENGTH = 128
POINT_MINIMUM_AMOUNT = Decimal('15.0')
STATEMENT_DESCRIPTOR_MAX = 22
PUBLIC_KEY_ENDPOINTS = ('/users/me/mercadopago_account/applications', '/users/me/credentials')

CREDIT_CARDS = ('visa', 'master', 'amex', 'diners', 'hipercard', 'elo')
DEBIT_CARDS = ('debvisa', 'debmaster', 'debelo')


class MercadoPagoError(Exception):
    """Failed call to MercadoPago; status_code is the upstream HTTP status when there was a response"""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


def _setting(name, default=''):
    return getattr(settings, name, os.getenv(name, default))


def client_id():
    return _setting('MERCADOPAGO_CLIENT_ID')


def client_secret():
    return _setting('MERCADOPAGO_CLIENT_SECRET')


def global_access_token():
    return _setting('MERCADOPAGO_ACCESS_TOKEN')


def base_url():
    return (_setting('BASE_URL', 'http://localhost:8000') or 'http://localhost:8000').rstrip('/')


def redirect_uri():
    return f"{base_url()}/api/v1/mercadopago/oauth/callback/"


def environment_for(token):
    return 'TEST' if (token or '').startswith('TEST-') else 'PROD'


def is_valid_public_key(key):
    return bool(key) and key != 'PLACEHOLDER_TOKEN' and (key.startswith('TEST-') or key.startswith('APP_USR-'))


# PKCE
def generate_code_verifier(length=PKCE_VERIFIER_LENGTH):
    return ''.join(secrets.choice(PKCE_ALPHABET) for _ in range(length))


def code_challenge(verifier):
    """base64url(SHA256(verifier)) without padding"""
    digest = hashlib.sha256(verifier.encode('ascii')).digest()
    return base64.urlsafe_b64encode(digest).decode('ascii').rstrip('=')


def build_authorization_url(organization_id, use_pkce=True, force_logout=False):
    """
    Authorization URL for connecting a MercadoPago account.

    Returns (url, state, code_verifier); code_verifier is None without PKCE.
    """
    state = f"{organization_id}-{secrets.token_hex(8)}"
    params = {
        'client_id': client_id(),
        'response_type': 'code',
        'platform_id': 'mp',
        'state': state,
        'redirect_uri': redirect_uri(),
    }
    verifier = None
    if use_pkce:
        verifier = generate_code_verifier()
        params['code_challenge'] = code_challenge(verifier)
        params['code_challenge_method'] = 'S256'
    if force_logout:
        params['prompt'] = 'login'
        params['max_age'] = 0
    return f"{AUTHORIZATION_URL}?{urlencode(params)}", state, verifier


def organization_id_from_state(state):
    """Organization id encoded as the first segment of the OAuth state"""
    if not state:
        return None
    head = state.split('-', 1)[0]
    return int(head) if head.isdigit() else None


# HTTP
def _request(method, path, access_token=None, timeout=DEFAULT_TIMEOUT, headers=None, **kwargs):
    request_headers = {'Accept': 'application/json'}
    if access_token:
        request_headers['Authorization'] = f'Bearer {access_token}'
    if headers:
        request_headers.update(headers)

    url = path if path.startswith('http') else f"{API_BASE}{path}"
    try:
        response = requests.request(method, url, headers=request_headers, timeout=timeout, **kwargs)
    except requests.exceptions.RequestException as e:
        logger.error(f"MercadoPago request {method} {path} failed: {str(e)}", exc_info=True)
        raise MercadoPagoError(f'Error de comunicación con MercadoPago: {str(e)}') from e

    try:
        data = response.json()
    except ValueError:
        data = {'raw': response.text}

    if not response.ok:
        message = data.get('message') or data.get('error') if isinstance(data, dict) else None
        logger.warning(f"MercadoPago {method} {path} answered {response.status_code}: {data}")
        raise MercadoPagoError(message or f'HTTP {response.status_code}', status_code=response.status_code, payload=data)
    return data


# OAuth
def exchange_code(code, code_verifier=None):
    data = {
        'client_id': client_id(),
        'client_secret': client_secret(),
        'grant_type': 'authorization_code',
        'code': code,
        'redirect_uri': redirect_uri(),
    }
    if code_verifier:
        data['code_verifier'] = code_verifier
    return _request('POST', '/oauth/token', data=data,
                    headers={'Content-Type': 'application/x-www-form-urlencoded'})


def refresh_access_token(refresh_token):
    return _request('POST', '/oauth/token', data={
        'client_id': client_id(),
        'client_secret': client_secret(),
        'grant_type': 'refresh_token',
        'refresh_token': refresh_token,
    }, headers={'Content-Type': 'application/x-www-form-urlencoded'})


def get_user_info(access_token, timeout=DEFAULT_TIMEOUT):
    return _request('GET', '/users/me', access_token=access_token, timeout=timeout)


def detect_public_key(access_token):
    """Look for the account public key in the applications and credentials endpoints"""
    for endpoint in PUBLIC_KEY_ENDPOINTS:
        try:
            data = _request('GET', endpoint, access_token=access_token, timeout=3)
        except MercadoPagoError:
            continue
        if isinstance(data, list):
            app = next(
                (item for item in data if str(item.get('id')) == str(client_id()) or item.get('public_key')),
                None
            )
            found = app.get('public_key') if app else None
        else:
            found = data.get('public_key') or data.get('publicKey')
        if is_valid_public_key(found):
            return found
    return None


def select_credentials(oauth=None):
    """
    Access token for payment lookups: a global TEST token wins, then an OAuth
    TEST token, then the OAuth production token, then the global token.
    Returns (access_token, source).
    """
    global_token = global_access_token()
    oauth_token = oauth.access_token if oauth is not None else None
    if global_token and global_token.startswith('TEST-'):
        return global_token, 'global-test'
    if oauth_token and oauth_token.startswith('TEST-'):
        return oauth_token, 'oauth-test'
    if oauth_token:
        return oauth_token, 'oauth-prod'
    if global_token:
        return global_token, 'global-prod'
    return None, 'none'


def webhook_url(organization_id=None):
    if organization_id:
        return f"{base_url()}/api/v1/mercadopago/webhook/{organization_id}/"
    return f"{base_url()}/api/v1/mercadopago/webhook/"


# Payments
def get_payment(payment_id, access_token):
    return _request('GET', f'/v1/payments/{payment_id}', access_token=access_token)


def create_preference(access_token, organization_id, amount, description,
                      motorcycle_id=None, sale_id=None, additional_info=None, per_organization_webhook=False):
    """Checkout Pro preference; OAuth connected organizations are notified on their own webhook"""
    item_description = description
    if additional_info:
        item_description = ' '.join(
            str(additional_info.get(key, '')) for key in ('brand', 'model', 'year')
        ).strip() or description
    payload = {
        'items': [{
            'title': description,
            'unit_price': float(amount),
            'quantity': 1,
            'id': f'motorcycle-{motorcycle_id}' if motorcycle_id else 'sale-item',
            'description': item_description,
        }],
        'purpose': 'wallet_purchase',
        'back_urls': {
            'success': f"{base_url()}/sales/success",
            'failure': f"{base_url()}/sales/failure",
            'pending': f"{base_url()}/sales/pending",
        },
        'auto_return': 'approved',
        'external_reference': sale_id or f"sale-{int(time.time() * 1000)}",
        'notification_url': webhook_url(organization_id if per_organization_webhook else None),
        'metadata': {
            'organization_id': organization_id,
            'motorcycle_id': motorcycle_id,
            'sale_id': sale_id,
        },
    }
    return _request('POST', '/checkout/preferences', access_token=access_token, json=payload)


def create_point_intent(access_token, amount, device_id, external_reference=None):
    """Point Smart order; amounts below the terminal minimum are rejected before calling the API"""
    amount = Decimal(amount)
    if amount < POINT_MINIMUM_AMOUNT:
        raise ValueError(
            f'El monto mínimo para Point Smart es ${POINT_MINIMUM_AMOUNT}. Monto recibido: ${amount}'
        )
    payload = {
        'type': 'point',
        'external_reference': external_reference or f"point-{int(time.time() * 1000)}",
        'config': {
            'point': {
                'terminal_id': device_id,
                'print_on_terminal': 'no_ticket',
            },
        },
        'transactions': {
            'payments': [{'amount': f"{amount:.2f}"}],
        },
    }
    idempotency_key = f"po-{int(time.time() * 1000)}-{secrets.token_hex(5)}"
    return _request('POST', '/v1/orders', access_token=access_token, json=payload,
                    headers={'X-Idempotency-Key': idempotency_key})


def card_type(payment_method_id):
    if payment_method_id in DEBIT_CARDS:
        return 'debit_card'
    return 'credit_card'


def process_order(access_token, organization_id, amount, description, form_data, payer):
    """Online card payment through the Orders API"""
    timestamp = int(time.time() * 1000)
    amount_text = str(amount)
    payment_method = {
        'id': form_data['payment_method_id'],
        'type': card_type(form_data['payment_method_id']),
        'token': form_data['token'],
        'installments': form_data.get('installments') or 1,
        'statement_descriptor': description[:STATEMENT_DESCRIPTOR_MAX],
    }
    if form_data.get('issuer_id'):
        payment_method['issuer_id'] = form_data['issuer_id']

    payer_data = {
        'email': payer['email'],
        'entity_type': 'individual',
        'first_name': payer.get('first_name') or 'Cliente',
        'last_name': payer.get('last_name') or '',
    }
    if payer.get('identification'):
        payer_data['identification'] = payer['identification']

    payload = {
        'type': 'online',
        'external_reference': f"org-{organization_id}-process-{timestamp}",
        'total_amount': amount_text,
        'processing_mode': 'automatic',
        'payer': payer_data,
        'transactions': {'payments': [{'amount': amount_text, 'payment_method': payment_method}]},
        'description': description,
        'capture_mode': 'automatic_async',
        'items': [{
            'title': description,
            'unit_price': amount_text,
            'quantity': 1,
            'external_code': f"process-{timestamp}",
            'category_id': 'others',
        }],
    }
    return _request('POST', '/v1/orders', access_token=access_token, json=payload,
                    headers={'X-Idempotency-Key': f"process-{organization_id}-{timestamp}"})
