"""
Payment method configuration storage and gateway notification handling.
"""
import json
import logging
from datetime import timedelta
from decimal import Decimal
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from backend.core.models import Organization
from backend.current_accounts.models import Payment
from . import mercadopago
from .models import (
    PaymentMethod, OrganizationPaymentMethod, PaymentMethodConfiguration,
    MercadoPagoOAuth, PaymentNotification
)

logger = logging.getLogger('backend.payments')

MERCADOPAGO = 'mercadopago'
PAYWAY = 'payway'

ENCRYPTED_KEYS = {
    MERCADOPAGO: {'access_token'},
    PAYWAY: {'api_key', 'secret_key'},
}
REQUIRED_KEYS = {
    MERCADOPAGO: ('access_token', 'public_key'),
    PAYWAY: ('merchant_id', 'api_key', 'secret_key', 'environment'),
}
NOTIFICATION_TTL = timedelta(hours=1)
PLACEHOLDER_PREFIX = 'YOUR_'


def get_organization_method(organization, method_type):
    return OrganizationPaymentMethod.objects.filter(
        organization=organization, method__type=method_type
    ).select_related('method').first()


def get_configuration(organization, method_type):
    """Configuration dict of a method for the organization, or None when it is not associated"""
    org_method = get_organization_method(organization, method_type)
    if org_method is None:
        return None
    return {item.config_key: item.config_value for item in org_method.configurations.all()}


def masked_configuration(organization, method_type):
    """Configuration with encrypted values hidden"""
    org_method = get_organization_method(organization, method_type)
    if org_method is None:
        return None
    result = {}
    for item in org_method.configurations.all():
        if item.is_encrypted and item.config_value:
            result[item.config_key] = f"{item.config_value[:6]}..."
        else:
            result[item.config_key] = item.config_value
    return result


def update_configuration(organization, method_type, values):
    """Upsert configuration keys; None values are skipped"""
    try:
        method = PaymentMethod.objects.get(type=method_type)
    except PaymentMethod.DoesNotExist:
        raise ValueError(f'Método de pago {method_type} no encontrado. Ejecute la carga inicial primero.')

    encrypted = ENCRYPTED_KEYS.get(method_type, set())
    with transaction.atomic():
        org_method, _ = OrganizationPaymentMethod.objects.get_or_create(organization=organization, method=method)
        for key, value in values.items():
            if value is None:
                continue
            PaymentMethodConfiguration.objects.update_or_create(
                organization_payment_method=org_method,
                config_key=key,
                defaults={'config_value': str(value), 'is_encrypted': key in encrypted},
            )
    logger.info(f"Updated {method_type} configuration for organization {organization.id}: {sorted(values)}")
    return org_method


def missing_fields(config, method_type):
    """Required keys that are empty or still hold a YOUR_ placeholder"""
    config = config or {}
    return [
        key for key in REQUIRED_KEYS[method_type]
        if not config.get(key) or str(config[key]).startswith(PLACEHOLDER_PREFIX)
    ]


def is_configuration_valid(config, method_type):
    return config is not None and not missing_fields(config, method_type)


# MercadoPago OAuth
def save_oauth_tokens(organization, token_data, user_info):
    expires_in = token_data.get('expires_in')
    scope = token_data.get('scope')
    oauth, _ = MercadoPagoOAuth.objects.update_or_create(
        organization=organization,
        defaults={
            'mercadopago_user_id': str(user_info.get('id')),
            'access_token': token_data['access_token'],
            'refresh_token': token_data.get('refresh_token'),
            'email': user_info.get('email'),
            'public_key': token_data.get('public_key'),
            'scopes': scope.split(' ') if scope else [],
            'expires_at': timezone.now() + timedelta(seconds=expires_in) if expires_in else None,
        },
    )
    return oauth


def refresh_oauth(oauth):
    """Renew the access token; keeps the previous refresh token and scopes when the response omits them"""
    if not oauth.refresh_token:
        raise ValueError('No hay refresh token disponible. Reconecte MercadoPago.')

    token_data = mercadopago.refresh_access_token(oauth.refresh_token)
    oauth.access_token = token_data['access_token']
    oauth.refresh_token = token_data.get('refresh_token') or oauth.refresh_token
    if token_data.get('scope'):
        oauth.scopes = token_data['scope'].split(' ')
    if token_data.get('expires_in'):
        oauth.expires_at = timezone.now() + timedelta(seconds=token_data['expires_in'])
    if token_data.get('public_key'):
        oauth.public_key = token_data['public_key']

    try:
        user_info = mercadopago.get_user_info(oauth.access_token)
    except mercadopago.MercadoPagoError as e:
        logger.warning(f"Could not refresh public key for organization {oauth.organization_id}: {str(e)}")
    else:
        public_key = user_info.get('public_key')
        if mercadopago.is_valid_public_key(public_key):
            oauth.public_key = public_key
        if user_info.get('email'):
            oauth.email = user_info['email']
    oauth.save()
    return oauth


def quick_auto_detect(oauth):
    """
    Resolve the public key of a connected account.
    Returns (public_key, method, user_info) where method is EXISTING or AUTO_DETECTED.
    """
    if mercadopago.is_valid_public_key(oauth.public_key):
        return oauth.public_key, 'EXISTING', None

    user_info = mercadopago.get_user_info(oauth.access_token, timeout=mercadopago.QUICK_TIMEOUT)
    public_key = user_info.get('public_key') if mercadopago.is_valid_public_key(user_info.get('public_key')) else None
    public_key = public_key or mercadopago.detect_public_key(oauth.access_token)
    if not public_key:
        public_key = mercadopago._setting('MERCADOPAGO_FALLBACK_PUBLIC_KEY') or mercadopago._setting('MERCADOPAGO_PUBLIC_KEY')
    if not public_key:
        return None, None, user_info

    oauth.public_key = public_key
    oauth.save(update_fields=['public_key', 'updated_at'])
    return public_key, 'AUTO_DETECTED', user_info


# Webhook
def record_approved_payment(organization, payment_data):
    """Store an approved MercadoPago payment and a one hour notification"""
    reference = str(payment_data['id'])
    existing = Payment.objects.filter(organization=organization, transaction_reference=reference).first()
    if existing is not None:
        logger.info(f"MercadoPago payment {reference} already recorded as {existing.id}")
        return existing

    paid_at = parse_datetime(payment_data.get('date_approved') or payment_data.get('date_created') or '')
    amount = Decimal(str(payment_data.get('transaction_amount') or 0))
    notes = {
        'mercadopago_payment_id': payment_data['id'],
        'mercadopago_status': payment_data.get('status'),
        'mercadopago_status_detail': payment_data.get('status_detail'),
        'payer_email': (payment_data.get('payer') or {}).get('email'),
        'payment_method': payment_data.get('payment_method_id'),
        'installments': payment_data.get('installments'),
        'external_reference': payment_data.get('external_reference'),
        'live_mode': payment_data.get('live_mode'),
    }
    with transaction.atomic():
        payment = Payment.objects.create(
            organization=organization,
            amount_paid=amount,
            currency=payment_data.get('currency_id') or 'ARS',
            payment_date=paid_at or timezone.now(),
            payment_method=f"MercadoPago - {payment_data.get('payment_method_id')}",
            transaction_reference=reference,
            status='COMPLETED',
            notes=json.dumps(notes),
        )
        PaymentNotification.objects.create(
            organization=organization,
            payment=payment,
            mercadopago_payment_id=reference,
            amount=amount,
            message=f"MercadoPago confirmó su pago de ${amount}",
            expires_at=timezone.now() + NOTIFICATION_TTL,
        )
    logger.info(f"Recorded MercadoPago payment {reference} for organization {organization.id}")
    return payment


def process_webhook(body):
    """
    Handle a MercadoPago notification. Returns a dict describing the outcome;
    raises ValueError for malformed notifications and MercadoPagoError for API failures.
    """
    if body.get('type') != 'payment':
        return {'status': 'ignored'}

    payment_id = (body.get('data') or {}).get('id')
    if not payment_id:
        raise ValueError('Payment ID missing')

    lookup_token = mercadopago.global_access_token()
    if not lookup_token:
        raise ValueError('No credentials found')
    initial = mercadopago.get_payment(payment_id, lookup_token)

    organization_id = (initial.get('metadata') or {}).get('organization_id')
    organization = Organization.objects.filter(pk=organization_id).first() if organization_id else None
    if organization is None:
        raise ValueError('Organization ID not found in metadata')

    oauth = MercadoPagoOAuth.objects.filter(organization=organization).first()
    access_token, source = mercadopago.select_credentials(oauth)
    payment_data = initial if access_token == lookup_token else mercadopago.get_payment(payment_id, access_token)

    payment_status = payment_data.get('status')
    if payment_status == 'approved':
        record_approved_payment(organization, payment_data)
    else:
        logger.info(f"MercadoPago payment {payment_id} for organization {organization.id} is {payment_status}")

    return {
        'status': 'processed',
        'organization_id': organization.id,
        'payment_id': payment_id,
        'credential_source': source,
    }


def process_organization_webhook(organization, body):
    """
    Handle a MercadoPago notification addressed to one organization. The
    payment is looked up with that organization's credentials, so OAuth
    connected organizations work without a global access token.
    """
    if body.get('type') != 'payment':
        return {'status': 'ignored'}

    payment_id = (body.get('data') or {}).get('id')
    if not payment_id:
        raise ValueError('Payment ID missing')

    oauth = MercadoPagoOAuth.objects.filter(organization=organization).first()
    access_token, source = mercadopago.select_credentials(oauth)
    if not access_token:
        raise ValueError('MP config not found')
    payment_data = mercadopago.get_payment(payment_id, access_token)

    metadata_organization = (payment_data.get('metadata') or {}).get('organization_id')
    if metadata_organization and str(metadata_organization) != str(organization.id):
        raise ValueError('Payment belongs to another organization')

    payment_status = payment_data.get('status')
    if payment_status == 'approved':
        record_approved_payment(organization, payment_data)
    else:
        logger.info(f"MercadoPago payment {payment_id} for organization {organization.id} is {payment_status}")

    return {
        'status': 'processed',
        'organization_id': organization.id,
        'payment_id': payment_id,
        'credential_source': source,
    }
