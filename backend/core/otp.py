"""
TOTP support for the organization secure mode.

Tokens are SHA1 TOTP codes; digits, period and issuer come from settings.
Verification accepts one period of drift in either direction.
"""
import logging
import re

import pyotp
from django.conf import settings

logger = logging.getLogger(__name__)

VERIFY_WINDOW = 1


def otp_digits():
    return int(getattr(settings, 'OTP_DIGITS', 6))


def otp_period():
    return int(getattr(settings, 'OTP_PERIOD', 120))


def otp_issuer():
    return getattr(settings, 'OTP_ISSUER', 'Apex Software')


def generate_secret():
    """Random base32 secret"""
    return pyotp.random_base32()


def build_totp(secret):
    return pyotp.TOTP(secret, digits=otp_digits(), interval=otp_period())


def provisioning_uri(secret, label):
    """otpauth:// URI rendered as a QR code by authenticator apps"""
    return build_totp(secret).provisioning_uri(name=label, issuer_name=otp_issuer())


def is_well_formed_token(token):
    if token is None:
        return False
    return bool(re.fullmatch(rf'\d{{{otp_digits()}}}', str(token).strip()))


def verify_token(secret, token):
    """True when the token is well formed and valid for the secret"""
    if not secret or not is_well_formed_token(token):
        return False
    return build_totp(secret).verify(str(token).strip(), valid_window=VERIFY_WINDOW)


def check_secure_mode_token(organization, token):
    """
    Validate the token required by secure mode.

    Returns an error message, or None when the operation may proceed.
    Organizations without secure mode always pass.
    """
    if organization is None or not organization.secure_mode_enabled:
        return None

    if not organization.otp_verified or not organization.otp_secret:
        return 'El modo seguro está activo pero el OTP no está configurado o verificado.'

    if not token:
        return 'Se requiere un código OTP para realizar esta acción.'

    if not is_well_formed_token(token):
        return f'El token OTP debe ser de {otp_digits()} dígitos numéricos.'

    if not verify_token(organization.otp_secret, token):
        logger.warning(f"Invalid OTP token for organization {organization.id}")
        return 'Código OTP inválido.'

    return None
