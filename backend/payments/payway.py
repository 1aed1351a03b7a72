"""
PayWay (Prisma) gateway configuration.
"""
import logging
from . import services

logger = logging.getLogger('backend.payments')

ENVIRONMENTS = ('sandbox', 'production')
CONFIG_KEYS = ('merchant_id', 'api_key', 'secret_key', 'environment', 'site_id')


def get_config(organization):
    """Raw PayWay configuration; ValueError when the method is not associated"""
    config = services.get_configuration(organization, services.PAYWAY)
    if config is None:
        raise ValueError('PayWay no está configurado para esta organización.')
    return config


def update_config(organization, values):
    environment = values.get('environment')
    if environment is not None and environment not in ENVIRONMENTS:
        raise ValueError(f"Entorno inválido: {environment}. Valores válidos: {', '.join(ENVIRONMENTS)}")
    clean = {key: values.get(key) for key in CONFIG_KEYS if key in values}
    return services.update_configuration(organization, services.PAYWAY, clean)


def validate_config(organization):
    """Readiness of the PayWay configuration of the organization"""
    config = services.get_configuration(organization, services.PAYWAY)
    if config is None:
        return {
            'is_valid': False,
            'missing_fields': list(services.REQUIRED_KEYS[services.PAYWAY]),
            'environment': None,
        }
    missing = services.missing_fields(config, services.PAYWAY)
    if missing:
        logger.info(f"PayWay configuration of organization {organization.id} is missing {missing}")
    return {
        'is_valid': not missing,
        'missing_fields': missing,
        'environment': config.get('environment'),
    }
