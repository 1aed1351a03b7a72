"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import (
    invalidate_reports_cache, invalidate_catalog_cache,
    invalidate_motorcycle_list_cache, invalidate_promotions_cache,
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

REPORT_MODELS = {
    'Motorcycle', 'Reservation', 'Sale', 'CurrentAccount', 'Payment',
    'PettyCashDeposit', 'PettyCashWithdrawal', 'PettyCashSpend', 'Supplier',
}
CATALOG_MODELS = {'Brand', 'MotorcycleModel', 'OrganizationBrand', 'Color'}
MOTORCYCLE_LIST_MODELS = {'Motorcycle', 'Reservation', 'Sale', 'MotorcycleTransfer'}
PROMOTION_MODELS = {'BankingPromotion', 'InstallmentPlan', 'BankCard'}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations (batch creation, seeding).
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_report_cache(sender, instance, **kwargs):
    """Invalidate the organization's reports when report sources change"""
    if is_suspended() or sender.__name__ not in REPORT_MODELS:
        return
    organization_id = getattr(instance, 'organization_id', None)
    if not organization_id:
        return
    try:
        invalidate_reports_cache(organization_id)
    except Exception as e:
        logger.warning(f"Error in invalidate_report_cache signal: {e}")


@receiver([post_save, post_delete])
def invalidate_catalog(sender, instance, **kwargs):
    """Invalidate cached brand/model/color lists"""
    if is_suspended() or sender.__name__ not in CATALOG_MODELS:
        return
    try:
        invalidate_catalog_cache()
    except Exception as e:
        logger.warning(f"Error in invalidate_catalog signal: {e}")


@receiver([post_save, post_delete])
def invalidate_motorcycle_lists(sender, instance, **kwargs):
    """Invalidate cached motorcycle listings when units change state or owner"""
    if is_suspended() or sender.__name__ not in MOTORCYCLE_LIST_MODELS:
        return
    organization_id = getattr(instance, 'organization_id', None)
    if not organization_id:
        return
    try:
        invalidate_motorcycle_list_cache(organization_id)
    except Exception as e:
        logger.warning(f"Error in invalidate_motorcycle_lists signal: {e}")


@receiver([post_save, post_delete])
def invalidate_promotions(sender, instance, **kwargs):
    """Invalidate cached promotions-by-day lookups"""
    if is_suspended() or sender.__name__ not in PROMOTION_MODELS:
        return
    try:
        invalidate_promotions_cache()
    except Exception as e:
        logger.warning(f"Error in invalidate_promotions signal: {e}")
