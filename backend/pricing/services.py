"""
Banking promotion calculations and lookups.
"""
import logging
from datetime import date as date_cls
from decimal import Decimal
from django.db import transaction
from django.db.models import Q
from backend.core.cache_utils import PROMOTIONS_CACHE_TTL, PROMOTIONS_KEY_PREFIX, cached_query
from .models import BankingPromotion, InstallmentPlan, WEEKDAYS

logger = logging.getLogger('backend.pricing')

HUNDRED = Decimal('100')


def weekday_name(value=None):
    """Spanish weekday name ('lunes'...'domingo') of a date, today by default"""
    value = value or date_cls.today()
    return WEEKDAYS[value.weekday()]


def calculate_promotion_amount(promotion, amount, installments=None):
    """
    Apply a promotion to an amount. A discount takes precedence over a
    surcharge; an enabled plan matching `installments` (> 1) adds its
    interest and splits the result in installments.
    """
    amount = Decimal(amount)
    final_amount = amount
    discount_amount = Decimal('0')
    surcharge_amount = Decimal('0')

    if promotion.discount_rate and promotion.discount_rate > 0:
        discount_amount = amount * promotion.discount_rate / HUNDRED
        final_amount = amount - discount_amount
    elif promotion.surcharge_rate and promotion.surcharge_rate > 0:
        surcharge_amount = amount * promotion.surcharge_rate / HUNDRED
        final_amount = amount + surcharge_amount

    result = {
        'original_amount': amount,
        'final_amount': final_amount,
        'discount_amount': discount_amount if discount_amount > 0 else None,
        'surcharge_amount': surcharge_amount if surcharge_amount > 0 else None,
        'installment_amount': None,
        'total_interest': None,
        'installments': None,
    }

    if installments and installments > 1:
        plan = promotion.installment_plans.filter(installments=installments, is_enabled=True).first()
        if plan is not None:
            total_interest = Decimal('0')
            if plan.interest_rate > 0:
                total_interest = final_amount * plan.interest_rate / HUNDRED
                final_amount = final_amount + total_interest
            result.update({
                'final_amount': final_amount,
                'installment_amount': final_amount / installments,
                'total_interest': total_interest if total_interest > 0 else None,
                'installments': installments,
            })

    for key in ('original_amount', 'final_amount', 'discount_amount', 'surcharge_amount',
                'installment_amount', 'total_interest'):
        if result[key] is not None:
            result[key] = result[key].quantize(Decimal('0.01'))
    return result


def save_installment_plans(promotion, plans):
    """Upsert installment plans keyed by installments"""
    existing = {plan.installments: plan for plan in promotion.installment_plans.all()}
    for plan_data in plans:
        plan = existing.get(plan_data['installments'])
        if plan is None:
            InstallmentPlan.objects.create(promotion=promotion, **plan_data)
            continue
        plan.interest_rate = plan_data.get('interest_rate', plan.interest_rate)
        plan.is_enabled = plan_data.get('is_enabled', plan.is_enabled)
        plan.save()


def save_promotion(organization, data, promotion=None):
    plans = data.pop('installment_plans', None)
    with transaction.atomic():
        if promotion is None:
            promotion = BankingPromotion.objects.create(organization=organization, **data)
        else:
            for field, value in data.items():
                setattr(promotion, field, value)
            promotion.save()
        if plans:
            save_installment_plans(promotion, plans)
    return promotion


@cached_query(cache_ttl=PROMOTIONS_CACHE_TTL, key_prefix=PROMOTIONS_KEY_PREFIX)
def promotion_ids_for_day(organization_id, day, on_date):
    """Ids of the enabled promotions of an organization valid on a weekday and date"""
    queryset = BankingPromotion.objects.filter(organization_id=organization_id, is_enabled=True).filter(
        Q(start_date__isnull=True) | Q(start_date__lte=on_date),
        Q(end_date__isnull=True) | Q(end_date__gte=on_date),
    )
    # JSON list lookups are not portable across databases; filter in Python
    return [promotion.id for promotion in queryset.only('id', 'active_days') if promotion.is_active_on(day)]


def promotions_for_day(organization, day=None, on_date=None):
    on_date = on_date or date_cls.today()
    day = day or weekday_name(on_date)
    if day not in WEEKDAYS:
        raise ValueError(f"Día inválido: {day}. Valores válidos: {', '.join(WEEKDAYS)}")
    ids = promotion_ids_for_day(organization.id, day, on_date.isoformat())
    return BankingPromotion.objects.filter(id__in=ids).select_related('bank', 'bank_card').prefetch_related('installment_plans')
