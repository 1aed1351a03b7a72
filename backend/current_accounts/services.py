"""
Current account (installment plan) rules: account creation, payments
against the French amortization plan and D/H reversals.
"""
import json
import logging
from decimal import Decimal
from django.db import transaction
from django.utils import timezone
from backend.inventory.models import Motorcycle
from .amortization import (
    ceil_amount, calculate_installment, french_schedule, next_due_date,
    payment_dates, simple_periodic_rate, simulate_remaining_installments,
)
from .models import CurrentAccount, Payment

logger = logging.getLogger('backend.current_accounts')

CENT = Decimal('0.01')
CLOSED_STATUSES = ('PAID_OFF', 'CANCELLED')


def _money(value):
    return Decimal(value).quantize(CENT)


def normal_payments(account):
    """Payments that count towards the plan (no D/H entries, no pending rows)"""
    return account.payments.filter(installment_version__isnull=True, is_down_payment=False).exclude(status='PENDING')


def create_account(organization, client, motorcycle_id, user=None, **data):
    """
    Open a current account. Returns (account, warning) where warning flags
    installments that do not add up to the financed amount.
    """
    try:
        motorcycle = Motorcycle.objects.get(pk=motorcycle_id, organization=organization)
    except Motorcycle.DoesNotExist:
        raise ValueError('La motocicleta especificada no existe.')

    total_amount = Decimal(data['total_amount'])
    down_payment = Decimal(data.get('down_payment') or 0)
    remaining = total_amount - down_payment
    if remaining < 0:
        raise ValueError('El pago inicial no puede ser mayor que el monto total.')

    installments = data['number_of_installments']
    frequency = data.get('payment_frequency') or 'MONTHLY'
    interest_rate = Decimal(data.get('interest_rate') or 0)
    installment_amount = data.get('installment_amount')
    if installment_amount in (None, ''):
        installment_amount = calculate_installment(remaining, interest_rate, installments, frequency)
    installment_amount = Decimal(installment_amount)

    warning = None
    if abs(remaining - installments * installment_amount) > CENT:
        warning = 'La suma de las cuotas no coincide exactamente con el monto restante a financiar.'
        logger.warning(
            f"Installments do not add up: remaining={remaining} "
            f"expected={installments * installment_amount}"
        )

    start_date = data['start_date']
    next_due, end_date = payment_dates(start_date, installments, frequency)

    account = CurrentAccount.objects.create(
        organization=organization,
        client=client,
        motorcycle=motorcycle,
        total_amount=_money(total_amount),
        down_payment=_money(down_payment),
        financed_amount=_money(remaining),
        remaining_amount=_money(remaining),
        number_of_installments=installments,
        installment_amount=_money(installment_amount),
        payment_frequency=frequency,
        start_date=start_date,
        next_due_date=next_due,
        end_date=end_date,
        interest_rate=interest_rate,
        currency=data.get('currency') or 'ARS',
        reminder_lead_time_days=data.get('reminder_lead_time_days'),
        status=data.get('status') or 'ACTIVE',
        notes=data.get('notes') or '',
        created_by=user,
    )
    logger.info(f"Current account {account.id} created for client {client.id}")
    return account, warning


def amortization_plan(account):
    principal = account.total_amount - account.down_payment
    return french_schedule(principal, account.interest_rate, account.number_of_installments, account.payment_frequency)


def record_payment(account, amount_paid, user=None, payment_date=None, payment_method=None,
                   transaction_reference=None, notes=None, installment_number=None,
                   surplus_action=None, is_down_payment=False):
    """
    Register a payment against the account and recompute balance, next due
    date and status. A payment above the planned installment (plus one unit)
    either recalculates the installment or shortens the plan.
    """
    amount_paid = Decimal(amount_paid)
    if amount_paid <= 0:
        raise ValueError('El monto pagado debe ser positivo.')

    with transaction.atomic():
        account = CurrentAccount.objects.select_for_update().get(pk=account.pk)
        if account.status in CLOSED_STATUSES:
            raise ValueError(f'La cuenta corriente está {account.get_status_display().lower()} y no admite pagos.')

        plan = amortization_plan(account)
        if installment_number is not None:
            paid_count = installment_number - 1
        else:
            paid_count = normal_payments(account).count()
        installment_num = installment_number or paid_count + 1

        plan_entry = next((entry for entry in plan if entry['installment_number'] == installment_num), None)
        principal_before = plan_entry['capital_start'] if plan_entry else account.remaining_amount

        rate = simple_periodic_rate(account.interest_rate, account.payment_frequency)
        interest_component = ceil_amount(principal_before * rate)
        amortization_component = max(Decimal(0), amount_paid - interest_component)
        new_balance = max(Decimal(0), principal_before - amortization_component)

        payment_values = {
            'amount_paid': _money(amount_paid),
            'payment_date': payment_date or timezone.now(),
            'payment_method': payment_method,
            'transaction_reference': transaction_reference,
            'notes': notes,
            'installment_number': installment_num,
            'is_down_payment': is_down_payment,
            'surplus_action': surplus_action,
            'status': 'COMPLETED',
            'created_by': user,
        }
        pending = account.payments.filter(
            installment_number=installment_num, installment_version__isnull=True, status='PENDING'
        ).first()
        if pending is not None:
            for field, value in payment_values.items():
                setattr(pending, field, value)
            pending.save()
            payment = pending
        else:
            payment = Payment.objects.create(
                organization=account.organization,
                current_account=account,
                currency=account.currency,
                **payment_values
            )

        reference_installment = plan_entry['installment_amount'] if plan_entry else account.installment_amount
        has_surplus = amount_paid > reference_installment + 1

        account.remaining_amount = _money(new_balance)
        account.next_due_date = next_due_date(
            account.start_date, account.payment_frequency, paid_count + 1, account.number_of_installments
        )
        account.status = 'PAID_OFF' if new_balance <= 0 else 'ACTIVE'

        if has_surplus:
            if surplus_action in (None, '', 'RECALCULATE'):
                account.installment_amount = _money(calculate_installment(
                    new_balance,
                    account.interest_rate,
                    account.number_of_installments - (paid_count + 1),
                    account.payment_frequency,
                ))
            elif surplus_action == 'REDUCE_INSTALLMENTS':
                count, last_amount = simulate_remaining_installments(new_balance, account.installment_amount, rate)
                account.number_of_installments = paid_count + 1 + count
                if last_amount:
                    info = {
                        'type': 'LAST_INSTALLMENT_INFO',
                        'lastInstallmentAmount': float(last_amount),
                        'originalInstallmentAmount': float(account.installment_amount),
                        'difference': float(last_amount - account.installment_amount),
                        'calculatedAt': timezone.now().isoformat(),
                    }
                    account.notes = f"{account.notes or ''}\n[INFO_ULTIMA_CUOTA] {json.dumps(info)}"
        account.save()

    logger.info(
        f"Payment {payment.id} of {amount_paid} recorded on account {account.id} "
        f"(installment {installment_num}, balance {account.remaining_amount})"
    )
    return payment, account


def _reverse(payment, note):
    """Mark a payment as D and create its H counterpart"""
    if payment.installment_version in ('D', 'H'):
        raise ValueError(f'El pago {payment.id} ya forma parte de un proceso de anulación.')
    if payment.current_account_id is None:
        raise ValueError(f'El pago {payment.id} no está asociado a una cuenta corriente.')

    payment.installment_version = 'D'
    payment.save(update_fields=['installment_version', 'updated_at'])

    return Payment.objects.create(
        organization=payment.organization,
        current_account=payment.current_account,
        amount_paid=payment.amount_paid,
        currency=payment.currency,
        payment_date=payment.payment_date,
        payment_method=payment.payment_method,
        transaction_reference=payment.transaction_reference,
        installment_number=payment.installment_number,
        installment_version='H',
        is_down_payment=payment.is_down_payment,
        status=payment.status,
        notes=note,
    )


def _reopen_with(account, amount):
    account.remaining_amount = _money(account.remaining_amount + amount)
    if account.remaining_amount > 0 and account.status == 'PAID_OFF':
        account.status = 'ACTIVE'


def undo_payment(payment):
    """Void a payment with D/H entries and give the amount back to the balance"""
    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        note = f"{payment.notes} (Anulación H)" if payment.notes else f"Asiento H por anulación de pago {payment.id}"
        reversal = _reverse(payment, note)

        account = CurrentAccount.objects.select_for_update().get(pk=payment.current_account_id)
        _reopen_with(account, payment.amount_paid)
        account.save()

    logger.info(f"Payment {payment.id} voided (D/H) on account {account.id}")
    return payment, reversal, account


def cancel_payment(payment):
    """
    Void a payment of a specific installment: D/H entries plus a pending
    row for the same installment; the installment amount is recomputed over
    the installments still unpaid.
    """
    if payment.installment_number is None:
        raise ValueError(
            'El pago no está asociado a una cuota específica y no puede cancelarse de esta manera.'
        )

    with transaction.atomic():
        payment = Payment.objects.select_for_update().get(pk=payment.pk)
        reversal = _reverse(payment, f"Anulación de pago ID: {payment.id}. Contrapartida contable.")

        pending = Payment.objects.create(
            organization=payment.organization,
            current_account=payment.current_account,
            amount_paid=payment.amount_paid,
            currency=payment.currency,
            payment_date=None,
            payment_method=None,
            transaction_reference=None,
            installment_number=payment.installment_number,
            installment_version=None,
            status='PENDING',
            notes=f"Cuota pendiente tras anulación de pago ID: {payment.id}.",
        )

        account = CurrentAccount.objects.select_for_update().get(pk=payment.current_account_id)
        _reopen_with(account, payment.amount_paid)
        remaining_installments = max(0, account.number_of_installments - normal_payments(account).count())
        if remaining_installments > 0:
            account.installment_amount = _money(calculate_installment(
                account.remaining_amount,
                account.interest_rate,
                remaining_installments,
                account.payment_frequency,
            ))
        account.save()

    logger.info(f"Payment {payment.id} cancelled on account {account.id}, pending row {pending.id} created")
    return payment, reversal, pending, account


def refresh_overdue_accounts(organization=None, today=None):
    """Flag ACTIVE accounts whose next due date has passed as OVERDUE"""
    today = today or timezone.localdate()
    queryset = CurrentAccount.objects.filter(status='ACTIVE', next_due_date__lt=today)
    if organization is not None:
        queryset = queryset.filter(organization=organization)
    return queryset.update(status='OVERDUE', updated_at=timezone.now())
