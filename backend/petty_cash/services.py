"""
Petty cash ledger: deposits fund the cash box, withdrawals hand money to an
employee and spends justify the withdrawals.
"""
import logging
import time
from decimal import Decimal
from django.db import transaction
from django.db.models import Sum
from backend.core.blob_storage import delete_blob, upload_file
from .models import PettyCashDeposit, PettyCashWithdrawal, PettyCashSpend

logger = logging.getLogger('backend.petty_cash')

GENERAL_ACCOUNT = 'GENERAL_ACCOUNT'
GENERAL_BRANCH = '__general__'
TICKET_CONTENT_TYPES = ('image/jpeg', 'image/png', 'application/pdf')


def resolve_branch_filter(branch_value):
    """
    Translate the branch selector of the petty cash screens into a branch id.
    Returns (is_general, branch_id).
    """
    if branch_value in (None, '', GENERAL_BRANCH, GENERAL_ACCOUNT):
        return True, None
    try:
        return False, int(branch_value)
    except (TypeError, ValueError):
        raise ValueError('La sucursal indicada no es válida.')


def withdrawn_total(deposit):
    return deposit.withdrawals.aggregate(total=Sum('amount_given'))['total'] or Decimal('0.00')


def create_deposit(organization, amount, date, description, reference=None, branch=None, user=None):
    if amount <= 0:
        raise ValueError('El monto del depósito debe ser positivo.')
    deposit = PettyCashDeposit.objects.create(
        organization=organization,
        branch=branch,
        amount=amount,
        date=date,
        description=description,
        reference=reference or None,
        status='OPEN',
        created_by=user,
    )
    logger.info(f"Petty cash deposit {deposit.id} of {amount} created (branch={branch.id if branch else 'general'})")
    return deposit


def create_withdrawal(organization, user_name, amount_given, date, deposit_id=None, branch_id=None, user=None):
    """
    Withdraw from a deposit. Without an explicit deposit the latest OPEN
    deposit of the branch (or of the general account) is used.
    """
    if amount_given <= 0:
        raise ValueError('El monto del retiro debe ser positivo.')

    with transaction.atomic():
        deposits = PettyCashDeposit.objects.select_for_update().filter(organization=organization)
        if deposit_id:
            deposit = deposits.filter(pk=deposit_id).first()
            if deposit is None:
                raise ValueError('Depósito no encontrado.')
        else:
            deposit = deposits.filter(status='OPEN', branch_id=branch_id).order_by('-date', '-created_at').first()
            if deposit is None:
                raise ValueError('No hay un depósito abierto para realizar el retiro.')

        if deposit.status != 'OPEN':
            raise ValueError('El depósito seleccionado no está abierto.')

        available = deposit.amount - withdrawn_total(deposit)
        if available < amount_given:
            raise ValueError(
                f'Fondos insuficientes en el depósito. Disponible: {available:.2f}. '
                f'Solicitado: {Decimal(amount_given):.2f}'
            )

        withdrawal = PettyCashWithdrawal.objects.create(
            organization=organization,
            deposit=deposit,
            user=user,
            user_name=user_name,
            amount_given=amount_given,
            date=date,
            status='PENDING_JUSTIFICATION',
        )

        if available - amount_given <= 0:
            deposit.status = 'CLOSED'
            deposit.save(update_fields=['status', 'updated_at'])
            logger.info(f"Petty cash deposit {deposit.id} fully withdrawn and closed")

    logger.info(f"Petty cash withdrawal {withdrawal.id} of {amount_given} from deposit {deposit.id}")
    return withdrawal


def upload_ticket(organization, withdrawal, uploaded_file):
    """Store a spend ticket; returns {'key', 'url'}"""
    content_type = getattr(uploaded_file, 'content_type', None)
    if content_type not in TICKET_CONTENT_TYPES:
        raise ValueError('Tipo de archivo no soportado. Solo se permiten JPG, PNG o PDF.')
    safe_name = '_'.join(uploaded_file.name.split())
    key = f"uploads/tickets/petty-cash/{organization.id}/{withdrawal.id}/{int(time.time() * 1000)}-{safe_name}"
    return upload_file(key, uploaded_file)


def create_spend(organization, withdrawal_id, motive, amount, date, description=None, ticket=None, user=None):
    """
    Justify part of a withdrawal. The withdrawal becomes JUSTIFIED when the
    justified amount reaches the amount given; the deposit closes when all its
    withdrawals are justified and it was fully withdrawn.
    """
    if amount <= 0:
        raise ValueError('El monto del gasto debe ser positivo.')
    if motive == 'otros' and not (description or '').strip():
        raise ValueError("La descripción es requerida cuando el motivo es 'Otros'.")

    stored = None
    try:
        with transaction.atomic():
            try:
                withdrawal = PettyCashWithdrawal.objects.select_for_update().select_related('deposit').get(
                    pk=withdrawal_id, organization=organization
                )
            except PettyCashWithdrawal.DoesNotExist:
                raise ValueError('Retiro no encontrado o no pertenece a la organización.')

            if withdrawal.status == 'JUSTIFIED':
                raise ValueError('Este retiro ya ha sido completamente justificado.')

            new_justified = withdrawal.amount_justified + amount
            if new_justified > withdrawal.amount_given:
                raise ValueError('El monto justificado excede el monto entregado en el retiro.')

            if ticket is not None:
                stored = upload_ticket(organization, withdrawal, ticket)

            spend = PettyCashSpend.objects.create(
                organization=organization,
                withdrawal=withdrawal,
                motive=motive,
                description=description or (motive if motive != 'otros' else 'Otros'),
                amount=amount,
                date=date,
                ticket_url=stored['url'] if stored else None,
                ticket_key=stored['key'] if stored else None,
                created_by=user,
            )

            withdrawal.amount_justified = new_justified
            withdrawal.status = 'JUSTIFIED' if new_justified == withdrawal.amount_given else 'PARTIALLY_JUSTIFIED'
            withdrawal.save(update_fields=['amount_justified', 'status', 'updated_at'])

            deposit = withdrawal.deposit
            if withdrawal.status == 'JUSTIFIED' and deposit.status == 'OPEN':
                withdrawals = list(deposit.withdrawals.all())
                all_justified = all(w.status == 'JUSTIFIED' for w in withdrawals)
                if all_justified and sum((w.amount_given for w in withdrawals), Decimal('0.00')) >= deposit.amount:
                    deposit.status = 'CLOSED'
                    deposit.save(update_fields=['status', 'updated_at'])
    except Exception:
        # The spend was rolled back, so its ticket must not stay in storage
        if stored is not None:
            logger.warning(f"Removing ticket {stored['key']} of a spend that was not saved")
            delete_blob(stored['key'])
        raise

    logger.info(f"Petty cash spend {spend.id} of {amount} on withdrawal {withdrawal.id}")
    return spend


def delete_deposit(deposit):
    if deposit.withdrawals.exists():
        raise ValueError('No se puede eliminar un depósito que tiene retiros asociados.')
    deposit.delete()


def delete_withdrawal(withdrawal):
    if withdrawal.spends.exists():
        raise ValueError('No se puede eliminar un retiro que tiene gastos asociados.')
    with transaction.atomic():
        deposit = withdrawal.deposit
        withdrawal.delete()
        # Money goes back to the deposit
        if deposit.status == 'CLOSED' and withdrawn_total(deposit) < deposit.amount:
            deposit.status = 'OPEN'
            deposit.save(update_fields=['status', 'updated_at'])


def movements(organization, branch_value=None, date_from=None, date_to=None):
    """
    Deposits (DEBE) and spends (HABER) of a branch, newest first, each row
    carrying the running balance up to that movement. Returns
    (rows, totals).
    """
    _, branch_id = resolve_branch_filter(branch_value)

    deposits = PettyCashDeposit.objects.filter(organization=organization, branch_id=branch_id)
    spends = PettyCashSpend.objects.filter(
        organization=organization, withdrawal__deposit__branch_id=branch_id
    ).select_related('withdrawal')
    if date_from:
        deposits = deposits.filter(date__gte=date_from)
        spends = spends.filter(date__gte=date_from)
    if date_to:
        deposits = deposits.filter(date__lte=date_to)
        spends = spends.filter(date__lte=date_to)

    rows = [{
        'id': deposit.id,
        'type': 'DEBE',
        'amount': deposit.amount,
        'description': deposit.description,
        'ticket_number': deposit.reference,
        'receipt_url': None,
        'date': deposit.date,
        'created_at': deposit.created_at,
        'user': None,
    } for deposit in deposits]
    rows.extend({
        'id': spend.id,
        'type': 'HABER',
        'amount': spend.amount,
        'description': spend.description,
        'ticket_number': spend.motive,
        'receipt_url': spend.ticket_url,
        'date': spend.date,
        'created_at': spend.created_at,
        'user': {'id': spend.withdrawal.user_id, 'name': spend.withdrawal.user_name} if spend.withdrawal.user_id else None,
    } for spend in spends)

    rows.sort(key=lambda row: row['created_at'])
    total_debe = Decimal('0.00')
    total_haber = Decimal('0.00')
    for row in rows:
        if row['type'] == 'DEBE':
            total_debe += row['amount']
        else:
            total_haber += row['amount']
        row['balance'] = total_debe - total_haber
    rows.reverse()

    return rows, {
        'total_debe': total_debe,
        'total_haber': total_haber,
        'balance': total_debe - total_haber,
    }
