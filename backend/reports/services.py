"""
Aggregations behind the report endpoints.

Amounts are grouped per currency because an organization sells in ARS and
USD at the same time; every money figure is a {currency: Decimal} dict.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from django.db.models import Sum
from backend.current_accounts.models import CurrentAccount, Payment
from backend.inventory.models import Motorcycle
from backend.parties.models import Supplier
from backend.sales.models import Reservation, Sale

logger = logging.getLogger('backend.reports')

ZERO = Decimal('0.00')
RESERVATION_STATUSES = ('active', 'completed', 'cancelled', 'expired')


def _money():
    return defaultdict(lambda: ZERO)


def _plain(value):
    """Turn nested defaultdicts into plain dicts"""
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def _date_range(queryset, field, date_from=None, date_to=None):
    if date_from:
        queryset = queryset.filter(**{f'{field}__date__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{field}__date__lte': date_to})
    return queryset


def sales_report(organization, date_from=None, date_to=None, branch_id=None):
    sales = Sale.objects.filter(organization=organization).select_related(
        'seller', 'branch', 'motorcycle__brand', 'motorcycle__model'
    )
    sales = _date_range(sales, 'sold_at', date_from, date_to)
    if branch_id:
        sales = sales.filter(branch_id=branch_id)

    summary = {'total_sales': 0, 'total_revenue': _money(), 'total_profit': _money(), 'average_price': {}}
    counts = defaultdict(int)
    by_seller = {}
    by_branch = {}
    by_month = {}

    for sale in sales:
        currency = sale.currency
        profit = sale.profit
        summary['total_sales'] += 1
        summary['total_revenue'][currency] += sale.price
        counts[currency] += 1
        if profit is not None:
            summary['total_profit'][currency] += profit

        seller_key = str(sale.seller_id or 'unknown')
        seller = by_seller.setdefault(seller_key, {
            'name': sale.seller.display_name if sale.seller else 'Desconocido',
            'count': 0, 'revenue': _money(), 'profit': _money(),
        })
        seller['count'] += 1
        seller['revenue'][currency] += sale.price
        if profit is not None:
            seller['profit'][currency] += profit

        branch_key = str(sale.branch_id or 'unknown')
        branch = by_branch.setdefault(branch_key, {
            'name': sale.branch.name if sale.branch else 'Desconocida',
            'count': 0, 'revenue': _money(),
        })
        branch['count'] += 1
        branch['revenue'][currency] += sale.price

        month = by_month.setdefault(sale.sold_at.strftime('%Y-%m'), {'count': 0, 'revenue': _money()})
        month['count'] += 1
        month['revenue'][currency] += sale.price

    summary['average_price'] = {
        currency: (total / counts[currency]).quantize(Decimal('0.01'))
        for currency, total in summary['total_revenue'].items()
    }
    return _plain({
        'summary': summary,
        'sales_by_seller': by_seller,
        'sales_by_branch': by_branch,
        'sales_by_month': dict(sorted(by_month.items())),
    })


def inventory_report(organization, branch_id=None):
    """Motorcycles by state and brand; deleted units are left out"""
    motorcycles = Motorcycle.objects.filter(organization=organization).exclude(
        state=Motorcycle.STATE_DELETED
    ).select_related('brand', 'branch')
    if branch_id:
        motorcycles = motorcycles.filter(branch_id=branch_id)

    by_state = {}
    by_brand = {}
    by_branch = {}
    value_by_state = {}
    total = 0
    for motorcycle in motorcycles:
        total += 1
        currency = motorcycle.currency
        by_state[motorcycle.state] = by_state.get(motorcycle.state, 0) + 1
        value_by_state.setdefault(motorcycle.state, _money())[currency] += motorcycle.retail_price

        brand = by_brand.setdefault(motorcycle.brand.name, {'count': 0, 'value': _money()})
        brand['count'] += 1
        brand['value'][currency] += motorcycle.retail_price

        branch_name = motorcycle.branch.name if motorcycle.branch else 'Sin sucursal'
        by_branch[branch_name] = by_branch.get(branch_name, 0) + 1

    return _plain({
        'total': total,
        'by_state': by_state,
        'by_brand': by_brand,
        'by_branch': by_branch,
        'value_by_state': value_by_state,
    })


def reservations_report(organization, date_from=None, date_to=None, branch_id=None):
    reservations = Reservation.objects.filter(organization=organization).select_related('motorcycle__branch')
    reservations = _date_range(reservations, 'created_at', date_from, date_to)
    if branch_id:
        reservations = reservations.filter(motorcycle__branch_id=branch_id)

    total_amount = _money()
    by_status = {key: {'count': 0, 'amount': _money()} for key in RESERVATION_STATUSES}
    by_branch = {}
    total = 0
    for reservation in reservations:
        total += 1
        currency = reservation.currency
        total_amount[currency] += reservation.amount
        entry = by_status.setdefault(reservation.status, {'count': 0, 'amount': _money()})
        entry['count'] += 1
        entry['amount'][currency] += reservation.amount

        branch = reservation.motorcycle.branch
        branch_key = str(branch.id) if branch else 'unknown'
        branch_entry = by_branch.setdefault(branch_key, {
            'name': branch.name if branch else 'Desconocida',
            'total': 0, 'amount': _money(), **{key: 0 for key in RESERVATION_STATUSES},
        })
        branch_entry['total'] += 1
        branch_entry[reservation.status] = branch_entry.get(reservation.status, 0) + 1
        branch_entry['amount'][currency] += reservation.amount

    completed = by_status['completed']['count']
    conversion_rate = round(completed / total * 100, 2) if total else 0
    return _plain({
        'summary': {
            'total_reservations': total,
            'active_reservations': by_status['active']['count'],
            'completed_reservations': completed,
            'cancelled_reservations': by_status['cancelled']['count'],
            'expired_reservations': by_status['expired']['count'],
            'total_amount': total_amount,
            'conversion_rate': conversion_rate,
        },
        'reservations_by_status': by_status,
        'reservations_by_branch': by_branch,
    })


def current_accounts_report(organization, date_from=None, date_to=None, status=None):
    """Financed, paid and pending totals; paid only counts completed normal payments"""
    accounts = CurrentAccount.objects.filter(organization=organization).select_related('motorcycle__branch')
    accounts = _date_range(accounts, 'created_at', date_from, date_to)
    if status and status != 'all':
        accounts = accounts.filter(status=status)

    payments = Payment.objects.filter(
        current_account__in=accounts, status='COMPLETED',
        installment_version__isnull=True,
    )
    paid_by_account = {
        row['current_account_id']: row['total'] or ZERO
        for row in payments.values('current_account_id').annotate(total=Sum('amount_paid'))
    }

    total_financed = ZERO
    total_paid = ZERO
    by_status = {}
    by_branch = {}
    overdue = []
    for account in accounts:
        financed = account.total_amount
        paid = paid_by_account.get(account.id, ZERO)
        total_financed += financed
        total_paid += paid

        entry = by_status.setdefault(account.status, {'count': 0, 'total_amount': ZERO})
        entry['count'] += 1
        entry['total_amount'] += financed

        branch = account.motorcycle.branch
        branch_entry = by_branch.setdefault(branch.name if branch else 'Sin sucursal', {'count': 0, 'total_amount': ZERO})
        branch_entry['count'] += 1
        branch_entry['total_amount'] += financed

        if account.status == 'OVERDUE':
            overdue.append({
                'id': account.id,
                'client_id': account.client_id,
                'next_due_date': account.next_due_date,
                'remaining_amount': account.remaining_amount,
                'currency': account.currency,
            })

    monthly = {}
    for payment in payments.exclude(payment_date__isnull=True).only('payment_date', 'amount_paid'):
        month = monthly.setdefault(payment.payment_date.strftime('%Y-%m'), {'total_payments': 0, 'total_amount': ZERO})
        month['total_payments'] += 1
        month['total_amount'] += payment.amount_paid

    return {
        'total_accounts': sum(item['count'] for item in by_status.values()),
        'total_financed_amount': total_financed,
        'total_paid_amount': total_paid,
        'total_pending_amount': total_financed - total_paid,
        'accounts_by_status': [{'status': key, **value} for key, value in by_status.items()],
        'accounts_by_branch': [{'branch': key, **value} for key, value in by_branch.items()],
        'payments_by_month': [{'month': key, **value} for key, value in sorted(monthly.items())],
        'overdue_accounts': overdue,
    }


def suppliers_report(organization, date_from=None, date_to=None):
    """Motorcycles bought and purchase value (cost price) per supplier"""
    motorcycles = Motorcycle.objects.filter(organization=organization, supplier__isnull=False).exclude(
        state=Motorcycle.STATE_DELETED
    )
    motorcycles = _date_range(motorcycles, 'created_at', date_from, date_to)

    suppliers = {
        supplier.id: {
            'id': supplier.id,
            'name': supplier.commercial_name or supplier.legal_name,
            'status': supplier.status,
            'motorcycles': 0,
            'purchase_value': _money(),
            'by_state': {},
        }
        for supplier in Supplier.objects.filter(organization=organization)
    }
    total_value = _money()
    for motorcycle in motorcycles.only('supplier_id', 'state', 'cost_price', 'currency'):
        entry = suppliers.get(motorcycle.supplier_id)
        if entry is None:
            continue
        entry['motorcycles'] += 1
        entry['by_state'][motorcycle.state] = entry['by_state'].get(motorcycle.state, 0) + 1
        if motorcycle.cost_price is not None:
            entry['purchase_value'][motorcycle.currency] += motorcycle.cost_price
            total_value[motorcycle.currency] += motorcycle.cost_price

    rows = sorted(suppliers.values(), key=lambda item: item['motorcycles'], reverse=True)
    return _plain({
        'summary': {
            'total_suppliers': len(rows),
            'active_suppliers': sum(1 for row in rows if row['status'] == 'activo'),
            'total_motorcycles': sum(row['motorcycles'] for row in rows),
            'total_purchase_value': total_value,
        },
        'suppliers': rows,
    })


def account_statement(account):
    """Current account data for the statement PDF"""
    payments = account.payments.filter(installment_version__isnull=True).exclude(status='PENDING').order_by(
        'payment_date', 'id'
    )
    paid = sum((payment.amount_paid for payment in payments if payment.status == 'COMPLETED'), ZERO)
    return {
        'account': account,
        'payments': list(payments),
        'total_paid': paid,
        'pending': max(ZERO, account.total_amount - account.down_payment - paid),
    }
