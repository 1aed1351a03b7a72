"""
French amortization helpers.

Amounts are Decimal; installment and interest figures are rounded up to
whole currency units, matching how the dealership quotes installments.
"""
import calendar
from datetime import timedelta
from decimal import Decimal, ROUND_CEILING

PERIODS_PER_YEAR = {
    'WEEKLY': 52,
    'BIWEEKLY': 26,
    'MONTHLY': 12,
    'QUARTERLY': 4,
    'ANNUALLY': 1,
}

ZERO = Decimal('0')


def periods_per_year(frequency):
    return PERIODS_PER_YEAR.get(frequency, 12)


def ceil_amount(value):
    return Decimal(value).to_integral_value(rounding=ROUND_CEILING)


def periodic_rate(annual_rate_percent, frequency):
    """Effective periodic rate from a nominal annual rate: (1 + TNA)^(1/ppy) - 1"""
    annual = Decimal(annual_rate_percent or 0)
    if annual <= 0:
        return ZERO
    return (Decimal(1) + annual / Decimal(100)) ** (Decimal(1) / Decimal(periods_per_year(frequency))) - Decimal(1)


def simple_periodic_rate(annual_rate_percent, frequency):
    """TNA / 100 / ppy, used to split a received payment into interest and capital"""
    return Decimal(annual_rate_percent or 0) / Decimal(100) / Decimal(periods_per_year(frequency))


def add_months(value, months):
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_periods(start, frequency, count):
    """Date `count` periods after `start`"""
    if frequency == 'WEEKLY':
        return start + timedelta(days=7 * count)
    if frequency == 'BIWEEKLY':
        return start + timedelta(days=14 * count)
    if frequency == 'QUARTERLY':
        return add_months(start, 3 * count)
    if frequency == 'ANNUALLY':
        return add_months(start, 12 * count)
    return add_months(start, count)


def payment_dates(start, number_of_installments, frequency):
    """
    (next_due_date, end_date) for a new account. The first installment is
    due one period after start unless there is a single installment.
    """
    if number_of_installments <= 0:
        return None, None
    next_due = add_periods(start, frequency, 1) if number_of_installments > 1 else start
    end = add_periods(start, frequency, number_of_installments - 1)
    return next_due, end


def next_due_date(start, frequency, paid_count, total_installments):
    if paid_count >= total_installments:
        return None
    return add_periods(start, frequency, paid_count)


def calculate_installment(principal, annual_rate_percent, installments, frequency):
    """Fixed French installment (rounded up) for the given principal"""
    principal = Decimal(principal)
    if principal <= 0 or installments <= 0:
        return ZERO
    rate = periodic_rate(annual_rate_percent, frequency)
    if rate == 0:
        return ceil_amount(principal / installments)
    factor = (Decimal(1) + rate) ** installments
    return ceil_amount(principal * rate * factor / (factor - Decimal(1)))


def french_schedule(principal, annual_rate_percent, installments, frequency):
    """
    Full amortization plan. Each entry holds installment_number,
    capital_start, interest, amortization, installment_amount and capital_end.
    """
    principal = Decimal(principal)
    if principal <= 0 or installments <= 0 or Decimal(annual_rate_percent or 0) < 0:
        return []

    rate = periodic_rate(annual_rate_percent, frequency)
    capital = principal
    schedule = []

    if rate == 0:
        fixed = ceil_amount(principal / installments)
        for number in range(1, installments + 1):
            amortization = capital if number == installments else min(fixed, capital)
            schedule.append({
                'installment_number': number,
                'capital_start': capital,
                'interest': ZERO,
                'amortization': amortization,
                'installment_amount': amortization,
                'capital_end': max(ZERO, capital - amortization),
            })
            capital = max(ZERO, capital - amortization)
        return schedule

    fixed = calculate_installment(principal, annual_rate_percent, installments, frequency)
    for number in range(1, installments + 1):
        interest = ceil_amount(capital * rate)
        amortization = fixed - interest
        installment_amount = fixed
        if number == installments:
            amortization = capital
            installment_amount = ceil_amount(capital + interest)
        amortization = max(ZERO, min(amortization, capital))
        capital_end = max(ZERO, capital - amortization)
        schedule.append({
            'installment_number': number,
            'capital_start': capital,
            'interest': interest,
            'amortization': amortization,
            'installment_amount': installment_amount,
            'capital_end': capital_end,
        })
        capital = capital_end
    return schedule


def simulate_remaining_installments(balance, installment_amount, rate, limit=100):
    """
    Number of installments of a fixed amount needed to cancel `balance`
    and the amount of the last one. Stops after `limit` iterations.
    """
    balance = Decimal(balance)
    installment_amount = Decimal(installment_amount)
    count = 0
    last_amount = ZERO
    while balance > 0:
        interest = ceil_amount(balance * rate)
        amortization = min(balance, installment_amount - interest)
        if amortization < balance:
            balance -= amortization
        else:
            last_amount = amortization + interest
            balance = ZERO
        count += 1
        if count > limit:
            break
    return count, last_amount
