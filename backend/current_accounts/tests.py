"""
Test suite for current accounts: amortization helpers, payments and D/H reversals
"""
from datetime import date
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.current_accounts.amortization import (
    add_months, calculate_installment, french_schedule, payment_dates, simulate_remaining_installments
)
from backend.current_accounts.models import CurrentAccount, Payment
from backend.current_accounts.services import (
    cancel_payment, create_account, record_payment, refresh_overdue_accounts, undo_payment
)
from backend.inventory.models import Motorcycle


class AmortizationTests(TestCase):

    def test_add_months_clamps_to_month_end(self):
        self.assertEqual(add_months(date(2024, 1, 31), 1), date(2024, 2, 29))
        self.assertEqual(add_months(date(2023, 11, 30), 3), date(2024, 2, 29))
        self.assertEqual(add_months(date(2024, 3, 15), 12), date(2025, 3, 15))

    def test_payment_dates(self):
        start = date(2024, 1, 15)
        self.assertEqual(payment_dates(start, 1, 'MONTHLY'), (start, start))
        self.assertEqual(payment_dates(start, 3, 'MONTHLY'), (date(2024, 2, 15), date(2024, 3, 15)))
        self.assertEqual(payment_dates(start, 2, 'WEEKLY'), (date(2024, 1, 22), date(2024, 1, 22)))
        self.assertEqual(payment_dates(start, 0, 'MONTHLY'), (None, None))

    def test_zero_rate_schedule(self):
        schedule = french_schedule(Decimal('1000'), Decimal('0'), 3, 'MONTHLY')
        self.assertEqual([entry['installment_amount'] for entry in schedule],
                         [Decimal('334'), Decimal('334'), Decimal('332')])
        self.assertEqual(sum(entry['amortization'] for entry in schedule), Decimal('1000'))
        self.assertEqual(schedule[-1]['capital_end'], Decimal('0'))

    def test_schedule_with_interest(self):
        installment = calculate_installment(Decimal('100000'), Decimal('60'), 12, 'MONTHLY')
        self.assertGreater(installment, Decimal('100000') / 12)
        self.assertEqual(installment, installment.to_integral_value())

        schedule = french_schedule(Decimal('100000'), Decimal('60'), 12, 'MONTHLY')
        self.assertEqual(len(schedule), 12)
        self.assertEqual(schedule[0]['installment_amount'], installment)
        self.assertGreater(schedule[0]['interest'], schedule[-1]['interest'])
        self.assertEqual(schedule[-1]['capital_end'], Decimal('0'))

    def test_invalid_schedule_inputs(self):
        self.assertEqual(french_schedule(Decimal('0'), Decimal('10'), 12, 'MONTHLY'), [])
        self.assertEqual(french_schedule(Decimal('1000'), Decimal('-1'), 12, 'MONTHLY'), [])
        self.assertEqual(calculate_installment(Decimal('1000'), Decimal('10'), 0, 'MONTHLY'), Decimal('0'))

    def test_simulate_remaining_installments(self):
        self.assertEqual(simulate_remaining_installments(Decimal('250'), Decimal('100'), Decimal('0')),
                         (3, Decimal('50')))


class AccountServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.customer = TestDataFactory.create_client(self.organization)
        self.motorcycle = TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_SOLD)

    def _create(self, **overrides):
        data = {
            'total_amount': Decimal('1000'),
            'down_payment': Decimal('200'),
            'number_of_installments': 4,
            'start_date': date(2024, 1, 31),
        }
        data.update(overrides)
        return create_account(self.organization, self.customer, self.motorcycle.id, user=self.user, **data)

    def test_create_computes_plan(self):
        account, warning = self._create()
        self.assertIsNone(warning)
        self.assertEqual(account.financed_amount, Decimal('800.00'))
        self.assertEqual(account.remaining_amount, Decimal('800.00'))
        self.assertEqual(account.installment_amount, Decimal('200.00'))
        self.assertEqual(account.next_due_date, date(2024, 2, 29))
        self.assertEqual(account.end_date, date(2024, 4, 30))
        self.assertEqual(account.status, 'ACTIVE')

    def test_create_warns_when_installments_do_not_add_up(self):
        account, warning = self._create(installment_amount=Decimal('150'))
        self.assertIsNotNone(warning)
        self.assertEqual(account.installment_amount, Decimal('150.00'))

    def test_down_payment_above_total(self):
        with self.assertRaises(ValueError):
            self._create(down_payment=Decimal('1500'))

    def test_motorcycle_of_other_organization(self):
        foreign = TestDataFactory.create_motorcycle(TestDataFactory.create_organization())
        with self.assertRaises(ValueError):
            create_account(self.organization, self.customer, foreign.id,
                           total_amount=Decimal('1000'), number_of_installments=2, start_date=date(2024, 1, 1))


class PaymentServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.account = TestDataFactory.create_current_account(self.organization, start_date=date(2024, 1, 10))

    def test_regular_payment(self):
        payment, account = record_payment(self.account, Decimal('100'), user=self.user)
        self.assertEqual(payment.installment_number, 1)
        self.assertEqual(payment.status, 'COMPLETED')
        self.assertEqual(account.remaining_amount, Decimal('1100.00'))
        self.assertEqual(account.installment_amount, Decimal('100.00'))
        self.assertEqual(account.next_due_date, date(2024, 2, 10))
        self.assertEqual(account.status, 'ACTIVE')

        payment, account = record_payment(account, Decimal('100'))
        self.assertEqual(payment.installment_number, 2)
        self.assertEqual(account.remaining_amount, Decimal('1000.00'))

    def test_non_positive_amount(self):
        with self.assertRaises(ValueError):
            record_payment(self.account, Decimal('0'))

    def test_full_payment_closes_account(self):
        _, account = record_payment(self.account, Decimal('1200'), surplus_action='RECALCULATE')
        self.assertEqual(account.remaining_amount, Decimal('0.00'))
        self.assertEqual(account.status, 'PAID_OFF')
        with self.assertRaises(ValueError):
            record_payment(account, Decimal('10'))

    def test_surplus_recalculates_installment(self):
        _, account = record_payment(self.account, Decimal('300'), surplus_action='RECALCULATE')
        self.assertEqual(account.remaining_amount, Decimal('900.00'))
        self.assertEqual(account.installment_amount, Decimal('82.00'))
        self.assertEqual(account.number_of_installments, 12)

    def test_surplus_reduces_installments(self):
        _, account = record_payment(self.account, Decimal('300'), surplus_action='REDUCE_INSTALLMENTS')
        self.assertEqual(account.remaining_amount, Decimal('900.00'))
        self.assertEqual(account.installment_amount, Decimal('100.00'))
        self.assertEqual(account.number_of_installments, 10)
        self.assertIn('[INFO_ULTIMA_CUOTA]', account.notes)

    def test_undo_payment_creates_dh_entries(self):
        payment, _ = record_payment(self.account, Decimal('100'))
        payment, reversal, account = undo_payment(payment)

        self.assertEqual(payment.installment_version, 'D')
        self.assertEqual(reversal.installment_version, 'H')
        self.assertEqual(reversal.amount_paid, payment.amount_paid)
        self.assertEqual(account.remaining_amount, Decimal('1200.00'))

        with self.assertRaises(ValueError):
            undo_payment(payment)
        with self.assertRaises(ValueError):
            undo_payment(reversal)

    def test_undo_reopens_paid_off_account(self):
        payment, account = record_payment(self.account, Decimal('1200'))
        self.assertEqual(account.status, 'PAID_OFF')
        _, _, account = undo_payment(payment)
        self.assertEqual(account.status, 'ACTIVE')

    def test_cancel_payment_leaves_pending_installment(self):
        payment, _ = record_payment(self.account, Decimal('100'))
        payment, reversal, pending, account = cancel_payment(payment)

        self.assertEqual(reversal.installment_version, 'H')
        self.assertEqual(pending.status, 'PENDING')
        self.assertEqual(pending.installment_number, 1)
        self.assertIsNone(pending.installment_version)
        self.assertEqual(account.remaining_amount, Decimal('1200.00'))
        self.assertEqual(account.installment_amount, Decimal('100.00'))

        paid, _ = record_payment(account, Decimal('100'), installment_number=1)
        self.assertEqual(paid.pk, pending.pk)
        self.assertEqual(paid.status, 'COMPLETED')

    def test_cancel_requires_installment(self):
        payment = Payment.objects.create(organization=self.organization, current_account=self.account,
                                         amount_paid=Decimal('50'))
        with self.assertRaises(ValueError):
            cancel_payment(payment)

    def test_refresh_overdue_accounts(self):
        late = TestDataFactory.create_current_account(self.organization, start_date=date(2020, 1, 1))
        future = TestDataFactory.create_current_account(self.organization, start_date=date(2099, 1, 1))
        other = TestDataFactory.create_current_account(TestDataFactory.create_organization(),
                                                       start_date=date(2020, 1, 1))

        updated = refresh_overdue_accounts(self.organization, today=date(2024, 6, 1))

        self.assertEqual(updated, 2)
        late.refresh_from_db()
        future.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(late.status, 'OVERDUE')
        self.assertEqual(future.status, 'ACTIVE')
        self.assertEqual(other.status, 'ACTIVE')

    def test_update_overdue_command(self):
        TestDataFactory.create_current_account(self.organization, start_date=date(2020, 1, 1))
        out = StringIO()
        call_command('update_overdue_accounts', '--dry-run', stdout=out)
        self.assertIn('DRY RUN', out.getvalue())
        self.assertFalse(CurrentAccount.objects.filter(status='OVERDUE').exists())

        call_command('update_overdue_accounts', '--organization', self.organization.slug, stdout=StringIO())
        self.assertTrue(CurrentAccount.objects.filter(status='OVERDUE').exists())


class CurrentAccountAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.customer = TestDataFactory.create_client(self.organization)
        self.motorcycle = TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_SOLD)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _create(self, **overrides):
        data = {
            'client': self.customer.id,
            'motorcycle': self.motorcycle.id,
            'total_amount': '1200.00',
            'number_of_installments': 12,
            'start_date': '2024-01-10',
        }
        data.update(overrides)
        return self.client.post('/api/v1/current-accounts/', data, format='json')

    def test_create_and_detail(self):
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['installment_amount']), Decimal('100.00'))
        self.assertEqual(response.data['paid_installments'], 0)
        self.assertNotIn('warning', response.data)

        response = self.client.get(f"/api/v1/current-accounts/{response.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['schedule']), 12)
        self.assertEqual(response.data['schedule'][0]['installment_amount'], '100')
        self.assertEqual(response.data['payments'], [])

    def test_create_with_warning(self):
        response = self._create(installment_amount='90.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('warning', response.data)

    def test_create_with_foreign_client(self):
        stranger = TestDataFactory.create_client(TestDataFactory.create_organization())
        response = self._create(client=stranger.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        self._create()
        TestDataFactory.create_current_account(TestDataFactory.create_organization())
        response = self.client.get('/api/v1/current-accounts/')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/current-accounts/?status=PAID_OFF,CANCELLED')
        self.assertEqual(response.data['count'], 0)
        response = self.client.get(f'/api/v1/current-accounts/?search={self.motorcycle.chassis_number[:6]}')
        self.assertEqual(response.data['count'], 1)

    def test_payment_undo_and_cancel_endpoints(self):
        account_id = self._create().data['id']

        response = self.client.post(f'/api/v1/current-accounts/{account_id}/payments/',
                                    {'amount_paid': '100.00', 'payment_method': 'Efectivo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['account']['paid_installments'], 1)
        first_id = response.data['payment']['id']

        response = self.client.post(f'/api/v1/payments/{first_id}/undo/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['original']['installment_version'], 'D')
        self.assertEqual(Decimal(response.data['remaining_amount']), Decimal('1200.00'))

        response = self.client.post(f'/api/v1/current-accounts/{account_id}/payments/',
                                    {'amount_paid': '100.00'}, format='json')
        second_id = response.data['payment']['id']
        response = self.client.post(f'/api/v1/payments/{second_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending']['status'], 'PENDING')

        response = self.client.get(f'/api/v1/current-accounts/{account_id}/payments/')
        self.assertEqual(len(response.data), 5)

    def test_negative_payment_rejected(self):
        account_id = self._create().data['id']
        response = self.client.post(f'/api/v1/current-accounts/{account_id}/payments/',
                                    {'amount_paid': '-5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_organization_account_not_found(self):
        foreign = TestDataFactory.create_current_account(TestDataFactory.create_organization())
        response = self.client.get(f'/api/v1/current-accounts/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
