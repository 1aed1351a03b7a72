"""
Test suite for JSON and PDF reports
"""
from datetime import date
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.current_accounts.services import record_payment
from backend.inventory.models import Motorcycle
from backend.logistics.services import request_transfer
from backend.petty_cash.services import create_deposit
from backend.pricing.models import BankingPromotion
from backend.reports import services
from backend.sales.models import Reservation
from backend.sales.services import complete_sale


class ReportServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.branch = TestDataFactory.create_branch(self.organization, name='Centro')
        self.customer = TestDataFactory.create_client(self.organization)

    def test_sales_grouped_per_currency(self):
        ars = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        usd = TestDataFactory.create_motorcycle(self.organization, branch=self.branch, currency='USD',
                                                retail_price=Decimal('5000'), cost_price=Decimal('4000'))
        complete_sale(self.organization, ars.id, self.customer, self.user)
        complete_sale(self.organization, usd.id, self.customer, self.user)

        report = services.sales_report(self.organization)

        summary = report['summary']
        self.assertEqual(summary['total_sales'], 2)
        self.assertEqual(summary['total_revenue'], {'ARS': Decimal('1500000.00'), 'USD': Decimal('5000.00')})
        self.assertEqual(summary['total_profit']['USD'], Decimal('1000.00'))
        self.assertEqual(summary['average_price']['ARS'], Decimal('1500000.00'))
        seller = report['sales_by_seller'][str(self.user.id)]
        self.assertEqual(seller['count'], 2)
        self.assertEqual(report['sales_by_branch'][str(self.branch.id)]['name'], 'Centro')
        self.assertEqual(sum(month['count'] for month in report['sales_by_month'].values()), 2)

    def test_sales_date_filter(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        complete_sale(self.organization, motorcycle.id, self.customer, self.user)
        report = services.sales_report(self.organization, date_to=date(2000, 1, 1))
        self.assertEqual(report['summary']['total_sales'], 0)
        self.assertEqual(report['summary']['average_price'], {})

    def test_inventory_excludes_deleted_units(self):
        TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_PAUSED)
        TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_DELETED)

        report = services.inventory_report(self.organization)

        self.assertEqual(report['total'], 2)
        self.assertEqual(report['by_state'], {Motorcycle.STATE_STOCK: 1, Motorcycle.STATE_PAUSED: 1})
        self.assertEqual(report['by_branch'], {'Centro': 1, 'Sin sucursal': 1})
        self.assertEqual(report['value_by_state'][Motorcycle.STATE_STOCK], {'ARS': Decimal('1500000.00')})

    def test_reservation_conversion_rate(self):
        for reservation_status in ('completed', 'cancelled', 'active', 'completed'):
            Reservation.objects.create(organization=self.organization, client=self.customer,
                                       motorcycle=TestDataFactory.create_motorcycle(self.organization,
                                                                                    branch=self.branch),
                                       amount=Decimal('1000'), status=reservation_status)

        summary = services.reservations_report(self.organization)['summary']

        self.assertEqual(summary['total_reservations'], 4)
        self.assertEqual(summary['completed_reservations'], 2)
        self.assertEqual(summary['conversion_rate'], 50.0)
        self.assertEqual(summary['total_amount'], {'ARS': Decimal('4000.00')})

    def test_current_accounts_totals_ignore_voided_payments(self):
        account = TestDataFactory.create_current_account(self.organization, start_date=date(2024, 1, 10))
        record_payment(account, Decimal('100'))
        payment, _ = record_payment(account, Decimal('100'))
        from backend.current_accounts.services import undo_payment
        undo_payment(payment)

        report = services.current_accounts_report(self.organization)

        self.assertEqual(report['total_accounts'], 1)
        self.assertEqual(report['total_financed_amount'], Decimal('1200.00'))
        self.assertEqual(report['total_paid_amount'], Decimal('100.00'))
        self.assertEqual(report['total_pending_amount'], Decimal('1100.00'))

    def test_current_accounts_status_filter_and_overdue_list(self):
        account = TestDataFactory.create_current_account(self.organization)
        account.status = 'OVERDUE'
        account.save()
        TestDataFactory.create_current_account(self.organization)

        report = services.current_accounts_report(self.organization, status='OVERDUE')
        self.assertEqual(report['total_accounts'], 1)
        self.assertEqual([item['id'] for item in report['overdue_accounts']], [account.id])
        self.assertEqual(services.current_accounts_report(self.organization, status='all')['total_accounts'], 2)

    def test_suppliers_purchase_value(self):
        supplier = TestDataFactory.create_supplier(self.organization)
        TestDataFactory.create_supplier(self.organization)
        TestDataFactory.create_motorcycle(self.organization, supplier=supplier)
        TestDataFactory.create_motorcycle(self.organization, supplier=supplier, state=Motorcycle.STATE_SOLD)

        report = services.suppliers_report(self.organization)

        self.assertEqual(report['summary']['total_suppliers'], 2)
        self.assertEqual(report['summary']['total_motorcycles'], 2)
        self.assertEqual(report['suppliers'][0]['id'], supplier.id)
        self.assertEqual(report['suppliers'][0]['purchase_value'], {'ARS': Decimal('2000000.00')})


class ReportAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.branch = TestDataFactory.create_branch(self.organization, name='Centro')
        self.customer = TestDataFactory.create_client(self.organization)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _assert_pdf(self, response):
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_sales_report_cache_invalidated_by_new_sale(self):
        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.data['summary']['total_sales'], 0)

        motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        complete_sale(self.organization, motorcycle.id, self.customer, self.user)

        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.data['summary']['total_sales'], 1)

    def test_invalid_date(self):
        response = self.client.get('/api/v1/reports/sales/?date_from=06/05/2024')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_json_reports(self):
        for path in ('inventory', 'reservations', 'current-accounts', 'suppliers'):
            response = self.client.get(f'/api/v1/reports/{path}/')
            self.assertEqual(response.status_code, status.HTTP_200_OK, path)

    def test_report_pdfs(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        complete_sale(self.organization, motorcycle.id, self.customer, self.user)
        TestDataFactory.create_current_account(self.organization)

        for path in ('sales', 'inventory', 'reservations', 'current-accounts'):
            self._assert_pdf(self.client.get(f'/api/v1/reports/{path}/pdf/?date_from=2024-01-01'))

    def test_account_statement_pdf(self):
        account = TestDataFactory.create_current_account(self.organization, client=self.customer)
        record_payment(account, Decimal('100'), payment_method='Efectivo')
        self._assert_pdf(self.client.get(f'/api/v1/reports/current-accounts/{account.id}/pdf/'))

        foreign = TestDataFactory.create_current_account(TestDataFactory.create_organization())
        response = self.client.get(f'/api/v1/reports/current-accounts/{foreign.id}/pdf/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_petty_cash_pdf(self):
        create_deposit(self.organization, Decimal('5000'), date(2024, 5, 1), 'Fondo fijo', branch=self.branch)
        self._assert_pdf(self.client.get(f'/api/v1/reports/petty-cash-movements/pdf/?branch={self.branch.id}'))
        self._assert_pdf(self.client.get('/api/v1/reports/petty-cash-movements/pdf/?branch=GENERAL_ACCOUNT'))

        response = self.client.get('/api/v1/reports/petty-cash-movements/pdf/?branch=norte')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_transfer_pdf(self):
        destination = TestDataFactory.create_branch(self.organization, name='Norte')
        motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        transfer = request_transfer(self.organization, motorcycle.id, self.branch, destination)
        response = self.client.get(f'/api/v1/reports/transfers/{transfer.id}/pdf/')
        self._assert_pdf(response)
        self.assertIn(f'remito-traslado-{transfer.id}.pdf', response['Content-Disposition'])

    def test_quote_pdf(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Promo',
                                                    discount_rate=Decimal('10'))
        response = self.client.post('/api/v1/reports/quote/pdf/', {
            'motorcycle': motorcycle.id,
            'client': self.customer.id,
            'down_payment': '500000.00',
            'installments': 12,
            'interest_rate': '45',
            'promotion': promotion.id,
            'notes': 'Incluye patentamiento',
        }, format='json')
        self._assert_pdf(response)

    def test_quote_down_payment_above_price(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        response = self.client.post('/api/v1/reports/quote/pdf/', {
            'motorcycle': motorcycle.id, 'client_name': 'Consumidor final', 'down_payment': '9000000.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
