"""
Test suite for reservations and sales
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Motorcycle
from backend.logistics.services import request_transfer
from backend.sales.models import Reservation, Sale
from backend.sales.services import complete_sale


class ReservationTests(TestCase):
    """Test reservation endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.customer = TestDataFactory.create_client(self.organization)
        self.motorcycle = TestDataFactory.create_motorcycle(self.organization)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _reserve(self, motorcycle=None, **extra):
        data = {
            'motorcycle': (motorcycle or self.motorcycle).id,
            'client': self.customer.id,
            'amount': '150000.00',
            'payment_method': 'Efectivo',
        }
        data.update(extra)
        return self.client.post('/api/v1/reservations/', data, format='json')

    def test_reserve_stock_unit(self):
        response = self._reserve()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'active')
        self.assertNotIn('warning', response.data)
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_RESERVED)
        self.assertEqual(self.motorcycle.client, self.customer)
        self.assertTrue(AuditLog.objects.filter(action='reservation').exists())

    def test_reserve_paused_unit(self):
        paused = TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_PAUSED)
        response = self._reserve(motorcycle=paused)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_cannot_reserve_sold_unit(self):
        sold = TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_SOLD)
        response = self._reserve(motorcycle=sold)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Reservation.objects.count(), 0)

    def test_cannot_reserve_reserved_unit(self):
        self._reserve()
        response = self._reserve()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_paused_unit_with_active_reservation_warns(self):
        Reservation.objects.create(organization=self.organization, motorcycle=self.motorcycle,
                                   client=self.customer, amount=Decimal('1000'))
        self.motorcycle.state = Motorcycle.STATE_PAUSED
        self.motorcycle.save()
        response = self._reserve()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('warning', response.data)

    def test_client_from_other_organization(self):
        stranger = TestDataFactory.create_client(TestDataFactory.create_organization())
        response = self._reserve(client=stranger.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_releases_unit(self):
        reservation_id = self._reserve().data['id']
        response = self.client.post(f'/api/v1/reservations/{reservation_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelled')
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_STOCK)
        self.assertIsNone(self.motorcycle.client)

    def test_cancel_twice_rejected(self):
        reservation_id = self._reserve().data['id']
        self.client.post(f'/api/v1/reservations/{reservation_id}/cancel/')
        response = self.client.post(f'/api/v1/reservations/{reservation_id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filter_by_status(self):
        self._reserve()
        response = self.client.get('/api/v1/reservations/?status=active')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/reservations/?status=cancelled')
        self.assertEqual(response.data['count'], 0)


class SaleTests(TestCase):
    """Test sale endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.branch = TestDataFactory.create_branch(self.organization)
        self.customer = TestDataFactory.create_client(self.organization)
        self.motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_sale_marks_unit_sold(self):
        response = self.client.post('/api/v1/sales/', {
            'motorcycle': self.motorcycle.id, 'client': self.customer.id, 'payment_method': 'Transferencia'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['price']), self.motorcycle.retail_price)
        self.assertEqual(Decimal(response.data['profit']), Decimal('500000.00'))
        self.assertEqual(response.data['branch'], self.branch.id)

        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_SOLD)
        self.assertEqual(self.motorcycle.seller, self.user)
        self.assertIsNotNone(self.motorcycle.sold_at)

    def test_sale_completes_active_reservation(self):
        reservation = Reservation.objects.create(organization=self.organization, motorcycle=self.motorcycle,
                                                 client=self.customer, amount=Decimal('1000'))
        self.motorcycle.state = Motorcycle.STATE_RESERVED
        self.motorcycle.save()

        response = self.client.post('/api/v1/sales/', {
            'motorcycle': self.motorcycle.id, 'client': self.customer.id, 'price': '1400000.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['reservation'], reservation.id)
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, 'completed')

    def test_cannot_sell_twice(self):
        payload = {'motorcycle': self.motorcycle.id, 'client': self.customer.id}
        self.client.post('/api/v1/sales/', payload, format='json')
        response = self.client.post('/api/v1/sales/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Sale.objects.count(), 1)

    def test_cannot_sell_unit_in_transit_or_deleted(self):
        for state in (Motorcycle.STATE_IN_TRANSIT, Motorcycle.STATE_DELETED):
            motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch, state=state)
            with self.assertRaises(ValueError):
                complete_sale(self.organization, motorcycle.id, self.customer, self.user)
            motorcycle.refresh_from_db()
            self.assertEqual(motorcycle.state, state)
            self.assertIsNone(motorcycle.sold_at)
        self.assertEqual(Sale.objects.count(), 0)

    def test_sale_endpoint_rejects_unit_in_transit(self):
        destination = TestDataFactory.create_branch(self.organization)
        request_transfer(self.organization, self.motorcycle.id, self.branch, destination)
        response = self.client.post('/api/v1/sales/', {
            'motorcycle': self.motorcycle.id, 'client': self.customer.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_IN_TRANSIT)

    def test_other_organization_motorcycle(self):
        foreign = TestDataFactory.create_motorcycle(TestDataFactory.create_organization())
        response = self.client.post('/api/v1/sales/', {
            'motorcycle': foreign.id, 'client': self.customer.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        self.client.post('/api/v1/sales/', {'motorcycle': self.motorcycle.id, 'client': self.customer.id}, format='json')
        response = self.client.get(f'/api/v1/sales/?seller={self.user.id}')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/sales/?date_to=2000-01-01')
        self.assertEqual(response.data['count'], 0)
