"""
Test suite for logistic providers and branch transfers
"""
from unittest import mock
from django.core import mail
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Motorcycle
from backend.logistics.models import LogisticProvider, MotorcycleTransfer
from backend.logistics.services import confirm_arrival, request_transfer, update_transfer_status


class LogisticProviderTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _payload(self, **overrides):
        data = {
            'name': 'Transportes Andes',
            'transport_types': ['terrestre'],
            'vehicle_types': ['camion', 'trailer'],
            'coverage_zones': ['nacional'],
            'base_fee': '25000.00',
            'rating': 4,
        }
        data.update(overrides)
        return data

    def test_create_provider(self):
        response = self.client.post('/api/v1/logistic-providers/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'activo')

    def test_lists_must_not_be_empty(self):
        response = self.client.post('/api/v1/logistic-providers/', self._payload(vehicle_types=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('vehicle_types', response.data)

    def test_unknown_coverage_zone(self):
        response = self.client.post('/api/v1/logistic-providers/',
                                    self._payload(coverage_zones=['lunar']), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rating_range_and_positive_fees(self):
        response = self.client.post('/api/v1/logistic-providers/', self._payload(rating=6), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/logistic-providers/', self._payload(base_fee='0'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_search_and_status(self):
        self.client.post('/api/v1/logistic-providers/', self._payload(), format='json')
        self.client.post('/api/v1/logistic-providers/', self._payload(name='Fletes Rio', status='inactivo'),
                         format='json')
        response = self.client.get('/api/v1/logistic-providers/?search=andes')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/logistic-providers/?status=inactivo')
        self.assertEqual(response.data[0]['name'], 'Fletes Rio')

    def test_delete_with_active_transfer(self):
        provider = LogisticProvider.objects.create(organization=self.organization, name='Fletes')
        origin = TestDataFactory.create_branch(self.organization)
        destination = TestDataFactory.create_branch(self.organization)
        motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=origin)
        request_transfer(self.organization, motorcycle.id, origin, destination, logistic_provider=provider)

        response = self.client.delete(f'/api/v1/logistic-providers/{provider.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TransferServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(role='admin')
        self.organization = self.user.organization
        self.origin = TestDataFactory.create_branch(self.organization, name='Centro')
        self.destination = TestDataFactory.create_branch(self.organization, name='Norte')
        self.motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.origin)

    def test_request_puts_motorcycle_in_transit_and_notifies(self):
        transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination,
                                    user=self.user)
        self.assertEqual(transfer.status, MotorcycleTransfer.STATUS_IN_TRANSIT)
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_IN_TRANSIT)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.motorcycle.chassis_number, mail.outbox[0].subject)
        self.assertEqual(mail.outbox[0].to, [self.user.email])

    def test_email_failure_keeps_transfer(self):
        with mock.patch('backend.logistics.services.send_mail', side_effect=OSError('smtp down')):
            transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination)
        self.assertTrue(MotorcycleTransfer.objects.filter(pk=transfer.pk).exists())

    def test_motorcycle_must_be_in_origin_branch(self):
        with self.assertRaises(ValueError):
            request_transfer(self.organization, self.motorcycle.id, self.destination, self.origin)

    def test_only_stock_units_travel(self):
        paused = TestDataFactory.create_motorcycle(self.organization, branch=self.origin,
                                                   state=Motorcycle.STATE_PAUSED)
        with self.assertRaises(ValueError):
            request_transfer(self.organization, paused.id, self.origin, self.destination)

    def test_same_branch_rejected(self):
        with self.assertRaises(ValueError):
            request_transfer(self.organization, self.motorcycle.id, self.origin, self.origin)

    def test_confirm_arrival_moves_unit(self):
        transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination)
        confirm_arrival(transfer, user=self.user)

        self.assertEqual(transfer.status, MotorcycleTransfer.STATUS_DELIVERED)
        self.assertIsNotNone(transfer.actual_delivery_date)
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.branch, self.destination)
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_STOCK)

        with self.assertRaises(ValueError):
            confirm_arrival(transfer)

    def test_arrival_leaves_unit_that_is_no_longer_in_transit(self):
        transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination)
        Motorcycle.objects.filter(pk=self.motorcycle.pk).update(state=Motorcycle.STATE_SOLD)
        transfer.motorcycle.refresh_from_db()

        confirm_arrival(transfer, user=self.user)

        self.assertEqual(transfer.status, MotorcycleTransfer.STATUS_DELIVERED)
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_SOLD)
        self.assertEqual(self.motorcycle.branch, self.origin)

    def test_status_delivered_leaves_unit_that_is_no_longer_in_transit(self):
        transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination)
        Motorcycle.objects.filter(pk=self.motorcycle.pk).update(state=Motorcycle.STATE_DELETED)
        transfer.motorcycle.refresh_from_db()

        update_transfer_status(transfer, MotorcycleTransfer.STATUS_DELIVERED)

        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_DELETED)

    def test_cancel_returns_unit_to_stock(self):
        transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination)
        update_transfer_status(transfer, MotorcycleTransfer.STATUS_CANCELLED, tracking_number='TRK-1')
        self.assertEqual(transfer.tracking_number, 'TRK-1')
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.state, Motorcycle.STATE_STOCK)
        self.assertEqual(self.motorcycle.branch, self.origin)

    def test_invalid_transition(self):
        transfer = request_transfer(self.organization, self.motorcycle.id, self.origin, self.destination)
        with self.assertRaises(ValueError):
            update_transfer_status(transfer, MotorcycleTransfer.STATUS_CONFIRMED)


class TransferAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.origin = TestDataFactory.create_branch(self.organization)
        self.destination = TestDataFactory.create_branch(self.organization)
        self.motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.origin)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _transfer(self, **overrides):
        data = {'motorcycle': self.motorcycle.id, 'from_branch': self.origin.id, 'to_branch': self.destination.id}
        data.update(overrides)
        return self.client.post('/api/v1/transfers/', data, format='json')

    def test_create_and_list(self):
        response = self._transfer()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'IN_TRANSIT')

        response = self.client.get('/api/v1/transfers/?status=in_transit,delivered')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'/api/v1/transfers/?to_branch={self.origin.id}')
        self.assertEqual(response.data['count'], 0)

        response = self.client.get('/api/v1/transfers/in-transit/')
        self.assertEqual(len(response.data), 1)

    def test_same_branch_rejected_by_validation(self):
        response = self._transfer(to_branch=self.origin.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('to_branch', response.data)

    def test_foreign_branch_not_found(self):
        foreign = TestDataFactory.create_branch(TestDataFactory.create_organization())
        response = self._transfer(to_branch=foreign.id)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_available_motorcycles_excludes_travelling_units(self):
        idle = TestDataFactory.create_motorcycle(self.organization, branch=self.origin)
        self._transfer()
        response = self.client.get('/api/v1/transfers/available-motorcycles/')
        self.assertEqual([item['id'] for item in response.data['results']], [idle.id])

    def test_confirm_arrival_endpoint(self):
        transfer_id = self._transfer().data['id']
        response = self.client.post(f'/api/v1/transfers/{transfer_id}/confirm-arrival/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'DELIVERED')

        response = self.client.post(f'/api/v1/transfers/{transfer_id}/confirm-arrival/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_endpoint(self):
        transfer_id = self._transfer().data['id']
        response = self.client.post(f'/api/v1/transfers/{transfer_id}/status/',
                                    {'status': 'DELIVERED', 'cost': '45000.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cost'], '45000.00')
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.branch, self.destination)
