"""
Test suite for inventory: units, batches, state changes, fuzzy search and labels
"""
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Motorcycle
from backend.inventory.services import change_status, main_consonants, strip_vowels, swap_variations
from backend.sales.models import Reservation


class MotorcycleTests(TestCase):
    """Test motorcycle endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.branch = TestDataFactory.create_branch(self.organization)
        self.model = TestDataFactory.create_model()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _payload(self, **overrides):
        data = {
            'brand': self.model.brand_id,
            'model': self.model.id,
            'year': 2024,
            'chassis_number': 'abc123',
            'engine_number': 'mot001',
            'retail_price': '2500000.00',
            'branch': self.branch.id,
        }
        data.update(overrides)
        return data

    def test_create_normalizes_chassis(self):
        response = self.client.post('/api/v1/motorcycles/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['chassis_number'], 'ABC123')
        self.assertEqual(response.data['state'], Motorcycle.STATE_STOCK)

    def test_duplicate_chassis_rejected(self):
        TestDataFactory.create_motorcycle(self.organization, chassis_number='ABC123')
        response = self.client.post('/api/v1/motorcycles/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('chassis_number', response.data)

    def test_model_must_belong_to_brand(self):
        other_brand = TestDataFactory.create_brand()
        response = self.client.post('/api/v1/motorcycles/', self._payload(brand=other_brand.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/motorcycles/', self._payload(retail_price='-1'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_branch_and_supplier_rejected(self):
        other = TestDataFactory.create_organization()
        foreign_branch = TestDataFactory.create_branch(other)
        foreign_supplier = TestDataFactory.create_supplier(other)

        response = self.client.post('/api/v1/motorcycles/', self._payload(branch=foreign_branch.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('branch', response.data)

        response = self.client.post('/api/v1/motorcycles/', self._payload(supplier=foreign_supplier.id),
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('supplier', response.data)
        self.assertFalse(Motorcycle.objects.filter(organization=self.organization).exists())

    def test_update_with_foreign_branch_rejected(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        foreign_branch = TestDataFactory.create_branch(TestDataFactory.create_organization())
        response = self.client.patch(f'/api/v1/motorcycles/{motorcycle.id}/', {'branch': foreign_branch.id},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        motorcycle.refresh_from_db()
        self.assertEqual(motorcycle.branch, self.branch)

    def test_colors_of_own_organization_or_global(self):
        global_color = TestDataFactory.create_color()
        own_color = TestDataFactory.create_color(self.organization)
        foreign_color = TestDataFactory.create_color(TestDataFactory.create_organization())

        response = self.client.post('/api/v1/motorcycles/', self._payload(color=global_color.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/motorcycles/', self._payload(
            color=own_color.id, chassis_number='abc124', engine_number='mot002'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/motorcycles/', self._payload(
            color=foreign_color.id, chassis_number='abc125', engine_number='mot003'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('color', response.data)

    def test_state_not_writable_through_update(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        response = self.client.patch(f'/api/v1/motorcycles/{motorcycle.id}/', {'state': 'VENDIDO'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        motorcycle.refresh_from_db()
        self.assertEqual(motorcycle.state, Motorcycle.STATE_STOCK)

    def test_list_filters_and_pagination(self):
        TestDataFactory.create_motorcycle(self.organization, model=self.model, branch=self.branch)
        TestDataFactory.create_motorcycle(self.organization, model=self.model, state=Motorcycle.STATE_PAUSED)
        TestDataFactory.create_motorcycle(TestDataFactory.create_organization(), model=self.model)

        response = self.client.get('/api/v1/motorcycles/')
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/v1/motorcycles/?state=pausado')
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(f'/api/v1/motorcycles/?branch={self.branch.id}&limit=1')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['page_size'], 1)

    def test_list_cache_invalidated_on_create(self):
        self.client.get('/api/v1/motorcycles/')
        TestDataFactory.create_motorcycle(self.organization)
        response = self.client.get('/api/v1/motorcycles/')
        self.assertEqual(response.data['count'], 1)

    def test_label(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization, branch=self.branch)
        response = self.client.get(f'/api/v1/motorcycles/{motorcycle.id}/label/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['image'].startswith('data:image/png;base64,'))


class BatchTests(TestCase):
    """Test batch intake"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.model = TestDataFactory.create_model()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _batch(self, units):
        return {
            'brand': self.model.brand_id,
            'model': self.model.id,
            'year': 2025,
            'retail_price': '1800000.00',
            'cost_price': '1200000.00',
            'units': units,
        }

    def test_batch_creates_all_units(self):
        response = self.client.post('/api/v1/motorcycles/batch/', self._batch([
            {'chassis_number': 'ch-1', 'engine_number': 'en-1'},
            {'chassis_number': 'ch-2', 'engine_number': 'en-2', 'state': 'PAUSADO'},
        ]), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_count'], 2)
        unit = Motorcycle.objects.get(chassis_number='CH-2')
        self.assertEqual(unit.state, Motorcycle.STATE_PAUSED)
        self.assertEqual(unit.cost_price, Decimal('1200000.00'))

    def test_duplicate_chassis_in_batch(self):
        response = self.client.post('/api/v1/motorcycles/batch/', self._batch([
            {'chassis_number': 'ch-1'}, {'chassis_number': 'CH-1'},
        ]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Motorcycle.objects.count(), 0)

    def test_existing_engine_fails_whole_batch(self):
        existing = TestDataFactory.create_motorcycle(self.organization, model=self.model)
        Motorcycle.objects.filter(pk=existing.pk).update(engine_number='EN-9')
        response = self.client.post('/api/v1/motorcycles/batch/', self._batch([
            {'chassis_number': 'ch-1'}, {'chassis_number': 'ch-2', 'engine_number': 'en-9'},
        ]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Motorcycle.objects.filter(organization=self.organization).count(), 1)

    def test_unknown_branch_fails_batch(self):
        other_branch = TestDataFactory.create_branch(TestDataFactory.create_organization())
        response = self.client.post('/api/v1/motorcycles/batch/', self._batch([
            {'chassis_number': 'ch-1'}, {'chassis_number': 'ch-2', 'branch': other_branch.id},
        ]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Motorcycle.objects.count(), 0)

    def test_empty_batch(self):
        response = self.client.post('/api/v1/motorcycles/batch/', self._batch([]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class StatusTransitionTests(TestCase):
    """Test state transitions"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_pause_and_back_to_stock(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        response = self.client.post(f'/api/v1/motorcycles/{motorcycle.id}/status/', {'state': 'PAUSADO'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.post(f'/api/v1/motorcycles/{motorcycle.id}/status/', {'state': 'STOCK'}, format='json')
        self.assertEqual(response.data['state'], 'STOCK')

    def test_cannot_mark_sold(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        response = self.client.post(f'/api/v1/motorcycles/{motorcycle.id}/status/', {'state': 'VENDIDO'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sold_cannot_go_back_to_stock(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_SOLD)
        with self.assertRaises(ValueError):
            change_status(motorcycle, Motorcycle.STATE_STOCK)

    def test_reserved_to_stock_releases_client_and_cancels_reservation(self):
        client = TestDataFactory.create_client(self.organization)
        motorcycle = TestDataFactory.create_motorcycle(self.organization, state=Motorcycle.STATE_RESERVED)
        motorcycle.client = client
        motorcycle.save()
        reservation = Reservation.objects.create(organization=self.organization, motorcycle=motorcycle,
                                                 client=client, amount=Decimal('100000'))

        previous = change_status(motorcycle, Motorcycle.STATE_STOCK)

        self.assertEqual(previous, Motorcycle.STATE_RESERVED)
        motorcycle.refresh_from_db()
        self.assertIsNone(motorcycle.client)
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, 'cancelled')


class FuzzySearchTests(TestCase):
    """Test the typo tolerant search"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        brand = TestDataFactory.create_brand(name='Kawasaki')
        self.motorcycle = TestDataFactory.create_motorcycle(
            self.organization, model=TestDataFactory.create_model(brand=brand, name='Versys 650')
        )
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_helpers(self):
        self.assertIn('bersys', swap_variations('versys'))
        self.assertIn('cabayo', swap_variations('caballo'))
        self.assertEqual(strip_vowels('honda'), 'hnd')
        self.assertEqual(main_consonants('kawasakki'), 'kwsk')

    def test_contains(self):
        response = self.client.get('/api/v1/motorcycles/search/?q=versys')
        self.assertEqual(response.data['strategy'], 'contains')
        self.assertEqual(response.data['results'][0]['id'], self.motorcycle.id)

    def test_character_swap(self):
        response = self.client.get('/api/v1/motorcycles/search/?q=bersys')
        self.assertEqual(response.data['strategy'], 'character_swap')
        self.assertEqual(len(response.data['results']), 1)

    def test_no_match(self):
        response = self.client.get('/api/v1/motorcycles/search/?q=xxxxxx')
        self.assertIsNone(response.data['strategy'])
        self.assertEqual(response.data['results'], [])

    def test_state_filter(self):
        response = self.client.get('/api/v1/motorcycles/search/?q=versys&state=VENDIDO')
        self.assertEqual(response.data['results'], [])
