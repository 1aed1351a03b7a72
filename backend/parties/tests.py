"""
Test suite for clients and suppliers
"""
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Client


class ClientTests(TestCase):
    """Test client endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_individual(self):
        response = self.client.post('/api/v1/clients/', {
            'first_name': ' María ', 'last_name': 'López', 'tax_id': '30111222'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['display_name'], 'María López')
        self.assertTrue(AuditLog.objects.filter(model_name='Client', action='create').exists())

    def test_individual_requires_names(self):
        response = self.client.post('/api/v1/clients/', {'first_name': 'María'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_legal_entity_requires_company_name(self):
        response = self.client.post('/api/v1/clients/', {'type': 'LegalEntity'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('company_name', response.data)

    def test_legal_entity_display_name(self):
        response = self.client.post('/api/v1/clients/', {
            'type': 'LegalEntity', 'company_name': 'Transportes SRL'
        }, format='json')
        self.assertEqual(response.data['display_name'], 'Transportes SRL')

    def test_duplicate_tax_id_in_organization(self):
        TestDataFactory.create_client(self.organization, tax_id='30111222')
        response = self.client.post('/api/v1/clients/', {
            'first_name': 'Ana', 'last_name': 'Díaz', 'tax_id': '30111222'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_tax_id_other_organization(self):
        TestDataFactory.create_client(TestDataFactory.create_organization(), tax_id='30111222')
        response = self.client.post('/api/v1/clients/', {
            'first_name': 'Ana', 'last_name': 'Díaz', 'tax_id': '30111222'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_search(self):
        TestDataFactory.create_client(self.organization, last_name='Fernandez')
        TestDataFactory.create_client(self.organization, last_name='Suarez')
        response = self.client.get('/api/v1/clients/?search=fernan')
        self.assertEqual(len(response.data), 1)

    def test_delete_client_with_account_rejected(self):
        account = TestDataFactory.create_current_account(self.organization)
        response = self.client.delete(f'/api/v1/clients/{account.client_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Client.objects.filter(pk=account.client_id).exists())

    def test_other_organization_client_not_found(self):
        other = TestDataFactory.create_client(TestDataFactory.create_organization())
        response = self.client.get(f'/api/v1/clients/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SupplierTests(TestCase):
    """Test supplier endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_supplier(self):
        response = self.client.post('/api/v1/suppliers/', {
            'legal_name': 'Distribuidora Norte SA',
            'tax_identification': '30712345679',
            'payment_methods': ['transferencia', 'cheque'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment_methods'], ['transferencia', 'cheque'])

    def test_cuit_required(self):
        response = self.client.post('/api/v1/suppliers/', {'legal_name': 'Sin CUIT'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_cuit(self):
        TestDataFactory.create_supplier(self.organization, tax_identification='30712345679')
        response = self.client.post('/api/v1/suppliers/', {
            'legal_name': 'Otra', 'tax_identification': '30712345679'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_counts_motorcycles(self):
        supplier = TestDataFactory.create_supplier(self.organization)
        TestDataFactory.create_motorcycle(self.organization, supplier=supplier)
        TestDataFactory.create_motorcycle(self.organization, supplier=supplier)
        response = self.client.get('/api/v1/suppliers/')
        self.assertEqual(response.data[0]['motorcycles_count'], 2)

    def test_delete_supplier_with_motorcycles_rejected(self):
        supplier = TestDataFactory.create_supplier(self.organization)
        TestDataFactory.create_motorcycle(self.organization, supplier=supplier)
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
