"""
Test suite for the catalog: brands, models, colors and model files
"""
from unittest import mock
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework import status
from backend.catalog.models import Brand, MotorcycleModel, OrganizationBrand, Color, ModelFile
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class BrandModelTests(TestCase):
    """Test brand and model endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_brand_list_includes_models(self):
        model = TestDataFactory.create_model()
        response = self.client.get('/api/v1/brands/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        brand = next(b for b in response.data if b['id'] == model.brand_id)
        self.assertEqual(brand['models'][0]['name'], model.name)

    def test_brand_name_unique_case_insensitive(self):
        Brand.objects.create(name='Honda')
        response = self.client.post('/api/v1/brands/', {'name': 'honda'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_new_brand_visible_after_cache_invalidation(self):
        self.client.get('/api/v1/brands/')
        self.client.post('/api/v1/brands/', {'name': 'Bajaj'}, format='json')
        response = self.client.get('/api/v1/brands/')
        self.assertIn('Bajaj', [b['name'] for b in response.data])

    def test_duplicate_model_for_brand(self):
        model = TestDataFactory.create_model(name='Boxer 150')
        response = self.client.post('/api/v1/models/', {'brand': model.brand_id, 'name': 'BOXER 150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_model_with_motorcycles_rejected(self):
        motorcycle = TestDataFactory.create_motorcycle(self.organization)
        response = self.client.delete(f'/api/v1/models/{motorcycle.model_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quick_brand_model_creates_and_reuses(self):
        response = self.client.post('/api/v1/catalog/quick-brand-model/',
                                    {'brand_name': 'Zanella', 'model_name': 'RX 150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['brand']['created'])
        self.assertTrue(OrganizationBrand.objects.filter(organization=self.organization, brand__name='Zanella').exists())

        response = self.client.post('/api/v1/catalog/quick-brand-model/',
                                    {'brand_name': 'zanella', 'model_name': 'rx 150'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['model']['created'])
        self.assertEqual(MotorcycleModel.objects.filter(brand__name='Zanella').count(), 1)

    def test_quick_brand_model_requires_names(self):
        response = self.client.post('/api/v1/catalog/quick-brand-model/', {'brand_name': 'Zanella'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_organization_brand_association(self):
        brand = TestDataFactory.create_brand()
        response = self.client.post('/api/v1/organization-brands/', {'brand': brand.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['color'], brand.color)


class ColorTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_includes_global_and_own(self):
        Color.objects.create(name='Negro', color_one='#000000')
        TestDataFactory.create_color(organization=self.organization, name='Verde Kawasaki')
        TestDataFactory.create_color(organization=TestDataFactory.create_organization(), name='Ajeno')
        response = self.client.get('/api/v1/colors/')
        names = [c['name'] for c in response.data]
        self.assertIn('Negro', names)
        self.assertIn('Verde Kawasaki', names)
        self.assertNotIn('Ajeno', names)

    def test_bitono_requires_second_color(self):
        response = self.client.post('/api/v1/colors/', {
            'name': 'Rojo y Negro', 'type': 'BITONO', 'color_one': '#FF0000'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_global_color_read_only(self):
        color = Color.objects.create(name='Blanco', color_one='#FFFFFF')
        response = self.client.patch(f'/api/v1/colors/{color.id}/', {'name': 'Blanco perla'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ModelFileTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.model = TestDataFactory.create_model()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    @mock.patch('backend.catalog.views.upload_file')
    def test_upload_file(self, upload_file):
        upload_file.return_value = {'key': 'models/1/1/ficha.pdf', 'url': 'https://blob.example/ficha.pdf'}
        upload = SimpleUploadedFile('ficha.pdf', b'%PDF-1.4', content_type='application/pdf')
        response = self.client.post(f'/api/v1/models/{self.model.id}/files/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'ficha.pdf')
        self.assertTrue(upload_file.call_args[0][0].startswith(f'models/{self.organization.id}/{self.model.id}/'))

    def test_upload_without_file(self):
        response = self.client.post(f'/api/v1/models/{self.model.id}/files/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.catalog.views.delete_blob', return_value=False)
    def test_delete_file_even_if_blob_fails(self, delete_blob):
        model_file = ModelFile.objects.create(organization=self.organization, model=self.model,
                                              name='manual.pdf', blob_key='models/x/manual.pdf')
        response = self.client.delete(f'/api/v1/models/{self.model.id}/files/{model_file.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ModelFile.objects.filter(pk=model_file.id).exists())
