"""
Test suite for branches
"""
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.locations.models import Branch


class BranchTests(TestCase):
    """Test branch endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.organization = self.admin.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_branch_appends_order(self):
        TestDataFactory.create_branch(self.organization, name='Centro', order=3)
        response = self.client.post('/api/v1/branches/', {'name': '  Zona   Norte '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Zona Norte')
        self.assertEqual(response.data['order'], 4)

    def test_duplicate_name_rejected_case_insensitive(self):
        TestDataFactory.create_branch(self.organization, name='Centro')
        response = self.client.post('/api/v1/branches/', {'name': 'CENTRO'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_name_in_other_organization_allowed(self):
        TestDataFactory.create_branch(TestDataFactory.create_organization(), name='Centro')
        response = self.client.post('/api/v1/branches/', {'name': 'Centro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_non_admin_cannot_create(self):
        user = TestDataFactory.create_user(organization=self.organization, role='user')
        self.client.authenticate_user(user)
        response = self.client.post('/api/v1/branches/', {'name': 'Sur'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_only_own_branches(self):
        TestDataFactory.create_branch(self.organization, name='Centro')
        TestDataFactory.create_branch(TestDataFactory.create_organization(), name='Ajena')
        response = self.client.get('/api/v1/branches/')
        self.assertEqual([b['name'] for b in response.data], ['Centro'])

    def test_other_organization_branch_not_found(self):
        branch = TestDataFactory.create_branch(TestDataFactory.create_organization())
        response = self.client.get(f'/api/v1/branches/{branch.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_branch_with_motorcycles_rejected(self):
        branch = TestDataFactory.create_branch(self.organization)
        TestDataFactory.create_motorcycle(self.organization, branch=branch)
        response = self.client.delete(f'/api/v1/branches/{branch.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Branch.objects.filter(pk=branch.id).exists())

    def test_reorder(self):
        first = TestDataFactory.create_branch(self.organization, name='A', order=1)
        second = TestDataFactory.create_branch(self.organization, name='B', order=2)
        response = self.client.post('/api/v1/branches/reorder/', [
            {'id': first.id, 'order': 2}, {'id': second.id, 'order': 1}
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['name'] for b in response.data], ['B', 'A'])

    def test_reorder_unknown_branch_rolls_back(self):
        first = TestDataFactory.create_branch(self.organization, name='A', order=1)
        response = self.client.post('/api/v1/branches/reorder/', [
            {'id': first.id, 'order': 9}, {'id': 999999, 'order': 1}
        ], format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        first.refresh_from_db()
        self.assertEqual(first.order, 1)
