"""
Test suite for petty cash: deposits, withdrawals, spends and movements
"""
from datetime import date
from decimal import Decimal
from unittest import mock
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase
from rest_framework import status
from backend.core.otp import build_totp, generate_secret
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.petty_cash import services
from backend.petty_cash.models import PettyCashDeposit, PettyCashWithdrawal, PettyCashSpend


class PettyCashServiceTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.organization = self.user.organization
        self.branch = TestDataFactory.create_branch(self.organization)

    def _deposit(self, amount='1000.00', branch=None):
        return services.create_deposit(self.organization, Decimal(amount), date(2024, 5, 1),
                                       'Fondo fijo', branch=branch, user=self.user)

    def test_resolve_branch_filter(self):
        self.assertEqual(services.resolve_branch_filter(None), (True, None))
        self.assertEqual(services.resolve_branch_filter('GENERAL_ACCOUNT'), (True, None))
        self.assertEqual(services.resolve_branch_filter('7'), (False, 7))
        with self.assertRaises(ValueError):
            services.resolve_branch_filter('centro')

    def test_withdrawal_uses_latest_open_deposit_of_branch(self):
        self._deposit()
        branch_deposit = self._deposit(branch=self.branch)
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('300'), date(2024, 5, 2),
                                                branch_id=self.branch.id, user=self.user)
        self.assertEqual(withdrawal.deposit, branch_deposit)
        self.assertEqual(withdrawal.status, 'PENDING_JUSTIFICATION')

    def test_withdrawal_insufficient_funds(self):
        self._deposit(amount='100.00')
        with self.assertRaises(ValueError) as ctx:
            services.create_withdrawal(self.organization, 'Carlos', Decimal('150'), date(2024, 5, 2))
        self.assertIn('Fondos insuficientes', str(ctx.exception))

    def test_withdrawal_without_open_deposit(self):
        with self.assertRaises(ValueError):
            services.create_withdrawal(self.organization, 'Carlos', Decimal('10'), date(2024, 5, 2))

    def test_full_withdrawal_closes_deposit(self):
        deposit = self._deposit(amount='500.00')
        services.create_withdrawal(self.organization, 'Carlos', Decimal('500'), date(2024, 5, 2))
        deposit.refresh_from_db()
        self.assertEqual(deposit.status, 'CLOSED')
        with self.assertRaises(ValueError):
            services.create_withdrawal(self.organization, 'Carlos', Decimal('1'), date(2024, 5, 2),
                                       deposit_id=deposit.id)

    def test_spends_justify_withdrawal(self):
        self._deposit(amount='500.00')
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('500'), date(2024, 5, 2))

        services.create_spend(self.organization, withdrawal.id, 'combustible', Decimal('200'), date(2024, 5, 3))
        withdrawal.refresh_from_db()
        self.assertEqual(withdrawal.status, 'PARTIALLY_JUSTIFIED')
        self.assertEqual(withdrawal.amount_justified, Decimal('200.00'))

        with self.assertRaises(ValueError):
            services.create_spend(self.organization, withdrawal.id, 'limpieza', Decimal('400'), date(2024, 5, 3))

        services.create_spend(self.organization, withdrawal.id, 'limpieza', Decimal('300'), date(2024, 5, 3))
        withdrawal.refresh_from_db()
        self.assertEqual(withdrawal.status, 'JUSTIFIED')

        with self.assertRaises(ValueError):
            services.create_spend(self.organization, withdrawal.id, 'limpieza', Decimal('1'), date(2024, 5, 3))

    def test_other_motive_requires_description(self):
        self._deposit()
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('100'), date(2024, 5, 2))
        with self.assertRaises(ValueError):
            services.create_spend(self.organization, withdrawal.id, 'otros', Decimal('10'), date(2024, 5, 3))
        spend = services.create_spend(self.organization, withdrawal.id, 'otros', Decimal('10'), date(2024, 5, 3),
                                      description='Cerrajero')
        self.assertEqual(spend.description, 'Cerrajero')

    def test_delete_withdrawal_reopens_deposit(self):
        deposit = self._deposit(amount='500.00')
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('500'), date(2024, 5, 2))
        services.delete_withdrawal(withdrawal)
        deposit.refresh_from_db()
        self.assertEqual(deposit.status, 'OPEN')

    def test_delete_guards(self):
        deposit = self._deposit()
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('100'), date(2024, 5, 2))
        with self.assertRaises(ValueError):
            services.delete_deposit(deposit)
        services.create_spend(self.organization, withdrawal.id, 'viaticos', Decimal('50'), date(2024, 5, 3))
        with self.assertRaises(ValueError):
            services.delete_withdrawal(withdrawal)

    def test_movements_balance(self):
        self._deposit(amount='1000.00')
        self._deposit(amount='999.00', branch=self.branch)
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('400'), date(2024, 5, 2))
        services.create_spend(self.organization, withdrawal.id, 'combustible', Decimal('150'), date(2024, 5, 3))

        rows, totals = services.movements(self.organization, 'GENERAL_ACCOUNT')

        self.assertEqual(len(rows), 2)
        self.assertEqual(totals['total_debe'], Decimal('1000.00'))
        self.assertEqual(totals['total_haber'], Decimal('150.00'))
        self.assertEqual(totals['balance'], Decimal('850.00'))
        self.assertEqual(rows[0]['balance'], totals['balance'])

        rows, totals = services.movements(self.organization, str(self.branch.id))
        self.assertEqual(totals['balance'], Decimal('999.00'))

    @mock.patch('backend.petty_cash.services.delete_blob')
    @mock.patch('backend.petty_cash.services.upload_file')
    def test_failed_spend_removes_uploaded_ticket(self, mock_upload, mock_delete):
        mock_upload.return_value = {'key': 'uploads/tickets/petty-cash/x/t.png', 'url': 'https://blob/t.png'}
        self._deposit()
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('100'), date(2024, 5, 2))
        ticket = SimpleUploadedFile('t.png', b'\x89PNG fake', content_type='image/png')

        with mock.patch.object(PettyCashSpend.objects, 'create', side_effect=DatabaseError('disk full')):
            with self.assertRaises(DatabaseError):
                services.create_spend(self.organization, withdrawal.id, 'combustible', Decimal('40'),
                                      date(2024, 5, 3), ticket=ticket)

        mock_delete.assert_called_once_with('uploads/tickets/petty-cash/x/t.png')
        withdrawal.refresh_from_db()
        self.assertEqual(withdrawal.amount_justified, Decimal('0'))
        self.assertEqual(withdrawal.status, 'PENDING_JUSTIFICATION')

    @mock.patch('backend.petty_cash.services.delete_blob')
    @mock.patch('backend.petty_cash.services.upload_file')
    def test_saved_spend_keeps_ticket(self, mock_upload, mock_delete):
        mock_upload.return_value = {'key': 'uploads/tickets/petty-cash/x/t.png', 'url': 'https://blob/t.png'}
        self._deposit()
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('100'), date(2024, 5, 2))
        ticket = SimpleUploadedFile('t.png', b'\x89PNG fake', content_type='image/png')

        spend = services.create_spend(self.organization, withdrawal.id, 'combustible', Decimal('40'),
                                      date(2024, 5, 3), ticket=ticket)
        self.assertEqual(spend.ticket_key, 'uploads/tickets/petty-cash/x/t.png')
        mock_delete.assert_not_called()

    @mock.patch('backend.petty_cash.services.upload_file')
    def test_ticket_not_uploaded_when_amount_exceeds_withdrawal(self, mock_upload):
        self._deposit()
        withdrawal = services.create_withdrawal(self.organization, 'Carlos', Decimal('100'), date(2024, 5, 2))
        ticket = SimpleUploadedFile('t.png', b'\x89PNG fake', content_type='image/png')
        with self.assertRaises(ValueError):
            services.create_spend(self.organization, withdrawal.id, 'combustible', Decimal('140'),
                                  date(2024, 5, 3), ticket=ticket)
        mock_upload.assert_not_called()


class PettyCashAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(role='cash-manager')
        self.organization = self.user.organization
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _deposit(self, **extra):
        data = {'amount': '1000.00', 'date': '2024-05-01', 'description': 'Fondo fijo'}
        data.update(extra)
        return self.client.post('/api/v1/petty-cash/deposits/', data, format='json')

    def test_create_deposit_general_account(self):
        response = self._deposit(branch='GENERAL_ACCOUNT')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['branch'])
        self.assertEqual(response.data['status'], 'OPEN')

    def test_deposit_unknown_branch(self):
        foreign_branch = TestDataFactory.create_branch(TestDataFactory.create_organization())
        response = self._deposit(branch=str(foreign_branch.id))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deposit_non_positive_amount(self):
        response = self._deposit(amount='0')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_withdrawal_for_user_of_other_organization(self):
        self._deposit()
        stranger = TestDataFactory.create_user()
        response = self.client.post('/api/v1/petty-cash/withdrawals/', {
            'user_name': 'Otro', 'user': stranger.id, 'amount_given': '10.00', 'date': '2024-05-02'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('backend.petty_cash.services.upload_file')
    def test_spend_with_ticket(self, mock_upload):
        mock_upload.return_value = {'key': 'uploads/tickets/petty-cash/x/t.png', 'url': 'https://blob/t.png'}
        self._deposit()
        withdrawal_id = self.client.post('/api/v1/petty-cash/withdrawals/', {
            'user_name': 'Carlos', 'amount_given': '100.00', 'date': '2024-05-02'
        }, format='json').data['id']

        ticket = SimpleUploadedFile('ticket nafta.png', b'\x89PNG fake', content_type='image/png')
        response = self.client.post('/api/v1/petty-cash/spends/', {
            'withdrawal': withdrawal_id, 'motive': 'combustible', 'amount': '40.00',
            'date': '2024-05-03', 'ticket': ticket,
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['ticket_url'], 'https://blob/t.png')
        key = mock_upload.call_args[0][0]
        self.assertTrue(key.startswith(f'uploads/tickets/petty-cash/{self.organization.id}/{withdrawal_id}/'))
        self.assertTrue(key.endswith('ticket_nafta.png'))

    @mock.patch('backend.petty_cash.services.upload_file')
    def test_spend_rejects_unsupported_ticket(self, mock_upload):
        self._deposit()
        withdrawal_id = self.client.post('/api/v1/petty-cash/withdrawals/', {
            'user_name': 'Carlos', 'amount_given': '100.00', 'date': '2024-05-02'
        }, format='json').data['id']
        ticket = SimpleUploadedFile('notas.txt', b'hola', content_type='text/plain')
        response = self.client.post('/api/v1/petty-cash/spends/', {
            'withdrawal': withdrawal_id, 'motive': 'libreria', 'amount': '5.00',
            'date': '2024-05-03', 'ticket': ticket,
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_upload.assert_not_called()
        self.assertEqual(PettyCashSpend.objects.count(), 0)

    def test_regular_user_cannot_delete(self):
        deposit_id = self._deposit().data['id']
        user = TestDataFactory.create_user(organization=self.organization, role='user')
        self.client.authenticate_user(user)
        response = self.client.delete(f'/api/v1/petty-cash/deposits/{deposit_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(PettyCashDeposit.objects.filter(pk=deposit_id).exists())

    def test_delete_with_secure_mode(self):
        secret = generate_secret()
        self.organization.secure_mode_enabled = True
        self.organization.otp_secret = secret
        self.organization.otp_verified = True
        self.organization.save()
        deposit_id = self._deposit().data['id']

        response = self.client.delete(f'/api/v1/petty-cash/deposits/{deposit_id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(f'/api/v1/petty-cash/deposits/{deposit_id}/',
                                      {'otp_token': build_totp(secret).now()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_delete_withdrawal_endpoint(self):
        self._deposit()
        withdrawal_id = self.client.post('/api/v1/petty-cash/withdrawals/', {
            'user_name': 'Carlos', 'amount_given': '100.00', 'date': '2024-05-02'
        }, format='json').data['id']
        response = self.client.delete(f'/api/v1/petty-cash/withdrawals/{withdrawal_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PettyCashWithdrawal.objects.exists())

    def test_movements_endpoint(self):
        self._deposit()
        response = self.client.get('/api/v1/petty-cash/movements/?branch=GENERAL_ACCOUNT')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['results'][0]['type'], 'DEBE')
        self.assertEqual(Decimal(response.data['balance']), Decimal('1000.00'))

        response = self.client.get('/api/v1/petty-cash/movements/?branch=centro')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
