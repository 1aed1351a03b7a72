"""
Test suite for banks, cards and banking promotions
"""
from datetime import date
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.pricing.models import Bank, BankCard, BankingPromotion, CardType, InstallmentPlan
from backend.pricing.services import calculate_promotion_amount, promotions_for_day, weekday_name


class PromotionCalculationTests(TestCase):

    def setUp(self):
        self.organization = TestDataFactory.create_organization()

    def test_discount(self):
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Lunes 10%',
                                                    discount_rate=Decimal('10'))
        result = calculate_promotion_amount(promotion, Decimal('2000000'))
        self.assertEqual(result['final_amount'], Decimal('1800000.00'))
        self.assertEqual(result['discount_amount'], Decimal('200000.00'))
        self.assertIsNone(result['surcharge_amount'])

    def test_discount_takes_precedence_over_surcharge(self):
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Mixta',
                                                    discount_rate=Decimal('5'), surcharge_rate=Decimal('8'))
        result = calculate_promotion_amount(promotion, Decimal('1000'))
        self.assertEqual(result['final_amount'], Decimal('950.00'))
        self.assertIsNone(result['surcharge_amount'])

    def test_surcharge_with_installments(self):
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Cuotas',
                                                    surcharge_rate=Decimal('10'))
        InstallmentPlan.objects.create(promotion=promotion, installments=6, interest_rate=Decimal('20'))
        InstallmentPlan.objects.create(promotion=promotion, installments=12, interest_rate=Decimal('40'),
                                       is_enabled=False)

        result = calculate_promotion_amount(promotion, Decimal('1000'), installments=6)
        self.assertEqual(result['surcharge_amount'], Decimal('100.00'))
        self.assertEqual(result['total_interest'], Decimal('220.00'))
        self.assertEqual(result['final_amount'], Decimal('1320.00'))
        self.assertEqual(result['installment_amount'], Decimal('220.00'))
        self.assertEqual(result['installments'], 6)

        result = calculate_promotion_amount(promotion, Decimal('1000'), installments=12)
        self.assertIsNone(result['installments'])
        self.assertEqual(result['final_amount'], Decimal('1100.00'))

    def test_weekday_name(self):
        self.assertEqual(weekday_name(date(2024, 5, 6)), 'lunes')
        self.assertEqual(weekday_name(date(2024, 5, 12)), 'domingo')


class PromotionsByDayTests(TestCase):

    def setUp(self):
        cache.clear()
        self.organization = TestDataFactory.create_organization()

    def test_filters_by_day_and_validity(self):
        every_day = BankingPromotion.objects.create(organization=self.organization, name='Siempre')
        monday = BankingPromotion.objects.create(organization=self.organization, name='Lunes',
                                                 active_days=['lunes'])
        BankingPromotion.objects.create(organization=self.organization, name='Viernes', active_days=['viernes'])
        BankingPromotion.objects.create(organization=self.organization, name='Vencida',
                                        end_date=date(2024, 1, 31))
        BankingPromotion.objects.create(organization=self.organization, name='Apagada', is_enabled=False)

        promotions = promotions_for_day(self.organization, day='lunes', on_date=date(2024, 5, 6))
        self.assertEqual({promotion.id for promotion in promotions}, {every_day.id, monday.id})

    def test_invalid_day(self):
        with self.assertRaises(ValueError):
            promotions_for_day(self.organization, day='funday')

    def test_cache_invalidated_when_promotion_changes(self):
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Martes',
                                                    active_days=['martes'])
        on_date = date(2024, 5, 7)
        self.assertEqual(len(promotions_for_day(self.organization, on_date=on_date)), 1)

        promotion.is_enabled = False
        promotion.save()
        self.assertEqual(len(promotions_for_day(self.organization, on_date=on_date)), 0)


class PricingAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_user(role='admin')
        self.organization = self.admin.organization
        self.bank = Bank.objects.create(name='Banco Nación')
        self.card_type = CardType.objects.create(name='Visa', type='credit')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_only_admins_create_banks(self):
        user = TestDataFactory.create_user(organization=self.organization, role='user')
        self.client.authenticate_user(user)
        response = self.client.post('/api/v1/banks/', {'name': 'Banco Galicia'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/banks/', {'name': 'Banco Galicia'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_bank_card_is_unique_per_organization(self):
        payload = {'bank': self.bank.id, 'card_type': self.card_type.id}
        response = self.client.post('/api/v1/bank-cards/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['card_type_type'], 'credit')
        response = self.client.post('/api/v1/bank-cards/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_promotion_with_plans(self):
        card = BankCard.objects.create(organization=self.organization, bank=self.bank, card_type=self.card_type)
        response = self.client.post('/api/v1/promotions/', {
            'name': 'Nación 3 sin interés',
            'discount_rate': '0',
            'active_days': ['miércoles'],
            'bank': self.bank.id,
            'bank_card': card.id,
            'installment_plans': [
                {'installments': 3, 'interest_rate': '0'},
                {'installments': 6, 'interest_rate': '15'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['installment_plans']), 2)

        promotion_id = response.data['id']
        response = self.client.patch(f'/api/v1/promotions/{promotion_id}/', {
            'installment_plans': [{'installments': 6, 'interest_rate': '12'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        plan = InstallmentPlan.objects.get(promotion_id=promotion_id, installments=6)
        self.assertEqual(plan.interest_rate, Decimal('12.00'))
        self.assertEqual(InstallmentPlan.objects.filter(promotion_id=promotion_id).count(), 2)

    def test_promotion_validation(self):
        response = self.client.post('/api/v1/promotions/', {'name': 'Mala', 'active_days': ['lunes', 'feriado']},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('active_days', response.data)

        response = self.client.post('/api/v1/promotions/', {'name': 'Mala', 'discount_rate': '120'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post('/api/v1/promotions/', {
            'name': 'Mala', 'start_date': '2024-05-10', 'end_date': '2024-05-01'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_bank_card_rejected(self):
        foreign_card = BankCard.objects.create(organization=TestDataFactory.create_organization(),
                                               bank=self.bank, card_type=self.card_type)
        response = self.client.post('/api/v1/promotions/', {'name': 'Ajena', 'bank_card': foreign_card.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_and_calculate(self):
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Promo',
                                                    discount_rate=Decimal('15'))
        response = self.client.post(f'/api/v1/promotions/{promotion.id}/toggle/')
        self.assertFalse(response.data['is_enabled'])
        response = self.client.post(f'/api/v1/promotions/{promotion.id}/toggle/', {'is_enabled': True},
                                    format='json')
        self.assertTrue(response.data['is_enabled'])

        response = self.client.post('/api/v1/promotions/calculate/', {
            'promotion': promotion.id, 'amount': '1000.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['final_amount'], '850.00')
        self.assertIsNone(response.data['installments'])

    def test_installment_plan_toggle(self):
        promotion = BankingPromotion.objects.create(organization=self.organization, name='Promo')
        plan = InstallmentPlan.objects.create(promotion=promotion, installments=3)
        response = self.client.post(f'/api/v1/installment-plans/{plan.id}/toggle/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_enabled'])

    def test_promotions_by_day_endpoint(self):
        BankingPromotion.objects.create(organization=self.organization, name='Jueves', active_days=['jueves'])
        response = self.client.get('/api/v1/promotions/by-day/?day=jueves')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/promotions/by-day/?day=lunes')
        self.assertEqual(response.data, [])
        response = self.client.get('/api/v1/promotions/by-day/?day=nunca')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
