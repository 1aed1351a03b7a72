import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, user_has_role, ADMIN_ROLES
from .models import Bank, CardType, BankCard, BankingPromotion, InstallmentPlan
from .serializers import (
    BankSerializer, CardTypeSerializer, BankCardSerializer,
    BankingPromotionSerializer, InstallmentPlanSerializer, PromotionCalculateSerializer
)
from .services import calculate_promotion_amount, promotions_for_day, save_promotion

logger = logging.getLogger('backend.pricing')


def _admin_required(request):
    if not user_has_role(request.user, *ADMIN_ROLES):
        return Response({'error': 'Solo administradores pueden realizar esta acción.'},
                        status=status.HTTP_403_FORBIDDEN)
    return None


# Bank views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bank_list_create(request):
    """List banks (?enabled=true) or create one (admins)"""
    if request.method == 'GET':
        banks = Bank.objects.all()
        if request.query_params.get('enabled') == 'true':
            banks = banks.filter(is_enabled=True)
        return Response(BankSerializer(banks, many=True).data)

    denied = _admin_required(request)
    if denied:
        return denied
    serializer = BankSerializer(data=request.data)
    if serializer.is_valid():
        bank = serializer.save()
        create_audit_log(request, 'create', 'Bank', bank.id, object_name=bank.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def bank_detail(request, pk):
    bank = get_object_or_404(Bank, pk=pk)

    if request.method == 'GET':
        return Response(BankSerializer(bank).data)

    denied = _admin_required(request)
    if denied:
        return denied
    serializer = BankSerializer(bank, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'update', 'Bank', bank.id, object_name=bank.name)
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def card_type_list_create(request):
    if request.method == 'GET':
        return Response(CardTypeSerializer(CardType.objects.all(), many=True).data)

    denied = _admin_required(request)
    if denied:
        return denied
    serializer = CardTypeSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Bank card views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def bank_card_list_create(request):
    """Bank/card combinations of the organization"""
    organization = request.user.organization

    if request.method == 'GET':
        cards = BankCard.objects.filter(organization=organization).select_related('bank', 'card_type')
        if request.query_params.get('enabled') == 'true':
            cards = cards.filter(is_enabled=True)
        return Response(BankCardSerializer(cards, many=True).data)

    serializer = BankCardSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    if BankCard.objects.filter(organization=organization, bank=data['bank'], card_type=data['card_type']).exists():
        return Response({'error': 'La tarjeta ya está asociada a la organización.'},
                        status=status.HTTP_400_BAD_REQUEST)
    card = serializer.save(organization=organization)
    create_audit_log(request, 'create', 'BankCard', card.id, object_name=str(card))
    return Response(BankCardSerializer(card).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def bank_card_detail(request, pk):
    card = get_object_or_404(BankCard, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        return Response(BankCardSerializer(card).data)

    if request.method == 'DELETE':
        card_id = card.id
        card_name = str(card)
        card.delete()
        create_audit_log(request, 'delete', 'BankCard', card_id, object_name=card_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = BankCardSerializer(card, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Banking promotion views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def promotion_list_create(request):
    """Promotions of the organization (?enabled=true) or create one with its installment plans"""
    organization = request.user.organization

    if request.method == 'GET':
        promotions = BankingPromotion.objects.filter(organization=organization).select_related(
            'bank', 'bank_card', 'bank_card__bank', 'bank_card__card_type'
        ).prefetch_related('installment_plans')
        if request.query_params.get('enabled') == 'true':
            promotions = promotions.filter(is_enabled=True)
        return Response(BankingPromotionSerializer(promotions, many=True).data)

    serializer = BankingPromotionSerializer(data=request.data, context={'organization': organization})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    promotion = save_promotion(organization, dict(serializer.validated_data))
    create_audit_log(request, 'create', 'BankingPromotion', promotion.id, object_name=promotion.name)
    return Response(BankingPromotionSerializer(promotion).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def promotion_detail(request, pk):
    organization = request.user.organization
    promotion = get_object_or_404(BankingPromotion, pk=pk, organization=organization)

    if request.method == 'GET':
        return Response(BankingPromotionSerializer(promotion).data)

    if request.method == 'DELETE':
        promotion_id = promotion.id
        promotion_name = promotion.name
        promotion.delete()
        create_audit_log(request, 'delete', 'BankingPromotion', promotion_id, object_name=promotion_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = BankingPromotionSerializer(
        promotion, data=request.data, partial=request.method == 'PATCH', context={'organization': organization}
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    promotion = save_promotion(organization, dict(serializer.validated_data), promotion=promotion)
    create_audit_log(request, 'update', 'BankingPromotion', promotion.id, object_name=promotion.name)
    return Response(BankingPromotionSerializer(promotion).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def promotion_toggle(request, pk):
    """Enable or disable a promotion ({"is_enabled": bool}, flips it when absent)"""
    promotion = get_object_or_404(BankingPromotion, pk=pk, organization=request.user.organization)
    is_enabled = request.data.get('is_enabled')
    promotion.is_enabled = (not promotion.is_enabled) if is_enabled is None else bool(is_enabled)
    promotion.save(update_fields=['is_enabled', 'updated_at'])
    create_audit_log(request, 'update', 'BankingPromotion', promotion.id,
                     changes={'is_enabled': promotion.is_enabled}, object_name=promotion.name)
    return Response(BankingPromotionSerializer(promotion).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def installment_plan_toggle(request, pk):
    plan = get_object_or_404(InstallmentPlan, pk=pk, promotion__organization=request.user.organization)
    is_enabled = request.data.get('is_enabled')
    plan.is_enabled = (not plan.is_enabled) if is_enabled is None else bool(is_enabled)
    plan.save(update_fields=['is_enabled', 'updated_at'])
    return Response(InstallmentPlanSerializer(plan).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def promotion_calculate(request):
    """Final amount of a sale with a promotion and optional installments"""
    serializer = PromotionCalculateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    promotion = get_object_or_404(BankingPromotion, pk=data['promotion'], organization=request.user.organization)
    result = calculate_promotion_amount(promotion, data['amount'], data.get('installments'))
    return Response({key: (str(value) if value is not None and key != 'installments' else value)
                     for key, value in result.items()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def promotions_by_day(request):
    """Enabled promotions valid today, or on ?day=<lunes..domingo>"""
    try:
        promotions = promotions_for_day(request.user.organization, day=request.query_params.get('day'))
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(BankingPromotionSerializer(promotions, many=True).data)
