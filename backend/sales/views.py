import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, paginated_response_data
from backend.parties.models import Client
from .models import Reservation, Sale
from .serializers import (
    ReservationSerializer, ReservationCreateSerializer,
    SaleSerializer, SaleCreateSerializer
)
from .services import create_reservation, cancel_reservation, complete_sale

logger = logging.getLogger('backend.sales')


def _get_client(organization, client_id):
    try:
        return Client.objects.get(pk=client_id, organization=organization)
    except Client.DoesNotExist:
        raise ValueError('No se encontró el cliente especificado')


# Reservation views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def reservation_list_create(request):
    """List reservations (?status=, ?motorcycle=, ?client=) or reserve a motorcycle"""
    organization = request.user.organization

    if request.method == 'GET':
        queryset = Reservation.objects.filter(organization=organization).select_related(
            'motorcycle', 'motorcycle__brand', 'motorcycle__model', 'client', 'created_by'
        )
        for param, field in (('status', 'status'), ('motorcycle', 'motorcycle_id'), ('client', 'client_id')):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        return Response(paginated_response_data(request, queryset, ReservationSerializer))

    serializer = ReservationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    motorcycle_id = data.pop('motorcycle')
    try:
        client = _get_client(organization, data.pop('client'))
        reservation, warning = create_reservation(organization, motorcycle_id, client, user=request.user, **data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'reservation', 'Reservation', reservation.id,
                     changes={'amount': str(reservation.amount), 'currency': reservation.currency},
                     object_name=str(reservation), object_reference=reservation.motorcycle.chassis_number)

    response_data = ReservationSerializer(reservation).data
    if warning:
        response_data['warning'] = warning
    return Response(response_data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def reservation_detail(request, pk):
    reservation = get_object_or_404(Reservation, pk=pk, organization=request.user.organization)
    return Response(ReservationSerializer(reservation).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def reservation_cancel(request, pk):
    """Cancel a reservation and release the motorcycle"""
    reservation = get_object_or_404(Reservation, pk=pk, organization=request.user.organization)
    try:
        cancel_reservation(reservation)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'status_change', 'Reservation', reservation.id,
                     changes={'status': 'cancelled'}, object_name=str(reservation))
    return Response(ReservationSerializer(reservation).data)


# Sale views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def sale_list_create(request):
    """
    GET: sales of the organization (?date_from=, ?date_to=, ?seller=, ?branch=).
    POST: complete the sale of a motorcycle.
    """
    organization = request.user.organization

    if request.method == 'GET':
        queryset = Sale.objects.filter(organization=organization).select_related(
            'motorcycle', 'motorcycle__brand', 'motorcycle__model', 'client', 'seller', 'branch', 'promotion'
        )
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if date_from:
            queryset = queryset.filter(sold_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(sold_at__date__lte=date_to)
        for param, field in (('seller', 'seller_id'), ('branch', 'branch_id'), ('client', 'client_id')):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        return Response(paginated_response_data(request, queryset, SaleSerializer))

    serializer = SaleCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    motorcycle_id = data.pop('motorcycle')
    promotion_id = data.pop('promotion', None)
    current_account_id = data.pop('current_account', None)
    try:
        client = _get_client(organization, data.pop('client'))
        if promotion_id:
            from backend.pricing.models import BankingPromotion
            data['promotion'] = get_object_or_404(BankingPromotion, pk=promotion_id, organization=organization)
        if current_account_id:
            from backend.current_accounts.models import CurrentAccount
            data['current_account'] = get_object_or_404(CurrentAccount, pk=current_account_id, organization=organization)
        sale = complete_sale(organization, motorcycle_id, client, request.user, **data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'sale', 'Motorcycle', sale.motorcycle_id,
                     changes={'sale_id': sale.id, 'price': str(sale.price), 'currency': sale.currency,
                              'client_id': client.id},
                     object_name=str(sale.motorcycle), object_reference=sale.motorcycle.chassis_number)
    return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def sale_detail(request, pk):
    sale = get_object_or_404(Sale, pk=pk, organization=request.user.organization)
    return Response(SaleSerializer(sale).data)
