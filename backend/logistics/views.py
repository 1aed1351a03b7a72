import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, paginated_response_data
from backend.inventory.models import Motorcycle
from backend.inventory.serializers import MotorcycleListSerializer
from backend.locations.models import Branch
from .filters import MotorcycleTransferFilter
from .models import LogisticProvider, MotorcycleTransfer
from .serializers import (
    LogisticProviderSerializer, MotorcycleTransferSerializer,
    TransferCreateSerializer, TransferStatusSerializer
)
from .services import request_transfer, update_transfer_status, confirm_arrival

logger = logging.getLogger('backend.logistics')


def _transfers(organization):
    return MotorcycleTransfer.objects.filter(organization=organization).select_related(
        'motorcycle', 'motorcycle__brand', 'motorcycle__model', 'from_branch', 'to_branch',
        'logistic_provider', 'requested_by', 'confirmed_by'
    )


# Logistic provider views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def provider_list_create(request):
    """List (?status=, ?search=) or create logistic providers"""
    organization = request.user.organization

    if request.method == 'GET':
        queryset = LogisticProvider.objects.filter(organization=organization)
        provider_status = request.query_params.get('status')
        if provider_status:
            queryset = queryset.filter(status=provider_status)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(name__icontains=search)
        return Response(LogisticProviderSerializer(queryset, many=True).data)

    serializer = LogisticProviderSerializer(data=request.data)
    if serializer.is_valid():
        provider = serializer.save(organization=organization)
        create_audit_log(request, 'create', 'LogisticProvider', provider.id, object_name=provider.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def provider_detail(request, pk):
    provider = get_object_or_404(LogisticProvider, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        return Response(LogisticProviderSerializer(provider).data)

    if request.method == 'DELETE':
        if provider.transfers.filter(status__in=MotorcycleTransfer.ACTIVE_STATUSES).exists():
            return Response(
                {'error': 'No se puede eliminar un proveedor con transferencias activas.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        provider_id = provider.id
        provider_name = provider.name
        try:
            provider.delete()
        except ProtectedError:
            return Response({'error': 'El proveedor tiene registros asociados.'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'LogisticProvider', provider_id, object_name=provider_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = LogisticProviderSerializer(provider, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'update', 'LogisticProvider', provider.id, object_name=provider.name)
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Transfer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def transfer_list_create(request):
    """
    GET: transfers filtered by ?status= (comma list), ?from_branch=, ?to_branch=,
    ?logistic_provider=, ?date_from=, ?date_to=.
    POST: send a motorcycle to another branch.
    """
    organization = request.user.organization

    if request.method == 'GET':
        filterset = MotorcycleTransferFilter(request.query_params, queryset=_transfers(organization))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(paginated_response_data(request, filterset.qs, MotorcycleTransferSerializer))

    serializer = TransferCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    from_branch = get_object_or_404(Branch, pk=data['from_branch'], organization=organization)
    to_branch = get_object_or_404(Branch, pk=data['to_branch'], organization=organization)
    provider = None
    if data.get('logistic_provider'):
        provider = get_object_or_404(LogisticProvider, pk=data['logistic_provider'], organization=organization)

    try:
        transfer = request_transfer(
            organization, data['motorcycle'], from_branch, to_branch,
            user=request.user,
            logistic_provider=provider,
            scheduled_pickup_date=data.get('scheduled_pickup_date'),
            notes=data.get('notes', ''),
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'transfer', 'Motorcycle', transfer.motorcycle_id,
                     changes={'transfer_id': transfer.id, 'from_branch': from_branch.name,
                              'to_branch': to_branch.name},
                     object_name=str(transfer.motorcycle), object_reference=transfer.motorcycle.chassis_number)
    return Response(MotorcycleTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def transfers_in_transit(request):
    queryset = _transfers(request.user.organization).filter(status=MotorcycleTransfer.STATUS_IN_TRANSIT)
    return Response(MotorcycleTransferSerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycles_for_transfer(request):
    """Motorcycles in STOCK without an active transfer (?branch=)"""
    queryset = Motorcycle.objects.filter(
        organization=request.user.organization, state=Motorcycle.STATE_STOCK
    ).exclude(
        transfers__status__in=MotorcycleTransfer.ACTIVE_STATUSES
    ).select_related('brand', 'model', 'color', 'branch')
    branch = request.query_params.get('branch')
    if branch:
        queryset = queryset.filter(branch_id=branch)
    return Response(paginated_response_data(request, queryset.distinct(), MotorcycleListSerializer))


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def transfer_detail(request, pk):
    transfer = get_object_or_404(_transfers(request.user.organization), pk=pk)
    return Response(MotorcycleTransferSerializer(transfer).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def transfer_status(request, pk):
    transfer = get_object_or_404(_transfers(request.user.organization), pk=pk)
    serializer = TransferStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    new_status = data.pop('status')
    old_status = transfer.status
    try:
        update_transfer_status(transfer, new_status, user=request.user, **data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'status_change', 'MotorcycleTransfer', transfer.id,
                     changes={'status': {'old': old_status, 'new': new_status}}, object_name=str(transfer))
    return Response(MotorcycleTransferSerializer(transfer).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def transfer_confirm_arrival(request, pk):
    transfer = get_object_or_404(_transfers(request.user.organization), pk=pk)
    try:
        confirm_arrival(transfer, user=request.user)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'status_change', 'MotorcycleTransfer', transfer.id,
                     changes={'status': {'old': MotorcycleTransfer.STATUS_IN_TRANSIT,
                                         'new': MotorcycleTransfer.STATUS_DELIVERED}},
                     object_name=str(transfer), object_reference=transfer.motorcycle.chassis_number)
    return Response(MotorcycleTransferSerializer(transfer).data)
