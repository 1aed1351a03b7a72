import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.blob_storage import BlobStorageError
from backend.core.otp import check_secure_mode_token
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, user_has_role, PETTY_CASH_MANAGER_ROLES
from backend.locations.models import Branch
from .models import PettyCashDeposit, PettyCashWithdrawal, PettyCashSpend
from .serializers import (
    PettyCashDepositSerializer, PettyCashWithdrawalSerializer, PettyCashSpendSerializer,
    DepositCreateSerializer, WithdrawalCreateSerializer, SpendCreateSerializer
)
from . import services

logger = logging.getLogger('backend.petty_cash')


def _branch_id(organization, value):
    """Branch id for a petty cash branch selector, None for the general account"""
    is_general, branch_id = services.resolve_branch_filter(value)
    if is_general:
        return None
    if not Branch.objects.filter(pk=branch_id, organization=organization).exists():
        raise ValueError('La sucursal indicada no existe.')
    return branch_id


def _secure_delete_error(request):
    """Role and secure mode checks shared by the delete endpoints; returns a Response or None"""
    if not user_has_role(request.user, *PETTY_CASH_MANAGER_ROLES):
        return Response(
            {'error': 'No tiene permisos para eliminar movimientos de caja chica.'},
            status=status.HTTP_403_FORBIDDEN
        )
    token = request.data.get('otp_token') or request.query_params.get('otp_token')
    error = check_secure_mode_token(request.user.organization, token)
    if error:
        return Response({'error': error}, status=status.HTTP_403_FORBIDDEN)
    return None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def deposit_list_create(request):
    """Deposits with their withdrawals and spends (?branch=, ?status=)"""
    organization = request.user.organization

    if request.method == 'GET':
        queryset = PettyCashDeposit.objects.filter(organization=organization).select_related(
            'branch'
        ).prefetch_related('withdrawals__spends')
        branch = request.query_params.get('branch')
        if branch:
            try:
                queryset = queryset.filter(branch_id=_branch_id(organization, branch))
            except ValueError as e:
                return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        deposit_status = request.query_params.get('status')
        if deposit_status:
            queryset = queryset.filter(status=deposit_status)
        return Response(PettyCashDepositSerializer(queryset, many=True).data)

    serializer = DepositCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        branch_id = _branch_id(organization, data.get('branch'))
        deposit = services.create_deposit(
            organization,
            amount=data['amount'],
            date=data['date'],
            description=data['description'],
            reference=data.get('reference'),
            branch=Branch.objects.get(pk=branch_id) if branch_id else None,
            user=request.user,
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'deposit', 'PettyCashDeposit', deposit.id,
                     changes={'amount': str(deposit.amount), 'branch_id': branch_id},
                     object_name=deposit.description, object_reference=deposit.reference)
    return Response(PettyCashDepositSerializer(deposit).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def deposit_detail(request, pk):
    deposit = get_object_or_404(PettyCashDeposit, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        return Response(PettyCashDepositSerializer(deposit).data)

    denied = _secure_delete_error(request)
    if denied:
        return denied

    deposit_id = deposit.id
    deposit_description = deposit.description
    try:
        services.delete_deposit(deposit)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'delete', 'PettyCashDeposit', deposit_id, object_name=deposit_description)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def withdrawal_list_create(request):
    """Withdrawals (?deposit=, ?status=) or a new withdrawal from an open deposit"""
    organization = request.user.organization

    if request.method == 'GET':
        queryset = PettyCashWithdrawal.objects.filter(organization=organization).prefetch_related('spends')
        for param, field in (('deposit', 'deposit_id'), ('status', 'status')):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        return Response(PettyCashWithdrawalSerializer(queryset, many=True).data)

    serializer = WithdrawalCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    user = request.user
    if data.get('user'):
        user = organization.users.filter(pk=data['user']).first()
        if user is None:
            return Response({'error': 'El usuario indicado no pertenece a la organización.'},
                            status=status.HTTP_400_BAD_REQUEST)
    try:
        withdrawal = services.create_withdrawal(
            organization,
            user_name=data['user_name'],
            amount_given=data['amount_given'],
            date=data['date'],
            deposit_id=data.get('deposit'),
            branch_id=_branch_id(organization, data.get('branch')),
            user=user,
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'withdrawal', 'PettyCashWithdrawal', withdrawal.id,
                     changes={'amount_given': str(withdrawal.amount_given), 'deposit_id': withdrawal.deposit_id},
                     object_name=withdrawal.user_name)
    return Response(PettyCashWithdrawalSerializer(withdrawal).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def withdrawal_detail(request, pk):
    withdrawal = get_object_or_404(PettyCashWithdrawal, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        return Response(PettyCashWithdrawalSerializer(withdrawal).data)

    denied = _secure_delete_error(request)
    if denied:
        return denied

    withdrawal_id = withdrawal.id
    withdrawal_name = str(withdrawal)
    try:
        services.delete_withdrawal(withdrawal)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'delete', 'PettyCashWithdrawal', withdrawal_id, object_name=withdrawal_name)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def spend_list_create(request):
    """Spends (?withdrawal=) or a new spend, multipart when a ticket file is attached"""
    organization = request.user.organization

    if request.method == 'GET':
        queryset = PettyCashSpend.objects.filter(organization=organization)
        withdrawal_id = request.query_params.get('withdrawal')
        if withdrawal_id:
            queryset = queryset.filter(withdrawal_id=withdrawal_id)
        return Response(PettyCashSpendSerializer(queryset, many=True).data)

    serializer = SpendCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        spend = services.create_spend(
            organization,
            withdrawal_id=data['withdrawal'],
            motive=data['motive'],
            amount=data['amount'],
            date=data['date'],
            description=data.get('description'),
            ticket=data.get('ticket'),
            user=request.user,
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except BlobStorageError as e:
        logger.error(f"Ticket upload failed: {str(e)}", exc_info=True)
        return Response({'error': f'Error al subir el comprobante: {str(e)}'},
                        status=status.HTTP_503_SERVICE_UNAVAILABLE)

    create_audit_log(request, 'spend', 'PettyCashSpend', spend.id,
                     changes={'amount': str(spend.amount), 'withdrawal_id': spend.withdrawal_id,
                              'motive': spend.motive},
                     object_name=spend.description)
    return Response(PettyCashSpendSerializer(spend).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def movement_list(request):
    """DEBE/HABER movements of a branch (?branch=<id>|GENERAL_ACCOUNT, ?date_from=, ?date_to=)"""
    try:
        rows, totals = services.movements(
            request.user.organization,
            branch_value=request.query_params.get('branch'),
            date_from=request.query_params.get('date_from'),
            date_to=request.query_params.get('date_to'),
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'results': rows,
        'total_debe': str(totals['total_debe']),
        'total_haber': str(totals['total_haber']),
        'balance': str(totals['balance']),
    })
