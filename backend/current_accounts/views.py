import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, paginated_response_data
from backend.parties.models import Client
from .models import CurrentAccount, Payment
from .serializers import (
    CurrentAccountSerializer, CurrentAccountCreateSerializer,
    PaymentSerializer, PaymentCreateSerializer
)
from .services import (
    create_account, record_payment, undo_payment, cancel_payment, amortization_plan
)

logger = logging.getLogger('backend.current_accounts')

NORMAL_PAYMENT = Q(
    payments__installment_version__isnull=True,
    payments__is_down_payment=False,
    payments__status='COMPLETED',
)


def _accounts(organization):
    return CurrentAccount.objects.filter(organization=organization).select_related(
        'client', 'motorcycle', 'motorcycle__brand', 'motorcycle__model'
    ).annotate(paid_installments=Count('payments', filter=NORMAL_PAYMENT))


def _schedule_data(account):
    return [
        {key: (str(value) if key != 'installment_number' else value) for key, value in entry.items()}
        for entry in amortization_plan(account)
    ]


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def current_account_list_create(request):
    """
    GET: current accounts (?status=, ?client=, ?motorcycle=, ?search=).
    POST: open a new current account.
    """
    organization = request.user.organization

    if request.method == 'GET':
        queryset = _accounts(organization)
        statuses = request.query_params.get('status')
        if statuses:
            queryset = queryset.filter(status__in=statuses.split(','))
        for param, field in (('client', 'client_id'), ('motorcycle', 'motorcycle_id')):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value})
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(client__first_name__icontains=search) |
                Q(client__last_name__icontains=search) |
                Q(client__company_name__icontains=search) |
                Q(motorcycle__chassis_number__icontains=search)
            )
        return Response(paginated_response_data(request, queryset, CurrentAccountSerializer))

    serializer = CurrentAccountCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    client_id = data.pop('client')
    motorcycle_id = data.pop('motorcycle')
    try:
        client = Client.objects.get(pk=client_id, organization=organization)
    except Client.DoesNotExist:
        return Response({'error': 'El cliente especificado no existe.'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        account, warning = create_account(organization, client, motorcycle_id, user=request.user, **data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'create', 'CurrentAccount', account.id,
                     changes={'total_amount': str(account.total_amount),
                              'number_of_installments': account.number_of_installments},
                     object_name=str(account), object_reference=account.motorcycle.chassis_number)

    response_data = CurrentAccountSerializer(_accounts(organization).get(pk=account.pk)).data
    if warning:
        response_data['warning'] = warning
    return Response(response_data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, HasOrganization])
def current_account_detail(request, pk):
    """Account with its payments and amortization schedule; updates limited to plan terms and status"""
    organization = request.user.organization
    account = get_object_or_404(_accounts(organization), pk=pk)

    if request.method == 'GET':
        data = CurrentAccountSerializer(account).data
        data['payments'] = PaymentSerializer(account.payments.select_related('created_by'), many=True).data
        data['schedule'] = _schedule_data(account)
        return Response(data)

    partial = request.method == 'PATCH'
    serializer = CurrentAccountSerializer(account, data=request.data, partial=partial)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = account.status
    serializer.save()
    create_audit_log(request, 'update', 'CurrentAccount', account.id,
                     changes={'status': {'old': old_status, 'new': account.status}}, object_name=str(account))
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def current_account_payments(request, pk):
    """List payments of an account or record a new one"""
    account = get_object_or_404(CurrentAccount, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        payments = account.payments.select_related('created_by')
        return Response(PaymentSerializer(payments, many=True).data)

    serializer = PaymentCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        payment, account = record_payment(account, user=request.user, **serializer.validated_data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'payment_add', 'CurrentAccount', account.id,
                     changes={'payment_id': payment.id, 'amount_paid': str(payment.amount_paid),
                              'installment_number': payment.installment_number,
                              'remaining_amount': str(account.remaining_amount)},
                     object_name=str(account))
    return Response({
        'payment': PaymentSerializer(payment).data,
        'account': CurrentAccountSerializer(_accounts(account.organization).get(pk=account.pk)).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def payment_undo(request, pk):
    """Void a payment with a D/H pair; the amount returns to the account balance"""
    payment = get_object_or_404(Payment, pk=pk, organization=request.user.organization)
    try:
        payment, reversal, account = undo_payment(payment)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'payment_undo', 'Payment', payment.id,
                     changes={'reversal_id': reversal.id, 'amount_paid': str(payment.amount_paid),
                              'remaining_amount': str(account.remaining_amount)},
                     object_name=str(payment), object_reference=str(account.id))
    return Response({
        'original': PaymentSerializer(payment).data,
        'reversal': PaymentSerializer(reversal).data,
        'remaining_amount': str(account.remaining_amount),
        'status': account.status,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def payment_cancel(request, pk):
    """Void an installment payment and leave the installment pending again"""
    payment = get_object_or_404(Payment, pk=pk, organization=request.user.organization)
    try:
        payment, reversal, pending, account = cancel_payment(payment)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'payment_cancel', 'Payment', payment.id,
                     changes={'reversal_id': reversal.id, 'pending_id': pending.id,
                              'installment_number': payment.installment_number,
                              'installment_amount': str(account.installment_amount)},
                     object_name=str(payment), object_reference=str(account.id))
    return Response({
        'original': PaymentSerializer(payment).data,
        'reversal': PaymentSerializer(reversal).data,
        'pending': PaymentSerializer(pending).data,
        'installment_amount': str(account.installment_amount),
        'remaining_amount': str(account.remaining_amount),
    })
