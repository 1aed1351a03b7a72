import logging
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from backend.core.cache_utils import get_cached_report, cache_report
from backend.core.permissions import HasOrganization
from backend.current_accounts.amortization import calculate_installment, french_schedule
from backend.current_accounts.models import CurrentAccount
from backend.current_accounts.services import amortization_plan
from backend.inventory.models import Motorcycle
from backend.locations.models import Branch
from backend.logistics.models import MotorcycleTransfer
from backend.parties.models import Client
from backend.petty_cash import services as petty_cash_services
from backend.pricing.models import BankingPromotion
from backend.pricing.services import calculate_promotion_amount
from . import pdf, services
from .serializers import QuoteSerializer

logger = logging.getLogger('backend.reports')


class InvalidDate(ValueError):
    pass


def _date_param(request, name):
    value = request.query_params.get(name)
    if not value:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise InvalidDate(f"Fecha inválida en {name}: {value}. Formato esperado YYYY-MM-DD")
    return parsed


def _report_params(request):
    return {
        'date_from': _date_param(request, 'date_from'),
        'date_to': _date_param(request, 'date_to'),
    }


def _cached(request, report_name, builder, **params):
    """Report data from cache, building and caching it on a miss"""
    organization = request.user.organization
    key_params = {key: str(value) for key, value in params.items() if value}
    cached_data, cache_key = get_cached_report(report_name, organization.id, **key_params)
    if cached_data is not None:
        logger.debug(f"Report {report_name} cache HIT for organization {organization.id}")
        return cached_data
    logger.debug(f"Report {report_name} cache MISS for organization {organization.id}")
    data = builder(organization, **params)
    cache_report(cache_key, data)
    return data


def _pdf_response(content, filename):
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


# JSON reports
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def sales_report(request):
    """Sales grouped by seller, branch and month (?date_from=, ?date_to=, ?branch=)"""
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    data = _cached(request, 'sales', services.sales_report,
                   branch_id=request.query_params.get('branch'), **params)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def inventory_report(request):
    data = _cached(request, 'inventory', services.inventory_report, branch_id=request.query_params.get('branch'))
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def reservations_report(request):
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    data = _cached(request, 'reservations', services.reservations_report,
                   branch_id=request.query_params.get('branch'), **params)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def current_accounts_report(request):
    """Current accounts totals (?status=ACTIVE|OVERDUE|...|all)"""
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    data = _cached(request, 'current_accounts', services.current_accounts_report,
                   status=request.query_params.get('status'), **params)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def suppliers_report(request):
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    data = _cached(request, 'suppliers', services.suppliers_report, **params)
    return Response(data)


# PDF reports
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def sales_report_pdf(request):
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    organization = request.user.organization
    report = _cached(request, 'sales', services.sales_report, branch_id=request.query_params.get('branch'), **params)
    content = pdf.sales_pdf(organization, report, **params)
    return _pdf_response(content, 'reporte-ventas.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def inventory_report_pdf(request):
    organization = request.user.organization
    report = _cached(request, 'inventory', services.inventory_report, branch_id=request.query_params.get('branch'))
    return _pdf_response(pdf.inventory_pdf(organization, report), 'reporte-inventario.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def reservations_report_pdf(request):
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    organization = request.user.organization
    report = _cached(request, 'reservations', services.reservations_report,
                     branch_id=request.query_params.get('branch'), **params)
    return _pdf_response(pdf.reservations_pdf(organization, report, **params), 'reporte-reservas.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def current_accounts_report_pdf(request):
    try:
        params = _report_params(request)
    except InvalidDate as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    organization = request.user.organization
    report = _cached(request, 'current_accounts', services.current_accounts_report,
                     status=request.query_params.get('status'), **params)
    return _pdf_response(pdf.current_accounts_pdf(organization, report), 'reporte-cuentas-corrientes.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def current_account_statement_pdf(request, pk):
    organization = request.user.organization
    account = get_object_or_404(
        CurrentAccount.objects.select_related('client', 'motorcycle__brand', 'motorcycle__model'),
        pk=pk, organization=organization
    )
    content = pdf.account_statement_pdf(organization, services.account_statement(account), amortization_plan(account))
    return _pdf_response(content, f'cuenta-corriente-{account.id}.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def petty_cash_movements_pdf(request):
    """Same filters as the petty cash movements list"""
    organization = request.user.organization
    branch_value = request.query_params.get('branch')
    try:
        params = _report_params(request)
        rows, totals = petty_cash_services.movements(organization, branch_value=branch_value, **params)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    _, branch_id = petty_cash_services.resolve_branch_filter(branch_value)
    branch = Branch.objects.filter(pk=branch_id, organization=organization).first() if branch_id else None
    content = pdf.petty_cash_pdf(organization, rows, totals,
                                 branch_name=branch.name if branch else 'Cuenta general', **params)
    return _pdf_response(content, 'movimientos-caja-chica.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def transfer_pdf(request, pk):
    organization = request.user.organization
    transfer = get_object_or_404(
        MotorcycleTransfer.objects.select_related(
            'motorcycle__brand', 'motorcycle__model', 'motorcycle__color',
            'from_branch', 'to_branch', 'logistic_provider'
        ),
        pk=pk, organization=organization
    )
    return _pdf_response(pdf.transfer_pdf(organization, transfer), f'remito-traslado-{transfer.id}.pdf')


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def quote_pdf(request):
    """Quote for a motorcycle with optional financing schedule and banking promotion"""
    organization = request.user.organization
    serializer = QuoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    motorcycle = get_object_or_404(
        Motorcycle.objects.select_related('brand', 'model'), pk=data['motorcycle'], organization=organization
    )
    client_name = data.get('client_name')
    if data.get('client'):
        client_name = get_object_or_404(Client, pk=data['client'], organization=organization).display_name

    price = data.get('price') or motorcycle.retail_price
    down_payment = data['down_payment']
    if down_payment > price:
        return Response({'error': 'El anticipo no puede superar el precio.'}, status=status.HTTP_400_BAD_REQUEST)

    financing = None
    if data.get('installments'):
        principal = price - down_payment
        frequency = data['payment_frequency']
        financing = {
            'principal': principal,
            'installments': data['installments'],
            'interest_rate': data['interest_rate'],
            'installment_amount': calculate_installment(principal, data['interest_rate'], data['installments'], frequency),
            'schedule': french_schedule(principal, data['interest_rate'], data['installments'], frequency),
        }

    promotion = None
    if data.get('promotion'):
        banking_promotion = get_object_or_404(BankingPromotion, pk=data['promotion'], organization=organization)
        promotion = calculate_promotion_amount(banking_promotion, price, data.get('promotion_installments'))

    content = pdf.quote_pdf(
        organization, motorcycle, client_name, price, motorcycle.currency,
        down_payment=down_payment, financing=financing, promotion=promotion, notes=data.get('notes'),
    )
    return _pdf_response(content, f'presupuesto-{motorcycle.chassis_number}.pdf')
