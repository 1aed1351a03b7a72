import logging
from urllib.parse import urlencode
from django.core.cache import cache
from django.shortcuts import get_object_or_404, redirect
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from backend.core.models import Organization
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log
from . import mercadopago, payway, services
from .models import PaymentMethod, OrganizationPaymentMethod, MercadoPagoOAuth, PaymentNotification
from .serializers import (
    PaymentMethodSerializer, OrganizationPaymentMethodSerializer, MercadoPagoOAuthSerializer,
    PaymentNotificationSerializer, MercadoPagoConfigSerializer, PayWayConfigSerializer,
    PreferenceSerializer, PointIntentSerializer, ProcessOrderSerializer
)

logger = logging.getLogger('backend.payments')

OAUTH_STATE_TTL = 600


def _oauth_state_key(state):
    return f"mercadopago:oauth_state:{state}"


def _configuration_redirect(**params):
    return redirect(f"{mercadopago.base_url()}/configuration?{urlencode(params)}")


def _access_token(organization):
    """OAuth token of the organization, then its stored configuration, then the global token"""
    oauth = MercadoPagoOAuth.objects.filter(organization=organization).first()
    if oauth is not None:
        return oauth.access_token
    config = services.get_configuration(organization, services.MERCADOPAGO) or {}
    return config.get('access_token') or mercadopago.global_access_token()


def _gateway_error(e):
    code = e.status_code if e.status_code and 400 <= e.status_code < 500 else status.HTTP_502_BAD_GATEWAY
    return Response({'error': str(e), 'details': e.payload}, status=code)


# Payment method views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payment_method_list(request):
    """Global payment method catalog"""
    return Response(PaymentMethodSerializer(PaymentMethod.objects.all(), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def organization_payment_method_list(request):
    """Methods associated with the organization, or associate one ({"method": id})"""
    organization = request.user.organization

    if request.method == 'GET':
        methods = OrganizationPaymentMethod.objects.filter(organization=organization).select_related('method')
        if request.query_params.get('enabled') == 'true':
            methods = methods.filter(is_enabled=True)
        return Response(OrganizationPaymentMethodSerializer(methods, many=True).data)

    method = get_object_or_404(PaymentMethod, pk=request.data.get('method'))
    org_method, created = OrganizationPaymentMethod.objects.get_or_create(
        organization=organization, method=method,
        defaults={'order': request.data.get('order') or 0}
    )
    if created:
        create_audit_log(request, 'create', 'OrganizationPaymentMethod', org_method.id, object_name=method.name)
    return Response(OrganizationPaymentMethodSerializer(org_method).data,
                    status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def organization_payment_method_toggle(request, pk):
    org_method = get_object_or_404(OrganizationPaymentMethod, pk=pk, organization=request.user.organization)
    is_enabled = request.data.get('is_enabled')
    org_method.is_enabled = (not org_method.is_enabled) if is_enabled is None else bool(is_enabled)
    org_method.save(update_fields=['is_enabled', 'updated_at'])
    create_audit_log(request, 'update', 'OrganizationPaymentMethod', org_method.id,
                     changes={'is_enabled': org_method.is_enabled}, object_name=org_method.method.name)
    return Response(OrganizationPaymentMethodSerializer(org_method).data)


# Gateway configuration views
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_config(request):
    organization = request.user.organization

    if request.method == 'GET':
        config = services.get_configuration(organization, services.MERCADOPAGO)
        return Response({
            'configuration': services.masked_configuration(organization, services.MERCADOPAGO),
            'is_valid': services.is_configuration_valid(config, services.MERCADOPAGO),
            'missing_fields': services.missing_fields(config, services.MERCADOPAGO),
        })

    serializer = MercadoPagoConfigSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        org_method = services.update_configuration(organization, services.MERCADOPAGO, serializer.validated_data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'update', 'PaymentMethodConfiguration', org_method.id,
                     changes={'keys': sorted(serializer.validated_data)}, object_name='mercadopago')
    return Response({'configuration': services.masked_configuration(organization, services.MERCADOPAGO)})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, HasOrganization])
def payway_config(request):
    organization = request.user.organization

    if request.method == 'GET':
        return Response({
            'configuration': services.masked_configuration(organization, services.PAYWAY),
            **payway.validate_config(organization),
        })

    serializer = PayWayConfigSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        org_method = payway.update_config(organization, serializer.validated_data)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'update', 'PaymentMethodConfiguration', org_method.id,
                     changes={'keys': sorted(serializer.validated_data)}, object_name='payway')
    return Response({'configuration': services.masked_configuration(organization, services.PAYWAY)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def payway_validate(request):
    return Response(payway.validate_config(request.user.organization))


# MercadoPago OAuth views
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_oauth_connect(request):
    """Authorization URL (?pkce=false to skip PKCE, ?force_logout=true to force a new login)"""
    if not mercadopago.client_id():
        return Response({'error': 'MERCADOPAGO_CLIENT_ID no está configurado.'},
                        status=status.HTTP_503_SERVICE_UNAVAILABLE)

    use_pkce = request.query_params.get('pkce', 'true') != 'false'
    force_logout = request.query_params.get('force_logout') == 'true'
    url, state, verifier = mercadopago.build_authorization_url(
        request.user.organization_id, use_pkce=use_pkce, force_logout=force_logout
    )
    cache.set(_oauth_state_key(state), {
        'organization_id': request.user.organization_id,
        'code_verifier': verifier,
    }, OAUTH_STATE_TTL)
    return Response({'authorization_url': url, 'state': state, 'pkce': use_pkce})


@api_view(['GET'])
@permission_classes([AllowAny])
def mercadopago_oauth_callback(request):
    """Redirect target of the MercadoPago authorization screen"""
    code = request.query_params.get('code')
    state = request.query_params.get('state')
    if not code or not state:
        return _configuration_redirect(mp_error='missing_params')

    pending = cache.get(_oauth_state_key(state))
    organization_id = mercadopago.organization_id_from_state(state)
    if not pending or organization_id is None or pending['organization_id'] != organization_id:
        logger.warning(f"MercadoPago OAuth callback with unknown state {state}")
        return _configuration_redirect(mp_error='invalid_state')
    organization = Organization.objects.filter(pk=organization_id).first()
    if organization is None:
        return _configuration_redirect(mp_error='invalid_state')
    cache.delete(_oauth_state_key(state))

    try:
        token_data = mercadopago.exchange_code(code, pending.get('code_verifier'))
    except mercadopago.MercadoPagoError as e:
        logger.error(f"MercadoPago token exchange failed for organization {organization_id}: {str(e)}", exc_info=True)
        return _configuration_redirect(mp_error='token_exchange_failed')

    try:
        user_info = mercadopago.get_user_info(token_data['access_token'])
    except mercadopago.MercadoPagoError as e:
        logger.error(f"MercadoPago user info failed for organization {organization_id}: {str(e)}", exc_info=True)
        return _configuration_redirect(mp_error='user_info_failed')

    try:
        oauth = services.save_oauth_tokens(organization, token_data, user_info)
    except (KeyError, ValueError) as e:
        logger.error(f"Could not store MercadoPago OAuth for organization {organization_id}: {str(e)}", exc_info=True)
        return _configuration_redirect(mp_error='internal_error')

    logger.info(f"MercadoPago account {oauth.mercadopago_user_id} connected to organization {organization_id}")
    return _configuration_redirect(mp_success='true')


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_oauth_status(request):
    oauth = MercadoPagoOAuth.objects.filter(organization=request.user.organization).first()
    if oauth is None:
        return Response({'connected': False})
    return Response({'connected': True, **MercadoPagoOAuthSerializer(oauth).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_oauth_refresh(request):
    oauth = get_object_or_404(MercadoPagoOAuth, organization=request.user.organization)
    try:
        oauth = services.refresh_oauth(oauth)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except mercadopago.MercadoPagoError as e:
        return _gateway_error(e)
    create_audit_log(request, 'update', 'MercadoPagoOAuth', oauth.id, object_name=oauth.email or '')
    return Response(MercadoPagoOAuthSerializer(oauth).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_oauth_auto_detect(request):
    """Find and store the public key of the connected account"""
    oauth = get_object_or_404(MercadoPagoOAuth, organization=request.user.organization)
    try:
        public_key, method, user_info = services.quick_auto_detect(oauth)
    except mercadopago.MercadoPagoError as e:
        return _gateway_error(e)

    if not public_key:
        return Response({
            'success': False,
            'error': 'No se pudo detectar la public key. Ingrésela manualmente.',
            'user_id': (user_info or {}).get('id'),
        }, status=status.HTTP_404_NOT_FOUND)
    return Response({
        'success': True,
        'public_key': public_key,
        'method': method,
        'environment': mercadopago.environment_for(oauth.access_token),
    })


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_oauth_disconnect(request):
    oauth = get_object_or_404(MercadoPagoOAuth, organization=request.user.organization)
    oauth_id = oauth.id
    user_id = oauth.mercadopago_user_id
    oauth.delete()
    create_audit_log(request, 'delete', 'MercadoPagoOAuth', oauth_id, object_name=user_id)
    return Response(status=status.HTTP_204_NO_CONTENT)


# MercadoPago payment views
@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_preference(request):
    """Checkout Pro preference for a sale"""
    serializer = PreferenceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    access_token = _access_token(request.user.organization)
    if not access_token:
        return Response({'error': 'MercadoPago no está configurado.'}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    has_oauth = MercadoPagoOAuth.objects.filter(organization=request.user.organization).exists()
    try:
        preference = mercadopago.create_preference(
            access_token, request.user.organization_id, data['amount'], data['description'],
            motorcycle_id=data.get('motorcycle_id'), sale_id=data.get('sale_id') or None,
            additional_info=data.get('additional_info'), per_organization_webhook=has_oauth,
        )
    except mercadopago.MercadoPagoError as e:
        return _gateway_error(e)

    return Response({
        'preference_id': preference.get('id'),
        'init_point': preference.get('init_point'),
        'sandbox_init_point': preference.get('sandbox_init_point'),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_point_intent(request):
    """Send a charge to a Point Smart terminal"""
    serializer = PointIntentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    access_token = _access_token(request.user.organization)
    if not access_token:
        return Response({'error': 'MercadoPago no está configurado.'}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        order = mercadopago.create_point_intent(
            access_token, data['amount'], data['device_id'], data.get('external_reference') or None
        )
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except mercadopago.MercadoPagoError as e:
        return _gateway_error(e)
    return Response(order, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_process_order(request):
    """Online card payment with a card token from the payment brick"""
    serializer = ProcessOrderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    access_token = _access_token(request.user.organization)
    if not access_token:
        return Response({'error': 'MercadoPago no está configurado.'}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        order = mercadopago.process_order(
            access_token, request.user.organization_id, data['amount'], data['description'],
            data['form_data'], data['payer'],
        )
    except mercadopago.MercadoPagoError as e:
        return _gateway_error(e)

    create_audit_log(request, 'create', 'MercadoPagoOrder', order.get('id'),
                     changes={'amount': str(data['amount']), 'status': order.get('status')},
                     object_name=data['description'])
    return Response(order, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def mercadopago_payment_detail(request, payment_id):
    access_token = _access_token(request.user.organization)
    if not access_token:
        return Response({'error': 'MercadoPago no está configurado.'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        payment = mercadopago.get_payment(payment_id, access_token)
    except mercadopago.MercadoPagoError as e:
        return _gateway_error(e)
    return Response({
        'id': payment.get('id'),
        'status': payment.get('status'),
        'status_detail': payment.get('status_detail'),
        'transaction_amount': payment.get('transaction_amount'),
        'currency_id': payment.get('currency_id'),
        'payment_method_id': payment.get('payment_method_id'),
        'installments': payment.get('installments'),
        'date_created': payment.get('date_created'),
        'date_approved': payment.get('date_approved'),
        'external_reference': payment.get('external_reference'),
        'payer_email': (payment.get('payer') or {}).get('email'),
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def mercadopago_webhook(request):
    """Payment notifications sent by MercadoPago"""
    try:
        result = services.process_webhook(request.data)
    except ValueError as e:
        logger.warning(f"Rejected MercadoPago notification: {str(e)}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except mercadopago.MercadoPagoError as e:
        logger.error(f"MercadoPago notification lookup failed: {str(e)}", exc_info=True)
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(result)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def mercadopago_organization_webhook(request, organization_id):
    """Payment notifications for one organization; GET answers a health check"""
    organization = get_object_or_404(Organization, pk=organization_id)
    if request.method == 'GET':
        return Response({
            'status': 'active',
            'service': 'MercadoPago Webhook',
            'organization_id': organization.id,
            'timestamp': timezone.now().isoformat(),
        })

    try:
        result = services.process_organization_webhook(organization, request.data)
    except ValueError as e:
        logger.warning(f"Rejected MercadoPago notification for organization {organization.id}: {str(e)}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except mercadopago.MercadoPagoError as e:
        logger.error(f"MercadoPago payment lookup failed for organization {organization.id}: {str(e)}",
                     exc_info=True)
        if e.status_code and 400 <= e.status_code < 500:
            return Response({'error': 'Payment not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(result)


# Notification views
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def payment_notification_list(request):
    """Unexpired notifications (?unread=true for unread only)"""
    notifications = PaymentNotification.objects.filter(
        organization=request.user.organization, expires_at__gt=timezone.now()
    )
    if request.query_params.get('unread') == 'true':
        notifications = notifications.filter(is_read=False)
    return Response(PaymentNotificationSerializer(notifications, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def payment_notification_read(request, pk):
    notification = get_object_or_404(PaymentNotification, pk=pk, organization=request.user.organization)
    notification.is_read = True
    notification.save(update_fields=['is_read'])
    return Response(PaymentNotificationSerializer(notification).data)
