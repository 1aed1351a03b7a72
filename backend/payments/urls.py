from django.urls import path
from .views import (
    payment_method_list, organization_payment_method_list, organization_payment_method_toggle,
    mercadopago_config, payway_config, payway_validate,
    mercadopago_oauth_connect, mercadopago_oauth_callback, mercadopago_oauth_status,
    mercadopago_oauth_refresh, mercadopago_oauth_auto_detect, mercadopago_oauth_disconnect,
    mercadopago_preference, mercadopago_point_intent, mercadopago_process_order,
    mercadopago_payment_detail, mercadopago_webhook, mercadopago_organization_webhook,
    payment_notification_list, payment_notification_read
)

urlpatterns = [
    # Payment methods
    path('payment-methods/', payment_method_list, name='payment-method-list'),
    path('payment-methods/organization/', organization_payment_method_list, name='organization-payment-method-list'),
    path('payment-methods/organization/<int:pk>/toggle/', organization_payment_method_toggle,
         name='organization-payment-method-toggle'),

    # Gateway configuration
    path('payment-methods/mercadopago/config/', mercadopago_config, name='mercadopago-config'),
    path('payment-methods/payway/config/', payway_config, name='payway-config'),
    path('payment-methods/payway/validate/', payway_validate, name='payway-validate'),

    # MercadoPago OAuth
    path('mercadopago/oauth/connect/', mercadopago_oauth_connect, name='mercadopago-oauth-connect'),
    path('mercadopago/oauth/callback/', mercadopago_oauth_callback, name='mercadopago-oauth-callback'),
    path('mercadopago/oauth/status/', mercadopago_oauth_status, name='mercadopago-oauth-status'),
    path('mercadopago/oauth/refresh/', mercadopago_oauth_refresh, name='mercadopago-oauth-refresh'),
    path('mercadopago/oauth/auto-detect/', mercadopago_oauth_auto_detect, name='mercadopago-oauth-auto-detect'),
    path('mercadopago/oauth/disconnect/', mercadopago_oauth_disconnect, name='mercadopago-oauth-disconnect'),

    # MercadoPago payments
    path('mercadopago/preferences/', mercadopago_preference, name='mercadopago-preference'),
    path('mercadopago/point/intents/', mercadopago_point_intent, name='mercadopago-point-intent'),
    path('mercadopago/orders/', mercadopago_process_order, name='mercadopago-process-order'),
    path('mercadopago/payments/<str:payment_id>/', mercadopago_payment_detail, name='mercadopago-payment-detail'),
    path('mercadopago/webhook/', mercadopago_webhook, name='mercadopago-webhook'),
    path('mercadopago/webhook/<int:organization_id>/', mercadopago_organization_webhook,
         name='mercadopago-organization-webhook'),

    # Notifications
    path('payment-notifications/', payment_notification_list, name='payment-notification-list'),
    path('payment-notifications/<int:pk>/read/', payment_notification_read, name='payment-notification-read'),
]
