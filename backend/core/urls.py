from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me,
    user_list_create, user_detail, organization_current,
    security_settings, toggle_secure_mode, verify_otp_setup,
    setting_list_create, setting_detail,
    audit_log_list, audit_log_detail,
    global_search
)
from .storage_views import signed_url

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # Organization and security
    path('organizations/current/', organization_current, name='organization-current'),
    path('security/', security_settings, name='security-settings'),
    path('security/secure-mode/', toggle_secure_mode, name='security-secure-mode'),
    path('security/verify-otp/', verify_otp_setup, name='security-verify-otp'),

    # Setting endpoints
    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/<int:pk>/', setting_detail, name='setting-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),

    # Blob storage
    path('storage/signed-url/', signed_url, name='storage-signed-url'),

    # Global search endpoint
    path('search/', global_search, name='global-search'),
]
