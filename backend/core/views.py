import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from django.utils.text import slugify
from .models import Organization, Setting, AuditLog
from .otp import generate_secret, provisioning_uri, verify_token, is_well_formed_token, otp_digits
from .permissions import HasOrganization, IsOrganizationAdmin
from .serializers import (
    OrganizationSerializer, UserSerializer, UserCreateSerializer,
    SettingSerializer, AuditLogSerializer
)
from .utils import create_audit_log, user_has_role, ADMIN_ROLES, PETTY_CASH_MANAGER_ROLES

logger = logging.getLogger('backend.core')

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        token['organization_id'] = user.organization_id
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


def _unique_slug(name):
    base = slugify(name) or 'org'
    slug = base
    suffix = 1
    while Organization.objects.filter(slug=slug).exists():
        suffix += 1
        slug = f"{base}-{suffix}"
    return slug


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    User registration endpoint.

    When `organization_name` is given a new organization is created and the
    user becomes its admin.
    """
    organization_name = request.data.get('organization_name')
    data = {
        key: request.data.get(key)
        for key in ('username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone')
        if key in request.data
    }

    serializer = UserCreateSerializer(data=data)
    if serializer.is_valid():
        user = serializer.save()
        if organization_name:
            organization = Organization.objects.create(
                name=organization_name,
                slug=_unique_slug(organization_name),
            )
            user.organization = organization
            user.role = 'admin'
        user.is_active = True
        user.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization, IsOrganizationAdmin])
def user_list_create(request):
    """List the organization's users or create a new one"""
    organization = request.user.organization
    if request.method == 'GET':
        users = User.objects.filter(organization=organization).order_by('username')
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        data = request.data.copy()
        data['organization'] = organization.id
        serializer = UserCreateSerializer(data=data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request, 'create', 'User', user.id, object_name=user.username)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization, IsOrganizationAdmin])
def user_detail(request, pk):
    """Retrieve, update or delete a user of the organization"""
    user = get_object_or_404(User, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        data.pop('organization', None)
        serializer = UserSerializer(user, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'No puede eliminar su propio usuario.'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'User', user.id, object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with organization and access flags"""
    user = request.user
    user_data = UserSerializer(user).data

    if user.organization:
        user_data['organization'] = OrganizationSerializer(user.organization).data

    user_data['is_admin'] = user_has_role(user, *ADMIN_ROLES)
    user_data['can_manage_petty_cash'] = user_has_role(user, *PETTY_CASH_MANAGER_ROLES)
    user_data['can_access_reports'] = user_has_role(user, *ADMIN_ROLES)
    user_data['can_configure_payments'] = user_has_role(user, *ADMIN_ROLES)
    return Response(user_data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, HasOrganization])
def organization_current(request):
    """Retrieve or update the current organization"""
    organization = request.user.organization
    if request.method == 'GET':
        return Response(OrganizationSerializer(organization).data)

    if not user_has_role(request.user, *ADMIN_ROLES):
        return Response({'error': 'Solo administradores pueden modificar la organización.'}, status=status.HTTP_403_FORBIDDEN)
    serializer = OrganizationSerializer(organization, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'update', 'Organization', organization.id, changes=request.data, object_name=organization.name)
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Security (secure mode / OTP) views
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def security_settings(request):
    organization = request.user.organization
    return Response({
        'secure_mode_enabled': organization.secure_mode_enabled,
        'otp_auth_url': organization.otp_auth_url,
        'otp_verified': organization.otp_verified,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization, IsOrganizationAdmin])
def toggle_secure_mode(request):
    """
    Enable or disable secure mode.

    Enabling without a verified secret issues a new secret and returns the
    provisioning URI; an already verified secret is kept. Disabling clears
    the secret.
    """
    organization = request.user.organization
    enabled = request.data.get('enabled')
    if not isinstance(enabled, bool):
        return Response({'error': 'El campo enabled es requerido (true/false).'}, status=status.HTTP_400_BAD_REQUEST)

    new_otp_auth_url = None
    if enabled:
        if not organization.otp_secret or not organization.otp_verified:
            secret = generate_secret()
            label = request.user.email or request.user.username
            organization.otp_secret = secret
            organization.otp_auth_url = provisioning_uri(secret, label)
            organization.otp_verified = False
            new_otp_auth_url = organization.otp_auth_url
    else:
        organization.otp_secret = None
        organization.otp_auth_url = None
        organization.otp_verified = False

    organization.secure_mode_enabled = enabled
    organization.save()

    create_audit_log(request, 'secure_mode', 'Organization', organization.id,
                     changes={'secure_mode_enabled': enabled}, object_name=organization.name)

    if enabled and new_otp_auth_url:
        message = 'Modo seguro activado. Escanee el QR para configurar OTP.'
    elif enabled:
        message = 'Modo seguro activado. OTP ya configurado y verificado.'
    else:
        message = 'Modo seguro desactivado.'

    return Response({
        'success': True,
        'otp_auth_url': new_otp_auth_url,
        'otp_verified': organization.otp_verified,
        'message': message,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization, IsOrganizationAdmin])
def verify_otp_setup(request):
    organization = request.user.organization
    token = str(request.data.get('token', '')).strip()

    if not is_well_formed_token(token):
        return Response({'error': f'El token OTP debe ser de {otp_digits()} dígitos numéricos.'}, status=status.HTTP_400_BAD_REQUEST)

    if not organization.otp_secret:
        return Response({'error': 'No hay un secreto OTP pendiente de verificación.'}, status=status.HTTP_400_BAD_REQUEST)

    if not verify_token(organization.otp_secret, token):
        return Response({'error': 'Código OTP inválido.'}, status=status.HTTP_400_BAD_REQUEST)

    organization.otp_verified = True
    organization.save(update_fields=['otp_verified', 'updated_at'])
    return Response({'success': True, 'message': 'OTP verificado correctamente.'})


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def setting_list_create(request):
    """List the organization's settings or create one (admins only)"""
    organization = request.user.organization
    if request.method == 'GET':
        settings = Setting.objects.filter(organization=organization).order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)

    if not user_has_role(request.user, *ADMIN_ROLES):
        return Response({'error': 'Solo administradores pueden modificar la configuración.'},
                        status=status.HTTP_403_FORBIDDEN)
    serializer = SettingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    key = serializer.validated_data['key']
    if Setting.objects.filter(organization=organization, key=key).exists():
        return Response({'key': [f'Ya existe la configuración "{key}".']}, status=status.HTTP_400_BAD_REQUEST)
    setting = serializer.save(organization=organization)
    create_audit_log(request, 'create', 'Setting', str(setting.id), changes=serializer.data, object_name=setting.key)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization, IsOrganizationAdmin])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting of the organization"""
    setting = get_object_or_404(Setting, pk=pk, organization=request.user.organization)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        key = serializer.validated_data.get('key', setting.key)
        if Setting.objects.filter(organization=setting.organization, key=key).exclude(pk=setting.pk).exists():
            return Response({'key': [f'Ya existe la configuración "{key}".']}, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(request, 'update', 'Setting', str(setting.id), changes=serializer.data,
                         object_name=setting.key)
        return Response(serializer.data)
    else:  # DELETE
        create_audit_log(request, 'delete', 'Setting', str(setting.id), object_name=setting.key)
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def audit_log_list(request):
    """List the organization's audit logs with filtering"""
    queryset = AuditLog.objects.filter(organization=request.user.organization).select_related('user')

    # Non admins only see their own entries
    if not user_has_role(request.user, *ADMIN_ROLES):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk, organization=request.user.organization)

    if not user_has_role(request.user, *ADMIN_ROLES) and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def global_search(request):
    """Search motorcycles, clients, suppliers and branches of the organization"""
    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'motorcycles': [],
            'clients': [],
            'suppliers': [],
            'branches': [],
        })

    from backend.inventory.models import Motorcycle
    from backend.inventory.serializers import MotorcycleListSerializer
    from backend.parties.models import Client, Supplier
    from backend.parties.serializers import ClientSerializer, SupplierSerializer
    from backend.locations.models import Branch
    from backend.locations.serializers import BranchSerializer

    organization = request.user.organization
    results = {}

    motorcycles = Motorcycle.objects.filter(organization=organization).filter(
        Q(chassis_number__icontains=query) |
        Q(engine_number__icontains=query) |
        Q(license_plate__icontains=query) |
        Q(brand__name__icontains=query) |
        Q(model__name__icontains=query)
    ).select_related('brand', 'model', 'branch', 'color')[:20]
    results['motorcycles'] = MotorcycleListSerializer(motorcycles, many=True).data

    clients = Client.objects.filter(organization=organization).filter(
        Q(first_name__icontains=query) |
        Q(last_name__icontains=query) |
        Q(company_name__icontains=query) |
        Q(tax_id__icontains=query) |
        Q(email__icontains=query)
    )[:20]
    results['clients'] = ClientSerializer(clients, many=True).data

    suppliers = Supplier.objects.filter(organization=organization).filter(
        Q(legal_name__icontains=query) |
        Q(commercial_name__icontains=query) |
        Q(tax_identification__icontains=query)
    )[:20]
    results['suppliers'] = SupplierSerializer(suppliers, many=True).data

    branches = Branch.objects.filter(organization=organization, name__icontains=query)[:20]
    results['branches'] = BranchSerializer(branches, many=True).data

    return Response(results)
