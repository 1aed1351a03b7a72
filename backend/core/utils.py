"""Utility functions for audit logging and organization scoping"""
import logging
import re

from django.contrib.auth import get_user_model

from .models import AuditLog

logger = logging.getLogger(__name__)

User = get_user_model()

ADMIN_ROLES = ('admin', 'root')
PETTY_CASH_MANAGER_ROLES = ('admin', 'root', 'cash-manager')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def get_request_organization(request):
    """Organization of the authenticated user, or None"""
    user = getattr(request, 'user', None)
    if not user or not user.is_authenticated:
        return None
    return user.organization


def user_has_role(user, *roles):
    """Superusers pass every role check"""
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return user.role in roles


def normalize_name(value):
    """Trim and collapse inner whitespace"""
    if value is None:
        return ''
    return re.sub(r'\s+', ' ', str(value)).strip()


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None,
                     organization=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, payment_add, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
        object_reference: Reference identifier (e.g., chassis number)
        organization: Optional organization override (defaults to the user's)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        if audit_user is not None and not audit_user.is_authenticated:
            audit_user = None

        if organization is None and audit_user is not None:
            organization = audit_user.organization

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            organization=organization,
            user=audit_user,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def paginated_response_data(request, queryset, serializer_class, default_limit=50, context=None):
    """Page a queryset with ?page= and ?limit= and serialize the page"""
    from django.core.paginator import Paginator

    try:
        page = int(request.query_params.get('page', 1))
        limit = int(request.query_params.get('limit', default_limit))
    except (TypeError, ValueError):
        page, limit = 1, default_limit
    limit = max(1, min(limit, 500))

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    serializer = serializer_class(page_obj, many=True, context=context or {})
    return {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }
