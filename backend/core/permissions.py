from rest_framework.permissions import BasePermission

from .utils import ADMIN_ROLES, user_has_role


class HasOrganization(BasePermission):
    """Authenticated user attached to an organization"""
    message = 'Usuario no autenticado o sin organización.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.organization_id)


class IsOrganizationAdmin(BasePermission):
    message = 'Solo administradores pueden realizar esta acción.'

    def has_permission(self, request, view):
        return user_has_role(request.user, *ADMIN_ROLES)
