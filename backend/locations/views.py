import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.db.models import Max, ProtectedError
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, user_has_role, ADMIN_ROLES
from .models import Branch
from .serializers import BranchSerializer

logger = logging.getLogger('backend.locations')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def branch_list_create(request):
    """List the organization's branches or create a new one (create requires admin)"""
    organization = request.user.organization
    if request.method == 'GET':
        branches = Branch.objects.filter(organization=organization)
        if request.query_params.get('active') == 'true':
            branches = branches.filter(is_active=True)
        serializer = BranchSerializer(branches, many=True)
        return Response(serializer.data)

    if not user_has_role(request.user, *ADMIN_ROLES):
        logger.warning(f"User {request.user.username} attempted to create branch without admin privileges")
        return Response({'error': 'Only administrators can create branches'}, status=status.HTTP_403_FORBIDDEN)

    serializer = BranchSerializer(data=request.data, context={'organization': organization})
    if serializer.is_valid():
        next_order = (Branch.objects.filter(organization=organization).aggregate(max_order=Max('order'))['max_order'] or 0) + 1
        branch = serializer.save(organization=organization, order=next_order)
        logger.info(f"Branch '{branch.name}' created by {request.user.username}")
        create_audit_log(request, 'create', 'Branch', branch.id, object_name=branch.name)
        return Response(BranchSerializer(branch).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def branch_detail(request, pk):
    """Retrieve, update or delete a branch (update/delete requires admin)"""
    organization = request.user.organization
    branch = get_object_or_404(Branch, pk=pk, organization=organization)

    if request.method == 'GET':
        return Response(BranchSerializer(branch).data)

    if not user_has_role(request.user, *ADMIN_ROLES):
        return Response({'error': 'Only administrators can modify branches'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = BranchSerializer(branch, data=request.data, partial=request.method == 'PATCH',
                                      context={'organization': organization})
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Branch', branch.id, changes=dict(request.data), object_name=branch.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    try:
        branch.delete()
    except ProtectedError:
        return Response({'error': 'La sucursal tiene motos o movimientos asociados y no puede eliminarse.'},
                        status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request, 'delete', 'Branch', pk, object_name=branch.name)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def branch_reorder(request):
    """Persist a new branch order: [{id, order}, ...]"""
    if not user_has_role(request.user, *ADMIN_ROLES):
        return Response({'error': 'Only administrators can reorder branches'}, status=status.HTTP_403_FORBIDDEN)

    items = request.data if isinstance(request.data, list) else request.data.get('items', [])
    if not items:
        return Response({'error': 'No se recibieron sucursales para ordenar.'}, status=status.HTTP_400_BAD_REQUEST)

    organization = request.user.organization
    with transaction.atomic():
        for item in items:
            try:
                branch_id = int(item['id'])
                order = int(item['order'])
            except (KeyError, TypeError, ValueError):
                return Response({'error': 'Formato inválido: se espera [{id, order}].'}, status=status.HTTP_400_BAD_REQUEST)
            updated = Branch.objects.filter(pk=branch_id, organization=organization).update(order=order)
            if not updated:
                transaction.set_rollback(True)
                return Response({'error': f'Sucursal {branch_id} no encontrada.'}, status=status.HTTP_404_NOT_FOUND)

    branches = Branch.objects.filter(organization=organization)
    return Response(BranchSerializer(branches, many=True).data)
