import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Count, ProtectedError
from django.shortcuts import get_object_or_404
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log
from .models import Client, Supplier
from .serializers import ClientSerializer, SupplierSerializer

logger = logging.getLogger('backend.parties')


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def client_list_create(request):
    """List the organization's clients or create a new one"""
    organization = request.user.organization
    if request.method == 'GET':
        queryset = Client.objects.filter(organization=organization)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(company_name__icontains=search) |
                Q(tax_id__icontains=search) |
                Q(email__icontains=search) |
                Q(mobile__icontains=search)
            )
        client_status = request.query_params.get('status')
        if client_status:
            queryset = queryset.filter(status=client_status)
        client_type = request.query_params.get('type')
        if client_type:
            queryset = queryset.filter(type=client_type)
        return Response(ClientSerializer(queryset, many=True).data)
    else:
        serializer = ClientSerializer(data=request.data, context={'organization': organization})
        if serializer.is_valid():
            client = serializer.save(organization=organization)
            create_audit_log(request, 'create', 'Client', client.id, object_name=client.display_name,
                             object_reference=client.tax_id)
            return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def client_detail(request, pk):
    """Retrieve, update or delete a client"""
    organization = request.user.organization
    client = get_object_or_404(Client, pk=pk, organization=organization)

    if request.method == 'GET':
        return Response(ClientSerializer(client).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ClientSerializer(client, data=request.data, partial=request.method == 'PATCH',
                                      context={'organization': organization})
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Client', client.id, changes=request.data,
                             object_name=client.display_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        name = client.display_name
        try:
            client.delete()
        except ProtectedError:
            return Response(
                {'error': 'El cliente tiene cuentas corrientes o ventas asociadas y no puede eliminarse.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request, 'delete', 'Client', pk, object_name=name)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def supplier_list_create(request):
    """List suppliers ordered by legal name or create a new supplier"""
    organization = request.user.organization
    if request.method == 'GET':
        queryset = Supplier.objects.filter(organization=organization).annotate(
            motorcycles_count=Count('motorcycles')
        ).order_by('legal_name')
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(legal_name__icontains=search) |
                Q(commercial_name__icontains=search) |
                Q(tax_identification__icontains=search) |
                Q(contact_name__icontains=search)
            )
        supplier_status = request.query_params.get('status')
        if supplier_status:
            queryset = queryset.filter(status=supplier_status)
        return Response(SupplierSerializer(queryset, many=True).data)
    else:
        serializer = SupplierSerializer(data=request.data, context={'organization': organization})
        if serializer.is_valid():
            supplier = serializer.save(organization=organization)
            create_audit_log(request, 'create', 'Supplier', supplier.id, object_name=supplier.legal_name,
                             object_reference=supplier.tax_identification)
            logger.info(f"Supplier {supplier.legal_name} created for organization {organization.id}")
            return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    organization = request.user.organization
    supplier = get_object_or_404(Supplier, pk=pk, organization=organization)

    if request.method == 'GET':
        return Response(SupplierSerializer(supplier).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH',
                                        context={'organization': organization})
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Supplier', supplier.id, changes=request.data,
                             object_name=supplier.legal_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        name = supplier.legal_name
        try:
            supplier.delete()
        except ProtectedError:
            return Response(
                {'error': 'El proveedor tiene motos asociadas y no puede eliminarse.'},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request, 'delete', 'Supplier', pk, object_name=name)
        return Response(status=status.HTTP_204_NO_CONTENT)
