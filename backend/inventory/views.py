import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.shortcuts import get_object_or_404
from backend.catalog.label_generator import label_for_motorcycle
from backend.core.cache_utils import MOTORCYCLE_LIST_CACHE_TTL, get_motorcycle_list_cache_key
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, paginated_response_data
from .filters import MotorcycleFilter
from .models import Motorcycle
from .serializers import (
    MotorcycleListSerializer, MotorcycleSerializer,
    MotorcycleBatchSerializer, MotorcycleStatusSerializer
)
from .services import change_status, create_batch, fuzzy_search

logger = logging.getLogger('backend.inventory')


def _organization_motorcycles(organization):
    return Motorcycle.objects.filter(organization=organization).select_related(
        'brand', 'model', 'color', 'branch', 'supplier', 'client', 'seller'
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycle_list_create(request):
    """
    GET: paginated, filtered listing (see MotorcycleFilter).
    POST: create a single unit.
    """
    organization = request.user.organization

    if request.method == 'GET':
        params = {key: request.query_params.get(key) for key in sorted(request.query_params.keys())}
        cache_key = get_motorcycle_list_cache_key(organization.id, params)
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            logger.debug(f"Motorcycle list cache HIT for organization {organization.id}")
            return Response(cached_data)

        filterset = MotorcycleFilter(request.query_params, queryset=_organization_motorcycles(organization))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('-created_at', '-id')

        data = paginated_response_data(request, queryset, MotorcycleListSerializer)
        cache.set(cache_key, data, MOTORCYCLE_LIST_CACHE_TTL)
        return Response(data)

    serializer = MotorcycleSerializer(data=request.data, context={'organization': organization})
    if serializer.is_valid():
        motorcycle = serializer.save(organization=organization)
        create_audit_log(request, 'create', 'Motorcycle', motorcycle.id, object_name=str(motorcycle),
                         object_reference=motorcycle.chassis_number)
        return Response(MotorcycleSerializer(motorcycle).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycle_batch_create(request):
    """Create several units sharing brand, model and prices in one transaction"""
    serializer = MotorcycleBatchSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    units = data.pop('units')
    try:
        created = create_batch(request.user.organization, data, units)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    for motorcycle in created:
        create_audit_log(request, 'create', 'Motorcycle', motorcycle.id, object_name=str(motorcycle),
                         object_reference=motorcycle.chassis_number, changes={'batch': True})
    return Response({
        'created_count': len(created),
        'motorcycles': MotorcycleListSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycle_detail(request, pk):
    """Retrieve or update a motorcycle"""
    organization = request.user.organization
    motorcycle = get_object_or_404(_organization_motorcycles(organization), pk=pk)

    if request.method == 'GET':
        return Response(MotorcycleSerializer(motorcycle).data)

    serializer = MotorcycleSerializer(motorcycle, data=request.data, partial=request.method == 'PATCH',
                                      context={'organization': organization})
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'update', 'Motorcycle', motorcycle.id, changes=request.data,
                         object_name=str(motorcycle), object_reference=motorcycle.chassis_number)
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycle_status(request, pk):
    """Change the state of a unit (never to VENDIDO)"""
    motorcycle = get_object_or_404(Motorcycle, pk=pk, organization=request.user.organization)
    serializer = MotorcycleStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    new_state = serializer.validated_data['state']
    try:
        previous_state = change_status(motorcycle, new_state)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request, 'status_change', 'Motorcycle', motorcycle.id,
                     changes={'from': previous_state, 'to': new_state},
                     object_name=str(motorcycle), object_reference=motorcycle.chassis_number)
    return Response(MotorcycleSerializer(motorcycle).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycle_fuzzy_search(request):
    """Typo tolerant search; ?q= and optional ?state= list and ?limit="""
    queryset = _organization_motorcycles(request.user.organization)
    states = [s.strip().upper() for s in request.query_params.get('state', '').split(',') if s.strip()]
    if states:
        queryset = queryset.filter(state__in=states)

    try:
        limit = int(request.query_params.get('limit', 50))
    except ValueError:
        limit = 50

    query = request.query_params.get('q', '')
    results, strategy = fuzzy_search(queryset, query, limit=limit)
    if strategy is None and not query.strip():
        results = results.order_by('-created_at')[:limit]
    return Response({
        'strategy': strategy,
        'results': MotorcycleListSerializer(results, many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def motorcycle_label(request, pk):
    """Printable stock label (PNG data URL) with the chassis barcode"""
    motorcycle = get_object_or_404(_organization_motorcycles(request.user.organization), pk=pk)
    try:
        image = label_for_motorcycle(motorcycle)
    except Exception as e:
        logger.error(f"Label generation failed for motorcycle {motorcycle.id}: {e}", exc_info=True)
        return Response({'error': 'No se pudo generar la etiqueta.'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({
        'motorcycle_id': motorcycle.id,
        'chassis_number': motorcycle.chassis_number,
        'image': image,
    })
