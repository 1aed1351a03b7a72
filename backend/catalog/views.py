import logging
import time
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.db import transaction
from django.db.models import Max, Q
from django.shortcuts import get_object_or_404
from backend.core.blob_storage import BlobStorageError, upload_file, delete_blob
from backend.core.cache_utils import CATALOG_CACHE_TTL, get_catalog_cache_key
from backend.core.permissions import HasOrganization
from backend.core.utils import create_audit_log, normalize_name
from .models import Brand, MotorcycleModel, OrganizationBrand, Color, ModelFile
from .serializers import (
    BrandSerializer, MotorcycleModelSerializer, OrganizationBrandSerializer,
    ColorSerializer, ModelFileSerializer
)

logger = logging.getLogger('backend.catalog')

MAX_MODEL_FILE_SIZE = 20 * 1024 * 1024


# Brand views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def brand_list_create(request):
    """List all brands (with models) or create a new brand"""
    if request.method == 'GET':
        cache_key = get_catalog_cache_key('brands')
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            return Response(cached_data)
        brands = Brand.objects.prefetch_related('models')
        data = BrandSerializer(brands, many=True).data
        cache.set(cache_key, data, CATALOG_CACHE_TTL)
        return Response(data)
    else:
        serializer = BrandSerializer(data=request.data)
        if serializer.is_valid():
            brand = serializer.save()
            create_audit_log(request, 'create', 'Brand', brand.id, object_name=brand.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def brand_detail(request, pk):
    """Retrieve, update or delete a brand"""
    brand = get_object_or_404(Brand, pk=pk)

    if request.method == 'GET':
        return Response(BrandSerializer(brand).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BrandSerializer(brand, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if brand.motorcycles.exists():
            return Response({'error': 'La marca tiene motos asociadas.'}, status=status.HTTP_400_BAD_REQUEST)
        brand.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Model views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def model_list_create(request):
    """List models (optionally of one brand) or create a new model"""
    if request.method == 'GET':
        models_qs = MotorcycleModel.objects.select_related('brand')
        brand_id = request.query_params.get('brand')
        if brand_id:
            models_qs = models_qs.filter(brand_id=brand_id)
        search = request.query_params.get('search')
        if search:
            models_qs = models_qs.filter(Q(name__icontains=search) | Q(brand__name__icontains=search))
        return Response(MotorcycleModelSerializer(models_qs, many=True).data)
    else:
        serializer = MotorcycleModelSerializer(data=request.data)
        if serializer.is_valid():
            brand = serializer.validated_data['brand']
            if MotorcycleModel.objects.filter(brand=brand, name__iexact=serializer.validated_data['name']).exists():
                return Response({'error': 'El modelo ya existe para esta marca.'}, status=status.HTTP_400_BAD_REQUEST)
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def model_detail(request, pk):
    """Retrieve, update or delete a model"""
    model = get_object_or_404(MotorcycleModel, pk=pk)

    if request.method == 'GET':
        return Response(MotorcycleModelSerializer(model).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MotorcycleModelSerializer(model, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if model.motorcycles.exists():
            return Response({'error': 'El modelo tiene motos asociadas.'}, status=status.HTTP_400_BAD_REQUEST)
        model.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Organization brand views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def organization_brand_list_create(request):
    """Brands the organization works with; POST associates a brand"""
    organization = request.user.organization
    if request.method == 'GET':
        associations = OrganizationBrand.objects.filter(organization=organization).select_related('brand').prefetch_related('brand__models')
        return Response(OrganizationBrandSerializer(associations, many=True).data)

    brand_id = request.data.get('brand')
    brand = get_object_or_404(Brand, pk=brand_id)
    association = _associate_brand(organization, brand, color=request.data.get('color'))
    return Response(OrganizationBrandSerializer(association).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def organization_brand_detail(request, pk):
    association = get_object_or_404(OrganizationBrand, pk=pk, organization=request.user.organization)
    if request.method == 'PATCH':
        for field in ('color', 'order'):
            if field in request.data:
                setattr(association, field, request.data[field])
        association.save()
        return Response(OrganizationBrandSerializer(association).data)
    association.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


def _associate_brand(organization, brand, color=None):
    association, created = OrganizationBrand.objects.get_or_create(
        organization=organization,
        brand=brand,
        defaults={
            'order': (OrganizationBrand.objects.filter(organization=organization).aggregate(m=Max('order'))['m'] or 0) + 1,
            'color': color or brand.color,
        }
    )
    return association


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def quick_brand_model(request):
    """
    Get or create a brand and one of its models by name (case-insensitive)
    and associate the brand with the organization.
    """
    brand_name = normalize_name(request.data.get('brand_name'))
    model_name = normalize_name(request.data.get('model_name'))
    if not brand_name or not model_name:
        return Response({'error': 'Marca y modelo son requeridos.'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        brand = Brand.objects.filter(name__iexact=brand_name).first()
        brand_created = brand is None
        if brand_created:
            brand = Brand.objects.create(name=brand_name)

        model = MotorcycleModel.objects.filter(brand=brand, name__iexact=model_name).first()
        model_created = model is None
        if model_created:
            model = MotorcycleModel.objects.create(brand=brand, name=model_name)

        _associate_brand(request.user.organization, brand)

    logger.info(f"Quick brand/model: {brand.name} ({'new' if brand_created else 'existing'}) / "
                f"{model.name} ({'new' if model_created else 'existing'})")
    return Response({
        'brand': {'id': brand.id, 'name': brand.name, 'created': brand_created},
        'model': {'id': model.id, 'name': model.name, 'created': model_created},
    }, status=status.HTTP_201_CREATED if (brand_created or model_created) else status.HTTP_200_OK)


# Color views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
def color_list_create(request):
    """Global colors plus the organization's own colors"""
    organization = request.user.organization
    if request.method == 'GET':
        colors = Color.objects.filter(Q(organization=organization) | Q(organization__isnull=True))
        return Response(ColorSerializer(colors, many=True).data)

    serializer = ColorSerializer(data=request.data)
    if serializer.is_valid():
        name = normalize_name(serializer.validated_data['name'])
        if Color.objects.filter(organization=organization, name__iexact=name).exists():
            return Response({'error': 'Ya existe un color con ese nombre.'}, status=status.HTTP_400_BAD_REQUEST)
        next_order = (Color.objects.filter(organization=organization).aggregate(m=Max('order'))['m'] or 0) + 1
        color = serializer.save(organization=organization, name=name, order=next_order)
        return Response(ColorSerializer(color).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def color_detail(request, pk):
    """Organization colors can be edited; global colors are read-only"""
    organization = request.user.organization
    color = get_object_or_404(Color, Q(organization=organization) | Q(organization__isnull=True), pk=pk)

    if request.method == 'GET':
        return Response(ColorSerializer(color).data)

    if color.organization_id is None:
        return Response({'error': 'Los colores globales no pueden modificarse.'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = ColorSerializer(color, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    color.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Model file views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasOrganization])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def model_files(request, model_id):
    """List or upload files attached to a model"""
    organization = request.user.organization
    model = get_object_or_404(MotorcycleModel, pk=model_id)

    if request.method == 'GET':
        files = ModelFile.objects.filter(organization=organization, model=model)
        return Response(ModelFileSerializer(files, many=True).data)

    uploaded = request.FILES.get('file')
    if uploaded is None:
        return Response({'error': 'No se recibió ningún archivo.'}, status=status.HTTP_400_BAD_REQUEST)
    if uploaded.size > MAX_MODEL_FILE_SIZE:
        return Response({'error': 'El archivo supera el tamaño máximo de 20MB.'}, status=status.HTTP_400_BAD_REQUEST)

    blob_key = f"models/{organization.id}/{model.id}/{int(time.time() * 1000)}-{uploaded.name}"
    try:
        stored = upload_file(blob_key, uploaded)
    except BlobStorageError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    model_file = ModelFile.objects.create(
        organization=organization,
        model=model,
        name=uploaded.name,
        file_type=getattr(uploaded, 'content_type', '') or '',
        blob_key=stored['key'],
        url=stored['url'],
        size=uploaded.size,
        uploaded_by=request.user,
    )
    create_audit_log(request, 'create', 'ModelFile', model_file.id, object_name=model_file.name,
                     object_reference=str(model))
    return Response(ModelFileSerializer(model_file).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, HasOrganization])
def model_file_detail(request, model_id, file_id):
    model_file = get_object_or_404(ModelFile, pk=file_id, model_id=model_id, organization=request.user.organization)
    if not delete_blob(model_file.blob_key):
        logger.warning(f"Blob {model_file.blob_key} could not be removed, deleting record anyway")
    model_file.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
