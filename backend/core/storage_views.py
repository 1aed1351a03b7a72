import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .blob_storage import BlobStorageError, get_signed_url, DEFAULT_SAS_EXPIRY_MINUTES
from .permissions import HasOrganization

logger = logging.getLogger('backend.core')

PETTY_CASH_PREFIX = 'uploads/tickets/petty-cash/'


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasOrganization])
def signed_url(request):
    """Time-limited read URL for an uploaded file"""
    key = request.query_params.get('key', '').strip()
    if not key:
        return Response({'error': 'El parámetro key es requerido.'}, status=status.HTTP_400_BAD_REQUEST)

    # Petty cash tickets are namespaced by organization id
    if key.startswith(PETTY_CASH_PREFIX):
        org_segment = key[len(PETTY_CASH_PREFIX):].split('/', 1)[0]
        if org_segment != str(request.user.organization_id):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    try:
        expires_in = int(request.query_params.get('expires_in', DEFAULT_SAS_EXPIRY_MINUTES))
    except (TypeError, ValueError):
        expires_in = DEFAULT_SAS_EXPIRY_MINUTES

    try:
        url = get_signed_url(key, expiry_minutes=expires_in)
    except BlobStorageError as e:
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({'url': url, 'key': key, 'expires_in_minutes': expires_in})
