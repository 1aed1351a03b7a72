"""
Azure Blob Storage helpers for uploaded files (petty cash tickets, model files).
Blobs are private; readers get time-limited SAS URLs.
"""
import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobSasPermissions, BlobServiceClient, ContentSettings, generate_blob_sas
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_SAS_EXPIRY_MINUTES = 60


class BlobStorageError(Exception):
    pass


def _setting(name, default=''):
    return getattr(settings, name, os.getenv(name, default))


def account_name():
    return _setting('AZURE_STORAGE_ACCOUNT_NAME')


def account_key():
    return _setting('AZURE_STORAGE_ACCOUNT_KEY')


def container_name():
    return _setting('AZURE_STORAGE_CONTAINER', 'dealership-files')


def is_configured():
    return bool(account_name() and account_key())


def get_blob_service_client():
    if not is_configured():
        raise BlobStorageError('Azure Storage no está configurado.')
    connection_string = (
        f"DefaultEndpointsProtocol=https;AccountName={account_name()};"
        f"AccountKey={account_key()};EndpointSuffix=core.windows.net"
    )
    return BlobServiceClient.from_connection_string(connection_string)


def build_blob_url(blob_name: str) -> str:
    # Keep forward slashes, they are path separators in Azure
    encoded_blob_name = quote(blob_name, safe='/')
    return f"https://{account_name()}.blob.core.windows.net/{container_name()}/{encoded_blob_name}"


def generate_read_sas(blob_name: str, expiry_minutes: int = DEFAULT_SAS_EXPIRY_MINUTES) -> str:
    expiry_time = datetime.now(timezone.utc) + timedelta(minutes=expiry_minutes)
    return generate_blob_sas(
        account_name=account_name(),
        container_name=container_name(),
        blob_name=blob_name,
        account_key=account_key(),
        permission=BlobSasPermissions(read=True),
        expiry=expiry_time,
    )


def get_signed_url(blob_name: str, expiry_minutes: int = DEFAULT_SAS_EXPIRY_MINUTES) -> str:
    """Blob URL carrying a read-only SAS token"""
    if not is_configured():
        raise BlobStorageError('Azure Storage no está configurado.')
    base_url = build_blob_url(blob_name)
    if not _setting('AZURE_USE_SAS_TOKENS', True):
        return base_url
    return f"{base_url}?{generate_read_sas(blob_name, expiry_minutes)}"


def upload_bytes(blob_name: str, data: bytes, content_type: Optional[str] = None) -> dict:
    """
    Upload raw bytes under blob_name (overwriting).

    Returns:
        {'key': blob_name, 'url': unsigned blob URL}
    """
    service_client = get_blob_service_client()
    blob_client = service_client.get_blob_client(container=container_name(), blob=blob_name)
    content_settings = ContentSettings(content_type=content_type) if content_type else None
    try:
        blob_client.upload_blob(data, overwrite=True, content_settings=content_settings)
    except Exception as e:
        logger.error(f"Failed to upload blob {blob_name}: {str(e)}", exc_info=True)
        raise BlobStorageError(f'No se pudo subir el archivo: {str(e)}') from e
    logger.info(f"Uploaded blob {blob_name} ({len(data)} bytes)")
    return {'key': blob_name, 'url': build_blob_url(blob_name)}


def upload_file(blob_name: str, uploaded_file) -> dict:
    """Upload a Django UploadedFile"""
    return upload_bytes(blob_name, uploaded_file.read(), getattr(uploaded_file, 'content_type', None))


def delete_blob(blob_name: str) -> bool:
    """Delete a blob; a missing blob counts as deleted"""
    if not is_configured():
        return False
    try:
        service_client = get_blob_service_client()
        service_client.get_blob_client(container=container_name(), blob=blob_name).delete_blob()
        return True
    except ResourceNotFoundError:
        return True
    except Exception as e:
        logger.warning(f"Could not delete blob {blob_name}: {str(e)}")
        return False
