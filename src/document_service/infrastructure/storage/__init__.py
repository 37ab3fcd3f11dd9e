"""Storage infrastructure module.

Provides deployment-neutral blob storage via the StorageProvider interface.
"""

from document_service.infrastructure.storage.factory import get_storage_provider, reset_storage_provider
from document_service.infrastructure.storage.provider import BlobPermission, BlobProperties, StorageProvider
from document_service.infrastructure.storage.local_storage import LocalStorage
from document_service.infrastructure.storage.s3_storage import S3Storage
from document_service.infrastructure.storage.azure_blob_storage import AzureBlobStorage

__all__ = [
    "get_storage_provider",
    "reset_storage_provider",
    "BlobPermission",
    "BlobProperties",
    "StorageProvider",
    "LocalStorage",
    "S3Storage",
    "AzureBlobStorage",
]
