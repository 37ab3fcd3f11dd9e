"""Storage Provider Factory

Factory pattern for deployment-neutral storage selection.
Chooses between local filesystem, S3 and Azure Blob based on the
STORAGE_PROVIDER env var.
"""

import logging
import os
from typing import Optional

from document_service.infrastructure.storage.provider import StorageProvider
from document_service.infrastructure.storage.local_storage import LocalStorage
from document_service.infrastructure.storage.s3_storage import S3Storage
from document_service.infrastructure.storage.azure_blob_storage import AzureBlobStorage

logger = logging.getLogger(__name__)

# Singleton instance to avoid recreating sessions
_storage_instance: Optional[StorageProvider] = None


def get_storage_provider() -> StorageProvider:
    """Get or create the global storage provider instance.

    Uses STORAGE_PROVIDER environment variable to determine provider type:
    - "local" (default): Local filesystem storage with signed URLs
    - "s3": AWS S3 or MinIO storage
    - "azure": Azure Blob Storage, one container per dossier

    Returns:
        StorageProvider instance

    Environment Variables:
        STORAGE_PROVIDER: "local", "s3" or "azure" (default: "local")

        For local storage:
            STORAGE_LOCAL_PATH: Base directory (default: "./data/uploads")
            STORAGE_SIGNING_KEY: HMAC key for signed download URLs

        For S3 storage:
            S3_BUCKET_NAME: S3 bucket name (required)
            S3_REGION: AWS region (default: "eu-west-1")
            S3_ENDPOINT_URL: Custom endpoint for MinIO/LocalStack (optional)
            AWS_ACCESS_KEY_ID: AWS access key (optional, uses boto3 defaults)
            AWS_SECRET_ACCESS_KEY: AWS secret key (optional, uses boto3 defaults)

        For Azure storage:
            AZURE_STORAGE_CONNECTION_STRING: Account connection string (required)

    Example:
        ```python
        # Development (docker-compose)
        STORAGE_PROVIDER=local
        STORAGE_LOCAL_PATH=/data/uploads

        # Production on Azure
        STORAGE_PROVIDER=azure
        AZURE_STORAGE_CONNECTION_STRING=DefaultEndpointsProtocol=https;AccountName=...;AccountKey=...

        # Self-hosted with MinIO
        STORAGE_PROVIDER=s3
        S3_BUCKET_NAME=documenten
        S3_ENDPOINT_URL=http://minio:9000
        ```
    """
    global _storage_instance

    if _storage_instance is not None:
        return _storage_instance

    provider_type = os.getenv("STORAGE_PROVIDER", "local").lower()

    logger.info(f"Initializing storage provider: {provider_type}")

    if provider_type == "s3":
        bucket_name = os.getenv("S3_BUCKET_NAME")
        endpoint_url = os.getenv("S3_ENDPOINT_URL")

        _storage_instance = S3Storage(
            bucket_name=bucket_name,
            region=os.getenv("S3_REGION", "eu-west-1"),
            endpoint_url=endpoint_url,
            access_key=os.getenv("AWS_ACCESS_KEY_ID"),
            secret_key=os.getenv("AWS_SECRET_ACCESS_KEY")
        )

        logger.info(
            f"S3 storage provider initialized: "
            f"bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS'}"
        )

    elif provider_type == "azure":
        _storage_instance = AzureBlobStorage(
            connection_string=os.getenv("AZURE_STORAGE_CONNECTION_STRING")
        )

        logger.info("Azure Blob storage provider initialized")

    else:
        # Local filesystem storage for development and self-hosted
        local_path = os.getenv("STORAGE_LOCAL_PATH", "./data/uploads")

        _storage_instance = LocalStorage(
            base_path=local_path,
            signing_key=os.getenv("STORAGE_SIGNING_KEY"),
        )

        logger.info(f"Local storage provider initialized: path={local_path}")

    return _storage_instance


def reset_storage_provider():
    """Reset the global storage provider instance.

    Used for testing or reconfiguration. Should not be called in production code.
    """
    global _storage_instance
    _storage_instance = None
    logger.warning("Storage provider instance reset")
