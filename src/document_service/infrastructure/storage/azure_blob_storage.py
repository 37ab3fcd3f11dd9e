"""Azure Blob Storage Implementation

Async Azure Blob storage using ``azure.storage.blob.aio``. Each dossier gets
its own container, so no blob path can collide across dossiers. Pre-signed
URLs are SAS tokens signed with the account key from the connection string.
"""

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, BinaryIO, Dict, Optional

from azure.core.exceptions import HttpResponseError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobSasPermissions, ContentSettings, generate_blob_sas
from azure.storage.blob.aio import BlobServiceClient

from document_service.core.errors import StorageError
from document_service.infrastructure.storage.provider import (
    BlobPermission,
    BlobProperties,
    StorageProvider,
)

logger = logging.getLogger(__name__)


class AzureBlobStorage(StorageProvider):
    """Azure Blob storage provider with one container per dossier."""

    def __init__(self, connection_string: str = None, service_client: BlobServiceClient = None):
        """Initialize Azure Blob storage provider.

        Args:
            connection_string: Storage account connection string
                (falls back to AZURE_STORAGE_CONNECTION_STRING)
            service_client: Pre-built client (tests)

        Raises:
            ValueError: If neither a connection string nor a client is provided
        """
        if service_client is None:
            connection_string = connection_string or os.getenv("AZURE_STORAGE_CONNECTION_STRING")
            if not connection_string:
                raise ValueError(
                    "AZURE_STORAGE_CONNECTION_STRING environment variable or "
                    "connection_string parameter is required"
                )
            service_client = BlobServiceClient.from_connection_string(connection_string)

        self.service = service_client
        self.account_name = service_client.account_name

        logger.info(f"Azure Blob storage initialized - account: {self.account_name}")

    def _blob(self, container: str, blob_path: str):
        return self.service.get_blob_client(container=container, blob=blob_path)

    async def ensure_container(self, container: str) -> None:
        """Create the dossier container (private access) if absent"""
        try:
            await self.service.create_container(container)
            logger.info(f"Created blob container: {container}")
        except ResourceExistsError:
            pass
        except HttpResponseError as e:
            logger.error(f"Failed to create container {container}: {e}")
            raise StorageError("Failed to create blob container") from e

    async def upload(
        self,
        file_stream: BinaryIO,
        container: str,
        blob_path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
        content_disposition: Optional[str] = None,
    ) -> str:
        """Upload a block blob with content settings and metadata.

        Raises:
            StorageError: If upload fails
        """
        file_stream.seek(0)
        try:
            await self._blob(container, blob_path).upload_blob(
                file_stream,
                overwrite=True,
                content_settings=ContentSettings(
                    content_type=content_type,
                    content_disposition=content_disposition,
                ),
                metadata=metadata,
            )
            logger.info(f"Uploaded blob: {container}/{blob_path}")
            return blob_path

        except HttpResponseError as e:
            logger.error(f"Azure upload failed for {container}/{blob_path}: {e}")
            raise StorageError("Failed to upload blob") from e

    async def download_stream(self, container: str, blob_path: str) -> AsyncGenerator[bytes, None]:
        """Stream a blob in chunks.

        Raises:
            FileNotFoundError: If the blob does not exist
            StorageError: If download fails
        """
        try:
            downloader = await self._blob(container, blob_path).download_blob()
        except ResourceNotFoundError as e:
            logger.warning(f"Blob not found: {container}/{blob_path}")
            raise FileNotFoundError(f"{container}/{blob_path}") from e
        except HttpResponseError as e:
            logger.error(f"Azure download failed for {container}/{blob_path}: {e}")
            raise StorageError("Failed to download blob") from e

        async for chunk in downloader.chunks():
            yield chunk

    async def delete(self, container: str, blob_path: str) -> bool:
        """Delete a blob if it exists (delete-if-exists semantics)"""
        try:
            await self._blob(container, blob_path).delete_blob()
            logger.info(f"Deleted blob: {container}/{blob_path}")
            return True
        except ResourceNotFoundError:
            return False
        except HttpResponseError as e:
            logger.error(f"Azure delete failed for {container}/{blob_path}: {e}")
            raise StorageError("Failed to delete blob") from e

    async def generate_presigned_url(
        self,
        container: str,
        blob_path: str,
        expiration: int = 900,
        permission: BlobPermission = BlobPermission.READ,
    ) -> str:
        """Generate a SAS URL with read-only or write-only rights.

        Raises:
            StorageError: If the client has no account key to sign with
        """
        account_key = getattr(self.service.credential, "account_key", None)
        if not account_key:
            raise StorageError("SAS generation requires an account key credential")

        if BlobPermission(permission) is BlobPermission.WRITE:
            sas_permission = BlobSasPermissions(write=True, create=True)
        else:
            sas_permission = BlobSasPermissions(read=True)

        sas_token = generate_blob_sas(
            account_name=self.account_name,
            container_name=container,
            blob_name=blob_path,
            account_key=account_key,
            permission=sas_permission,
            expiry=datetime.now(timezone.utc) + timedelta(seconds=expiration),
        )
        url = f"{self._blob(container, blob_path).url}?{sas_token}"

        logger.debug(f"Generated SAS URL for {container}/{blob_path} (expires in {expiration}s)")
        return url

    async def file_exists(self, container: str, blob_path: str) -> bool:
        try:
            return await self._blob(container, blob_path).exists()
        except HttpResponseError as e:
            logger.error(f"Error checking blob existence for {container}/{blob_path}: {e}")
            raise StorageError("Failed to check blob existence") from e

    async def get_properties(self, container: str, blob_path: str) -> Optional[BlobProperties]:
        try:
            props = await self._blob(container, blob_path).get_blob_properties()
        except ResourceNotFoundError:
            return None
        except HttpResponseError as e:
            logger.error(f"Failed to read blob properties for {container}/{blob_path}: {e}")
            raise StorageError("Failed to read blob properties") from e

        return BlobProperties(
            size=props.size,
            content_type=props.content_settings.content_type,
            created_on=props.creation_time,
        )

    async def health_check(self) -> bool:
        """Check Azure storage health by reading account information."""
        try:
            await self.service.get_account_information()
            logger.debug("Azure Blob health check passed")
            return True
        except Exception as e:
            logger.error(f"Azure Blob health check failed: {e}")
            return False
