"""
Document Store

Blob layer for dossier documents. Every dossier has its own container
(``dossier-00042``); blobs are stored under a sanitized category folder with
a random filename, so user-supplied names never reach storage paths.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from io import BytesIO
from typing import BinaryIO, Optional, Union
from urllib.parse import quote
from uuid import uuid4

from document_service.core.clock import Clock, utcnow
from document_service.core.errors import NotFoundError
from document_service.core.validation import get_file_extension
from document_service.infrastructure.storage import BlobPermission, BlobProperties, StorageProvider

logger = logging.getLogger(__name__)

DEFAULT_URL_EXPIRY_MINUTES = 15
FALLBACK_CATEGORY_FOLDER = "overig"


@dataclass(frozen=True)
class UploadResult:
    """Where an uploaded blob landed"""
    container_name: str
    blob_path: str
    storage_filename: str
    size: int


@dataclass(frozen=True)
class SignedUrl:
    url: str
    expires_at: datetime


def container_name(dossier_id: int) -> str:
    """Deterministic per-dossier container name, zero-padded to five digits"""
    return f"dossier-{dossier_id:05d}"


def generate_storage_filename(original_filename: str) -> str:
    """Random UUID filename keeping the original (lowercased) extension"""
    extension = get_file_extension(original_filename)
    name = str(uuid4())
    return f"{name}.{extension}" if extension else name


def sanitize_category_name(category_name: str) -> str:
    folder = re.sub(r"[^a-z0-9-]", "-", category_name.lower())
    folder = re.sub(r"-+", "-", folder).strip("-")
    return folder or FALLBACK_CATEGORY_FOLDER


def generate_blob_path(category_name: str, storage_filename: str) -> str:
    """``{sanitized-category}/{storage_filename}``"""
    return f"{sanitize_category_name(category_name)}/{storage_filename}"


class DocumentStore:
    """Dossier-scoped operations on top of a StorageProvider"""

    def __init__(self, storage: StorageProvider, clock: Clock = utcnow):
        self.storage = storage
        self.clock = clock

    async def upload_document(
        self,
        dossier_id: int,
        category_name: str,
        data: Union[bytes, BinaryIO],
        original_filename: str,
        mime_type: str,
        size: Optional[int] = None,
    ) -> UploadResult:
        """
        Write a document blob into the dossier container.

        Args:
            dossier_id: Owning dossier
            category_name: Category display name, used as folder
            data: File bytes or a seekable binary stream
            original_filename: Client filename, stored only as metadata
            mime_type: Content type to serve the blob with
            size: Size in bytes (required when ``data`` is a stream)

        Returns:
            Container, blob path, storage filename and size for the record store
        """
        if isinstance(data, (bytes, bytearray)):
            size = len(data)
            data = BytesIO(data)
        elif size is None:
            raise ValueError("size is required when uploading from a stream")

        container = container_name(dossier_id)
        storage_filename = generate_storage_filename(original_filename)
        blob_path = generate_blob_path(category_name, storage_filename)
        encoded_name = quote(original_filename, safe="")

        await self.storage.ensure_container(container)
        await self.storage.upload(
            file_stream=data,
            container=container,
            blob_path=blob_path,
            content_type=mime_type,
            metadata={
                "originalFilename": encoded_name,
                "uploadedAt": self.clock().isoformat() + "Z",
            },
            content_disposition=f'attachment; filename="{encoded_name}"',
        )

        logger.info(f"Stored document blob {container}/{blob_path} ({size} bytes)")
        return UploadResult(
            container_name=container,
            blob_path=blob_path,
            storage_filename=storage_filename,
            size=size,
        )

    async def generate_download_url(
        self,
        dossier_id: int,
        blob_path: str,
        expires_in_minutes: int = DEFAULT_URL_EXPIRY_MINUTES,
    ) -> SignedUrl:
        """
        Read-only pre-signed URL for a document blob.

        Raises:
            NotFoundError: If the blob is missing from storage
            StorageError: If the storage backend cannot answer
        """
        container = container_name(dossier_id)
        if not await self.storage.file_exists(container, blob_path):
            logger.warning(f"Download requested for missing blob {container}/{blob_path}")
            raise NotFoundError("Document")

        url = await self.storage.generate_presigned_url(
            container, blob_path, expires_in_minutes * 60, BlobPermission.READ
        )
        return SignedUrl(url=url, expires_at=self.clock() + timedelta(minutes=expires_in_minutes))

    async def generate_upload_url(
        self,
        dossier_id: int,
        blob_path: str,
        expires_in_minutes: int = DEFAULT_URL_EXPIRY_MINUTES,
    ) -> SignedUrl:
        """Write-only pre-signed URL for a direct client upload"""
        container = container_name(dossier_id)
        await self.storage.ensure_container(container)
        url = await self.storage.generate_presigned_url(
            container, blob_path, expires_in_minutes * 60, BlobPermission.WRITE
        )
        return SignedUrl(url=url, expires_at=self.clock() + timedelta(minutes=expires_in_minutes))

    async def delete_blob(self, dossier_id: int, blob_path: str) -> bool:
        """Delete-if-exists. Never called by document soft delete."""
        return await self.storage.delete(container_name(dossier_id), blob_path)

    async def blob_exists(self, dossier_id: int, blob_path: str) -> bool:
        return await self.storage.file_exists(container_name(dossier_id), blob_path)

    async def get_blob_properties(self, dossier_id: int, blob_path: str) -> Optional[BlobProperties]:
        return await self.storage.get_properties(container_name(dossier_id), blob_path)
