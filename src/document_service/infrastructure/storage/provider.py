"""Storage Provider Interface

Abstract base class defining the contract for blob storage implementations.
Every dossier gets its own container; blobs inside it are addressed by a
category-scoped path. Supports local filesystem (development/self-hosted),
S3/MinIO and Azure Blob Storage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import AsyncGenerator, BinaryIO, Dict, Optional


class BlobPermission(str, Enum):
    """Capability granted by a pre-signed URL"""
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class BlobProperties:
    """Stored object metadata"""
    size: int
    content_type: Optional[str]
    created_on: Optional[datetime]


class StorageProvider(ABC):
    """Abstract storage provider interface for deployment-neutral blob storage."""

    @abstractmethod
    async def ensure_container(self, container: str) -> None:
        """Create the container if it does not exist yet.

        Args:
            container: Container name (one per dossier)
        """
        pass

    @abstractmethod
    async def upload(
        self,
        file_stream: BinaryIO,
        container: str,
        blob_path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
        content_disposition: Optional[str] = None,
    ) -> str:
        """Upload a blob, overwriting any existing blob at the same path.

        Args:
            file_stream: Binary file stream (SpooledTemporaryFile or similar)
            container: Container name
            blob_path: Path inside the container (e.g., "bewijs/<uuid>.pdf")
            content_type: MIME type (e.g., "application/pdf")
            metadata: String metadata stored with the blob
            content_disposition: Content-Disposition served on download

        Returns:
            The blob path

        Raises:
            StorageError: If upload fails
        """
        pass

    @abstractmethod
    async def download_stream(self, container: str, blob_path: str) -> AsyncGenerator[bytes, None]:
        """Stream blob content as bytes.

        Yields:
            Chunks of file bytes

        Raises:
            FileNotFoundError: If the blob doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, container: str, blob_path: str) -> bool:
        """Delete a blob if it exists.

        Returns:
            True if a blob was deleted, False if there was nothing to delete
        """
        pass

    @abstractmethod
    async def generate_presigned_url(
        self,
        container: str,
        blob_path: str,
        expiration: int = 900,
        permission: BlobPermission = BlobPermission.READ,
    ) -> str:
        """Generate a time-limited URL for direct blob access.

        Read URLs let the client download without proxying bytes through the
        service. Write URLs let the client upload directly.

        Args:
            container: Container name
            blob_path: Path inside the container
            expiration: URL lifetime in seconds (default: 15 minutes)
            permission: Read-only or write-only access

        Returns:
            Presigned URL string

        Raises:
            StorageError: If URL generation fails
        """
        pass

    @abstractmethod
    async def file_exists(self, container: str, blob_path: str) -> bool:
        """Check if a blob exists."""
        pass

    @abstractmethod
    async def get_properties(self, container: str, blob_path: str) -> Optional[BlobProperties]:
        """Return blob size, content type and creation time, or None if absent."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if storage backend is healthy and accessible.

        Returns:
            True if storage is healthy, False otherwise
        """
        pass
