"""Local Filesystem Storage Implementation

Async local file storage for development and self-hosted deployments.
Uses aiofiles for non-blocking I/O. Containers are directories under the
base path; pre-signed URLs are HMAC-signed links to the service's own
``/api/v1/storage`` route.
"""

import hashlib
import hmac
import json
import logging
import os
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator, BinaryIO, Callable, Dict, Optional
from urllib.parse import quote, urlencode

import aiofiles

from document_service.core.errors import DocumentValidationError, StorageError
from document_service.infrastructure.storage.provider import (
    BlobPermission,
    BlobProperties,
    StorageProvider,
)

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta.json"
CHUNK_SIZE = 65536


class LocalStorage(StorageProvider):
    """Local filesystem storage provider for development and self-hosted deployments.

    Uses aiofiles for async operations to avoid blocking the FastAPI event loop.
    Content type and metadata are kept in a JSON sidecar next to each blob.
    """

    def __init__(
        self,
        base_path: str = None,
        signing_key: str = None,
        url_prefix: str = "/api/v1/storage",
        clock: Callable[[], float] = time.time,
    ):
        """Initialize local storage provider.

        Args:
            base_path: Base directory for blob storage (default: ./data/uploads)
            signing_key: HMAC key for pre-signed URLs (random per process if unset)
            url_prefix: Route serving signed URLs
            clock: Wall clock in epoch seconds, used for URL expiry
        """
        if not base_path:
            base_path = os.getenv("STORAGE_LOCAL_PATH", "./data/uploads")

        signing_key = signing_key or os.getenv("STORAGE_SIGNING_KEY")
        if not signing_key:
            signing_key = secrets.token_hex(32)
            logger.warning("STORAGE_SIGNING_KEY not set, signed URLs will not survive a restart")

        self.base_path = Path(base_path).resolve()
        self.signing_key = signing_key.encode()
        self.url_prefix = url_prefix.rstrip("/")
        self.clock = clock

        # Ensure directory exists on startup
        self.base_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Local storage initialized at: {self.base_path}")

    def _get_path(self, container: str, blob_path: str = "") -> Path:
        """Resolve a container/blob path inside the base directory.

        Raises:
            DocumentValidationError: If the path escapes the base directory
        """
        # Security: Prevent directory traversal attacks (e.g., "../../etc/passwd")
        safe_path = (self.base_path / container / blob_path).resolve()

        if not safe_path.is_relative_to(self.base_path) or safe_path == self.base_path:
            logger.error(f"Path traversal attempt detected: {container}/{blob_path}")
            raise DocumentValidationError("Invalid file path")

        return safe_path

    def _meta_path(self, file_path: Path) -> Path:
        return file_path.with_name(file_path.name + META_SUFFIX)

    async def _read_meta(self, file_path: Path) -> Dict:
        meta_path = self._meta_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, "r") as meta_file:
            return json.loads(await meta_file.read())

    async def ensure_container(self, container: str) -> None:
        self._get_path(container).mkdir(parents=True, exist_ok=True)

    async def upload(
        self,
        file_stream: BinaryIO,
        container: str,
        blob_path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
        content_disposition: Optional[str] = None,
    ) -> str:
        """Write a blob and its metadata sidecar.

        Raises:
            StorageError: If the write fails
        """
        file_path = self._get_path(container, blob_path)

        # Ensure subdirectories exist
        file_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            # Reset stream pointer
            file_stream.seek(0)

            # Write file asynchronously in 64KB chunks
            async with aiofiles.open(file_path, "wb") as out_file:
                while content := file_stream.read(CHUNK_SIZE):
                    await out_file.write(content)

            meta = {
                "content_type": content_type,
                "content_disposition": content_disposition,
                "metadata": metadata or {},
                "created_on": datetime.now(timezone.utc).isoformat(),
            }
            async with aiofiles.open(self._meta_path(file_path), "w") as meta_file:
                await meta_file.write(json.dumps(meta))

            logger.info(f"Uploaded file to local storage: {file_path}")
            return blob_path

        except OSError as e:
            logger.error(f"Local upload failed for {container}/{blob_path}: {e}")
            raise StorageError("Local upload failed") from e

    async def download_stream(self, container: str, blob_path: str) -> AsyncGenerator[bytes, None]:
        """Stream a blob from the local filesystem.

        Raises:
            FileNotFoundError: If the blob does not exist
        """
        file_path = self._get_path(container, blob_path)

        if not file_path.is_file():
            logger.warning(f"File not found in local storage: {container}/{blob_path}")
            raise FileNotFoundError(f"{container}/{blob_path}")

        async with aiofiles.open(file_path, "rb") as in_file:
            while chunk := await in_file.read(CHUNK_SIZE):
                yield chunk

        logger.debug(f"Streamed file from local storage: {file_path}")

    async def delete(self, container: str, blob_path: str) -> bool:
        """Delete a blob and its sidecar if present.

        Note:
            Attempts to clean up the empty category directory
        """
        file_path = self._get_path(container, blob_path)

        if not file_path.is_file():
            return False

        try:
            os.remove(file_path)
            meta_path = self._meta_path(file_path)
            if meta_path.exists():
                os.remove(meta_path)
            logger.info(f"Deleted file from local storage: {file_path}")
        except OSError as e:
            logger.error(f"Failed to delete file {container}/{blob_path}: {e}")
            raise StorageError("Local delete failed") from e

        # Clean up empty directories (best effort)
        try:
            file_path.parent.rmdir()
        except OSError:
            # Directory not empty, that's fine
            pass

        return True

    def _signature(self, container: str, blob_path: str, expires: int, permission: str) -> str:
        message = f"{container}/{blob_path}:{expires}:{permission}".encode()
        return hmac.new(self.signing_key, message, hashlib.sha256).hexdigest()

    async def generate_presigned_url(
        self,
        container: str,
        blob_path: str,
        expiration: int = 900,
        permission: BlobPermission = BlobPermission.READ,
    ) -> str:
        """Generate an HMAC-signed URL served by the storage route.

        Returns:
            Relative URL of the form
            ``/api/v1/storage/{container}/{blob_path}?expires=..&permission=..&signature=..``
        """
        self._get_path(container, blob_path)

        permission = BlobPermission(permission).value
        expires = int(self.clock()) + expiration
        query = urlencode(
            {
                "expires": expires,
                "permission": permission,
                "signature": self._signature(container, blob_path, expires, permission),
            }
        )
        url = f"{self.url_prefix}/{quote(container)}/{quote(blob_path)}?{query}"

        logger.debug(f"Generated local {permission} URL for {container}/{blob_path} (expires in {expiration}s)")
        return url

    def verify_signature(
        self,
        container: str,
        blob_path: str,
        expires: int,
        permission: str,
        signature: str,
    ) -> bool:
        """Check a signed URL: signature matches and it has not expired"""
        if int(self.clock()) > expires:
            return False
        expected = self._signature(container, blob_path, expires, permission)
        return hmac.compare_digest(expected, signature)

    async def file_exists(self, container: str, blob_path: str) -> bool:
        try:
            return self._get_path(container, blob_path).is_file()
        except DocumentValidationError:
            # Path traversal attempt
            return False

    async def get_properties(self, container: str, blob_path: str) -> Optional[BlobProperties]:
        file_path = self._get_path(container, blob_path)
        if not file_path.is_file():
            return None

        meta = await self._read_meta(file_path)
        created_on = meta.get("created_on")
        return BlobProperties(
            size=file_path.stat().st_size,
            content_type=meta.get("content_type"),
            created_on=datetime.fromisoformat(created_on) if created_on else None,
        )

    async def get_content_disposition(self, container: str, blob_path: str) -> Optional[str]:
        """Content-Disposition stored at upload time, used when serving signed URLs"""
        meta = await self._read_meta(self._get_path(container, blob_path))
        return meta.get("content_disposition")

    async def health_check(self) -> bool:
        """Check local storage health by verifying write access.

        Returns:
            True if storage is writable, False otherwise
        """
        try:
            # Verify base directory is writable
            test_file = self.base_path / ".health_check"
            test_file.touch()
            test_file.unlink()

            logger.debug(f"Local storage health check passed: {self.base_path}")
            return True

        except OSError as e:
            logger.error(f"Local storage health check failed: {e}")
            return False
