"""S3/MinIO Storage Implementation

Production-ready S3-compatible storage using aioboto3 for non-blocking async I/O.
Supports AWS S3 and self-hosted MinIO. All dossiers share one bucket; a
dossier container maps to a key prefix.
"""

import logging
import os
from typing import AsyncGenerator, BinaryIO, Dict, Optional

import aioboto3
from botocore.exceptions import ClientError

from document_service.core.errors import StorageError
from document_service.infrastructure.storage.provider import (
    BlobPermission,
    BlobProperties,
    StorageProvider,
)

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3Storage(StorageProvider):
    """S3/MinIO storage provider for production deployments.

    Uses aioboto3 for async operations to avoid blocking the FastAPI event loop.
    Supports both AWS S3 and self-hosted MinIO via endpoint_url configuration.
    """

    def __init__(
        self,
        bucket_name: str = None,
        region: str = None,
        endpoint_url: str = None,
        access_key: str = None,
        secret_key: str = None
    ):
        """Initialize S3 storage provider.

        Args:
            bucket_name: S3 bucket name (required)
            region: AWS region (default: eu-west-1)
            endpoint_url: Custom S3 endpoint for MinIO/LocalStack (optional)
            access_key: AWS access key ID (optional, falls back to env)
            secret_key: AWS secret access key (optional, falls back to env)

        Raises:
            ValueError: If bucket_name is not provided
        """
        self.bucket_name = bucket_name or os.getenv("S3_BUCKET_NAME")
        self.region = region or os.getenv("S3_REGION", "eu-west-1")
        self.endpoint_url = endpoint_url or os.getenv("S3_ENDPOINT_URL")
        self.access_key = access_key or os.getenv("AWS_ACCESS_KEY_ID")
        self.secret_key = secret_key or os.getenv("AWS_SECRET_ACCESS_KEY")

        if not self.bucket_name:
            raise ValueError(
                "S3_BUCKET_NAME environment variable or bucket_name parameter is required"
            )

        # Create aioboto3 session
        self.session = aioboto3.Session(
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region
        )

        logger.info(
            f"S3 storage initialized - bucket: {self.bucket_name}, "
            f"region: {self.region}, "
            f"endpoint: {self.endpoint_url or 'AWS'}"
        )

    def _client(self):
        return self.session.client("s3", region_name=self.region, endpoint_url=self.endpoint_url)

    def _build_key(self, container: str, blob_path: str) -> str:
        """Build the S3 object key: ``{container}/{blob_path}``"""
        return f"{container}/{blob_path.lstrip('/')}"

    async def ensure_container(self, container: str) -> None:
        # Containers are key prefixes in the shared bucket
        return None

    async def upload(
        self,
        file_stream: BinaryIO,
        container: str,
        blob_path: str,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
        content_disposition: Optional[str] = None,
    ) -> str:
        """Upload a blob to the S3 bucket.

        Raises:
            StorageError: If upload fails
        """
        key = self._build_key(container, blob_path)
        extra_args = {"ContentType": content_type}
        if metadata:
            extra_args["Metadata"] = metadata
        if content_disposition:
            extra_args["ContentDisposition"] = content_disposition

        try:
            async with self._client() as s3:
                # Reset stream pointer
                file_stream.seek(0)

                await s3.upload_fileobj(file_stream, self.bucket_name, key, ExtraArgs=extra_args)

                logger.info(f"Uploaded file to S3: s3://{self.bucket_name}/{key}")
                return blob_path

        except ClientError as e:
            logger.error(f"S3 upload failed (error: {_error_code(e)}): {e}")
            raise StorageError(f"S3 upload failed: {_error_code(e)}") from e

    async def download_stream(self, container: str, blob_path: str) -> AsyncGenerator[bytes, None]:
        """Stream a blob from S3.

        Raises:
            FileNotFoundError: If the blob does not exist
            StorageError: If download fails
        """
        key = self._build_key(container, blob_path)
        async with self._client() as s3:
            try:
                response = await s3.get_object(Bucket=self.bucket_name, Key=key)

                # Stream the response body
                async for chunk in response["Body"].iter_chunks(chunk_size=65536):
                    yield chunk

                logger.debug(f"Streamed file from S3: s3://{self.bucket_name}/{key}")

            except ClientError as e:
                if _error_code(e) in NOT_FOUND_CODES:
                    logger.warning(f"File not found in S3: {key}")
                    raise FileNotFoundError(key) from e
                logger.error(f"S3 download failed (error: {_error_code(e)}): {e}")
                raise StorageError(f"S3 download failed: {_error_code(e)}") from e

    async def delete(self, container: str, blob_path: str) -> bool:
        """Delete a blob from S3 if it exists.

        Note:
            S3 delete_object succeeds even if the object doesn't exist, so
            existence is checked first to report whether anything was removed
        """
        if not await self.file_exists(container, blob_path):
            return False

        key = self._build_key(container, blob_path)
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=self.bucket_name, Key=key)
                logger.info(f"Deleted file from S3: s3://{self.bucket_name}/{key}")
                return True

        except ClientError as e:
            logger.error(f"S3 delete failed for {key}: {e}")
            raise StorageError(f"S3 delete failed: {_error_code(e)}") from e

    async def generate_presigned_url(
        self,
        container: str,
        blob_path: str,
        expiration: int = 900,
        permission: BlobPermission = BlobPermission.READ,
    ) -> str:
        """Generate a presigned GET (read) or PUT (write) URL.

        Raises:
            StorageError: If URL generation fails
        """
        key = self._build_key(container, blob_path)
        operation = "put_object" if BlobPermission(permission) is BlobPermission.WRITE else "get_object"

        try:
            async with self._client() as s3:
                url = await s3.generate_presigned_url(
                    operation,
                    Params={"Bucket": self.bucket_name, "Key": key},
                    ExpiresIn=expiration
                )

                logger.debug(f"Generated presigned {operation} URL for {key} (expires in {expiration}s)")
                return url

        except ClientError as e:
            logger.error(f"Failed to generate presigned URL for {key}: {e}")
            raise StorageError("Could not generate signed URL") from e

    async def _head(self, container: str, blob_path: str) -> Optional[Dict]:
        key = self._build_key(container, blob_path)
        try:
            async with self._client() as s3:
                return await s3.head_object(Bucket=self.bucket_name, Key=key)

        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return None
            logger.error(f"Error reading object metadata for {key}: {e}")
            raise StorageError(f"S3 head_object failed: {_error_code(e)}") from e

    async def file_exists(self, container: str, blob_path: str) -> bool:
        return await self._head(container, blob_path) is not None

    async def get_properties(self, container: str, blob_path: str) -> Optional[BlobProperties]:
        head = await self._head(container, blob_path)
        if head is None:
            return None
        return BlobProperties(
            size=head.get("ContentLength", 0),
            content_type=head.get("ContentType"),
            created_on=head.get("LastModified"),
        )

    async def health_check(self) -> bool:
        """Check S3 storage health by verifying bucket access.

        Returns:
            True if S3 is accessible and bucket exists, False otherwise
        """
        try:
            async with self._client() as s3:
                # Try to list objects (limit 1) to verify access
                await s3.list_objects_v2(Bucket=self.bucket_name, MaxKeys=1)
                logger.debug(f"S3 health check passed for bucket: {self.bucket_name}")
                return True

        except Exception as e:
            logger.error(f"S3 health check failed: {e}")
            return False
