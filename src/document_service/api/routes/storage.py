"""
Signed Storage Routes

Serves HMAC-signed blob URLs issued by the local storage provider. Cloud
providers (S3, Azure) hand out their own pre-signed URLs, so these routes
return 404 when another provider is configured.
"""

import logging
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from fastapi.responses import StreamingResponse

from document_service.infrastructure.storage import (
    BlobPermission,
    LocalStorage,
    StorageProvider,
    get_storage_provider,
)

router = APIRouter(prefix="/api/v1/storage", tags=["storage"])
logger = logging.getLogger(__name__)


def _require_signed(
    storage: StorageProvider,
    container: str,
    blob_path: str,
    expires: int,
    permission: str,
    signature: str,
    expected: BlobPermission,
) -> LocalStorage:
    if not isinstance(storage, LocalStorage):
        raise HTTPException(status_code=404, detail="Not found")
    if permission != expected.value or not storage.verify_signature(
        container, blob_path, expires, permission, signature
    ):
        logger.warning(f"Rejected signed URL for {container}/{blob_path}")
        raise HTTPException(status_code=403, detail="Invalid or expired signature")
    return storage


@router.get(
    "/{container}/{blob_path:path}",
    summary="Download Signed Blob",
    description="""
Streams a blob addressed by a read URL from the document download endpoint.

**Query Parameters**: `expires` (epoch seconds), `permission` (`read`), `signature` (HMAC-SHA256)

The response carries the content type and `Content-Disposition: attachment`
stored at upload time.

**Authorization**: The signature itself; no session or guest token
    """,
    responses={
        200: {"description": "Blob content streamed"},
        403: {"description": "Signature invalid or expired"},
        404: {"description": "Blob not found"},
    },
)
async def download_signed_blob(
    container: str = Path(..., description="Storage container"),
    blob_path: str = Path(..., description="Blob path inside the container"),
    expires: int = Query(...),
    permission: str = Query(...),
    signature: str = Query(...),
    storage: StorageProvider = Depends(get_storage_provider),
) -> StreamingResponse:
    """Serve a signed read URL"""
    local = _require_signed(
        storage, container, blob_path, expires, permission, signature, BlobPermission.READ
    )

    properties = await local.get_properties(container, blob_path)
    if properties is None:
        raise HTTPException(status_code=404, detail="Blob not found")

    headers = {}
    disposition = await local.get_content_disposition(container, blob_path)
    if disposition:
        headers["Content-Disposition"] = disposition

    return StreamingResponse(
        local.download_stream(container, blob_path),
        media_type=properties.content_type or "application/octet-stream",
        headers=headers,
    )


@router.put(
    "/{container}/{blob_path:path}",
    status_code=201,
    summary="Upload Signed Blob",
    description="""
Accepts the raw request body as blob content for a write URL issued for
direct uploads. The `Content-Type` header is stored with the blob.

**Query Parameters**: `expires`, `permission` (`write`), `signature`

**Authorization**: The signature itself; no session or guest token
    """,
    responses={
        201: {"description": "Blob stored"},
        403: {"description": "Signature invalid or expired"},
        404: {"description": "Signed URLs not served by this provider"},
    },
)
async def upload_signed_blob(
    request: Request,
    container: str = Path(..., description="Storage container"),
    blob_path: str = Path(..., description="Blob path inside the container"),
    expires: int = Query(...),
    permission: str = Query(...),
    signature: str = Query(...),
    storage: StorageProvider = Depends(get_storage_provider),
) -> dict:
    """Serve a signed write URL"""
    local = _require_signed(
        storage, container, blob_path, expires, permission, signature, BlobPermission.WRITE
    )

    body = await request.body()
    await local.ensure_container(container)
    await local.upload(
        file_stream=BytesIO(body),
        container=container,
        blob_path=blob_path,
        content_type=request.headers.get("content-type", "application/octet-stream"),
    )
    return {"container": container, "blob_path": blob_path, "size": len(body)}
