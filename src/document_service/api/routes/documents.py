"""
Document API Routes

Upload, list, download and delete dossier documents. Owners, shared users
and guests (within their permission) can list, upload and download; only
the owner can delete.
"""

import logging
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Request, UploadFile

from document_service.api.dependencies import (
    get_access_gate,
    get_audit_log,
    get_category_repository,
    get_document_repository,
    get_document_store,
    get_request_context,
)
from document_service.config.settings import settings
from document_service.core.access_control import AccessGate
from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.core.category_repository import DocumentCategorieRepository
from document_service.core.document_repository import DossierDocumentRepository
from document_service.core.document_store import DocumentStore
from document_service.core.errors import AuthorizationError, NotFoundError
from document_service.core.validation import validate_upload
from document_service.models import (
    DocumentListItem,
    DocumentListResponse,
    DocumentUploadResponse,
    DownloadUrlResponse,
    MessageResponse,
    Permission,
    RequestContext,
)

router = APIRouter(prefix="/api/v1/dossiers", tags=["documenten"])
logger = logging.getLogger(__name__)

AUTH_RESPONSES = {
    401: {"description": "No valid user session or guest token"},
    403: {"description": "Not allowed to access this dossier"},
}


@router.get(
    "/{dossier_id}/documenten",
    response_model=DocumentListResponse,
    summary="List Dossier Documents",
    description="""
Returns all active (not deleted) documents of a dossier with their category and uploader.

**Workflow**:
1. Authenticates the caller as guest (token) or user (X-User-ID)
2. Users need ownership or a sharing grant; guests need `view` permission on this dossier
3. Loads documents ordered by category, newest first
4. Records a `view` audit event

**Guest token transport**: `Authorization: Bearer <token>`, `X-Guest-Token` header or `?token=`
    """,
    responses={200: {"description": "Documents returned"}, **AUTH_RESPONSES},
)
async def list_documents(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    gate: AccessGate = Depends(get_access_gate),
    documents: DossierDocumentRepository = Depends(get_document_repository),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
) -> DocumentListResponse:
    """List documents"""
    actor = await gate.authenticate(request)
    await gate.require_dossier_access(actor, dossier_id, Permission.VIEW, context)

    items = await documents.find_by_dossier_id_with_categorie(dossier_id)
    await audit.log_view(dossier_id, actor, context, {"action": "list_documents"})

    return DocumentListResponse(
        documenten=[DocumentListItem.from_joined(item) for item in items],
        total=len(items),
    )


@router.post(
    "/{dossier_id}/documenten",
    response_model=DocumentUploadResponse,
    status_code=201,
    summary="Upload Document",
    description="""
Upload a document into a dossier category.

**Workflow**:
1. Authenticates and authorizes (guests need `upload` permission on this dossier)
2. Validates the category exists and is active
3. Validates extension, size and MIME type against the category
4. Writes the blob to `dossier-NNNNN/<category>/<uuid>.<ext>`
5. Creates the document record and records an `upload` audit event

**Request Format** (multipart/form-data):
- file: File upload (required)
- categorie_id: Document category ID (required)
    """,
    responses={
        201: {"description": "Document uploaded"},
        400: {"description": "Missing field or file rejected by category rules"},
        404: {"description": "Category not found or inactive"},
        **AUTH_RESPONSES,
    },
)
async def upload_document(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    file: Optional[UploadFile] = File(None, description="Document to upload"),
    categorie_id: Optional[str] = Form(None, description="Document category ID"),
    gate: AccessGate = Depends(get_access_gate),
    categories: DocumentCategorieRepository = Depends(get_category_repository),
    documents: DossierDocumentRepository = Depends(get_document_repository),
    store: DocumentStore = Depends(get_document_store),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
) -> DocumentUploadResponse:
    """Upload document"""
    actor = await gate.authenticate(request)
    await gate.require_dossier_access(actor, dossier_id, Permission.UPLOAD, context)

    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")
    if not categorie_id:
        raise HTTPException(status_code=400, detail="Category ID is required")
    try:
        categorie_id_value = int(categorie_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid category ID")

    categorie = await categories.find_by_id(categorie_id_value)
    if not categorie or not categorie.actief:
        raise HTTPException(status_code=404, detail="Category not found or inactive")

    file_content = await file.read()
    mime_type = file.content_type or "application/octet-stream"
    validate_upload(categorie, file.filename, len(file_content), mime_type)

    # Blob first, then metadata: a crash in between orphans a blob, never a record
    stored = await store.upload_document(
        dossier_id=dossier_id,
        category_name=categorie.naam,
        data=BytesIO(file_content),
        original_filename=file.filename,
        mime_type=mime_type,
        size=len(file_content),
    )
    document = await documents.create(
        dossier_id=dossier_id,
        categorie_id=categorie.id,
        blob_container=stored.container_name,
        blob_path=stored.blob_path,
        originele_bestandsnaam=file.filename,
        opgeslagen_bestandsnaam=stored.storage_filename,
        bestandsgrootte=stored.size,
        mime_type=mime_type,
        upload_ip=context.ip_adres,
        **actor.uploader_ids,
    )
    await audit.log_upload(
        dossier_id,
        document.id,
        actor,
        context,
        {
            "filename": file.filename,
            "size": stored.size,
            "mimeType": mime_type,
            "categorieId": categorie.id,
        },
    )

    logger.info(f"Document {document.id} uploaded to dossier {dossier_id}")
    return DocumentUploadResponse.from_document(document)


@router.get(
    "/{dossier_id}/documenten/{document_id}/download",
    response_model=DownloadUrlResponse,
    summary="Get Document Download URL",
    description="""
Returns a short-lived, read-only pre-signed URL for a document. File bytes are
never streamed through this endpoint.

**Workflow**:
1. Authenticates and authorizes (guests need `view` permission on this dossier)
2. Verifies the document exists, is not deleted and belongs to this dossier
3. Generates a pre-signed URL (default 15 minutes)
4. Records a `download` audit event
    """,
    responses={
        200: {"description": "Download URL generated"},
        404: {"description": "Document not found"},
        **AUTH_RESPONSES,
    },
)
async def get_download_url(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    document_id: int = Path(..., gt=0, description="Document ID"),
    gate: AccessGate = Depends(get_access_gate),
    documents: DossierDocumentRepository = Depends(get_document_repository),
    store: DocumentStore = Depends(get_document_store),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
) -> DownloadUrlResponse:
    """Generate download URL"""
    actor = await gate.authenticate(request)
    await gate.require_dossier_access(actor, dossier_id, Permission.VIEW, context)

    document = await documents.find_by_id(document_id)
    if not document:
        raise NotFoundError("Document", document_id)

    if document.dossier_id != dossier_id:
        await audit.log_access_denied(
            dossier_id,
            context,
            {
                "reason": "Document does not belong to dossier",
                "requestedDocumentId": document_id,
                "documentDossierId": document.dossier_id,
            },
            actor=actor,
        )
        raise AuthorizationError("document belongs to another dossier")

    expiry_minutes = settings.download_url_expiry_minutes
    signed = await store.generate_download_url(dossier_id, document.blob_path, expiry_minutes)
    await audit.log_download(dossier_id, document.id, actor, context)

    return DownloadUrlResponse(
        download_url=signed.url,
        filename=document.originele_bestandsnaam,
        mime_type=document.mime_type,
        size=document.bestandsgrootte,
        expires_in_minutes=expiry_minutes,
    )


@router.delete(
    "/{dossier_id}/documenten/{document_id}",
    response_model=MessageResponse,
    summary="Delete Document",
    description="""
Soft-deletes a document. The blob stays in storage for audit and recovery.

**Workflow**:
1. Authenticates the user (guest tokens are not accepted)
2. Requires dossier ownership; shared users are rejected
3. Verifies the document belongs to this dossier
4. Marks the record deleted and records a `delete` audit event
    """,
    responses={
        200: {"description": "Document deleted"},
        404: {"description": "Document not found or already deleted"},
        **AUTH_RESPONSES,
    },
)
async def delete_document(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    document_id: int = Path(..., gt=0, description="Document ID"),
    gate: AccessGate = Depends(get_access_gate),
    documents: DossierDocumentRepository = Depends(get_document_repository),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
) -> MessageResponse:
    """Delete document"""
    owner = await gate.require_owner(gate.authenticate_user(request), dossier_id, context)

    document = await documents.find_by_id(document_id)
    if not document or document.dossier_id != dossier_id:
        raise NotFoundError("Document", document_id)

    if not await documents.soft_delete(document_id):
        # Lost a race with a concurrent delete
        raise NotFoundError("Document", document_id)

    await audit.log_delete(
        dossier_id,
        document_id,
        owner,
        context,
        {
            "filename": document.originele_bestandsnaam,
            "blobPath": document.blob_path,
            "size": document.bestandsgrootte,
        },
    )

    logger.info(f"User {owner.user_id} deleted document {document_id} from dossier {dossier_id}")
    return MessageResponse(message="Document deleted successfully")
