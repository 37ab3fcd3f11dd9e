"""
Audit API Routes

Read-only view of a dossier's document audit trail for its owner.
"""

from fastapi import APIRouter, Depends, Path, Query, Request

from document_service.api.dependencies import get_access_gate, get_audit_log, get_request_context
from document_service.config.settings import settings
from document_service.core.access_control import AccessGate
from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.models import AuditLogResponse, RequestContext

router = APIRouter(prefix="/api/v1/dossiers", tags=["audit"])


@router.get(
    "/{dossier_id}/audit-log",
    response_model=AuditLogResponse,
    summary="Get Dossier Audit Log",
    description="""
Returns a newest-first page of the dossier's audit trail (uploads, downloads,
deletes, guest invitations and revocations, guest access, denied access)
plus activity counts for the last `days` days.

**Authorization**: Dossier owner only (X-User-ID)
    """,
    responses={
        200: {"description": "Audit entries returned"},
        401: {"description": "No valid user session"},
        403: {"description": "Caller is not the dossier owner"},
    },
)
async def read_audit_log(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    days: int = Query(30, ge=1, le=365, description="Summary window in days"),
    gate: AccessGate = Depends(get_access_gate),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
) -> AuditLogResponse:
    """Dossier audit trail"""
    await gate.require_owner(gate.authenticate_user(request), dossier_id, context)

    entries = await audit.find_by_dossier_id(dossier_id, limit=limit, offset=offset)
    summary = await audit.get_activity_summary(dossier_id, days=days)
    return AuditLogResponse(entries=entries, summary=summary, limit=limit, offset=offset)
