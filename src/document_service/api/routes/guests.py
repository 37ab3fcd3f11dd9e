"""
Guest API Routes

Owner-only management of guest invitations (list, invite, regenerate token,
revoke) and the guest portal's token validation endpoint.
"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from document_service.api.dependencies import (
    get_access_gate,
    get_audit_log,
    get_clock,
    get_dossier_repository,
    get_guest_authenticator,
    get_guest_repository,
    get_request_context,
)
from document_service.config.settings import settings
from document_service.core.access_control import AccessGate
from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.core.clock import Clock
from document_service.core.dossier_repository import DossierRepository
from document_service.core.errors import AuthenticationError, ConflictError, NotFoundError
from document_service.core.guest_auth import GuestAuthenticator
from document_service.core.guest_repository import DossierGastRepository
from document_service.models import (
    DossierInfo,
    GuestInfo,
    GuestInviteRequest,
    GuestListResponse,
    GuestPermissions,
    GuestResponse,
    GuestTokenResponse,
    GuestValidationResponse,
    MessageResponse,
    Permission,
    RegenerateTokenRequest,
    RequestContext,
)

router = APIRouter(prefix="/api/v1/dossiers", tags=["gasten"])
guest_router = APIRouter(prefix="/api/v1/guest", tags=["gast-portaal"])
logger = logging.getLogger(__name__)

OWNER_RESPONSES = {
    401: {"description": "No valid user session"},
    403: {"description": "Caller is not the dossier owner"},
}


@router.get(
    "/{dossier_id}/gasten",
    response_model=GuestListResponse,
    summary="List Dossier Guests",
    description="""
Returns every guest ever invited to the dossier (active, expired and revoked),
newest first, with `is_expired` and `is_active` computed at request time.
Token hashes are never returned.

**Authorization**: Dossier owner only (X-User-ID)
    """,
    responses={200: {"description": "Guests returned"}, **OWNER_RESPONSES},
)
async def list_guests(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    gate: AccessGate = Depends(get_access_gate),
    guests: DossierGastRepository = Depends(get_guest_repository),
    context: RequestContext = Depends(get_request_context),
    clock: Clock = Depends(get_clock),
) -> GuestListResponse:
    """List guests"""
    await gate.require_owner(gate.authenticate_user(request), dossier_id, context)

    gasten = await guests.find_by_dossier_id(dossier_id)
    now = clock()
    return GuestListResponse(
        gasten=[GuestResponse.from_gast(gast, now) for gast in gasten],
        total=len(gasten),
    )


@router.post(
    "/{dossier_id}/gasten",
    response_model=GuestTokenResponse,
    status_code=201,
    summary="Invite Guest",
    description="""
Invites a guest to the dossier and issues an access token.

**Workflow**:
1. Requires dossier ownership
2. Rejects an email that is already invited to this dossier (409)
3. Generates a 64-hex-character token; only its SHA-256 hash is stored
4. Records a `guest_invited` audit event
5. Returns the token and the guest portal link

**The token is returned exactly once** and must be delivered to the guest
out-of-band. It cannot be retrieved later; use regenerate-token instead.

**Request Body**:
```json
{"email": "alice@example.com", "naam": "Alice", "rechten": "upload_view", "verloopt_op_dagen": 30}
```
    """,
    responses={
        201: {"description": "Guest invited"},
        409: {"description": "Email already invited to this dossier"},
        **OWNER_RESPONSES,
    },
)
async def invite_guest(
    request: Request,
    body: GuestInviteRequest,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    gate: AccessGate = Depends(get_access_gate),
    guests: DossierGastRepository = Depends(get_guest_repository),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
    clock: Clock = Depends(get_clock),
) -> GuestTokenResponse:
    """Invite guest"""
    owner = await gate.require_owner(gate.authenticate_user(request), dossier_id, context)

    if await guests.exists_by_email(dossier_id, body.email):
        raise ConflictError(
            "A guest with this email already exists for this dossier. "
            "Use regenerate token to resend invitation."
        )

    expiry_days = min(
        body.verloopt_op_dagen or settings.guest_token_expiry_days,
        settings.guest_token_max_expiry_days,
    )
    gast, plain_token = await guests.create_with_token(
        dossier_id=dossier_id,
        email=body.email,
        invited_by_user_id=owner.user_id,
        naam=body.naam,
        rechten=body.rechten,
        token_verloopt_op=clock() + timedelta(days=expiry_days),
    )
    await audit.log_guest_invited(
        dossier_id,
        owner.user_id,
        gast.id,
        context,
        {"email": gast.email, "rechten": gast.rechten.value, "expiryDays": expiry_days},
    )

    logger.info(f"User {owner.user_id} invited guest {gast.id} to dossier {dossier_id}")
    return GuestTokenResponse(
        gast=GuestResponse.from_gast(gast, clock()),
        token=plain_token,
        access_url=settings.guest_access_url(plain_token),
        message="Guest invited successfully",
    )


@router.post(
    "/{dossier_id}/gasten/{gast_id}/regenerate-token",
    response_model=GuestTokenResponse,
    summary="Regenerate Guest Token",
    description="""
Issues a new token for a guest, extends its expiry and clears any revocation.
The previous token stops working immediately.

**Request Body** (optional):
```json
{"verloopt_op_dagen": 30}
```

**Authorization**: Dossier owner only; the guest must belong to this dossier (404 otherwise)
    """,
    responses={
        200: {"description": "Token regenerated"},
        404: {"description": "Guest not found in this dossier"},
        **OWNER_RESPONSES,
    },
)
async def regenerate_guest_token(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    gast_id: int = Path(..., gt=0, description="Guest ID"),
    body: Optional[RegenerateTokenRequest] = None,
    gate: AccessGate = Depends(get_access_gate),
    guests: DossierGastRepository = Depends(get_guest_repository),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
    clock: Clock = Depends(get_clock),
) -> GuestTokenResponse:
    """Regenerate guest token"""
    owner = await gate.require_owner(gate.authenticate_user(request), dossier_id, context)

    if not await guests.belongs_to_dossier(gast_id, dossier_id):
        raise NotFoundError("Guest", gast_id)

    expiry_days = min(
        (body.verloopt_op_dagen if body else None) or settings.guest_token_expiry_days,
        settings.guest_token_max_expiry_days,
    )
    gast, plain_token = await guests.regenerate_token(gast_id, expiry_days)

    # Logged as an invitation: a regenerated token is a fresh invite
    await audit.log_guest_invited(
        dossier_id,
        owner.user_id,
        gast_id,
        context,
        {"action": "token_regenerated", "email": gast.email, "expiryDays": expiry_days},
    )

    return GuestTokenResponse(
        gast=GuestResponse.from_gast(gast, clock()),
        token=plain_token,
        access_url=settings.guest_access_url(plain_token),
        message="Guest token regenerated successfully",
    )


@router.delete(
    "/{dossier_id}/gasten/{gast_id}",
    response_model=MessageResponse,
    summary="Revoke Guest",
    description="""
Revokes a guest's access. The record is kept; the token stops working
immediately. Revoking an already revoked guest returns 400.

**Authorization**: Dossier owner only; the guest must belong to this dossier (404 otherwise)
    """,
    responses={
        200: {"description": "Guest revoked"},
        400: {"description": "Guest already revoked"},
        404: {"description": "Guest not found in this dossier"},
        **OWNER_RESPONSES,
    },
)
async def revoke_guest(
    request: Request,
    dossier_id: int = Path(..., gt=0, description="Dossier ID"),
    gast_id: int = Path(..., gt=0, description="Guest ID"),
    gate: AccessGate = Depends(get_access_gate),
    guests: DossierGastRepository = Depends(get_guest_repository),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
    context: RequestContext = Depends(get_request_context),
) -> MessageResponse:
    """Revoke guest"""
    owner = await gate.require_owner(gate.authenticate_user(request), dossier_id, context)

    if not await guests.belongs_to_dossier(gast_id, dossier_id):
        raise NotFoundError("Guest", gast_id)

    gast = await guests.find_by_id(gast_id)
    if not await guests.revoke(gast_id):
        raise HTTPException(status_code=400, detail="Guest access is already revoked")

    await audit.log_guest_revoked(
        dossier_id,
        owner.user_id,
        gast_id,
        context,
        {"email": gast.email, "naam": gast.naam},
    )

    logger.info(f"User {owner.user_id} revoked guest {gast_id} on dossier {dossier_id}")
    return MessageResponse(message="Guest access revoked successfully")


@guest_router.get(
    "/validate",
    response_model=GuestValidationResponse,
    summary="Validate Guest Token",
    description="""
Used by the guest portal on entry. Validates the token and returns the guest,
its dossier and its capabilities.

**Token transport**: `Authorization: Bearer <token>`, `X-Guest-Token` header or `?token=`

Unknown, expired and revoked tokens all return the same 401.
    """,
    responses={
        200: {"description": "Token valid"},
        401: {"description": "Token missing, invalid, expired or revoked"},
        404: {"description": "Dossier not found"},
    },
)
async def validate_guest_token(
    request: Request,
    authenticator: GuestAuthenticator = Depends(get_guest_authenticator),
    dossiers: DossierRepository = Depends(get_dossier_repository),
) -> GuestValidationResponse:
    """Validate guest token"""
    result = await authenticator.authenticate(request)
    if not result.authenticated:
        raise AuthenticationError(result.error)

    gast = result.gast
    dossier = await dossiers.find_by_id(gast.dossier_id)
    if not dossier:
        raise NotFoundError("Dossier", gast.dossier_id)

    return GuestValidationResponse(
        gast=GuestInfo(
            id=gast.id,
            naam=gast.naam,
            email=gast.email,
            rechten=gast.rechten,
            token_verloopt_op=gast.token_verloopt_op,
        ),
        dossier=DossierInfo(id=dossier.id, dossier_nummer=dossier.dossier_nummer),
        permissions=GuestPermissions(
            can_upload=gast.has_permission(Permission.UPLOAD),
            can_view=gast.has_permission(Permission.VIEW),
        ),
    )
