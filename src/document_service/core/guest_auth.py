"""
Guest Authenticator

Resolves a guest from the token on an incoming request. Token lookup misses
are audited without a dossier reference (the guest's dossier is unknown);
hits record access timestamps and a ``guest_access`` audit event.

The authenticator does not know which dossier the request targets. Callers
must check ``gast.dossier_id`` against the route's dossier themselves (see
``AccessGate``).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from starlette.requests import Request

from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.core.guest_repository import DossierGastRepository
from document_service.core.tokens import is_valid_token_format
from document_service.models.actor import RequestContext
from document_service.models.guest import DossierGast

logger = logging.getLogger(__name__)

NO_TOKEN = "No guest token provided"
INVALID_FORMAT = "Invalid token format"
INVALID_TOKEN = "Invalid or expired token"


@dataclass(frozen=True)
class GuestAuthResult:
    authenticated: bool
    gast: Optional[DossierGast] = None
    error: Optional[str] = None


def extract_guest_token(request: Request) -> Optional[str]:
    """
    Find the guest token on a request.

    Priority: ``Authorization: Bearer``, then ``X-Guest-Token``, then the
    ``token`` query parameter. First match wins.
    """
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):].strip()

    guest_header = request.headers.get("x-guest-token")
    if guest_header:
        return guest_header.strip()

    token_param = request.query_params.get("token")
    if token_param:
        return token_param

    return None


def extract_client_ip(request: Request) -> Optional[str]:
    """First ``X-Forwarded-For`` entry, else ``X-Client-IP``, else the socket peer"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    client_ip = request.headers.get("x-client-ip")
    if client_ip:
        return client_ip

    return request.client.host if request.client else None


def extract_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent") or None


def request_context(request: Request) -> RequestContext:
    return RequestContext(ip_adres=extract_client_ip(request), user_agent=extract_user_agent(request))


class GuestAuthenticator:
    """Token validation with access bookkeeping and audit"""

    def __init__(self, guests: DossierGastRepository, audit: DocumentAuditLogRepository):
        self.guests = guests
        self.audit = audit

    async def authenticate_token(self, token: Optional[str], context: RequestContext) -> GuestAuthResult:
        """
        Validate a token and record the access.

        Args:
            token: Token as presented (None when absent)
            context: Client IP and user agent for the audit trail

        Returns:
            GuestAuthResult; ``error`` tells the reason apart for logging only
        """
        if not token:
            return GuestAuthResult(authenticated=False, error=NO_TOKEN)

        # Reject garbage before hitting the store
        if not is_valid_token_format(token):
            logger.warning(f"Rejected malformed guest token from {context.ip_adres}")
            return GuestAuthResult(authenticated=False, error=INVALID_FORMAT)

        gast = await self.guests.find_by_token(token)
        if not gast:
            logger.warning(f"Guest token lookup failed from {context.ip_adres}")
            await self.audit.log_access_denied(None, context, {"reason": INVALID_TOKEN})
            return GuestAuthResult(authenticated=False, error=INVALID_TOKEN)

        gast = await self.guests.record_first_access(gast.id)
        await self.audit.log_guest_access(gast.dossier_id, gast.id, context)

        logger.info(f"Guest {gast.id} authenticated for dossier {gast.dossier_id}")
        return GuestAuthResult(authenticated=True, gast=gast)

    async def authenticate(self, request: Request) -> GuestAuthResult:
        return await self.authenticate_token(extract_guest_token(request), request_context(request))
