"""
Access Control Gate

Single authorization decision per request. A request is authenticated as
either a guest (when it carries a guest token) or a user (``X-User-ID``
header set by the API gateway), never both.

- User-or-guest operations: users need ownership or a sharing grant; guests
  need a binding to the requested dossier and the operation's permission.
- Owner-only operations: only the dossier owner passes.

Every authorization failure is audited as ``access_denied`` with its internal
reason and surfaces to the client as a generic forbidden.
"""

import logging
from typing import Any, Dict, Optional

from starlette.requests import Request

from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.core.dossier_repository import DossierRepository
from document_service.core.errors import AuthenticationError, AuthorizationError
from document_service.core.guest_auth import GuestAuthenticator, extract_guest_token, request_context
from document_service.models.actor import Actor, GuestActor, RequestContext, UserActor
from document_service.models.guest import Permission

logger = logging.getLogger(__name__)


def parse_user_id(header_value: Optional[str]) -> Optional[int]:
    """Positive integer user ID from the gateway header, else None"""
    if not header_value:
        return None
    try:
        user_id = int(header_value.strip())
    except ValueError:
        return None
    return user_id if user_id > 0 else None


class AccessGate:
    """Composes user, sharing and guest checks into one decision"""

    def __init__(
        self,
        dossiers: DossierRepository,
        guest_authenticator: GuestAuthenticator,
        audit: DocumentAuditLogRepository,
        skip_auth: bool = False,
        dev_user_id: int = 1,
    ):
        self.dossiers = dossiers
        self.guest_authenticator = guest_authenticator
        self.audit = audit
        self.skip_auth = skip_auth
        self.dev_user_id = dev_user_id

    def authenticate_user(self, request: Request) -> UserActor:
        """
        Resolve the user from the gateway header.

        Raises:
            AuthenticationError: If no valid user ID is present
        """
        if self.skip_auth:
            logger.warning(f"skip_auth enabled, acting as user {self.dev_user_id}")
            return UserActor(user_id=self.dev_user_id)

        user_id = parse_user_id(request.headers.get("x-user-id"))
        if user_id is None:
            raise AuthenticationError("no valid user session")
        return UserActor(user_id=user_id)

    async def authenticate(self, request: Request) -> Actor:
        """
        Authenticate the request as a guest or a user.

        A request carrying a guest token is judged on that token alone.

        Raises:
            AuthenticationError: If neither path yields an identity
        """
        token = extract_guest_token(request)
        if token is not None:
            result = await self.guest_authenticator.authenticate_token(token, request_context(request))
            if not result.authenticated:
                raise AuthenticationError(result.error)
            return GuestActor(gast=result.gast)

        return self.authenticate_user(request)

    async def _deny(
        self,
        dossier_id: int,
        actor: Optional[Actor],
        context: RequestContext,
        reason: str,
        **details: Any,
    ) -> AuthorizationError:
        logger.warning(f"Access denied to dossier {dossier_id}: {reason}")
        audit_details: Dict[str, Any] = {"reason": reason, **details}
        await self.audit.log_access_denied(dossier_id, context, audit_details, actor=actor)
        return AuthorizationError(reason)

    async def require_dossier_access(
        self,
        actor: Actor,
        dossier_id: int,
        permission: Permission,
        context: RequestContext,
    ) -> None:
        """
        Authorize a user-or-guest operation on a dossier.

        Args:
            actor: Authenticated party
            dossier_id: Dossier from the route
            permission: Guest capability the operation needs
            context: Client metadata for the audit trail

        Raises:
            AuthorizationError: On any failed check (already audited)
        """
        if isinstance(actor, UserActor):
            if not await self.dossiers.check_access(dossier_id, actor.user_id):
                raise await self._deny(dossier_id, actor, context, "User has no access to dossier")
            return

        gast = actor.gast
        if gast.dossier_id != dossier_id:
            raise await self._deny(
                dossier_id,
                actor,
                context,
                "Guest attempted to access different dossier",
                requestedDossierId=dossier_id,
                guestDossierId=gast.dossier_id,
            )

        if not gast.has_permission(permission):
            raise await self._deny(
                dossier_id,
                actor,
                context,
                f"Guest lacks {Permission(permission).value} permission",
                rechten=gast.rechten.value,
            )

    async def require_owner(self, actor: Actor, dossier_id: int, context: RequestContext) -> UserActor:
        """
        Authorize an owner-only operation. Shared users and guests are rejected.

        Returns:
            The owning user

        Raises:
            AuthorizationError: If the actor is not the owner (already audited)
        """
        if isinstance(actor, GuestActor):
            raise await self._deny(dossier_id, actor, context, "Guests cannot perform owner operations")

        if not await self.dossiers.is_owner(dossier_id, actor.user_id):
            raise await self._deny(dossier_id, actor, context, "User is not the dossier owner")
        return actor
