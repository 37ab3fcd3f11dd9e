"""
Guest Data Models

Domain models for dossier guests (gasten): time-limited, revocable,
permission-scoped invitations to exactly one dossier.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Permission(str, Enum):
    """Capability a guest can exercise"""
    UPLOAD = "upload"
    VIEW = "view"


class GastRechten(str, Enum):
    """Permission level granted to a guest"""
    UPLOAD = "upload"
    VIEW = "view"
    UPLOAD_VIEW = "upload_view"

    def allows(self, permission: Permission) -> bool:
        """``upload_view`` covers both capabilities, the others only themselves"""
        if self is GastRechten.UPLOAD_VIEW:
            return True
        return self.value == Permission(permission).value


class DossierGast(BaseModel):
    """Guest invitation record (never carries the plaintext token)"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    dossier_id: int = Field(..., description="Dossier the guest is bound to (immutable)")
    email: str = Field(..., description="Lowercased guest email")
    naam: Optional[str] = Field(None, description="Optional display name")
    token_hash: str = Field(..., description="SHA-256 of the access token")
    token_verloopt_op: datetime = Field(..., description="Token expiry (UTC)")
    rechten: GastRechten = GastRechten.UPLOAD_VIEW
    uitgenodigd_door_gebruiker_id: int
    uitnodiging_verzonden_op: Optional[datetime] = None
    eerste_toegang_op: Optional[datetime] = None
    laatste_toegang_op: Optional[datetime] = None
    ingetrokken: bool = False
    ingetrokken_op: Optional[datetime] = None
    aangemaakt_op: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.token_verloopt_op

    def is_active(self, now: datetime) -> bool:
        return not self.ingetrokken and not self.is_expired(now)

    def has_permission(self, permission: Permission) -> bool:
        return self.rechten.allows(permission)
