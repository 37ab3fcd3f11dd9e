"""
Request Actors

The authenticated party behind a request is either a registered user or a
guest, never both and never neither. Callers branch on the concrete type.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from document_service.models.guest import DossierGast


@dataclass(frozen=True)
class RequestContext:
    """Client metadata recorded in the audit trail"""
    ip_adres: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class UserActor:
    """Account holder identified by the gateway"""
    user_id: int

    @property
    def audit_ids(self) -> Dict[str, Any]:
        return {"gebruiker_id": self.user_id}

    @property
    def uploader_ids(self) -> Dict[str, Any]:
        return {"uploaded_by_user_id": self.user_id}


@dataclass(frozen=True)
class GuestActor:
    """Guest authenticated by token; bound to ``gast.dossier_id``"""
    gast: DossierGast

    @property
    def gast_id(self) -> int:
        return self.gast.id

    @property
    def audit_ids(self) -> Dict[str, Any]:
        return {"gast_id": self.gast.id}

    @property
    def uploader_ids(self) -> Dict[str, Any]:
        return {"uploaded_by_gast_id": self.gast.id}


Actor = Union[UserActor, GuestActor]
