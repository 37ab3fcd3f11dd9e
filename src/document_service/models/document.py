"""
Document Data Models

Domain models for dossiers, document categories, document metadata and
the document audit trail.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Dossier(BaseModel):
    """Case file summary"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    dossier_nummer: str
    gebruiker_id: int = Field(..., description="Owner user ID")
    status: bool = False
    aangemaakt_op: datetime


class DocumentCategorie(BaseModel):
    """Named bucket with allowed extensions and size limit"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    naam: str
    beschrijving: Optional[str] = None
    icoon: Optional[str] = None
    toegestane_extensies: Optional[str] = Field(None, description="Comma-separated extensions")
    max_bestandsgrootte_mb: int
    volgorde: int = 0
    actief: bool = True
    aangemaakt_op: datetime

    @property
    def allowed_extensions(self) -> List[str]:
        """Parse allowed extensions into a lowercase list without dots"""
        if not self.toegestane_extensies:
            return []
        return [
            ext.strip().lstrip(".").lower()
            for ext in self.toegestane_extensies.split(",")
            if ext.strip()
        ]

    @property
    def max_size_bytes(self) -> int:
        return self.max_bestandsgrootte_mb * 1024 * 1024


class DossierDocument(BaseModel):
    """Uploaded document metadata"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    dossier_id: int
    categorie_id: int
    blob_container: str
    blob_path: str
    originele_bestandsnaam: str
    opgeslagen_bestandsnaam: str
    bestandsgrootte: int = Field(..., ge=0, description="Size in bytes")
    mime_type: str
    geupload_door_gebruiker_id: Optional[int] = None
    geupload_door_gast_id: Optional[int] = None
    upload_ip: Optional[str] = None
    aangemaakt_op: datetime
    verwijderd_op: Optional[datetime] = None


class DossierDocumentWithCategorie(BaseModel):
    """Document joined with its category and a display name for the uploader"""

    document: DossierDocument
    categorie: DocumentCategorie
    uploader_naam: Optional[str] = None
    uploader_type: str = Field(..., description="'gebruiker' or 'gast'")


class AuditActie(str, Enum):
    """Closed vocabulary of audited actions"""
    UPLOAD = "upload"
    DOWNLOAD = "download"
    DELETE = "delete"
    ACCESS_DENIED = "access_denied"
    GUEST_INVITED = "guest_invited"
    GUEST_REVOKED = "guest_revoked"
    GUEST_ACCESS = "guest_access"
    VIEW = "view"


class AuditLogEntry(BaseModel):
    """Audit event to append. Every field except the action is optional."""

    actie: AuditActie
    dossier_id: Optional[int] = None
    document_id: Optional[int] = None
    gebruiker_id: Optional[int] = None
    gast_id: Optional[int] = None
    ip_adres: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class DocumentAuditLog(AuditLogEntry):
    """Stored audit event"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tijdstip: datetime


class ActivitySummary(BaseModel):
    """Per-action counts for a dossier over a time window"""

    uploads: int = 0
    downloads: int = 0
    deletes: int = 0
    access_denied: int = 0
    guest_access: int = 0
