"""
API Request and Response Models

Pydantic models for API input/output validation.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .document import (
    ActivitySummary,
    DocumentAuditLog,
    DocumentCategorie,
    DossierDocument,
    DossierDocumentWithCategorie,
)
from .guest import DossierGast, GastRechten


# Requests

class GuestInviteRequest(BaseModel):
    """Invite a guest to a dossier"""

    email: EmailStr = Field(..., description="Guest email address (max 255 characters)")
    naam: Optional[str] = Field(None, max_length=255, description="Guest display name")
    rechten: GastRechten = Field(default=GastRechten.UPLOAD_VIEW, description="Permission level")
    verloopt_op_dagen: Optional[int] = Field(
        None, ge=1, le=365, description="Token lifetime in days (default 30)"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        if len(value) > 255:
            raise ValueError("Email must be at most 255 characters")
        return value.strip().lower()


class RegenerateTokenRequest(BaseModel):
    """Issue a new token for an existing guest"""

    verloopt_op_dagen: Optional[int] = Field(
        None, ge=1, le=365, description="Token lifetime in days (default 30)"
    )


# Documents

class DocumentUploadResponse(BaseModel):
    """Response after successful upload"""

    id: int
    originele_bestandsnaam: str
    bestandsgrootte: int
    mime_type: str
    categorie_id: int
    aangemaakt_op: datetime

    @classmethod
    def from_document(cls, document: DossierDocument) -> "DocumentUploadResponse":
        return cls(
            id=document.id,
            originele_bestandsnaam=document.originele_bestandsnaam,
            bestandsgrootte=document.bestandsgrootte,
            mime_type=document.mime_type,
            categorie_id=document.categorie_id,
            aangemaakt_op=document.aangemaakt_op,
        )


class DocumentListItem(BaseModel):
    """Document with category and uploader for list responses"""

    id: int
    originele_bestandsnaam: str
    bestandsgrootte: int
    mime_type: str
    categorie_id: int
    categorie_naam: str
    categorie_icoon: Optional[str] = None
    uploader_naam: Optional[str] = None
    uploader_type: str
    aangemaakt_op: datetime

    @classmethod
    def from_joined(cls, item: DossierDocumentWithCategorie) -> "DocumentListItem":
        return cls(
            id=item.document.id,
            originele_bestandsnaam=item.document.originele_bestandsnaam,
            bestandsgrootte=item.document.bestandsgrootte,
            mime_type=item.document.mime_type,
            categorie_id=item.categorie.id,
            categorie_naam=item.categorie.naam,
            categorie_icoon=item.categorie.icoon,
            uploader_naam=item.uploader_naam,
            uploader_type=item.uploader_type,
            aangemaakt_op=item.document.aangemaakt_op,
        )


class DocumentListResponse(BaseModel):
    documenten: List[DocumentListItem] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class DownloadUrlResponse(BaseModel):
    """Time-limited download link; bytes never pass through the service"""

    download_url: str
    filename: str
    mime_type: str
    size: int
    expires_in_minutes: int


class MessageResponse(BaseModel):
    message: str


# Guests

class GuestResponse(BaseModel):
    """Guest record without its token hash"""

    id: int
    dossier_id: int
    email: str
    naam: Optional[str] = None
    rechten: GastRechten
    token_verloopt_op: datetime
    uitnodiging_verzonden_op: Optional[datetime] = None
    eerste_toegang_op: Optional[datetime] = None
    laatste_toegang_op: Optional[datetime] = None
    ingetrokken: bool
    ingetrokken_op: Optional[datetime] = None
    aangemaakt_op: datetime
    is_expired: bool
    is_active: bool

    @classmethod
    def from_gast(cls, gast: DossierGast, now: datetime) -> "GuestResponse":
        return cls(
            **gast.model_dump(exclude={"token_hash", "uitgenodigd_door_gebruiker_id"}),
            is_expired=gast.is_expired(now),
            is_active=gast.is_active(now),
        )


class GuestListResponse(BaseModel):
    gasten: List[GuestResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class GuestTokenResponse(BaseModel):
    """Invitation or regeneration result. The token is shown exactly once."""

    gast: GuestResponse
    token: str = Field(..., description="Plaintext access token (not retrievable later)")
    access_url: str = Field(..., description="Guest portal link containing the token")
    message: str


class GuestInfo(BaseModel):
    id: int
    naam: Optional[str] = None
    email: str
    rechten: GastRechten
    token_verloopt_op: datetime


class DossierInfo(BaseModel):
    id: int
    dossier_nummer: Optional[str] = None


class GuestPermissions(BaseModel):
    can_upload: bool
    can_view: bool


class GuestValidationResponse(BaseModel):
    """What the guest portal needs after a successful token check"""

    authenticated: bool = True
    gast: GuestInfo
    dossier: DossierInfo
    permissions: GuestPermissions


# Lookup

class CategoryResponse(BaseModel):
    id: int
    naam: str
    beschrijving: Optional[str] = None
    icoon: Optional[str] = None
    toegestane_extensies: List[str] = Field(default_factory=list)
    max_bestandsgrootte_mb: int
    volgorde: int

    @classmethod
    def from_categorie(cls, categorie: DocumentCategorie) -> "CategoryResponse":
        return cls(
            id=categorie.id,
            naam=categorie.naam,
            beschrijving=categorie.beschrijving,
            icoon=categorie.icoon,
            toegestane_extensies=categorie.allowed_extensions,
            max_bestandsgrootte_mb=categorie.max_bestandsgrootte_mb,
            volgorde=categorie.volgorde,
        )


class CategoryListResponse(BaseModel):
    categorieen: List[CategoryResponse] = Field(default_factory=list)


# Audit

class AuditLogResponse(BaseModel):
    """Page of a dossier's audit trail plus a recent-activity summary"""

    entries: List[DocumentAuditLog] = Field(default_factory=list)
    summary: ActivitySummary
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)


# Health

class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    checks: Dict[str, str] = Field(default_factory=dict, description="Dependency status")
