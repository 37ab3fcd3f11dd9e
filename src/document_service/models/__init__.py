"""Data models for the Document Service"""

from .actor import Actor, GuestActor, RequestContext, UserActor
from .document import (
    ActivitySummary,
    AuditActie,
    AuditLogEntry,
    DocumentAuditLog,
    DocumentCategorie,
    Dossier,
    DossierDocument,
    DossierDocumentWithCategorie,
)
from .guest import DossierGast, GastRechten, Permission
from .requests import (
    AuditLogResponse,
    CategoryListResponse,
    CategoryResponse,
    DocumentListItem,
    DocumentListResponse,
    DocumentUploadResponse,
    DossierInfo,
    DownloadUrlResponse,
    GuestInfo,
    GuestInviteRequest,
    GuestListResponse,
    GuestPermissions,
    GuestResponse,
    GuestTokenResponse,
    GuestValidationResponse,
    HealthResponse,
    MessageResponse,
    RegenerateTokenRequest,
)

__all__ = [
    "Actor",
    "GuestActor",
    "RequestContext",
    "UserActor",
    "ActivitySummary",
    "AuditActie",
    "AuditLogEntry",
    "DocumentAuditLog",
    "DocumentCategorie",
    "Dossier",
    "DossierDocument",
    "DossierDocumentWithCategorie",
    "DossierGast",
    "GastRechten",
    "Permission",
    "AuditLogResponse",
    "CategoryListResponse",
    "CategoryResponse",
    "DocumentListItem",
    "DocumentListResponse",
    "DocumentUploadResponse",
    "DossierInfo",
    "DownloadUrlResponse",
    "GuestInfo",
    "GuestInviteRequest",
    "GuestListResponse",
    "GuestPermissions",
    "GuestResponse",
    "GuestTokenResponse",
    "GuestValidationResponse",
    "HealthResponse",
    "MessageResponse",
    "RegenerateTokenRequest",
]
