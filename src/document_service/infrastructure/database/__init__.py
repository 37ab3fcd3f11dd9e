"""Database layer"""

from .client import DatabaseClient, db_client, get_db
from .models import (
    Base,
    DocumentAuditLogDB,
    DocumentCategorieDB,
    DossierDB,
    DossierDocumentDB,
    DossierGastDB,
    GebruikerDB,
    GedeeldDossierDB,
)

__all__ = [
    "DatabaseClient",
    "db_client",
    "get_db",
    "Base",
    "DocumentAuditLogDB",
    "DocumentCategorieDB",
    "DossierDB",
    "DossierDocumentDB",
    "DossierGastDB",
    "GebruikerDB",
    "GedeeldDossierDB",
]
