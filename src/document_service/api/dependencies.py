"""
API Dependencies

FastAPI providers wiring request-scoped stores to the shared session,
storage provider and category cache. Tests override ``get_db``,
``get_storage_provider`` and ``get_clock``.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.config.settings import settings
from document_service.core.access_control import AccessGate
from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.core.cache import TTLCache
from document_service.core.category_repository import DocumentCategorieRepository
from document_service.core.clock import Clock, utcnow
from document_service.core.document_repository import DossierDocumentRepository
from document_service.core.document_store import DocumentStore
from document_service.core.dossier_repository import DossierRepository
from document_service.core.guest_auth import GuestAuthenticator, request_context
from document_service.core.guest_repository import DossierGastRepository
from document_service.infrastructure.database.client import get_db
from document_service.infrastructure.storage import StorageProvider, get_storage_provider
from document_service.models.actor import RequestContext


def get_clock() -> Clock:
    return utcnow


def get_category_cache(request: Request) -> TTLCache:
    """Process-wide category cache built with the app"""
    return request.app.state.category_cache


def get_request_context(request: Request) -> RequestContext:
    return request_context(request)


def get_dossier_repository(db: AsyncSession = Depends(get_db)) -> DossierRepository:
    return DossierRepository(db)


def get_guest_repository(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DossierGastRepository:
    return DossierGastRepository(db, clock)


def get_document_repository(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DossierDocumentRepository:
    return DossierDocumentRepository(db, clock)


def get_category_repository(
    db: AsyncSession = Depends(get_db),
    cache: TTLCache = Depends(get_category_cache),
) -> DocumentCategorieRepository:
    return DocumentCategorieRepository(db, cache)


def get_audit_log(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DocumentAuditLogRepository:
    return DocumentAuditLogRepository(db, clock)


def get_document_store(
    storage: StorageProvider = Depends(get_storage_provider),
    clock: Clock = Depends(get_clock),
) -> DocumentStore:
    return DocumentStore(storage, clock)


def get_guest_authenticator(
    guests: DossierGastRepository = Depends(get_guest_repository),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
) -> GuestAuthenticator:
    return GuestAuthenticator(guests, audit)


def get_access_gate(
    dossiers: DossierRepository = Depends(get_dossier_repository),
    authenticator: GuestAuthenticator = Depends(get_guest_authenticator),
    audit: DocumentAuditLogRepository = Depends(get_audit_log),
) -> AccessGate:
    return AccessGate(
        dossiers,
        authenticator,
        audit,
        skip_auth=settings.skip_auth,
        dev_user_id=settings.dev_user_id,
    )
