"""
Document Audit Log

Append-only security trail for every access-relevant action: uploads,
downloads, deletes, guest invitations and revocations, guest access and
denied access. There is no update or delete operation.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.core.clock import Clock, utcnow
from document_service.infrastructure.database.models import DocumentAuditLogDB
from document_service.models.actor import Actor, RequestContext
from document_service.models.document import (
    ActivitySummary,
    AuditActie,
    AuditLogEntry,
    DocumentAuditLog,
)

logger = logging.getLogger(__name__)

_SUMMARY_FIELDS = {
    AuditActie.UPLOAD.value: "uploads",
    AuditActie.DOWNLOAD.value: "downloads",
    AuditActie.DELETE.value: "deletes",
    AuditActie.ACCESS_DENIED.value: "access_denied",
    AuditActie.GUEST_ACCESS.value: "guest_access",
}


class DocumentAuditLogRepository:
    """Writer and read-only queries for the document audit trail"""

    def __init__(self, db: AsyncSession, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    async def log(self, entry: AuditLogEntry) -> DocumentAuditLog:
        """
        Append an audit event.

        The row is committed immediately so it survives a later rollback of
        the surrounding request.

        Args:
            entry: Event to record; only ``actie`` is required

        Returns:
            Stored audit event
        """
        row = DocumentAuditLogDB(
            dossier_id=entry.dossier_id,
            document_id=entry.document_id,
            gebruiker_id=entry.gebruiker_id,
            gast_id=entry.gast_id,
            ip_adres=entry.ip_adres,
            user_agent=entry.user_agent,
            actie=AuditActie(entry.actie).value,
            details=entry.details,
            tijdstip=self.clock(),
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)

        logger.debug(f"Audit {row.actie}: dossier={row.dossier_id} document={row.document_id}")
        return DocumentAuditLog.model_validate(row)

    async def _log(
        self,
        actie: AuditActie,
        dossier_id: Optional[int] = None,
        document_id: Optional[int] = None,
        actor: Optional[Actor] = None,
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
        **ids: Any,
    ) -> DocumentAuditLog:
        if actor is not None:
            ids = {**actor.audit_ids, **ids}
        context = context or RequestContext()
        return await self.log(
            AuditLogEntry(
                actie=actie,
                dossier_id=dossier_id,
                document_id=document_id,
                ip_adres=context.ip_adres,
                user_agent=context.user_agent,
                details=details,
                **ids,
            )
        )

    # Convenience writers

    async def log_upload(
        self,
        dossier_id: int,
        document_id: int,
        actor: Actor,
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> DocumentAuditLog:
        return await self._log(AuditActie.UPLOAD, dossier_id, document_id, actor, context, details)

    async def log_download(
        self,
        dossier_id: int,
        document_id: int,
        actor: Actor,
        context: Optional[RequestContext] = None,
    ) -> DocumentAuditLog:
        return await self._log(AuditActie.DOWNLOAD, dossier_id, document_id, actor, context)

    async def log_delete(
        self,
        dossier_id: int,
        document_id: int,
        actor: Actor,
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> DocumentAuditLog:
        return await self._log(AuditActie.DELETE, dossier_id, document_id, actor, context, details)

    async def log_view(
        self,
        dossier_id: int,
        actor: Actor,
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> DocumentAuditLog:
        return await self._log(AuditActie.VIEW, dossier_id, None, actor, context, details)

    async def log_access_denied(
        self,
        dossier_id: Optional[int],
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
        actor: Optional[Actor] = None,
    ) -> DocumentAuditLog:
        """Record a denial; dossier and actor may be unknown before authentication"""
        return await self._log(AuditActie.ACCESS_DENIED, dossier_id, None, actor, context, details)

    async def log_guest_invited(
        self,
        dossier_id: int,
        gebruiker_id: int,
        gast_id: int,
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> DocumentAuditLog:
        return await self._log(
            AuditActie.GUEST_INVITED,
            dossier_id,
            context=context,
            details=details,
            gebruiker_id=gebruiker_id,
            gast_id=gast_id,
        )

    async def log_guest_revoked(
        self,
        dossier_id: int,
        gebruiker_id: int,
        gast_id: int,
        context: Optional[RequestContext] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> DocumentAuditLog:
        return await self._log(
            AuditActie.GUEST_REVOKED,
            dossier_id,
            context=context,
            details=details,
            gebruiker_id=gebruiker_id,
            gast_id=gast_id,
        )

    async def log_guest_access(
        self,
        dossier_id: int,
        gast_id: int,
        context: Optional[RequestContext] = None,
    ) -> DocumentAuditLog:
        return await self._log(AuditActie.GUEST_ACCESS, dossier_id, context=context, gast_id=gast_id)

    # Queries

    async def _find(self, *conditions, limit: Optional[int] = None, offset: int = 0) -> List[DocumentAuditLog]:
        stmt = (
            select(DocumentAuditLogDB)
            .where(*conditions)
            .order_by(DocumentAuditLogDB.tijdstip.desc(), DocumentAuditLogDB.id.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return [DocumentAuditLog.model_validate(row) for row in result.scalars().all()]

    async def find_by_dossier_id(
        self, dossier_id: int, limit: int = 100, offset: int = 0
    ) -> List[DocumentAuditLog]:
        """Newest-first page of a dossier's audit trail"""
        return await self._find(
            DocumentAuditLogDB.dossier_id == dossier_id, limit=limit, offset=offset
        )

    async def find_by_document_id(self, document_id: int, limit: int = 50) -> List[DocumentAuditLog]:
        return await self._find(DocumentAuditLogDB.document_id == document_id, limit=limit)

    async def find_by_action(self, actie: AuditActie, limit: int = 100) -> List[DocumentAuditLog]:
        return await self._find(DocumentAuditLogDB.actie == AuditActie(actie).value, limit=limit)

    async def find_by_gast_id(self, gast_id: int, limit: int = 100) -> List[DocumentAuditLog]:
        return await self._find(DocumentAuditLogDB.gast_id == gast_id, limit=limit)

    async def find_access_denied(self, dossier_id: int, since_days: int = 7) -> List[DocumentAuditLog]:
        since = self.clock() - timedelta(days=since_days)
        return await self._find(
            DocumentAuditLogDB.dossier_id == dossier_id,
            DocumentAuditLogDB.actie == AuditActie.ACCESS_DENIED.value,
            DocumentAuditLogDB.tijdstip > since,
        )

    async def get_action_counts(self, dossier_id: int) -> Dict[str, int]:
        """Count of each action ever recorded for a dossier"""
        stmt = (
            select(DocumentAuditLogDB.actie, func.count())
            .where(DocumentAuditLogDB.dossier_id == dossier_id)
            .group_by(DocumentAuditLogDB.actie)
        )
        result = await self.db.execute(stmt)
        return {actie: count for actie, count in result.all()}

    async def get_activity_summary(self, dossier_id: int, days: int = 30) -> ActivitySummary:
        """
        Summarize recent activity on a dossier.

        Args:
            dossier_id: Dossier ID
            days: Size of the look-back window

        Returns:
            Counts of uploads, downloads, deletes, denials and guest access
        """
        since = self.clock() - timedelta(days=days)
        stmt = (
            select(DocumentAuditLogDB.actie, func.count())
            .where(
                DocumentAuditLogDB.dossier_id == dossier_id,
                DocumentAuditLogDB.tijdstip > since,
            )
            .group_by(DocumentAuditLogDB.actie)
        )
        result = await self.db.execute(stmt)

        counts = {}
        for actie, count in result.all():
            field = _SUMMARY_FIELDS.get(actie)
            if field:
                counts[field] = count
        return ActivitySummary(**counts)
