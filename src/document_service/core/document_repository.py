"""
Document Record Store

Metadata for uploaded documents. Binaries live in blob storage; this store
links them to dossiers, categories and uploaders and implements soft delete.
Soft-deleted documents are excluded from every lookup except
``find_by_id_include_deleted``.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.core.clock import Clock, utcnow
from document_service.infrastructure.database.models import (
    DocumentCategorieDB,
    DossierDocumentDB,
    DossierGastDB,
    GebruikerDB,
)
from document_service.models.document import (
    DocumentCategorie,
    DossierDocument,
    DossierDocumentWithCategorie,
)

logger = logging.getLogger(__name__)


class DossierDocumentRepository:
    """Document metadata store scoped by dossier"""

    def __init__(self, db: AsyncSession, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    async def create(
        self,
        dossier_id: int,
        categorie_id: int,
        blob_container: str,
        blob_path: str,
        originele_bestandsnaam: str,
        opgeslagen_bestandsnaam: str,
        bestandsgrootte: int,
        mime_type: str,
        uploaded_by_user_id: Optional[int] = None,
        uploaded_by_gast_id: Optional[int] = None,
        upload_ip: Optional[str] = None,
    ) -> DossierDocument:
        """
        Insert a document record.

        Exactly one of ``uploaded_by_user_id`` and ``uploaded_by_gast_id`` must
        be given.

        Raises:
            ValueError: If both or neither uploader IDs are given
        """
        if uploaded_by_user_id is None and uploaded_by_gast_id is None:
            raise ValueError("Either uploaded_by_user_id or uploaded_by_gast_id must be provided")
        if uploaded_by_user_id is not None and uploaded_by_gast_id is not None:
            raise ValueError("Cannot specify both uploaded_by_user_id and uploaded_by_gast_id")

        row = DossierDocumentDB(
            dossier_id=dossier_id,
            categorie_id=categorie_id,
            blob_container=blob_container,
            blob_path=blob_path,
            originele_bestandsnaam=originele_bestandsnaam,
            opgeslagen_bestandsnaam=opgeslagen_bestandsnaam,
            bestandsgrootte=bestandsgrootte,
            mime_type=mime_type,
            geupload_door_gebruiker_id=uploaded_by_user_id,
            geupload_door_gast_id=uploaded_by_gast_id,
            upload_ip=upload_ip,
            aangemaakt_op=self.clock(),
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)

        logger.info(f"Created document {row.id} in dossier {dossier_id}: {originele_bestandsnaam}")
        return DossierDocument.model_validate(row)

    async def find_by_dossier_id(self, dossier_id: int) -> List[DossierDocument]:
        stmt = (
            select(DossierDocumentDB)
            .where(
                DossierDocumentDB.dossier_id == dossier_id,
                DossierDocumentDB.verwijderd_op.is_(None),
            )
            .order_by(DossierDocumentDB.aangemaakt_op.desc(), DossierDocumentDB.id.desc())
        )
        result = await self.db.execute(stmt)
        return [DossierDocument.model_validate(row) for row in result.scalars().all()]

    async def find_by_dossier_id_with_categorie(
        self, dossier_id: int
    ) -> List[DossierDocumentWithCategorie]:
        """
        Active documents of a dossier joined with their category.

        The uploader display name is the user's name, else the guest's name,
        else the guest's email. Ordered by category order, then newest first.
        """
        stmt = (
            select(
                DossierDocumentDB,
                DocumentCategorieDB,
                GebruikerDB.naam,
                DossierGastDB.naam,
                DossierGastDB.email,
            )
            .join(DocumentCategorieDB, DossierDocumentDB.categorie_id == DocumentCategorieDB.id)
            .outerjoin(GebruikerDB, DossierDocumentDB.geupload_door_gebruiker_id == GebruikerDB.id)
            .outerjoin(DossierGastDB, DossierDocumentDB.geupload_door_gast_id == DossierGastDB.id)
            .where(
                DossierDocumentDB.dossier_id == dossier_id,
                DossierDocumentDB.verwijderd_op.is_(None),
            )
            .order_by(
                DocumentCategorieDB.volgorde,
                DossierDocumentDB.aangemaakt_op.desc(),
                DossierDocumentDB.id.desc(),
            )
        )
        result = await self.db.execute(stmt)

        documents = []
        for document, categorie, gebruiker_naam, gast_naam, gast_email in result.all():
            if document.geupload_door_gebruiker_id is not None:
                uploader_type = "gebruiker"
                uploader_naam = gebruiker_naam
            else:
                uploader_type = "gast"
                uploader_naam = gast_naam or gast_email

            documents.append(
                DossierDocumentWithCategorie(
                    document=DossierDocument.model_validate(document),
                    categorie=DocumentCategorie.model_validate(categorie),
                    uploader_naam=uploader_naam,
                    uploader_type=uploader_type,
                )
            )
        return documents

    async def find_by_id(self, document_id: int) -> Optional[DossierDocument]:
        stmt = select(DossierDocumentDB).where(
            DossierDocumentDB.id == document_id,
            DossierDocumentDB.verwijderd_op.is_(None),
        )
        result = await self.db.execute(stmt)
        row = result.scalar_one_or_none()
        return DossierDocument.model_validate(row) if row else None

    async def find_by_id_include_deleted(self, document_id: int) -> Optional[DossierDocument]:
        """Lookup for audit and recovery; ignores soft delete"""
        result = await self.db.execute(
            select(DossierDocumentDB).where(DossierDocumentDB.id == document_id)
        )
        row = result.scalar_one_or_none()
        return DossierDocument.model_validate(row) if row else None

    async def soft_delete(self, document_id: int) -> bool:
        """
        Mark a document deleted. The blob is left in storage.

        Returns:
            True if this call deleted it, False if it was already deleted or
            does not exist
        """
        result = await self.db.execute(
            update(DossierDocumentDB)
            .where(
                DossierDocumentDB.id == document_id,
                DossierDocumentDB.verwijderd_op.is_(None),
            )
            .values(verwijderd_op=self.clock())
        )
        await self.db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Soft-deleted document {document_id}")
        return deleted

    async def hard_delete(self, document_id: int) -> bool:
        """Remove the record permanently (admin path; the blob is not touched)"""
        result = await self.db.execute(
            delete(DossierDocumentDB).where(DossierDocumentDB.id == document_id)
        )
        await self.db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.warning(f"Hard-deleted document record {document_id}")
        return deleted

    async def belongs_to_dossier(self, document_id: int, dossier_id: int) -> bool:
        stmt = select(func.count()).select_from(DossierDocumentDB).where(
            DossierDocumentDB.id == document_id,
            DossierDocumentDB.dossier_id == dossier_id,
            DossierDocumentDB.verwijderd_op.is_(None),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0

    async def get_count_by_category(self, dossier_id: int) -> Dict[int, int]:
        """Active document count per category ID"""
        stmt = (
            select(DossierDocumentDB.categorie_id, func.count())
            .where(
                DossierDocumentDB.dossier_id == dossier_id,
                DossierDocumentDB.verwijderd_op.is_(None),
            )
            .group_by(DossierDocumentDB.categorie_id)
        )
        result = await self.db.execute(stmt)
        return {categorie_id: count for categorie_id, count in result.all()}

    async def get_total_size_by_dossier(self, dossier_id: int) -> int:
        """Total bytes of active documents in a dossier"""
        stmt = select(func.coalesce(func.sum(DossierDocumentDB.bestandsgrootte), 0)).where(
            DossierDocumentDB.dossier_id == dossier_id,
            DossierDocumentDB.verwijderd_op.is_(None),
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())
