"""
Document Category Store

Read-mostly reference data controlling which files each category accepts.
Active categories are served through a ``TTLCache`` built at startup.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.core.cache import TTLCache
from document_service.infrastructure.database.models import DocumentCategorieDB
from document_service.models.document import DocumentCategorie

logger = logging.getLogger(__name__)

ACTIVE_CATEGORIES_KEY = "active"


class DocumentCategorieRepository:
    """Category lookups with an optional shared cache for the active list"""

    def __init__(self, db: AsyncSession, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache

    async def _load_active(self) -> List[DocumentCategorie]:
        stmt = (
            select(DocumentCategorieDB)
            .where(DocumentCategorieDB.actief.is_(True))
            .order_by(DocumentCategorieDB.volgorde, DocumentCategorieDB.naam)
        )
        result = await self.db.execute(stmt)
        categories = [DocumentCategorie.model_validate(row) for row in result.scalars().all()]
        logger.debug(f"Loaded {len(categories)} active document categories")
        return categories

    async def find_all_active(self) -> List[DocumentCategorie]:
        """Active categories ordered by ``volgorde``"""
        if self.cache is None:
            return await self._load_active()
        return await self.cache.get_or_load(ACTIVE_CATEGORIES_KEY, self._load_active)

    async def find_all(self) -> List[DocumentCategorie]:
        stmt = select(DocumentCategorieDB).order_by(
            DocumentCategorieDB.volgorde, DocumentCategorieDB.naam
        )
        result = await self.db.execute(stmt)
        return [DocumentCategorie.model_validate(row) for row in result.scalars().all()]

    async def find_by_id(self, categorie_id: int) -> Optional[DocumentCategorie]:
        result = await self.db.execute(
            select(DocumentCategorieDB).where(DocumentCategorieDB.id == categorie_id)
        )
        row = result.scalar_one_or_none()
        return DocumentCategorie.model_validate(row) if row else None

    async def validate_extension(self, categorie_id: int, extension: str) -> bool:
        """Unknown categories and categories without an extension list accept nothing"""
        categorie = await self.find_by_id(categorie_id)
        if not categorie:
            return False
        return extension.lstrip(".").lower() in categorie.allowed_extensions

    async def validate_file_size(self, categorie_id: int, size_bytes: int) -> bool:
        categorie = await self.find_by_id(categorie_id)
        if not categorie:
            return False
        return size_bytes <= categorie.max_size_bytes
