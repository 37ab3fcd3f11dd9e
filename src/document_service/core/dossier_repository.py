"""
Dossier Store

Read-only ownership and sharing lookups used by the access gate. Dossier
CRUD lives in the main application; this service only decides access.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.infrastructure.database.models import DossierDB, GedeeldDossierDB
from document_service.models.document import Dossier

logger = logging.getLogger(__name__)


class DossierRepository:
    """Ownership and sharing checks for dossiers"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, dossier_id: int) -> Optional[Dossier]:
        result = await self.db.execute(select(DossierDB).where(DossierDB.id == dossier_id))
        row = result.scalar_one_or_none()
        return Dossier.model_validate(row) if row else None

    async def is_owner(self, dossier_id: int, user_id: int) -> bool:
        stmt = select(func.count()).select_from(DossierDB).where(
            DossierDB.id == dossier_id,
            DossierDB.gebruiker_id == user_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0

    async def check_access(self, dossier_id: int, user_id: int) -> bool:
        """
        Owner or shared-user access check.

        Args:
            dossier_id: Dossier ID
            user_id: Requesting user ID

        Returns:
            True if the user owns the dossier or holds a sharing grant
        """
        if await self.is_owner(dossier_id, user_id):
            return True

        stmt = select(func.count()).select_from(GedeeldDossierDB).where(
            GedeeldDossierDB.dossier_id == dossier_id,
            GedeeldDossierDB.gebruiker_id == user_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0
