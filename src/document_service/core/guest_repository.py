"""
Guest Access Store

Persistence for dossier guest invitations, including secure token issuance,
token lookup, revocation and access bookkeeping.

SECURITY: tokens are stored as SHA-256 hashes. The plaintext token is only
returned by ``create_with_token`` and ``regenerate_token`` and must be
delivered to the guest out-of-band.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from document_service.core.clock import Clock, utcnow
from document_service.core.errors import ConflictError
from document_service.core.tokens import generate_token, hash_token
from document_service.infrastructure.database.models import DossierGastDB
from document_service.models.guest import DossierGast, GastRechten, Permission

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 30


class DossierGastRepository:
    """Guest invitation store scoped by dossier"""

    def __init__(self, db: AsyncSession, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    def _active_conditions(self, now: datetime):
        return and_(
            DossierGastDB.ingetrokken.is_(False),
            DossierGastDB.token_verloopt_op > now,
        )

    async def _get_row(self, gast_id: int) -> Optional[DossierGastDB]:
        result = await self.db.execute(select(DossierGastDB).where(DossierGastDB.id == gast_id))
        return result.scalar_one_or_none()

    async def find_by_dossier_id(self, dossier_id: int) -> List[DossierGast]:
        """All guests of a dossier (active, expired and revoked), newest first"""
        stmt = (
            select(DossierGastDB)
            .where(DossierGastDB.dossier_id == dossier_id)
            .order_by(DossierGastDB.aangemaakt_op.desc(), DossierGastDB.id.desc())
        )
        result = await self.db.execute(stmt)
        return [DossierGast.model_validate(row) for row in result.scalars().all()]

    async def find_active_by_dossier_id(self, dossier_id: int) -> List[DossierGast]:
        """Non-revoked, non-expired guests of a dossier"""
        stmt = (
            select(DossierGastDB)
            .where(DossierGastDB.dossier_id == dossier_id, self._active_conditions(self.clock()))
            .order_by(DossierGastDB.aangemaakt_op.desc(), DossierGastDB.id.desc())
        )
        result = await self.db.execute(stmt)
        return [DossierGast.model_validate(row) for row in result.scalars().all()]

    async def find_by_id(self, gast_id: int) -> Optional[DossierGast]:
        row = await self._get_row(gast_id)
        return DossierGast.model_validate(row) if row else None

    async def find_by_token(self, plain_token: str) -> Optional[DossierGast]:
        """
        Look up a guest by plaintext token.

        Returns None when the token is unknown, expired or revoked. The three
        cases are indistinguishable to the caller. Hex case is ignored; tokens
        are issued lowercase.

        Args:
            plain_token: Token as presented by the guest

        Returns:
            Active guest or None
        """
        stmt = select(DossierGastDB).where(
            DossierGastDB.token_hash == hash_token(plain_token.lower()),
            self._active_conditions(self.clock()),
        )
        result = await self.db.execute(stmt)
        row = result.scalar_one_or_none()
        return DossierGast.model_validate(row) if row else None

    async def exists_by_email(self, dossier_id: int, email: str) -> bool:
        """Check for an existing invitation to this dossier (case-insensitive)"""
        stmt = select(func.count()).select_from(DossierGastDB).where(
            DossierGastDB.dossier_id == dossier_id,
            func.lower(DossierGastDB.email) == email.strip().lower(),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0

    async def create_with_token(
        self,
        dossier_id: int,
        email: str,
        invited_by_user_id: int,
        naam: Optional[str] = None,
        rechten: GastRechten = GastRechten.UPLOAD_VIEW,
        token_verloopt_op: Optional[datetime] = None,
    ) -> Tuple[DossierGast, str]:
        """
        Create a guest invitation with a fresh token.

        Args:
            dossier_id: Dossier the guest is bound to
            email: Guest email (stored lowercased)
            invited_by_user_id: Owner issuing the invitation
            naam: Optional display name
            rechten: Permission level
            token_verloopt_op: Expiry; defaults to 30 days from now

        Returns:
            Tuple of (guest, plaintext token). The token is unrecoverable afterwards.

        Raises:
            ConflictError: If the email is already invited to this dossier
        """
        plain_token = generate_token()
        now = self.clock()

        row = DossierGastDB(
            dossier_id=dossier_id,
            email=email.strip().lower(),
            naam=naam or None,
            token_hash=hash_token(plain_token),
            token_verloopt_op=token_verloopt_op or now + timedelta(days=DEFAULT_EXPIRY_DAYS),
            rechten=GastRechten(rechten).value,
            uitgenodigd_door_gebruiker_id=invited_by_user_id,
            ingetrokken=False,
            aangemaakt_op=now,
        )
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("A guest with this email already exists for this dossier") from e
        await self.db.refresh(row)

        logger.info(f"Created guest {row.id} for dossier {dossier_id} ({row.rechten})")
        return DossierGast.model_validate(row), plain_token

    async def mark_invitation_sent(self, gast_id: int) -> DossierGast:
        row = await self._get_row(gast_id)
        if not row:
            raise LookupError(f"Guest with ID {gast_id} not found")

        row.uitnodiging_verzonden_op = self.clock()
        await self.db.commit()
        await self.db.refresh(row)
        return DossierGast.model_validate(row)

    async def record_first_access(self, gast_id: int) -> DossierGast:
        """Set first-access once and always refresh last-access"""
        now = self.clock()
        await self.db.execute(
            update(DossierGastDB)
            .where(DossierGastDB.id == gast_id)
            .values(
                eerste_toegang_op=func.coalesce(DossierGastDB.eerste_toegang_op, now),
                laatste_toegang_op=now,
            )
        )
        await self.db.commit()

        row = await self._get_row(gast_id)
        if not row:
            raise LookupError(f"Guest with ID {gast_id} not found")
        await self.db.refresh(row)
        return DossierGast.model_validate(row)

    async def update_last_access(self, gast_id: int) -> None:
        await self.db.execute(
            update(DossierGastDB)
            .where(DossierGastDB.id == gast_id)
            .values(laatste_toegang_op=self.clock())
        )
        await self.db.commit()

    async def revoke(self, gast_id: int) -> bool:
        """
        Revoke a guest.

        Returns:
            True if the guest was revoked now, False if it was already
            revoked or does not exist
        """
        result = await self.db.execute(
            update(DossierGastDB)
            .where(DossierGastDB.id == gast_id, DossierGastDB.ingetrokken.is_(False))
            .values(ingetrokken=True, ingetrokken_op=self.clock())
        )
        await self.db.commit()

        revoked = result.rowcount > 0
        if revoked:
            logger.info(f"Revoked guest {gast_id}")
        return revoked

    async def regenerate_token(
        self,
        gast_id: int,
        expiry_days: int = DEFAULT_EXPIRY_DAYS,
    ) -> Tuple[DossierGast, str]:
        """
        Issue a new token, extend expiry and clear revocation.

        The previous token stops working immediately because its hash is
        overwritten.

        Returns:
            Tuple of (guest, new plaintext token)

        Raises:
            LookupError: If the guest does not exist
        """
        row = await self._get_row(gast_id)
        if not row:
            raise LookupError(f"Guest with ID {gast_id} not found")

        plain_token = generate_token()
        row.token_hash = hash_token(plain_token)
        row.token_verloopt_op = self.clock() + timedelta(days=expiry_days)
        row.ingetrokken = False
        row.ingetrokken_op = None
        await self.db.commit()
        await self.db.refresh(row)

        logger.info(f"Regenerated token for guest {gast_id} (expires in {expiry_days} days)")
        return DossierGast.model_validate(row), plain_token

    async def delete(self, gast_id: int) -> bool:
        """Permanently delete a guest record (admin path)"""
        result = await self.db.execute(delete(DossierGastDB).where(DossierGastDB.id == gast_id))
        await self.db.commit()
        return result.rowcount > 0

    async def belongs_to_dossier(self, gast_id: int, dossier_id: int) -> bool:
        """Isolation check: guest ``gast_id`` is bound to ``dossier_id``"""
        stmt = select(func.count()).select_from(DossierGastDB).where(
            DossierGastDB.id == gast_id,
            DossierGastDB.dossier_id == dossier_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one() > 0

    async def get_count(self, dossier_id: int, active_only: bool = False) -> int:
        conditions = [DossierGastDB.dossier_id == dossier_id]
        if active_only:
            conditions.append(self._active_conditions(self.clock()))

        stmt = select(func.count()).select_from(DossierGastDB).where(*conditions)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def has_permission(self, gast_id: int, permission: Permission) -> bool:
        """Guest is still active and its permission level covers ``permission``"""
        gast = await self.find_by_id(gast_id)
        if not gast or not gast.is_active(self.clock()):
            return False
        return gast.has_permission(permission)
