"""Test support: fixed clock, seed data and well-known IDs"""

from datetime import datetime, timedelta

from document_service.infrastructure.database.models import (
    DocumentCategorieDB,
    DossierDB,
    GebruikerDB,
    GedeeldDossierDB,
)

OWNER_ID = 1
SHARED_USER_ID = 2
STRANGER_ID = 3

DOSSIER_ID = 42
OTHER_DOSSIER_ID = 43

BEWIJS_ID = 1
FINANCIEN_ID = 2
INACTIVE_ID = 3
EMPTY_EXTENSIONS_ID = 4


class FakeClock:
    """Settable clock returning naive UTC datetimes"""

    def __init__(self, start: datetime = datetime(2026, 3, 1, 10, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


async def seed(session) -> None:
    """Three users, two dossiers (42 shared with user 2) and four categories"""
    session.add_all(
        [
            GebruikerDB(id=OWNER_ID, email="owner@example.com", naam="Olga Eigenaar"),
            GebruikerDB(id=SHARED_USER_ID, email="shared@example.com", naam="Sam Gedeeld"),
            GebruikerDB(id=STRANGER_ID, email="stranger@example.com", naam=None),
        ]
    )
    await session.flush()
    session.add_all(
        [
            DossierDB(id=DOSSIER_ID, dossier_nummer="D-2026-0042", gebruiker_id=OWNER_ID),
            DossierDB(id=OTHER_DOSSIER_ID, dossier_nummer="D-2026-0043", gebruiker_id=STRANGER_ID),
        ]
    )
    await session.flush()
    session.add_all(
        [
            GedeeldDossierDB(dossier_id=DOSSIER_ID, gebruiker_id=SHARED_USER_ID),
            DocumentCategorieDB(
                id=BEWIJS_ID,
                naam="bewijs",
                icoon="file",
                toegestane_extensies="pdf,jpg",
                max_bestandsgrootte_mb=10,
                volgorde=1,
            ),
            DocumentCategorieDB(
                id=FINANCIEN_ID,
                naam="Financiën & Belastingen",
                toegestane_extensies="pdf, .XLSX",
                max_bestandsgrootte_mb=5,
                volgorde=2,
            ),
            DocumentCategorieDB(
                id=INACTIVE_ID,
                naam="Oud",
                toegestane_extensies="pdf",
                max_bestandsgrootte_mb=5,
                volgorde=3,
                actief=False,
            ),
            DocumentCategorieDB(
                id=EMPTY_EXTENSIONS_ID,
                naam="Leeg",
                toegestane_extensies=None,
                max_bestandsgrootte_mb=5,
                volgorde=0,
            ),
        ]
    )
    await session.commit()


def as_user(user_id: int = OWNER_ID) -> dict:
    return {"X-User-ID": str(user_id)}


def as_guest(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
