"""Unit tests for the document record store"""

import pytest
from sqlalchemy import func, select

from document_service.core.document_repository import DossierDocumentRepository
from document_service.core.guest_repository import DossierGastRepository
from document_service.infrastructure.database.models import DossierDocumentDB

from tests.support import BEWIJS_ID, DOSSIER_ID, FINANCIEN_ID, OTHER_DOSSIER_ID, OWNER_ID


@pytest.fixture
def documents(db, clock):
    return DossierDocumentRepository(db, clock)


async def add_document(documents, filename="paspoort.pdf", categorie_id=BEWIJS_ID, size=1024, **uploader):
    if not uploader:
        uploader = {"uploaded_by_user_id": OWNER_ID}
    return await documents.create(
        dossier_id=uploader.pop("dossier_id", DOSSIER_ID),
        categorie_id=categorie_id,
        blob_container="dossier-00042",
        blob_path=f"bewijs/{filename}",
        originele_bestandsnaam=filename,
        opgeslagen_bestandsnaam=filename,
        bestandsgrootte=size,
        mime_type="application/pdf",
        upload_ip="203.0.113.7",
        **uploader,
    )


async def row_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(DossierDocumentDB))
    return result.scalar_one()


@pytest.mark.unit
class TestCreate:
    async def test_user_upload(self, documents, clock):
        document = await add_document(documents)

        assert document.id is not None
        assert document.geupload_door_gebruiker_id == OWNER_ID
        assert document.geupload_door_gast_id is None
        assert document.aangemaakt_op == clock()
        assert document.verwijderd_op is None

    async def test_both_uploaders_rejected_before_insert(self, documents, db):
        with pytest.raises(ValueError):
            await add_document(documents, uploaded_by_user_id=OWNER_ID, uploaded_by_gast_id=1)

        assert await row_count(db) == 0

    async def test_no_uploader_rejected_before_insert(self, documents, db):
        with pytest.raises(ValueError):
            await documents.create(
                dossier_id=DOSSIER_ID,
                categorie_id=BEWIJS_ID,
                blob_container="dossier-00042",
                blob_path="bewijs/x.pdf",
                originele_bestandsnaam="x.pdf",
                opgeslagen_bestandsnaam="x.pdf",
                bestandsgrootte=1,
                mime_type="application/pdf",
            )

        assert await row_count(db) == 0


@pytest.mark.unit
class TestSoftDelete:
    async def test_soft_delete_is_idempotent(self, documents):
        document = await add_document(documents)

        assert await documents.soft_delete(document.id) is True
        assert await documents.soft_delete(document.id) is False

    async def test_deleted_document_hidden_from_lookups(self, documents):
        document = await add_document(documents)
        await documents.soft_delete(document.id)

        assert await documents.find_by_id(document.id) is None
        assert await documents.find_by_dossier_id(DOSSIER_ID) == []
        assert await documents.find_by_dossier_id_with_categorie(DOSSIER_ID) == []
        assert not await documents.belongs_to_dossier(document.id, DOSSIER_ID)

        deleted = await documents.find_by_id_include_deleted(document.id)
        assert deleted.verwijderd_op is not None

    async def test_hard_delete(self, documents):
        document = await add_document(documents)

        assert await documents.hard_delete(document.id) is True
        assert await documents.find_by_id_include_deleted(document.id) is None


@pytest.mark.unit
class TestQueries:
    async def test_belongs_to_dossier(self, documents):
        document = await add_document(documents)

        assert await documents.belongs_to_dossier(document.id, DOSSIER_ID)
        assert not await documents.belongs_to_dossier(document.id, OTHER_DOSSIER_ID)

    async def test_with_categorie_orders_and_names_uploaders(self, documents, db, clock):
        guests = DossierGastRepository(db, clock)
        named, _ = await guests.create_with_token(DOSSIER_ID, "alice@example.com", OWNER_ID, naam="Alice")
        anonymous, _ = await guests.create_with_token(DOSSIER_ID, "bob@example.com", OWNER_ID)

        financien = await add_document(documents, "aangifte.pdf", categorie_id=FINANCIEN_ID)
        first = await add_document(documents, "oud.pdf", uploaded_by_gast_id=named.id)
        clock.advance(minutes=5)
        second = await add_document(documents, "nieuw.pdf", uploaded_by_gast_id=anonymous.id)

        items = await documents.find_by_dossier_id_with_categorie(DOSSIER_ID)

        assert [item.document.id for item in items] == [second.id, first.id, financien.id]
        assert [item.uploader_naam for item in items] == ["bob@example.com", "Alice", "Olga Eigenaar"]
        assert [item.uploader_type for item in items] == ["gast", "gast", "gebruiker"]
        assert items[2].categorie.naam == "Financiën & Belastingen"

    async def test_counts_and_sizes(self, documents):
        await add_document(documents, "a.pdf", size=100)
        await add_document(documents, "b.pdf", size=250)
        deleted = await add_document(documents, "c.pdf", categorie_id=FINANCIEN_ID, size=1000)
        await documents.soft_delete(deleted.id)

        assert await documents.get_count_by_category(DOSSIER_ID) == {BEWIJS_ID: 2}
        assert await documents.get_total_size_by_dossier(DOSSIER_ID) == 350
        assert await documents.get_total_size_by_dossier(OTHER_DOSSIER_ID) == 0
