"""Integration tests for the document endpoints"""

import pytest

from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.models import AuditActie

from tests.support import (
    BEWIJS_ID,
    DOSSIER_ID,
    EMPTY_EXTENSIONS_ID,
    INACTIVE_ID,
    OTHER_DOSSIER_ID,
    SHARED_USER_ID,
    STRANGER_ID,
    as_guest,
    as_user,
)

DOCUMENTS_URL = f"/api/v1/dossiers/{DOSSIER_ID}/documenten"
PDF = b"%PDF-1.4\n" + b"0" * 2048


async def upload(client, headers=None, filename="paspoort.pdf", content=PDF, mime="application/pdf",
                 categorie_id=BEWIJS_ID, url=DOCUMENTS_URL):
    return await client.post(
        url,
        files={"file": (filename, content, mime)},
        data={"categorie_id": str(categorie_id)},
        headers=headers if headers is not None else as_user(),
    )


async def invite(client, rechten):
    response = await client.post(
        f"/api/v1/dossiers/{DOSSIER_ID}/gasten",
        json={"email": f"{rechten}@example.com", "naam": rechten.title(), "rechten": rechten},
        headers=as_user(),
    )
    return response.json()["token"]


@pytest.mark.integration
class TestUpload:
    async def test_owner_upload(self, client):
        response = await upload(client)

        assert response.status_code == 201
        body = response.json()
        assert body["originele_bestandsnaam"] == "paspoort.pdf"
        assert body["bestandsgrootte"] == len(PDF)
        assert body["categorie_id"] == BEWIJS_ID

    async def test_shared_user_upload(self, client):
        response = await upload(client, headers=as_user(SHARED_USER_ID))

        assert response.status_code == 201

    async def test_stranger_forbidden(self, client):
        response = await upload(client, headers=as_user(STRANGER_ID))

        assert response.status_code == 403

    @pytest.mark.parametrize(
        "kwargs, status, detail",
        [
            ({"filename": "virus.exe", "mime": "application/octet-stream"}, 400,
             "File type not allowed for this category. Allowed: pdf,jpg"),
            ({"content": b"0" * (10 * 1024 * 1024 + 1)}, 400, "File too large. Maximum size: 10 MB"),
            ({"mime": "image/jpeg"}, 400, "File MIME type does not match extension"),
            ({"categorie_id": "abc"}, 400, "Invalid category ID"),
            ({"categorie_id": INACTIVE_ID}, 404, "Category not found or inactive"),
            ({"categorie_id": 999}, 404, "Category not found or inactive"),
            ({"categorie_id": EMPTY_EXTENSIONS_ID}, 400, "File type not allowed for this category. Allowed: "),
        ],
    )
    async def test_rejected_uploads(self, client, storage, kwargs, status, detail):
        response = await upload(client, **kwargs)

        assert response.status_code == status
        assert response.json()["detail"] == detail
        assert not (storage.base_path / "dossier-00042").exists()

    async def test_missing_fields(self, client):
        no_file = await client.post(DOCUMENTS_URL, data={"categorie_id": "1"}, headers=as_user())
        no_category = await client.post(
            DOCUMENTS_URL, files={"file": ("a.pdf", PDF, "application/pdf")}, headers=as_user()
        )

        assert no_file.json()["detail"] == "No file provided"
        assert no_category.json()["detail"] == "Category ID is required"

    async def test_view_only_guest_cannot_upload(self, client):
        token = await invite(client, "view")

        response = await upload(client, headers=as_guest(token))

        assert response.status_code == 403


@pytest.mark.integration
class TestListAndDownload:
    async def test_list_shows_uploader_and_category(self, client):
        await upload(client)
        token = await invite(client, "upload_view")
        await upload(client, headers=as_guest(token), filename="foto.jpg", mime="image/jpeg")

        response = await client.get(DOCUMENTS_URL, headers=as_guest(token))

        body = response.json()
        assert body["total"] == 2
        assert {(d["uploader_naam"], d["uploader_type"]) for d in body["documenten"]} == {
            ("Olga Eigenaar", "gebruiker"),
            ("Upload_View", "gast"),
        }
        assert all(d["categorie_naam"] == "bewijs" for d in body["documenten"])

    async def test_upload_only_guest_cannot_list(self, client):
        token = await invite(client, "upload")

        assert (await upload(client, headers=as_guest(token))).status_code == 201
        assert (await client.get(DOCUMENTS_URL, headers=as_guest(token))).status_code == 403

    async def test_download_url_serves_blob(self, client):
        document_id = (await upload(client)).json()["id"]

        response = await client.get(f"{DOCUMENTS_URL}/{document_id}/download", headers=as_user())

        body = response.json()
        assert body["filename"] == "paspoort.pdf"
        assert body["mime_type"] == "application/pdf"
        assert body["size"] == len(PDF)
        assert body["expires_in_minutes"] == 15

        blob = await client.get(body["download_url"])
        assert blob.status_code == 200
        assert blob.content == PDF
        assert blob.headers["content-type"] == "application/pdf"
        assert blob.headers["content-disposition"] == 'attachment; filename="paspoort.pdf"'

    async def test_tampered_signature_rejected(self, client):
        document_id = (await upload(client)).json()["id"]
        url = (await client.get(f"{DOCUMENTS_URL}/{document_id}/download", headers=as_user())).json()["download_url"]

        response = await client.get(url.replace("signature=", "signature=0"))

        assert response.status_code == 403

    async def test_document_from_other_dossier_is_forbidden_and_audited(self, client, session_factory):
        other = await upload(
            client,
            headers=as_user(STRANGER_ID),
            url=f"/api/v1/dossiers/{OTHER_DOSSIER_ID}/documenten",
        )
        other_id = other.json()["id"]

        response = await client.get(f"{DOCUMENTS_URL}/{other_id}/download", headers=as_user())

        assert response.status_code == 403
        async with session_factory() as session:
            denied = await DocumentAuditLogRepository(session).find_by_action(AuditActie.ACCESS_DENIED)
        assert denied[0].details["requestedDocumentId"] == other_id
        assert denied[0].details["documentDossierId"] == OTHER_DOSSIER_ID

    async def test_unknown_document(self, client):
        response = await client.get(f"{DOCUMENTS_URL}/999/download", headers=as_user())

        assert response.status_code == 404
        assert response.json() == {"detail": "Document not found"}


@pytest.mark.integration
class TestDelete:
    async def test_owner_soft_deletes(self, client, storage):
        document_id = (await upload(client)).json()["id"]

        first = await client.delete(f"{DOCUMENTS_URL}/{document_id}", headers=as_user())
        second = await client.delete(f"{DOCUMENTS_URL}/{document_id}", headers=as_user())
        listing = await client.get(DOCUMENTS_URL, headers=as_user())

        assert first.status_code == 200
        assert second.status_code == 404
        assert listing.json()["total"] == 0
        # Blob retained
        assert any(p.suffix == ".pdf" for p in (storage.base_path / "dossier-00042").rglob("*"))

    async def test_shared_user_cannot_delete(self, client):
        document_id = (await upload(client)).json()["id"]

        response = await client.delete(f"{DOCUMENTS_URL}/{document_id}", headers=as_user(SHARED_USER_ID))

        assert response.status_code == 403

    async def test_guest_token_cannot_delete(self, client):
        document_id = (await upload(client)).json()["id"]
        token = await invite(client, "upload_view")

        response = await client.delete(f"{DOCUMENTS_URL}/{document_id}", headers=as_guest(token))

        assert response.status_code == 401
