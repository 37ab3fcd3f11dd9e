"""Unit tests for the guest access store"""

from datetime import timedelta

import pytest

from document_service.core.errors import ConflictError
from document_service.core.guest_repository import DossierGastRepository
from document_service.core.tokens import hash_token, is_valid_token_format
from document_service.models import GastRechten, Permission

from tests.support import DOSSIER_ID, OTHER_DOSSIER_ID, OWNER_ID


@pytest.fixture
def guests(db, clock):
    return DossierGastRepository(db, clock)


async def invite(guests, email="alice@example.com", rechten=GastRechten.UPLOAD_VIEW, **kwargs):
    return await guests.create_with_token(
        dossier_id=kwargs.pop("dossier_id", DOSSIER_ID),
        email=email,
        invited_by_user_id=OWNER_ID,
        rechten=rechten,
        **kwargs,
    )


@pytest.mark.unit
class TestCreateWithToken:
    """Invitation and token issuance"""

    async def test_returns_plaintext_token_and_stores_only_hash(self, guests, clock):
        gast, token = await invite(guests, email="  Alice@Example.COM ", naam="Alice")

        assert is_valid_token_format(token)
        assert gast.token_hash == hash_token(token)
        assert gast.email == "alice@example.com"
        assert gast.naam == "Alice"
        assert gast.rechten == GastRechten.UPLOAD_VIEW
        assert gast.token_verloopt_op == clock() + timedelta(days=30)
        assert gast.ingetrokken is False

    async def test_duplicate_email_per_dossier_conflicts(self, guests):
        await invite(guests, email="alice@example.com")

        with pytest.raises(ConflictError):
            await invite(guests, email="ALICE@example.com")

    async def test_same_email_allowed_in_other_dossier(self, guests):
        await invite(guests)
        gast, _ = await invite(guests, dossier_id=OTHER_DOSSIER_ID)

        assert gast.dossier_id == OTHER_DOSSIER_ID

    async def test_exists_by_email_is_case_insensitive(self, guests):
        await invite(guests)

        assert await guests.exists_by_email(DOSSIER_ID, "Alice@Example.com")
        assert not await guests.exists_by_email(OTHER_DOSSIER_ID, "alice@example.com")


@pytest.mark.unit
class TestFindByToken:
    """Token lookup collapses unknown, expired and revoked"""

    async def test_round_trip(self, guests):
        created, token = await invite(guests, rechten=GastRechten.VIEW)

        found = await guests.find_by_token(token)

        assert found is not None
        assert found.id == created.id
        assert found.dossier_id == DOSSIER_ID
        assert found.email == "alice@example.com"
        assert found.rechten == GastRechten.VIEW

    async def test_other_strings_do_not_match(self, guests):
        _, token = await invite(guests)

        assert await guests.find_by_token(token[::-1]) is None
        assert await guests.find_by_token("0" * 64) is None

    async def test_uppercase_copy_matches(self, guests):
        created, token = await invite(guests)

        assert (await guests.find_by_token(token.upper())).id == created.id

    async def test_expired_token_not_found(self, guests, clock):
        _, token = await invite(guests, token_verloopt_op=clock() - timedelta(seconds=1))

        assert await guests.find_by_token(token) is None

    async def test_token_stops_working_when_clock_passes_expiry(self, guests, clock):
        _, token = await invite(guests, token_verloopt_op=clock() + timedelta(days=1))
        assert await guests.find_by_token(token) is not None

        clock.advance(days=1)
        assert await guests.find_by_token(token) is None

    async def test_revoked_token_not_found(self, guests):
        gast, token = await invite(guests)

        assert await guests.revoke(gast.id) is True
        assert await guests.find_by_token(token) is None
        assert await guests.revoke(gast.id) is False

    async def test_revoke_unknown_guest_returns_false(self, guests):
        assert await guests.revoke(9999) is False


@pytest.mark.unit
class TestRegenerateToken:
    async def test_old_token_invalid_new_token_valid(self, guests):
        gast, old_token = await invite(guests)

        _, new_token = await guests.regenerate_token(gast.id)

        assert new_token != old_token
        assert await guests.find_by_token(old_token) is None
        assert (await guests.find_by_token(new_token)).id == gast.id

    async def test_clears_revocation_and_extends_expiry(self, guests, clock):
        gast, _ = await invite(guests, token_verloopt_op=clock() + timedelta(days=1))
        await guests.revoke(gast.id)

        regenerated, token = await guests.regenerate_token(gast.id, expiry_days=10)

        assert regenerated.ingetrokken is False
        assert regenerated.ingetrokken_op is None
        assert regenerated.token_verloopt_op == clock() + timedelta(days=10)
        assert await guests.find_by_token(token) is not None

    async def test_unknown_guest_raises(self, guests):
        with pytest.raises(LookupError):
            await guests.regenerate_token(9999)


@pytest.mark.unit
class TestIsolationAndPermissions:
    async def test_belongs_to_dossier(self, guests):
        gast, _ = await invite(guests)

        assert await guests.belongs_to_dossier(gast.id, DOSSIER_ID)
        assert not await guests.belongs_to_dossier(gast.id, OTHER_DOSSIER_ID)

    @pytest.mark.parametrize(
        "rechten, can_upload, can_view",
        [
            (GastRechten.UPLOAD, True, False),
            (GastRechten.VIEW, False, True),
            (GastRechten.UPLOAD_VIEW, True, True),
        ],
    )
    async def test_permission_matrix(self, guests, rechten, can_upload, can_view):
        gast, _ = await invite(guests, rechten=rechten)

        assert await guests.has_permission(gast.id, Permission.UPLOAD) is can_upload
        assert await guests.has_permission(gast.id, Permission.VIEW) is can_view

    async def test_revoked_guest_has_no_permission(self, guests):
        gast, _ = await invite(guests)
        await guests.revoke(gast.id)

        assert await guests.has_permission(gast.id, Permission.VIEW) is False


@pytest.mark.unit
class TestAccessBookkeeping:
    async def test_first_access_set_once(self, guests, clock):
        gast, _ = await invite(guests)
        first_seen = clock()

        updated = await guests.record_first_access(gast.id)
        assert updated.eerste_toegang_op == first_seen
        assert updated.laatste_toegang_op == first_seen

        clock.advance(hours=2)
        updated = await guests.record_first_access(gast.id)
        assert updated.eerste_toegang_op == first_seen
        assert updated.laatste_toegang_op == clock()

    async def test_mark_invitation_sent(self, guests, clock):
        gast, _ = await invite(guests)

        updated = await guests.mark_invitation_sent(gast.id)

        assert updated.uitnodiging_verzonden_op == clock()

    async def test_listing_and_counts(self, guests, clock):
        first, _ = await invite(guests, email="a@example.com")
        clock.advance(minutes=1)
        second, _ = await invite(guests, email="b@example.com")
        await guests.revoke(first.id)

        assert [g.id for g in await guests.find_by_dossier_id(DOSSIER_ID)] == [second.id, first.id]
        assert [g.id for g in await guests.find_active_by_dossier_id(DOSSIER_ID)] == [second.id]
        assert await guests.get_count(DOSSIER_ID) == 2
        assert await guests.get_count(DOSSIER_ID, active_only=True) == 1

    async def test_delete(self, guests):
        gast, _ = await invite(guests)

        assert await guests.delete(gast.id) is True
        assert await guests.find_by_id(gast.id) is None
        assert await guests.delete(gast.id) is False

    async def test_update_last_access_leaves_first_access(self, guests, clock):
        gast, _ = await invite(guests)

        clock.advance(minutes=5)
        await guests.update_last_access(gast.id)
        updated = await guests.find_by_id(gast.id)

        assert updated.laatste_toegang_op == clock()
        assert updated.eerste_toegang_op is None
