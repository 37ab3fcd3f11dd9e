"""Unit tests for guest authentication and the access gate"""

from datetime import timedelta

import pytest
from starlette.requests import Request

from document_service.core.access_control import AccessGate, parse_user_id
from document_service.core.audit_log import DocumentAuditLogRepository
from document_service.core.dossier_repository import DossierRepository
from document_service.core.errors import AuthenticationError, AuthorizationError
from document_service.core.guest_auth import (
    INVALID_FORMAT,
    INVALID_TOKEN,
    NO_TOKEN,
    GuestAuthenticator,
    extract_client_ip,
    extract_guest_token,
)
from document_service.core.guest_repository import DossierGastRepository
from document_service.models import AuditActie, GastRechten, GuestActor, Permission, UserActor

from tests.support import DOSSIER_ID, OTHER_DOSSIER_ID, OWNER_ID, SHARED_USER_ID, STRANGER_ID


def make_request(headers=None, query="", client=("198.51.100.1", 50000)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "query_string": query.encode(),
        "client": client,
    }
    return Request(scope)


@pytest.fixture
def guests(db, clock):
    return DossierGastRepository(db, clock)


@pytest.fixture
def audit(db, clock):
    return DocumentAuditLogRepository(db, clock)


@pytest.fixture
def authenticator(guests, audit):
    return GuestAuthenticator(guests, audit)


@pytest.fixture
def gate(db, authenticator, audit):
    return AccessGate(DossierRepository(db), authenticator, audit)


@pytest.mark.unit
class TestRequestExtraction:
    def test_bearer_wins_over_header_and_query(self):
        request = make_request(
            {"Authorization": "Bearer aaa", "X-Guest-Token": "bbb"}, query="token=ccc"
        )

        assert extract_guest_token(request) == "aaa"

    def test_guest_header_then_query(self):
        assert extract_guest_token(make_request({"X-Guest-Token": "bbb"}, query="token=ccc")) == "bbb"
        assert extract_guest_token(make_request(query="token=ccc")) == "ccc"

    def test_non_bearer_authorization_is_ignored(self):
        assert extract_guest_token(make_request({"Authorization": "Basic Zm9vOmJhcg=="})) is None

    def test_client_ip_priority(self):
        assert extract_client_ip(make_request({"X-Forwarded-For": "10.0.0.1, 10.0.0.2"})) == "10.0.0.1"
        assert extract_client_ip(make_request({"X-Client-IP": "10.0.0.3"})) == "10.0.0.3"
        assert extract_client_ip(make_request()) == "198.51.100.1"

    @pytest.mark.parametrize("value, expected", [("7", 7), (" 12 ", 12), ("0", None), ("-1", None), ("abc", None), (None, None)])
    def test_parse_user_id(self, value, expected):
        assert parse_user_id(value) == expected


@pytest.mark.unit
class TestGuestAuthenticator:
    async def test_missing_token(self, authenticator, context):
        result = await authenticator.authenticate_token(None, context)

        assert (result.authenticated, result.error) == (False, NO_TOKEN)

    async def test_malformed_token_skips_store_and_audit(self, authenticator, audit, context):
        result = await authenticator.authenticate_token("not-a-token", context)

        assert (result.authenticated, result.error) == (False, INVALID_FORMAT)
        assert await audit.find_by_action(AuditActie.ACCESS_DENIED) == []

    async def test_unknown_token_is_audited_without_dossier(self, authenticator, audit, context):
        result = await authenticator.authenticate_token("a" * 64, context)

        assert (result.authenticated, result.error) == (False, INVALID_TOKEN)
        denied = await audit.find_by_action(AuditActie.ACCESS_DENIED)
        assert len(denied) == 1
        assert denied[0].dossier_id is None
        assert denied[0].ip_adres == "203.0.113.7"

    async def test_valid_token_records_access(self, authenticator, guests, audit, context, clock):
        gast, token = await guests.create_with_token(DOSSIER_ID, "alice@example.com", OWNER_ID)

        result = await authenticator.authenticate_token(token, context)

        assert result.authenticated
        assert result.gast.id == gast.id
        assert result.gast.eerste_toegang_op == clock()
        access = await audit.find_by_action(AuditActie.GUEST_ACCESS)
        assert [(e.dossier_id, e.gast_id) for e in access] == [(DOSSIER_ID, gast.id)]

    async def test_expired_and_revoked_look_the_same(self, authenticator, guests, context, clock):
        expired, expired_token = await guests.create_with_token(
            DOSSIER_ID, "old@example.com", OWNER_ID, token_verloopt_op=clock() - timedelta(days=1)
        )
        revoked, revoked_token = await guests.create_with_token(DOSSIER_ID, "gone@example.com", OWNER_ID)
        await guests.revoke(revoked.id)

        first = await authenticator.authenticate_token(expired_token, context)
        second = await authenticator.authenticate_token(revoked_token, context)

        assert first == second


@pytest.mark.unit
class TestAccessGate:
    async def test_user_from_header(self, gate):
        actor = await gate.authenticate(make_request({"X-User-ID": str(OWNER_ID)}))

        assert actor == UserActor(user_id=OWNER_ID)

    async def test_no_identity(self, gate):
        with pytest.raises(AuthenticationError):
            await gate.authenticate(make_request())

    async def test_guest_token_never_falls_back_to_user(self, gate):
        request = make_request({"X-User-ID": str(OWNER_ID), "X-Guest-Token": "b" * 64})

        with pytest.raises(AuthenticationError):
            await gate.authenticate(request)

    async def test_skip_auth_uses_dev_user(self, db, authenticator, audit):
        gate = AccessGate(DossierRepository(db), authenticator, audit, skip_auth=True, dev_user_id=9)

        assert gate.authenticate_user(make_request()) == UserActor(user_id=9)

    async def test_guest_token_authenticates_guest(self, gate, guests):
        gast, token = await guests.create_with_token(DOSSIER_ID, "alice@example.com", OWNER_ID)

        actor = await gate.authenticate(make_request({"Authorization": f"Bearer {token}"}))

        assert isinstance(actor, GuestActor)
        assert actor.gast_id == gast.id

    @pytest.mark.parametrize("user_id", [OWNER_ID, SHARED_USER_ID])
    async def test_owner_and_shared_user_pass(self, gate, context, user_id):
        await gate.require_dossier_access(UserActor(user_id=user_id), DOSSIER_ID, Permission.UPLOAD, context)

    async def test_stranger_denied_and_audited(self, gate, audit, context):
        with pytest.raises(AuthorizationError):
            await gate.require_dossier_access(UserActor(user_id=STRANGER_ID), DOSSIER_ID, Permission.VIEW, context)

        denied = await audit.find_access_denied(DOSSIER_ID)
        assert denied[0].gebruiker_id == STRANGER_ID
        assert denied[0].details["reason"] == "User has no access to dossier"

    async def test_guest_bound_to_other_dossier_denied(self, gate, guests, audit, context):
        gast, _ = await guests.create_with_token(DOSSIER_ID, "alice@example.com", OWNER_ID)

        with pytest.raises(AuthorizationError):
            await gate.require_dossier_access(GuestActor(gast=gast), OTHER_DOSSIER_ID, Permission.VIEW, context)

        denied = await audit.find_access_denied(OTHER_DOSSIER_ID)
        assert denied[0].gast_id == gast.id
        assert denied[0].details["requestedDossierId"] == OTHER_DOSSIER_ID
        assert denied[0].details["guestDossierId"] == DOSSIER_ID

    async def test_guest_permission_enforced(self, gate, guests, audit, context):
        gast, _ = await guests.create_with_token(
            DOSSIER_ID, "viewer@example.com", OWNER_ID, rechten=GastRechten.VIEW
        )
        actor = GuestActor(gast=gast)

        await gate.require_dossier_access(actor, DOSSIER_ID, Permission.VIEW, context)
        with pytest.raises(AuthorizationError):
            await gate.require_dossier_access(actor, DOSSIER_ID, Permission.UPLOAD, context)

        denied = await audit.find_access_denied(DOSSIER_ID)
        assert denied[0].details == {"reason": "Guest lacks upload permission", "rechten": "view"}

    async def test_require_owner(self, gate, guests, context):
        gast, _ = await guests.create_with_token(DOSSIER_ID, "alice@example.com", OWNER_ID)

        assert await gate.require_owner(UserActor(user_id=OWNER_ID), DOSSIER_ID, context) == UserActor(user_id=OWNER_ID)
        with pytest.raises(AuthorizationError):
            await gate.require_owner(UserActor(user_id=SHARED_USER_ID), DOSSIER_ID, context)
        with pytest.raises(AuthorizationError):
            await gate.require_owner(GuestActor(gast=gast), DOSSIER_ID, context)
