# tests/test_session.py

"""
Session resolution, caching and refresh.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from core import cache
from core.session import SessionContext, SessionState
from models.enums import Role


def test_resolve_builds_identity(fake_db, resident):
    session = SessionContext()
    assert session.state == SessionState.uninitialized

    user = session.resolve(fake_db, resident.token)

    assert session.state == SessionState.resolved
    assert session.is_resolved
    assert user.id == resident.id
    assert user.role == Role.resident
    assert user.wing == "A"
    assert user.flat_number == "101"


def test_second_resolution_is_served_from_cache(fake_db, resident):
    SessionContext().resolve(fake_db, resident.token)
    calls_before = len(fake_db.calls)

    SessionContext().resolve(fake_db, resident.token)

    assert fake_db.auth.get_user_calls == 1
    assert len(fake_db.calls) == calls_before


def test_missing_role_row_means_no_role(fake_db, unroled):
    user = SessionContext().resolve(fake_db, unroled.token)
    assert user.role is None
    assert user.effective_role == Role.resident
    assert not user.has_role(Role.resident)


def test_unknown_role_value_means_no_role(fake_db):
    principal = fake_db.add_user(None)
    fake_db.add_row("user_roles", {"user_id": principal.id, "role": "superuser"})

    user = SessionContext().resolve(fake_db, principal.token)
    assert user.role is None


def test_invalid_token_is_unauthenticated(fake_db):
    session = SessionContext()
    with pytest.raises(HTTPException) as exc:
        session.resolve(fake_db, "not-a-token")
    assert exc.value.status_code == 401
    assert session.state == SessionState.uninitialized


def test_initial_lookup_failure_is_unauthenticated(fake_db, resident):
    fake_db.fail("user_roles", "select")
    session = SessionContext()

    with pytest.raises(HTTPException) as exc:
        session.resolve(fake_db, resident.token)

    assert exc.value.status_code == 401
    assert session.user is None


def test_refresh_failure_keeps_previous_identity(fake_db, resident):
    session = SessionContext()
    original = session.resolve(fake_db, resident.token)

    fake_db.fail("user_roles", "select")
    refreshed = session.refresh(fake_db)

    assert refreshed == original
    assert session.state == SessionState.resolved


def test_refresh_picks_up_changes(fake_db, resident):
    session = SessionContext()
    session.resolve(fake_db, resident.token)

    profile = next(p for p in fake_db.rows("profiles") if p["user_id"] == resident.id)
    profile["full_name"] = "Asha R."

    assert session.refresh(fake_db).full_name == "Asha R."
    assert cache.cached_identity(resident.id).full_name == "Asha R."


def test_sign_out_clears_cache(fake_db, resident):
    session = SessionContext()
    session.resolve(fake_db, resident.token)

    session.sign_out(fake_db)

    assert session.state == SessionState.signed_out
    assert session.user is None
    assert cache.lookup_session(resident.token) is None
    assert cache.cached_identity(resident.id) is None


def test_me_refresh_endpoint(client: TestClient, fake_db, resident):
    client.get("/auth/me", headers=resident.headers)

    profile = next(p for p in fake_db.rows("profiles") if p["user_id"] == resident.id)
    profile["flat_number"] = "102"

    # cached until refreshed
    assert client.get("/auth/me", headers=resident.headers).json()["flat_number"] == "101"
    assert client.get("/auth/me?refresh=true", headers=resident.headers).json()["flat_number"] == "102"
