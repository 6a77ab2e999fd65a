# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from main import create_app
from core.realtime import change_feed
from core.supabase_client import get_auth_client, get_supabase_client
from tests.fake_supabase import FakeSupabase


@pytest.fixture
def fake_db() -> FakeSupabase:
    """Fresh in-memory Supabase for every test."""
    return FakeSupabase()


@pytest.fixture(scope="function")
def app(fake_db):
    """Create a test FastAPI application wired to the in-memory backend."""
    application = create_app()
    application.dependency_overrides[get_supabase_client] = lambda: fake_db
    application.dependency_overrides[get_auth_client] = lambda: fake_db
    return application


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


# -----------------------------------------------------
# Principals
# -----------------------------------------------------
@pytest.fixture
def resident(fake_db):
    return fake_db.add_user("resident", full_name="Asha Rao", wing="A", flat_number="101")


@pytest.fixture
def other_resident(fake_db):
    return fake_db.add_user("resident", full_name="Vikram Shah", wing="B", flat_number="204")


@pytest.fixture
def admin(fake_db):
    return fake_db.add_user("admin", full_name="Committee Chair")


@pytest.fixture
def staff(fake_db):
    return fake_db.add_user("maintenance_staff", full_name="Ravi Kumar")


@pytest.fixture
def other_staff(fake_db):
    return fake_db.add_user("maintenance_staff", full_name="Sunil Patil")


@pytest.fixture
def unroled(fake_db):
    """Signed-in principal whose user_roles row is missing."""
    return fake_db.add_user(None, full_name="No Role Yet", wing="C", flat_number="301")


@pytest.fixture(autouse=True)
def reset_state():
    """Reset cache, realtime subscribers and rate limits around each test."""
    from core.cache import cache_clear
    from core.rate_limiter import reset_rate_limits

    cache_clear()
    change_feed.clear()
    reset_rate_limits()
    yield
    cache_clear()
    change_feed.clear()
    reset_rate_limits()
