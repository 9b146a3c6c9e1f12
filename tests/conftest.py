# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from main import create_app
from core.supabase_client import get_supabase_client
from tests.fake_supabase import FakeSupabase


ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    """Fresh in-memory store for every test."""
    return FakeSupabase()


@pytest.fixture(scope="function")
def app(fake_supabase):
    """Create a test FastAPI application instance wired to the fake store."""
    application = create_app()
    application.dependency_overrides[get_supabase_client] = lambda: fake_supabase
    yield application
    application.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {user.token}"}


@pytest.fixture
def super_admin(fake_supabase):
    return fake_supabase.add_user("root@example.com", roles=["super_admin"], organization_id=ORG_ID)


@pytest.fixture
def admin(fake_supabase):
    return fake_supabase.add_user("admin@example.com", roles=["admin"], organization_id=ORG_ID)


@pytest.fixture
def other_admin(fake_supabase):
    return fake_supabase.add_user("admin2@example.com", roles=["admin"], organization_id=OTHER_ORG_ID)


@pytest.fixture
def staff(fake_supabase):
    return fake_supabase.add_user("staff@example.com", roles=["staff"], organization_id=ORG_ID)


@pytest.fixture
def tenant_user(fake_supabase):
    """Tenant login with its ledger row in ORG_ID."""
    user = fake_supabase.add_user("tenant@example.com", roles=["tenant"], organization_id=ORG_ID)
    user.tenant = fake_supabase.seed(
        "tenants",
        name="Test Tenant",
        email="tenant@example.com",
        organization_id=ORG_ID,
        user_id=user.id,
        status="active",
    )
    return user


@pytest.fixture
def roleless_user(fake_supabase):
    return fake_supabase.add_user("nobody@example.com", roles=[], organization_id=ORG_ID)


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache and rate limits before each test."""
    from core.cache import cache_clear
    from core.rate_limiter import reset_rate_limits
    cache_clear()
    reset_rate_limits()
    yield
    cache_clear()
    reset_rate_limits()
