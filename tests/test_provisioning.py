# tests/test_provisioning.py

"""
Tests for user, organization and tenant provisioning.
"""

import pytest
from fastapi.testclient import TestClient

from core.config import settings
from services.provisioning import generate_tenant_code
from tests.conftest import ORG_ID, OTHER_ORG_ID, auth_headers


def test_tenant_code_format():
    code = generate_tenant_code()
    assert code.startswith("TEN")
    assert len(code) == 11
    assert code[3:].isdigit()


def test_admin_creates_tenant_in_own_org(client: TestClient, fake_supabase, admin):
    response = client.post(
        "/provisioning/users",
        json={"email": "t1@example.com", "password": "secret1", "role": "tenant"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["organization_id"] == ORG_ID
    assert fake_supabase.rows("user_roles", user_id=data["userId"])[0]["role"] == "tenant"
    assert fake_supabase.rows("profiles", id=data["userId"])[0]["organization_id"] == ORG_ID
    assert fake_supabase.rows("activity_log", action="USER_CREATED")


def test_admin_cannot_create_admin(client: TestClient, fake_supabase, admin):
    response = client.post(
        "/provisioning/users",
        json={"email": "a2@example.com", "password": "secret1", "role": "admin"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 403
    assert fake_supabase.auth.find_by_email("a2@example.com") is None


def test_admin_cannot_target_other_org(client: TestClient, admin):
    response = client.post(
        "/provisioning/users",
        json={"email": "t2@example.com", "password": "secret1", "role": "tenant", "organization_id": OTHER_ORG_ID},
        headers=auth_headers(admin),
    )
    assert response.status_code == 403


def test_super_admin_creates_admin_anywhere(client: TestClient, fake_supabase, super_admin):
    response = client.post(
        "/provisioning/users",
        json={"email": "boss@example.com", "password": "secret1", "role": "admin", "organization_id": OTHER_ORG_ID},
        headers=auth_headers(super_admin),
    )
    assert response.status_code == 201
    assert response.json()["data"]["organization_id"] == OTHER_ORG_ID


def test_duplicate_email(client: TestClient, fake_supabase, super_admin):
    fake_supabase.add_user("taken@example.com")
    response = client.post(
        "/provisioning/users",
        json={"email": "taken@example.com", "password": "secret1", "role": "staff"},
        headers=auth_headers(super_admin),
    )
    assert response.status_code == 400


def test_staff_cannot_provision(client: TestClient, staff):
    response = client.post(
        "/provisioning/users",
        json={"email": "x@example.com", "password": "secret1", "role": "tenant"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 403


def test_create_organization_with_admin(client: TestClient, fake_supabase, super_admin):
    response = client.post(
        "/provisioning/organizations",
        json={"org_name": "Acme Rentals", "plan_price": 999, "admin_email": "owner@acme.com", "admin_password": "secret1"},
        headers=auth_headers(super_admin),
    )

    assert response.status_code == 201
    body = response.json()
    org = fake_supabase.rows("organizations", id=body["organizationId"])[0]
    assert org["name"] == "Acme Rentals"
    assert org["status"] == "active"
    assert fake_supabase.rows("profiles", id=body["adminUserId"])[0]["organization_id"] == org["id"]
    assert fake_supabase.rows("user_roles", user_id=body["adminUserId"])[0]["role"] == "admin"


def test_admin_cannot_create_organization(client: TestClient, admin):
    response = client.post("/provisioning/organizations", json={"org_name": "Nope"}, headers=auth_headers(admin))
    assert response.status_code == 403


def test_bootstrap_super_admin_is_idempotent(client: TestClient, fake_supabase, monkeypatch):
    monkeypatch.setattr(settings, "SUPER_ADMIN_EMAIL", "root@propdesk.io")
    monkeypatch.setattr(settings, "SUPER_ADMIN_PASSWORD", "change-me")

    first = client.post("/provisioning/super-admin")
    second = client.post("/provisioning/super-admin")

    assert first.status_code == 200
    assert second.json()["userId"] == first.json()["userId"]
    assert len(fake_supabase.rows("user_roles", user_id=first.json()["userId"], role="super_admin")) == 1


def test_bootstrap_requires_secrets(client: TestClient, monkeypatch):
    monkeypatch.setattr(settings, "SUPER_ADMIN_EMAIL", None)
    assert client.post("/provisioning/super-admin").status_code == 500


@pytest.fixture
def unit(fake_supabase):
    return fake_supabase.seed("units", unit_number="7", organization_id=ORG_ID, availability="vacant")


def test_create_tenant_user_links_all_records(client: TestClient, fake_supabase, admin, unit):
    response = client.post(
        "/provisioning/tenant-users",
        json={"name": "Meera", "email": "meera@example.com", "password": "secret1", "unit_id": unit["id"]},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    body = response.json()
    ledger, portal = body["data"], body["profile"]
    assert ledger["organization_id"] == ORG_ID
    assert ledger["user_id"] == body["userId"]
    assert portal["tenant_record_id"] == ledger["id"]
    assert portal["tenant_code"].startswith("TEN")
    assert fake_supabase.rows("user_roles", user_id=body["userId"])[0]["role"] == "tenant"

    stored_unit = fake_supabase.rows("units", id=unit["id"])[0]
    assert stored_unit["availability"] == "occupied"
    assert stored_unit["tenant_id"] == ledger["id"]
    assert ledger["unit_id"] == unit["id"]
    assert ledger["status"] == "active"


def test_create_tenant_user_rolls_back(client: TestClient, fake_supabase, admin):
    fake_supabase.fail("tenants_profile", "insert")

    response = client.post(
        "/provisioning/tenant-users",
        json={"name": "Meera", "email": "meera@example.com", "password": "secret1"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 500
    assert fake_supabase.rows("tenants", email="meera@example.com") == []
    assert fake_supabase.auth.find_by_email("meera@example.com") is None


def tenant_user_payload(**overrides) -> dict:
    payload = {"name": "Meera", "email": "meera@example.com", "password": "secret1"}
    payload.update(overrides)
    return payload


def test_create_tenant_user_refuses_occupied_unit(client: TestClient, fake_supabase, admin):
    old = fake_supabase.seed("tenants", name="Old", organization_id=ORG_ID, status="active")
    unit = fake_supabase.seed(
        "units", unit_number="8", organization_id=ORG_ID, availability="occupied", tenant_id=old["id"]
    )

    response = client.post(
        "/provisioning/tenant-users", json=tenant_user_payload(unit_id=unit["id"]), headers=auth_headers(admin)
    )

    assert response.status_code == 400
    assert fake_supabase.rows("units", id=unit["id"])[0]["tenant_id"] == old["id"]
    assert fake_supabase.rows("tenants", email="meera@example.com") == []
    assert fake_supabase.auth.find_by_email("meera@example.com") is None


def test_create_tenant_user_refuses_foreign_unit(client: TestClient, fake_supabase, admin):
    foreign = fake_supabase.seed("units", unit_number="9", organization_id=OTHER_ORG_ID, availability="vacant")

    response = client.post(
        "/provisioning/tenant-users", json=tenant_user_payload(unit_id=foreign["id"]), headers=auth_headers(admin)
    )

    assert response.status_code == 404
    assert fake_supabase.rows("tenants", email="meera@example.com") == []
    assert fake_supabase.auth.find_by_email("meera@example.com") is None


def test_create_tenant_user_inactive_with_unit(client: TestClient, fake_supabase, admin, unit):
    response = client.post(
        "/provisioning/tenant-users",
        json=tenant_user_payload(unit_id=unit["id"], status="inactive"),
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "vacant"


def test_create_tenant_user_rolls_back_failed_assignment(client: TestClient, fake_supabase, admin, unit):
    fake_supabase.fail("units", "update")

    response = client.post(
        "/provisioning/tenant-users", json=tenant_user_payload(unit_id=unit["id"]), headers=auth_headers(admin)
    )

    assert response.status_code == 500
    assert fake_supabase.rows("tenants", email="meera@example.com") == []
    assert fake_supabase.rows("tenants_profile", email="meera@example.com") == []
    assert fake_supabase.auth.find_by_email("meera@example.com") is None
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "vacant"
