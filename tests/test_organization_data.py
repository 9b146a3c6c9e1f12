# tests/test_organization_data.py

"""
Tests for organization scoping of properties, tenants and maintenance tickets.
"""

import logging

from fastapi.testclient import TestClient

from core.logging_config import logger
from tests.conftest import ORG_ID, OTHER_ORG_ID, auth_headers


def test_property_created_in_caller_org(client: TestClient, fake_supabase, admin):
    response = client.post(
        "/properties",
        json={"name": "  Palm Court  ", "organization_id": OTHER_ORG_ID},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["name"] == "Palm Court"
    assert data["organization_id"] == ORG_ID


def test_property_search_is_scoped(client: TestClient, fake_supabase, admin):
    fake_supabase.seed("properties", name="Palm Court", organization_id=ORG_ID)
    fake_supabase.seed("properties", name="Palm Springs", organization_id=OTHER_ORG_ID)
    fake_supabase.seed("properties", name="Oak House", organization_id=ORG_ID)

    response = client.get("/properties", params={"search": "palm"}, headers=auth_headers(admin))

    assert [p["name"] for p in response.json()["data"]] == ["Palm Court"]


def test_foreign_property_cannot_be_changed(client: TestClient, fake_supabase, admin, other_admin):
    foreign = fake_supabase.seed("properties", name="Theirs", organization_id=OTHER_ORG_ID)
    headers = auth_headers(admin)

    assert client.get(f"/properties/{foreign['id']}", headers=headers).status_code == 404
    assert client.patch(f"/properties/{foreign['id']}", json={"name": "Mine"}, headers=headers).status_code == 404
    assert client.delete(f"/properties/{foreign['id']}", headers=headers).status_code == 404
    assert fake_supabase.rows("properties", id=foreign["id"])[0]["name"] == "Theirs"


def test_user_without_organization(client: TestClient, fake_supabase):
    drifter = fake_supabase.add_user("drifter@example.com", roles=["admin"], organization_id=None)
    response = client.get("/properties", headers=auth_headers(drifter))
    assert response.status_code == 403


def test_empty_patch(client: TestClient, fake_supabase, admin):
    prop = fake_supabase.seed("properties", name="Palm Court", organization_id=ORG_ID)
    assert client.patch(f"/properties/{prop['id']}", json={}, headers=auth_headers(admin)).status_code == 400


def test_store_errors_are_generic(client: TestClient, fake_supabase, admin):
    fake_supabase.fail("properties", "select", "relation properties: password=hunter2 leaked")

    response = client.get("/properties", headers=auth_headers(admin))

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to fetch properties"}


# -----------------------------------------------------
# Tenants
# -----------------------------------------------------
def test_tenant_create_refuses_direct_unit(client: TestClient, admin):
    response = client.post("/tenants", json={"name": "Asha", "unit_id": "u1"}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_tenant_with_unit_cannot_be_deleted(client: TestClient, fake_supabase, admin):
    tenant = fake_supabase.seed("tenants", name="Asha", organization_id=ORG_ID, unit_id="u1")
    assert client.delete(f"/tenants/{tenant['id']}", headers=auth_headers(admin)).status_code == 400


def test_tenant_status_filter(client: TestClient, fake_supabase, admin):
    fake_supabase.seed("tenants", name="A", organization_id=ORG_ID, status="active")
    fake_supabase.seed("tenants", name="B", organization_id=ORG_ID, status="inactive")

    response = client.get("/tenants", params={"status": "inactive"}, headers=auth_headers(admin))
    assert [t["name"] for t in response.json()["data"]] == ["B"]


# -----------------------------------------------------
# Maintenance
# -----------------------------------------------------
def test_staff_opens_and_progresses_ticket(client: TestClient, fake_supabase, staff):
    headers = auth_headers(staff)
    created = client.post(
        "/maintenance", json={"title": "Leaking tap", "priority": "high"}, headers=headers
    )

    assert created.status_code == 201
    ticket = created.json()["data"]
    assert ticket["status"] == "open"
    assert ticket["created_by"] == staff.id

    updated = client.patch(f"/maintenance/{ticket['id']}", json={"status": "in_progress"}, headers=headers)
    assert updated.json()["data"]["status"] == "in_progress"

    assert client.delete(f"/maintenance/{ticket['id']}", headers=headers).status_code == 403


def test_health(client: TestClient, fake_supabase):
    fake_supabase.fail("invoices", "select")

    app_health = client.get("/health/app").json()
    db_health = client.get("/health/db").json()

    assert app_health["status"] == "ok"
    assert db_health["status"] == "degraded"
    assert db_health["details"]["tables"]["properties"]["status"] == "ok"


class _PathlessRoute:
    """Route entry without a path attribute, as some included routers expose."""


def test_startup_route_listing_tolerates_pathless_routes(app, caplog):
    app.router.routes.append(_PathlessRoute())
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    try:
        with caplog.at_level(logging.DEBUG, logger=logger.name):
            with TestClient(app):
                pass
    finally:
        logger.setLevel(previous)
        logger.propagate = False
        app.router.routes.pop()

    assert any("/health/app" in record.getMessage() for record in caplog.records)
