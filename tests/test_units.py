# tests/test_units.py

"""
Tests for units and tenant ↔ unit assignment.
"""

import pytest
from fastapi.testclient import TestClient

from tests.conftest import ORG_ID, OTHER_ORG_ID, auth_headers


@pytest.fixture
def vacancy(fake_supabase):
    prop = fake_supabase.seed("properties", name="Lake View", organization_id=ORG_ID)
    unit = fake_supabase.seed(
        "units", property_id=prop["id"], unit_number="101", organization_id=ORG_ID,
        availability="vacant", tenant_id=None, rent=12000,
    )
    tenant = fake_supabase.seed("tenants", name="Asha", organization_id=ORG_ID, status="pending")
    return prop, unit, tenant


def test_create_unit_in_own_property(client: TestClient, fake_supabase, admin, vacancy):
    prop, _, _ = vacancy
    response = client.post(
        "/units",
        json={"property_id": prop["id"], "unit_number": "102", "organization_id": OTHER_ORG_ID},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    assert response.json()["data"]["organization_id"] == ORG_ID


def test_create_unit_in_foreign_property(client: TestClient, fake_supabase, admin):
    foreign = fake_supabase.seed("properties", name="Elsewhere", organization_id=OTHER_ORG_ID)
    response = client.post(
        "/units", json={"property_id": foreign["id"], "unit_number": "1"}, headers=auth_headers(admin)
    )
    assert response.status_code == 404


def test_list_units_is_scoped(client: TestClient, fake_supabase, admin, vacancy):
    fake_supabase.seed("units", unit_number="999", organization_id=OTHER_ORG_ID)

    response = client.get("/units", headers=auth_headers(admin))

    assert [u["unit_number"] for u in response.json()["data"]] == ["101"]


def test_assign_pairs_unit_and_tenant(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, tenant = vacancy

    response = client.post(
        f"/units/{unit['id']}/assign",
        json={"tenant_id": tenant["id"], "lease_start": "2024-01-01"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    stored_unit = fake_supabase.rows("units", id=unit["id"])[0]
    stored_tenant = fake_supabase.rows("tenants", id=tenant["id"])[0]
    assert stored_unit["availability"] == "occupied"
    assert stored_unit["tenant_id"] == tenant["id"]
    assert stored_tenant["status"] == "active"
    assert stored_tenant["unit_id"] == unit["id"]
    assert stored_tenant["rent_amount"] == 12000
    assert stored_tenant["lease_start"] == "2024-01-01"


def test_assign_restores_unit_when_tenant_write_fails(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, tenant = vacancy
    fake_supabase.fail("tenants", "update")

    response = client.post(
        f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=auth_headers(admin)
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Tenant assignment failed"}
    stored_unit = fake_supabase.rows("units", id=unit["id"])[0]
    assert stored_unit["availability"] == "vacant"
    assert stored_unit["tenant_id"] is None
    assert fake_supabase.rows("tenants", id=tenant["id"])[0]["status"] == "pending"


def test_assign_to_taken_unit(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, tenant = vacancy
    other = fake_supabase.seed("tenants", name="Ravi", organization_id=ORG_ID)
    headers = auth_headers(admin)
    client.post(f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    response = client.post(f"/units/{unit['id']}/assign", json={"tenant_id": other["id"]}, headers=headers)
    assert response.status_code == 400


def test_assign_foreign_tenant(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, _ = vacancy
    foreign = fake_supabase.seed("tenants", name="Outsider", organization_id=OTHER_ORG_ID)

    response = client.post(
        f"/units/{unit['id']}/assign", json={"tenant_id": foreign["id"]}, headers=auth_headers(admin)
    )
    assert response.status_code == 404
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "vacant"


def test_unassign(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, tenant = vacancy
    headers = auth_headers(admin)
    client.post(f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    response = client.post(f"/units/{unit['id']}/unassign", headers=headers)

    assert response.status_code == 200
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "vacant"
    stored_tenant = fake_supabase.rows("tenants", id=tenant["id"])[0]
    assert stored_tenant["status"] == "inactive"
    assert stored_tenant["unit_id"] is None


def test_unassign_empty_unit(client: TestClient, admin, vacancy):
    _, unit, _ = vacancy
    response = client.post(f"/units/{unit['id']}/unassign", headers=auth_headers(admin))
    assert response.status_code == 400


def test_occupied_unit_cannot_be_deleted_or_vacated(client: TestClient, admin, vacancy):
    _, unit, tenant = vacancy
    headers = auth_headers(admin)
    client.post(f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    assert client.delete(f"/units/{unit['id']}", headers=headers).status_code == 400
    assert client.patch(
        f"/units/{unit['id']}", json={"availability": "vacant"}, headers=headers
    ).status_code == 400


def test_staff_cannot_assign(client: TestClient, staff, vacancy):
    _, unit, tenant = vacancy
    response = client.post(f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=auth_headers(staff))
    assert response.status_code == 403


def test_assign_tenant_who_already_has_a_unit(client: TestClient, fake_supabase, admin, vacancy):
    prop, first, tenant = vacancy
    second = fake_supabase.seed(
        "units", property_id=prop["id"], unit_number="102", organization_id=ORG_ID,
        availability="vacant", tenant_id=None,
    )
    headers = auth_headers(admin)
    client.post(f"/units/{first['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    response = client.post(f"/units/{second['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    assert response.status_code == 400
    assert fake_supabase.rows("units", id=second["id"])[0]["availability"] == "vacant"
    assert fake_supabase.rows("units", id=first["id"])[0]["tenant_id"] == tenant["id"]
    assert fake_supabase.rows("tenants", id=tenant["id"])[0]["unit_id"] == first["id"]


def test_reassigning_same_unit_is_allowed(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, tenant = vacancy
    headers = auth_headers(admin)
    client.post(f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    response = client.post(
        f"/units/{unit['id']}/assign",
        json={"tenant_id": tenant["id"], "lease_end": "2025-01-01"},
        headers=headers,
    )

    assert response.status_code == 200
    assert fake_supabase.rows("tenants", id=tenant["id"])[0]["lease_end"] == "2025-01-01"


def test_housed_tenant_status_is_locked(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, tenant = vacancy
    headers = auth_headers(admin)
    client.post(f"/units/{unit['id']}/assign", json={"tenant_id": tenant["id"]}, headers=headers)

    response = client.patch(f"/tenants/{tenant['id']}", json={"status": "inactive"}, headers=headers)

    assert response.status_code == 400
    assert fake_supabase.rows("tenants", id=tenant["id"])[0]["status"] == "active"
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "occupied"

    # Other fields still editable
    renamed = client.patch(f"/tenants/{tenant['id']}", json={"name": "Asha R", "status": "active"}, headers=headers)
    assert renamed.status_code == 200


def test_unhoused_tenant_status_can_change(client: TestClient, fake_supabase, admin, vacancy):
    _, _, tenant = vacancy
    response = client.patch(f"/tenants/{tenant['id']}", json={"status": "inactive"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert fake_supabase.rows("tenants", id=tenant["id"])[0]["status"] == "inactive"


def test_empty_unit_cannot_be_marked_occupied(client: TestClient, fake_supabase, admin, vacancy):
    prop, unit, _ = vacancy
    headers = auth_headers(admin)

    patched = client.patch(f"/units/{unit['id']}", json={"availability": "occupied"}, headers=headers)
    created = client.post(
        "/units",
        json={"property_id": prop["id"], "unit_number": "103", "availability": "occupied"},
        headers=headers,
    )

    assert patched.status_code == 400
    assert created.status_code == 400
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "vacant"
    assert fake_supabase.rows("units", unit_number="103") == []


def test_empty_unit_can_go_to_maintenance(client: TestClient, fake_supabase, admin, vacancy):
    _, unit, _ = vacancy
    response = client.patch(f"/units/{unit['id']}", json={"availability": "maintenance"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert fake_supabase.rows("units", id=unit["id"])[0]["availability"] == "maintenance"
