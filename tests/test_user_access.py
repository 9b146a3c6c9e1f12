# tests/test_user_access.py

"""
Tests for role assignment and direct permission grants.
"""

from fastapi.testclient import TestClient

from core.cache import cache_get, roles_cache_key
from core.role_helpers import fetch_user_roles
from tests.conftest import OTHER_ORG_ID, auth_headers


def test_admin_assigns_staff_in_own_org(client: TestClient, fake_supabase, admin, roleless_user):
    fetch_user_roles(fake_supabase, roleless_user.id)
    assert cache_get(roles_cache_key(roleless_user.id)) is not None

    response = client.post(
        "/user-access/roles", json={"user_id": roleless_user.id, "role": "staff"}, headers=auth_headers(admin)
    )

    assert response.status_code == 201
    assert cache_get(roles_cache_key(roleless_user.id)) is None
    assert fake_supabase.rows("activity_log", action="ROLE_ASSIGNED", entity_id=roleless_user.id)

    me = client.get("/auth/me", headers=auth_headers(roleless_user))
    assert me.json()["data"]["roles"] == ["staff"]


def test_admin_cannot_assign_privileged_role(client: TestClient, admin, roleless_user):
    response = client.post(
        "/user-access/roles", json={"user_id": roleless_user.id, "role": "admin"}, headers=auth_headers(admin)
    )
    assert response.status_code == 403


def test_admin_cannot_manage_other_org(client: TestClient, fake_supabase, admin):
    outsider = fake_supabase.add_user("out@example.com", organization_id=OTHER_ORG_ID)
    response = client.post(
        "/user-access/roles", json={"user_id": outsider.id, "role": "staff"}, headers=auth_headers(admin)
    )
    assert response.status_code == 403


def test_super_admin_assigns_admin(client: TestClient, fake_supabase, super_admin):
    outsider = fake_supabase.add_user("out@example.com", organization_id=OTHER_ORG_ID)
    response = client.post(
        "/user-access/roles", json={"user_id": outsider.id, "role": "admin"}, headers=auth_headers(super_admin)
    )
    assert response.status_code == 201


def test_remove_role(client: TestClient, fake_supabase, admin, staff):
    response = client.request(
        "DELETE", "/user-access/roles", json={"user_id": staff.id, "role": "staff"}, headers=auth_headers(admin)
    )

    assert response.status_code == 200
    assert fake_supabase.rows("user_roles", user_id=staff.id) == []


def test_grant_and_revoke_permission(client: TestClient, fake_supabase, admin, staff):
    headers = auth_headers(admin)

    granted = client.post(
        "/user-access/permissions", json={"user_id": staff.id, "permission": "view_billing"}, headers=headers
    )
    assert granted.status_code == 201
    row = fake_supabase.rows("user_permissions", user_id=staff.id)[0]
    assert row["granted_by"] == admin.id
    assert client.get("/invoices", headers=auth_headers(staff)).status_code == 200

    client.request(
        "DELETE", "/user-access/permissions", json={"user_id": staff.id, "permission": "view_billing"}, headers=headers
    )
    assert client.get("/invoices", headers=auth_headers(staff)).status_code == 403


def test_grant_rejects_unknown_and_wildcard(client: TestClient, admin, staff):
    headers = auth_headers(admin)
    for name in ("*", "launch_rockets"):
        response = client.post("/user-access/permissions", json={"user_id": staff.id, "permission": name}, headers=headers)
        assert response.status_code == 400


def test_read_user_access(client: TestClient, admin, staff):
    response = client.get(f"/user-access/{staff.id}", headers=auth_headers(admin))
    assert response.json()["data"]["roles"] == ["staff"]
