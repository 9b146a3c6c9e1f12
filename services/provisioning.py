# services/provisioning.py

import secrets
from typing import Optional

from fastapi import HTTPException

from core.cache import invalidate_user_access
from core.config import settings
from core.errors import handle_supabase_error, supabase_error
from core.logging_config import logger
from core.roles import PRIVILEGED_ROLES, Role
from core.supabase_helpers import (
    create_supabase_user,
    delete_supabase_user,
    get_org_row,
    log_activity,
    upsert_profile,
)
from core.utils import sanitize
from models.enums import OrganizationStatus, TenantStatus
from models.unit import UnitAssignment
from models.user_create import AdminCreateUser, OrganizationCreate, TenantUserCreate
from services.tenant_assignment import assign_tenant


# ============================================================
# Helpers
# ============================================================
def generate_tenant_code() -> str:
    """TEN + 8 digits, shown to tenants and searchable by staff."""
    return "TEN" + "".join(secrets.choice("0123456789") for _ in range(8))


def grant_role(client, user_id: str, role: Role):
    try:
        client.table("user_roles").upsert(
            {"user_id": user_id, "role": role.value}, on_conflict="user_id,role"
        ).execute()
    except Exception as e:
        supabase_error(e, f"Failed to assign role {role.value}")
    invalidate_user_access(user_id)


def resolve_target_organization(caller, requested: Optional[str]) -> Optional[str]:
    """
    Admins always provision into their own organization; a super_admin may
    name any organization and otherwise falls back to their own.
    """
    if caller.role_state.is_super_admin:
        return requested or caller.organization_id
    if requested and requested != caller.organization_id:
        raise HTTPException(403, "Cannot create users in another organization")
    return caller.organization_id


# ============================================================
# create-user
# ============================================================
def create_user(client, caller, payload: AdminCreateUser) -> dict:
    role_state = caller.role_state

    if not role_state.is_super_admin:
        # Admins may only onboard tenants
        if not role_state.is_admin or payload.role != Role.tenant:
            raise HTTPException(403, "Forbidden: Super Admin access required")

    if payload.role in PRIVILEGED_ROLES and not role_state.is_super_admin:
        raise HTTPException(403, "Only a super admin may assign privileged roles")

    org_id = resolve_target_organization(caller, payload.organization_id)
    if not org_id and payload.role != Role.super_admin:
        raise HTTPException(400, "Organization ID is required")

    user = create_supabase_user(
        client,
        payload.email,
        payload.password,
        {"full_name": payload.full_name or ""},
    )

    try:
        upsert_profile(client, user.id, payload.email, payload.full_name, org_id)
        grant_role(client, user.id, payload.role)
    except HTTPException:
        delete_supabase_user(client, user.id)
        raise

    log_activity(
        client,
        user_id=caller.id,
        organization_id=org_id,
        action="USER_CREATED",
        entity_type="profiles",
        entity_id=user.id,
        details={"email": payload.email, "role": payload.role.value},
    )
    logger.info(f"User {payload.email} created with role {payload.role.value} by {caller.email}")

    return {"userId": user.id, "organization_id": org_id, "role": payload.role.value}


# ============================================================
# create-organization
# ============================================================
def create_organization(client, caller, payload: OrganizationCreate) -> dict:
    try:
        result = (
            client.table("organizations")
            .insert(
                sanitize(
                    {
                        "name": payload.org_name,
                        "plan_price": payload.plan_price,
                        "plan_valid_until": payload.plan_valid_until,
                        "status": OrganizationStatus.active.value,
                    }
                ),
                returning="representation",
            )
            .execute()
        )
    except Exception as e:
        supabase_error(e, "Failed to create organization")

    org = result.data[0]
    admin_user_id = None

    if payload.admin_email and payload.admin_password:
        user = create_supabase_user(
            client,
            payload.admin_email,
            payload.admin_password,
            {"full_name": payload.admin_full_name or ""},
        )
        admin_user_id = user.id
        try:
            upsert_profile(client, user.id, payload.admin_email, payload.admin_full_name, org["id"])
            grant_role(client, user.id, Role.admin)
        except HTTPException:
            delete_supabase_user(client, user.id)
            raise

    log_activity(
        client,
        user_id=caller.id,
        organization_id=org["id"],
        action="ORGANIZATION_CREATED",
        entity_type="organizations",
        entity_id=org["id"],
        details={"name": payload.org_name, "admin_email": payload.admin_email},
    )

    return {
        "message": (
            "Organization and Admin created successfully"
            if admin_user_id else "Organization created successfully"
        ),
        "organizationId": org["id"],
        "adminUserId": admin_user_id,
    }


# ============================================================
# create-super-admin (bootstrap, idempotent)
# ============================================================
def _find_user_by_email(client, email: str):
    try:
        users = client.auth.admin.list_users()
    except Exception as e:
        supabase_error(e, "Failed to list users")
    for user in users or []:
        if (user.email or "").lower() == email.lower():
            return user
    return None


def bootstrap_super_admin(client) -> dict:
    email = settings.SUPER_ADMIN_EMAIL
    password = settings.SUPER_ADMIN_PASSWORD
    if not email or not password:
        raise HTTPException(500, "SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD secrets must be set")

    existing = _find_user_by_email(client, email)
    if existing:
        upsert_profile(client, existing.id, email, "Super Admin")
        grant_role(client, existing.id, Role.super_admin)
        logger.info("Super admin role ensured for existing user")
        return {"message": "Super Admin role assigned to existing user", "userId": existing.id}

    user = create_supabase_user(client, email, password, {"full_name": "Super Admin"})
    upsert_profile(client, user.id, email, "Super Admin")
    grant_role(client, user.id, Role.super_admin)
    logger.info("Super admin created")
    return {"message": "Super Admin created successfully", "userId": user.id}


# ============================================================
# create-tenant-user
# ============================================================
def _check_unit_available(client, org_id: str, unit_id: str):
    unit = get_org_row(client, "units", unit_id, org_id, "Unit")
    if unit.get("tenant_id"):
        raise HTTPException(400, "Unit is already assigned to another tenant")
    return unit


def _remove_rows(client, table: str, row_id: str):
    try:
        client.table(table).delete().eq("id", row_id).execute()
    except Exception as cleanup_error:
        logger.error(f"Failed to remove {table} row {row_id}: {cleanup_error}")


def create_tenant_user(client, caller, payload: TenantUserCreate) -> dict:
    """
    Creates, in order:
      1. auth user
      2. `tenant` role
      3. ledger row in `tenants` (no unit link yet)
      4. portal row in `tenants_profile` linked by tenant_record_id
      5. optional unit assignment through `assign_tenant`

    Any failure removes what was written (portal row, ledger row, auth user).
    The unit is checked before anything is created.
    """
    org_id = resolve_target_organization(caller, payload.organization_id)
    if not org_id:
        raise HTTPException(400, "Organization ID is required")

    if payload.unit_id:
        if payload.status != TenantStatus.active:
            raise HTTPException(400, "A tenant placed in a unit must be active")
        _check_unit_available(client, org_id, payload.unit_id)
    elif payload.property_id:
        get_org_row(client, "properties", payload.property_id, org_id, "Property")

    user = create_supabase_user(client, payload.email, payload.password, {"full_name": payload.name})
    ledger = None
    portal = None

    try:
        upsert_profile(client, user.id, payload.email, payload.name, org_id)
        grant_role(client, user.id, Role.tenant)

        ledger_result = (
            client.table("tenants")
            .insert(
                sanitize(
                    {
                        "name": payload.name,
                        "email": payload.email,
                        "phone": payload.phone,
                        "lease_start": payload.lease_start,
                        "lease_end": payload.lease_end,
                        "status": payload.status.value,
                        "organization_id": org_id,
                        # set from the unit by assign_tenant
                        "property_id": None if payload.unit_id else payload.property_id,
                        "rent_amount": payload.rent_amount,
                        "user_id": user.id,
                    }
                ),
                returning="representation",
            )
            .execute()
        )
        ledger = ledger_result.data[0]

        profile_result = (
            client.table("tenants_profile")
            .insert(
                sanitize(
                    {
                        "user_id": user.id,
                        "tenant_code": generate_tenant_code(),
                        "full_name": payload.name,
                        "email": payload.email,
                        "phone": payload.phone,
                        "status": payload.status.value,
                        "tenant_record_id": ledger["id"],
                    }
                ),
                returning="representation",
            )
            .execute()
        )
        portal = profile_result.data[0]

        if payload.unit_id:
            assigned = assign_tenant(
                client,
                org_id,
                payload.unit_id,
                UnitAssignment(
                    tenant_id=ledger["id"],
                    lease_start=payload.lease_start,
                    lease_end=payload.lease_end,
                    rent_amount=payload.rent_amount,
                ),
            )
            ledger = assigned["tenant"]

    except Exception as e:
        if portal:
            _remove_rows(client, "tenants_profile", portal["id"])
        if ledger:
            _remove_rows(client, "tenants", ledger["id"])
        delete_supabase_user(client, user.id)
        if isinstance(e, HTTPException):
            raise
        raise handle_supabase_error(e, "Tenant user creation")

    log_activity(
        client,
        user_id=caller.id,
        organization_id=org_id,
        action="TENANT_USER_CREATED",
        entity_type="tenants",
        entity_id=ledger["id"],
        details={"email": payload.email, "tenant_code": portal.get("tenant_code"), "unit_id": payload.unit_id},
    )

    return {
        "message": "Tenant user created successfully",
        "data": ledger,
        "profile": portal,
        "userId": user.id,
    }
