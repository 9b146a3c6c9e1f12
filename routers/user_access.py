# routers/user_access.py

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from core.cache import invalidate_user_access
from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import fetch_user_permissions, requires_role
from core.permissions import Permission, WILDCARD
from core.role_helpers import fetch_user_roles
from core.roles import ADMIN_ROLES, PRIVILEGED_ROLES
from core.supabase_client import get_supabase_client
from core.supabase_helpers import log_activity
from dependencies.auth import CurrentUser, fetch_profile
from models.user_create import PermissionGrant, RoleAssignment


router = APIRouter(
    prefix="/user-access",
    tags=["Access Management"],
)

require_admin = requires_role(*ADMIN_ROLES)


# ============================================================
# Helpers
# ============================================================
def ensure_can_manage(client: Client, caller: CurrentUser, target_user_id: str):
    """
    Super admins manage anyone. Admins only manage users of their own
    organization.
    """
    if caller.role_state.is_super_admin:
        return

    target = fetch_profile(client, target_user_id)
    if not target:
        raise HTTPException(404, "User not found")
    if not caller.organization_id or target.get("organization_id") != caller.organization_id:
        raise HTTPException(403, "Cannot manage users outside your organization")


def ensure_can_grant_role(caller: CurrentUser, role):
    if role in PRIVILEGED_ROLES and not caller.role_state.is_super_admin:
        raise HTTPException(403, "Only a super admin may assign privileged roles")


def audit(client: Client, caller: CurrentUser, action: str, user_id: str, details: dict):
    log_activity(
        client,
        user_id=caller.id,
        organization_id=caller.organization_id,
        action=action,
        entity_type="user_access",
        entity_id=user_id,
        details=details,
    )


# ============================================================
# Read
# ============================================================
@router.get("/permissions/catalog", summary="Every grantable permission name")
def permission_catalog(current_user: CurrentUser = Depends(require_admin)):
    return {"success": True, "data": Permission.list()}


@router.get("/{user_id}", summary="Roles and direct grants of one user")
def user_access(
    user_id: str,
    current_user: CurrentUser = Depends(require_admin),
    client: Client = Depends(get_supabase_client),
):
    ensure_can_manage(client, current_user, user_id)

    role_state = fetch_user_roles(client, user_id, use_cache=False)
    return {
        "success": True,
        "data": {
            "user_id": user_id,
            "roles": role_state.names(),
            "permissions": fetch_user_permissions(client, user_id, use_cache=False),
        },
    }


# ============================================================
# Roles
# ============================================================
@router.post("/roles", status_code=201, summary="Assign a role")
def assign_role(
    payload: RoleAssignment,
    current_user: CurrentUser = Depends(require_admin),
    client: Client = Depends(get_supabase_client),
):
    ensure_can_grant_role(current_user, payload.role)
    ensure_can_manage(client, current_user, payload.user_id)

    try:
        client.table("user_roles").upsert(
            {"user_id": payload.user_id, "role": payload.role.value},
            on_conflict="user_id,role",
        ).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Role assignment")

    invalidate_user_access(payload.user_id)
    audit(client, current_user, "ROLE_ASSIGNED", payload.user_id, {"role": payload.role.value})
    logger.info(f"Role {payload.role.value} assigned to {payload.user_id} by {current_user.email}")

    return {"success": True, "data": {"user_id": payload.user_id, "role": payload.role.value}}


@router.delete("/roles", summary="Remove a role")
def remove_role(
    payload: RoleAssignment,
    current_user: CurrentUser = Depends(require_admin),
    client: Client = Depends(get_supabase_client),
):
    ensure_can_grant_role(current_user, payload.role)
    ensure_can_manage(client, current_user, payload.user_id)

    try:
        (
            client.table("user_roles")
            .delete()
            .eq("user_id", payload.user_id)
            .eq("role", payload.role.value)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Role removal")

    invalidate_user_access(payload.user_id)
    audit(client, current_user, "ROLE_REMOVED", payload.user_id, {"role": payload.role.value})

    return {"success": True, "message": f"Role {payload.role.value} removed"}


# ============================================================
# Direct permission grants
# ============================================================
@router.post("/permissions", status_code=201, summary="Grant a permission")
def grant_permission(
    payload: PermissionGrant,
    current_user: CurrentUser = Depends(require_admin),
    client: Client = Depends(get_supabase_client),
):
    if payload.permission == WILDCARD:
        raise HTTPException(400, "The wildcard permission cannot be granted directly")
    if payload.permission not in Permission.list():
        raise HTTPException(400, f"Unknown permission: {payload.permission}")

    ensure_can_manage(client, current_user, payload.user_id)

    try:
        client.table("user_permissions").upsert(
            {
                "user_id": payload.user_id,
                "permission": payload.permission,
                "granted_by": current_user.id,
            },
            on_conflict="user_id,permission",
        ).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Permission grant")

    invalidate_user_access(payload.user_id)
    audit(client, current_user, "PERMISSION_GRANTED", payload.user_id, {"permission": payload.permission})

    return {"success": True, "data": {"user_id": payload.user_id, "permission": payload.permission}}


@router.delete("/permissions", summary="Revoke a permission")
def revoke_permission(
    payload: PermissionGrant,
    current_user: CurrentUser = Depends(require_admin),
    client: Client = Depends(get_supabase_client),
):
    ensure_can_manage(client, current_user, payload.user_id)

    try:
        (
            client.table("user_permissions")
            .delete()
            .eq("user_id", payload.user_id)
            .eq("permission", payload.permission)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Permission revoke")

    invalidate_user_access(payload.user_id)
    audit(client, current_user, "PERMISSION_REVOKED", payload.user_id, {"permission": payload.permission})

    return {"success": True, "message": f"Permission {payload.permission} revoked"}
