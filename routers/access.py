# routers/access.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.guards import (
    ROUTE_GUARDS,
    evaluate_guard,
    evaluate_protected_route,
    guard_for_path,
    resolve_redirect,
)
from core.permission_helpers import PermissionState
from core.permissions import ROUTE_PERMISSIONS
from core.role_helpers import RoleState
from dependencies.auth import CurrentUser, get_current_user, get_optional_auth


router = APIRouter(
    prefix="/access",
    tags=["Access"],
)


# -----------------------------------------------------
# GET /access/roles
# -----------------------------------------------------
@router.get("/roles", summary="Resolved role tiers of the caller")
def my_roles(current_user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": current_user.role_state.summary()}


# -----------------------------------------------------
# GET /access/permissions
# -----------------------------------------------------
@router.get("/permissions", summary="Effective permissions of the caller")
def my_permissions(current_user: CurrentUser = Depends(get_current_user)):
    return {
        "success": True,
        "data": {
            "permissions": current_user.permissions,
            "routes": {
                route: current_user.permission_state.can_access_route(route)
                for route in ROUTE_PERMISSIONS
            },
        },
    }


# -----------------------------------------------------
# GET /access/redirect
# Landing decision after sign-in (token optional)
# -----------------------------------------------------
@router.get("/redirect", summary="Landing page for the caller")
def landing_redirect(current_user: Optional[CurrentUser] = Depends(get_optional_auth)):
    role_state = current_user.role_state if current_user else RoleState.resolved()
    decision = resolve_redirect(False, current_user, role_state)
    return {"success": True, "data": decision.model_dump(mode="json")}


# -----------------------------------------------------
# GET /access/check?path=/admin/tenants
# Guard decision for an SPA path (token optional)
# -----------------------------------------------------
@router.get("/check", summary="Guard decision for an SPA path")
def check_path(
    path: str = Query(..., min_length=1),
    permission: Optional[str] = None,
    current_user: Optional[CurrentUser] = Depends(get_optional_auth),
):
    role_state = current_user.role_state if current_user else RoleState.resolved()
    permission_state = current_user.permission_state if current_user else PermissionState()

    guard = guard_for_path(path)
    if guard is not None:
        decision = evaluate_guard(current_user, role_state, guard, path)
    else:
        # Paths outside the tier prefixes use the permission route table
        required = permission or next(iter(ROUTE_PERMISSIONS.get(path, [])), None)
        decision = evaluate_protected_route(current_user, permission_state, required, path)

    return {"success": True, "data": decision.model_dump(mode="json")}


@router.get("/guards", summary="Path prefixes and the tier each requires")
def list_guards():
    return {
        "success": True,
        "data": [
            {"prefix": prefix, "guard": guard.name, "roles": [r.value for r in guard.required_roles]}
            for prefix, guard in ROUTE_GUARDS
        ],
    }
