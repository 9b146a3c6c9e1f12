from typing import FrozenSet, Iterable, List

from fastapi import Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from core.cache import cache_get, cache_set, permissions_cache_key
from core.config import settings
from core.logging_config import logger
from core.permissions import ROLE_PERMISSIONS, ROUTE_PERMISSIONS, WILDCARD
from core.role_helpers import RoleState
from core.roles import Role


# -----------------------------------------------------
# Manually granted permissions (user_permissions table)
# -----------------------------------------------------
def fetch_user_permissions(client, user_id: str, *, use_cache: bool = True) -> List[str]:
    """
    Read the permission names granted directly to a user.
    Errors resolve to an empty list (fail closed).
    """
    if not user_id:
        return []

    key = permissions_cache_key(user_id)
    if use_cache:
        cached = cache_get(key)
        if cached is not None:
            return cached

    if client is None:
        return []

    try:
        result = (
            client.table("user_permissions")
            .select("permission")
            .eq("user_id", user_id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Permission lookup failed for {user_id}: {e}")
        return []

    granted = sorted({row["permission"] for row in (result.data or []) if row.get("permission")})
    cache_set(key, granted, settings.ROLE_CACHE_TTL_SECONDS)
    return granted


# -----------------------------------------------------
# Collect effective permissions:
#   • role-based permissions (every role held)
#   • per-user grants
# -----------------------------------------------------
def get_effective_permissions(role_state: RoleState, granted: Iterable[str] = ()) -> FrozenSet[str]:
    if role_state.loading:
        return frozenset()

    effective = set()
    for role in role_state.roles:
        effective.update(ROLE_PERMISSIONS.get(role, []))

    effective.update(p for p in granted if p)
    return frozenset(effective)


class PermissionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    loading: bool = False
    permissions: FrozenSet[str] = frozenset()

    @classmethod
    def pending(cls) -> "PermissionState":
        return cls(loading=True)

    @classmethod
    def build(cls, role_state: RoleState, granted: Iterable[str] = ()) -> "PermissionState":
        if role_state.loading:
            return cls.pending()
        return cls(permissions=get_effective_permissions(role_state, granted))

    def has_permission(self, permission) -> bool:
        if self.loading:
            return False
        if WILDCARD in self.permissions:
            return True
        return str(permission) in self.permissions

    def has_any_permission(self, permissions: Iterable) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable) -> bool:
        if self.loading:
            return False
        return all(self.has_permission(p) for p in permissions)

    def can_access_route(self, route: str) -> bool:
        """Routes with no registered requirement are open to any session."""
        if self.loading:
            return False
        required = ROUTE_PERMISSIONS.get(route)
        if not required:
            return True
        return self.has_any_permission(required)

    def names(self) -> list:
        return sorted(self.permissions)


# -----------------------------------------------------
# FastAPI dependency wrappers
# -----------------------------------------------------
def requires_permission(permission):
    """
    Usage:
        @router.post("", dependencies=[Depends(requires_permission(Permission.create_units))])
    """
    from dependencies.auth import CurrentUser, get_current_user

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not current_user.permission_state.has_permission(permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required",
            )
        return current_user

    return dependency


def requires_role(*roles: Role):
    """403 unless the caller holds at least one of `roles`."""
    from dependencies.auth import CurrentUser, get_current_user

    allowed = [str(r) for r in roles]

    def checker(current_user: CurrentUser = Depends(get_current_user)):
        if not current_user.role_state.has_role(*roles):
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of: {allowed}",
            )
        return current_user

    return checker
