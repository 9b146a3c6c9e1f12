# core/role_helpers.py

from typing import FrozenSet, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from core.cache import cache_get, cache_set, roles_cache_key
from core.config import settings
from core.logging_config import logger
from core.roles import Role, highest_role, parse_roles


# -----------------------------------------------------
# Role state of one user
# -----------------------------------------------------
class RoleState(BaseModel):
    """
    Resolved role set of a user.

    `loading=True` means "not known yet" and is never the same thing as an
    empty set: guards show a neutral state while loading and only deny once
    the set is resolved.
    """

    model_config = ConfigDict(frozen=True)

    loading: bool = False
    roles: FrozenSet[Role] = frozenset()

    @classmethod
    def pending(cls) -> "RoleState":
        return cls(loading=True)

    @classmethod
    def resolved(cls, roles: Iterable = ()) -> "RoleState":
        return cls(loading=False, roles=parse_roles(roles))

    def has_role(self, *roles: Role) -> bool:
        if self.loading:
            return False
        return any(r in self.roles for r in roles)

    @property
    def has_any_role(self) -> bool:
        return not self.loading and len(self.roles) > 0

    @property
    def is_super_admin(self) -> bool:
        return self.has_role(Role.super_admin)

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.admin)

    @property
    def is_manager(self) -> bool:
        return self.has_role(Role.manager)

    @property
    def is_staff(self) -> bool:
        return self.has_role(Role.staff)

    @property
    def is_tenant(self) -> bool:
        return self.has_role(Role.tenant)

    @property
    def is_user(self) -> bool:
        return self.has_role(Role.user)

    @property
    def is_guest(self) -> bool:
        return self.has_role(Role.guest)

    @property
    def highest(self) -> Optional[Role]:
        if self.loading:
            return None
        return highest_role(self.roles)

    def names(self) -> list:
        return sorted((r.value for r in self.roles), key=lambda v: Role(v).rank)

    def summary(self) -> dict:
        return {
            "loading": self.loading,
            "roles": self.names(),
            "has_any_role": self.has_any_role,
            "highest_role": self.highest.value if self.highest else None,
            "is_super_admin": self.is_super_admin,
            "is_admin": self.is_admin,
            "is_manager": self.is_manager,
            "is_staff": self.is_staff,
            "is_tenant": self.is_tenant,
            "is_user": self.is_user,
        }


# -----------------------------------------------------
# Fetch roles (fail closed)
# -----------------------------------------------------
def fetch_user_roles(client, user_id: str, *, use_cache: bool = True) -> RoleState:
    """
    Read every `user_roles` row for `user_id`.

    Any failure (client missing, query error, network error) resolves to an
    EMPTY role set: being unable to determine a role is the same as having
    none.
    """
    if not user_id:
        return RoleState.resolved()

    key = roles_cache_key(user_id)
    if use_cache:
        cached = cache_get(key)
        if cached is not None:
            return cached

    if client is None:
        logger.error(f"Role lookup for {user_id} skipped: Supabase not configured")
        return RoleState.resolved()

    try:
        result = (
            client.table("user_roles")
            .select("role")
            .eq("user_id", user_id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Role lookup failed for {user_id}: {e}")
        return RoleState.resolved()

    state = RoleState.resolved(row.get("role") for row in (result.data or []))
    cache_set(key, state, settings.ROLE_CACHE_TTL_SECONDS)
    return state
