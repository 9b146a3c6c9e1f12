# core/roles.py

from enum import Enum
from typing import Iterable, List, Optional


# ============================================
# ROLE TIERS
# ============================================
class Role(str, Enum):
    """
    Coarse authorization tiers.

    Declaration order IS the privilege order used by the landing redirect:
    the first tier a user holds wins. Stored assignments are an unordered set.
    """

    super_admin = "super_admin"
    admin = "admin"
    manager = "manager"
    staff = "staff"
    tenant = "tenant"
    user = "user"
    guest = "guest"

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls) -> List[str]:
        return [item.value for item in cls]

    @classmethod
    def parse(cls, value) -> Optional["Role"]:
        """Return the Role for a stored name, None for anything unknown."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def rank(self) -> int:
        return TIER_ORDER.index(self)


TIER_ORDER: List[Role] = list(Role)


def parse_roles(values: Iterable) -> frozenset:
    """Drop unknown role names; keep a set of Role members."""
    return frozenset(r for r in (Role.parse(v) for v in values) if r is not None)


def highest_role(roles: Iterable[Role]) -> Optional[Role]:
    ranked = sorted(roles, key=lambda r: r.rank)
    return ranked[0] if ranked else None


# -----------------------------------------------------
# Landing page per tier (SPA paths)
# -----------------------------------------------------
LOGIN_PATH = "/auth"
DEFAULT_HOME = "/user"

TIER_HOMES = [
    (Role.super_admin, "/super-admin"),
    (Role.admin, "/admin"),
    (Role.manager, "/manager"),
    (Role.staff, "/staff"),
    (Role.tenant, "/tenant"),
]


# -----------------------------------------------------
# Role groups used by server-side checks
# -----------------------------------------------------
ADMIN_ROLES = (Role.admin, Role.super_admin)

# Roles a caller may pick for themselves at sign-up
SELF_SERVICE_ROLES = (Role.user, Role.tenant)

# Roles only a super_admin may hand out
PRIVILEGED_ROLES = (Role.super_admin, Role.admin)
