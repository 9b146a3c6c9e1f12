# core/guards.py

"""
Route guards and the landing redirect, evaluated server-side.

The SPA asks `/access/check` or `/access/redirect` and renders whatever
outcome comes back. The decision functions take plain values so they can be
unit-tested without HTTP:

    session        -- truthy when a valid session exists
    role_state     -- RoleState (may be pending)
    permission_state -- PermissionState (may be pending)
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel

from core.permission_helpers import PermissionState
from core.role_helpers import RoleState
from core.roles import DEFAULT_HOME, LOGIN_PATH, TIER_HOMES, Role


class GuardOutcome(str, Enum):
    loading = "loading"
    redirect_login = "redirect_login"
    access_denied = "access_denied"
    render = "render"


class EscapeAction(str, Enum):
    login = "login"
    back = "back"


class GuardDecision(BaseModel):
    outcome: GuardOutcome
    guard: Optional[str] = None
    redirect_to: Optional[str] = None
    return_to: Optional[str] = None     # original location, for post-login return
    message: Optional[str] = None
    actions: List[EscapeAction] = []


class RouteGuard(BaseModel):
    name: str
    required_roles: Tuple[Role, ...]
    denied_message: str
    actions: Tuple[EscapeAction, ...] = (EscapeAction.login, EscapeAction.back)

    def allows(self, role_state: RoleState) -> bool:
        return role_state.has_role(*self.required_roles)


# -----------------------------------------------------
# One guard per tier
# -----------------------------------------------------
SuperAdminRoute = RouteGuard(
    name="SuperAdminRoute",
    required_roles=(Role.super_admin,),
    denied_message="This area is restricted to Super Administrators only.",
    actions=(EscapeAction.back,),
)

AdminRoute = RouteGuard(
    name="AdminRoute",
    required_roles=(Role.admin,),
    denied_message="This area is restricted to Administrator accounts only.",
)

ManagerRoute = RouteGuard(
    name="ManagerRoute",
    required_roles=(Role.manager,),
    denied_message="This area is restricted to Manager accounts only.",
)

StaffRoute = RouteGuard(
    name="StaffRoute",
    required_roles=(Role.staff,),
    denied_message="This area is restricted to Staff accounts only.",
)

TenantRoute = RouteGuard(
    name="TenantRoute",
    required_roles=(Role.tenant,),
    denied_message="This area is restricted to Tenant accounts only.",
)

UserRoute = RouteGuard(
    name="UserRoute",
    required_roles=(Role.user,),
    denied_message="This area is restricted to User accounts only.",
)

# Longest prefix first
ROUTE_GUARDS: List[Tuple[str, RouteGuard]] = [
    ("/super-admin", SuperAdminRoute),
    ("/manager", ManagerRoute),
    ("/tenant", TenantRoute),
    ("/admin", AdminRoute),
    ("/staff", StaffRoute),
    ("/user", UserRoute),
]


def guard_for_path(path: str) -> Optional[RouteGuard]:
    for prefix, guard in ROUTE_GUARDS:
        if path == prefix or path.startswith(prefix + "/"):
            return guard
    return None


# -----------------------------------------------------
# Guard evaluation
# -----------------------------------------------------
def _unauthenticated(requested_path: Optional[str], fallback: str, guard: Optional[str]) -> GuardDecision:
    return GuardDecision(
        outcome=GuardOutcome.redirect_login,
        guard=guard,
        redirect_to=fallback,
        return_to=requested_path,
    )


def evaluate_guard(
    session,
    role_state: RoleState,
    guard: RouteGuard,
    requested_path: Optional[str] = None,
    *,
    session_loading: bool = False,
    fallback: str = LOGIN_PATH,
) -> GuardDecision:
    """
    loading          -> neutral indicator, no content
    no session       -> redirect to login, remembering `requested_path`
    role missing     -> in-place access denied with escape actions
    otherwise        -> render children
    """
    if session_loading or role_state.loading:
        return GuardDecision(outcome=GuardOutcome.loading, guard=guard.name)

    if not session:
        return _unauthenticated(requested_path, fallback, guard.name)

    if not guard.allows(role_state):
        return GuardDecision(
            outcome=GuardOutcome.access_denied,
            guard=guard.name,
            message=guard.denied_message,
            actions=list(guard.actions),
        )

    return GuardDecision(outcome=GuardOutcome.render, guard=guard.name)


def evaluate_protected_route(
    session,
    permission_state: PermissionState,
    permission=None,
    requested_path: Optional[str] = None,
    *,
    session_loading: bool = False,
    fallback: str = LOGIN_PATH,
) -> GuardDecision:
    """Generic guard keyed on a named permission instead of a role tier."""
    if session_loading:
        return GuardDecision(outcome=GuardOutcome.loading, guard="ProtectedRoute")

    if not session:
        return _unauthenticated(requested_path, fallback, "ProtectedRoute")

    if permission is None:
        return GuardDecision(outcome=GuardOutcome.render, guard="ProtectedRoute")

    if permission_state.loading:
        return GuardDecision(outcome=GuardOutcome.loading, guard="ProtectedRoute")

    if not permission_state.has_permission(permission):
        return GuardDecision(
            outcome=GuardOutcome.access_denied,
            guard="ProtectedRoute",
            message="You don't have permission to access this page.",
            actions=[EscapeAction.back],
        )

    return GuardDecision(outcome=GuardOutcome.render, guard="ProtectedRoute")


# -----------------------------------------------------
# Landing redirect
# -----------------------------------------------------
class RedirectPhase(str, Enum):
    checking_auth = "checking_auth"
    checking_roles = "checking_roles"
    redirecting = "redirecting"


class RedirectDecision(BaseModel):
    phase: RedirectPhase
    target: Optional[str] = None


def home_for(role_state: RoleState) -> str:
    """First tier held wins; users with no tier land on the generic home."""
    for role, home in TIER_HOMES:
        if role in role_state.roles:
            return home
    return DEFAULT_HOME


def resolve_redirect(session_loading: bool, session, role_state: RoleState) -> RedirectDecision:
    """
    One-shot decision. `target` is only set in the `redirecting` phase, so a
    caller navigates at most once per evaluation.
    """
    if session_loading:
        return RedirectDecision(phase=RedirectPhase.checking_auth)

    if not session:
        return RedirectDecision(phase=RedirectPhase.redirecting, target=LOGIN_PATH)

    if role_state.loading:
        return RedirectDecision(phase=RedirectPhase.checking_roles)

    return RedirectDecision(phase=RedirectPhase.redirecting, target=home_for(role_state))
