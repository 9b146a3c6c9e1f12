from typing import Optional, List, Dict, Any
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.supabase_client import get_supabase_client
from core.logging_config import logger
from core.permission_helpers import PermissionState, fetch_user_permissions
from core.role_helpers import RoleState, fetch_user_roles


bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Current User Model (full backend identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID
    email: str

    full_name: Optional[str] = None
    phone: Optional[str] = None
    organization_id: Optional[str] = None   # profiles.organization_id
    metadata: Dict[str, Any] = {}

    role_state: RoleState = RoleState.resolved()
    permission_state: PermissionState = PermissionState()

    @property
    def roles(self) -> List[str]:
        return self.role_state.names()

    @property
    def permissions(self) -> List[str]:
        return self.permission_state.names()


def unauthorized(detail: str = "Invalid or expired authentication token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ============================================================
# Profile lookup (organization membership)
# ============================================================
def fetch_profile(client: Client, user_id: str) -> Dict[str, Any]:
    try:
        result = (
            client.table("profiles")
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Profile lookup failed for {user_id}: {e}")
        return {}
    return result.data[0] if result.data else {}


# ============================================================
# AUTH DECODING (Supabase: validates JWT, then roles + profile)
# ============================================================
def resolve_user(client: Client, token: str) -> CurrentUser:
    """
    Validate `token` with GoTrue and build the caller identity.

    Roles and permissions are always re-read from the store (or the short
    TTL cache); nothing in the token's user_metadata is trusted for
    authorization.
    """
    try:
        auth_resp = client.auth.get_user(token)
    except Exception:
        raise unauthorized()

    auth_user = getattr(auth_resp, "user", None)
    if not auth_user or not auth_user.email:
        raise unauthorized()

    user_id = auth_user.id
    metadata = auth_user.user_metadata or {}
    profile = fetch_profile(client, user_id)

    role_state = fetch_user_roles(client, user_id)
    granted = fetch_user_permissions(client, user_id)

    return CurrentUser(
        id=user_id,
        email=auth_user.email,
        full_name=profile.get("full_name") or metadata.get("full_name"),
        phone=metadata.get("phone"),
        organization_id=profile.get("organization_id"),
        metadata=metadata,
        role_state=role_state,
        permission_state=PermissionState.build(role_state, granted),
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    client: Client = Depends(get_supabase_client),
) -> CurrentUser:

    if not credentials or not credentials.credentials:
        raise unauthorized("Missing authorization header")

    if not client:
        raise HTTPException(500, "Supabase client not configured")

    return resolve_user(client, credentials.credentials)


# ============================================================
# OPTIONAL AUTHENTICATION (for guard / redirect endpoints)
# ============================================================
def get_optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    client: Client = Depends(get_supabase_client),
) -> Optional[CurrentUser]:
    """
    Returns CurrentUser if a valid token was provided, None otherwise.
    """
    if not credentials or not client:
        return None

    try:
        return resolve_user(client, credentials.credentials)
    except HTTPException:
        return None


# ============================================================
# ORGANIZATION SCOPE
# ============================================================
def require_organization(current_user: CurrentUser = Depends(get_current_user)) -> str:
    """
    The caller's own organization id. Client-supplied organization ids are
    never used for scoping.
    """
    if not current_user.organization_id:
        raise HTTPException(403, "User not associated with an organization")
    return current_user.organization_id
