from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials
from supabase import Client

from core.cache import invalidate_user_access
from core.config import settings
from core.errors import require_client
from core.logging_config import logger
from core.rate_limiter import get_rate_limit_identifier, require_rate_limit
from core.roles import SELF_SERVICE_ROLES, Role
from core.supabase_client import get_supabase_client
from core.supabase_helpers import safe_update, update_user_metadata, upsert_profile
from dependencies.auth import CurrentUser, bearer_scheme, get_current_user
from models.auth import LoginRequest, ProfileUpdate, RefreshRequest, SignupRequest, TokenResponse


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


def session_to_token(session, user_id: Optional[str] = None) -> TokenResponse:
    return TokenResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in or 3600,
        user_id=user_id,
    )


def _throttle(request: Request, email: str):
    identifier = get_rate_limit_identifier(request, user_id=email)
    require_rate_limit(
        request,
        identifier=identifier,
        max_requests=settings.LOGIN_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    )


def serialize_user(user: CurrentUser) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "phone": user.phone,
        "organization_id": user.organization_id,
        "roles": user.roles,
        "permissions": user.permissions,
    }


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(payload: LoginRequest, request: Request, client: Client = Depends(get_supabase_client)):

    email = payload.email.strip().lower()
    _throttle(request, email)
    require_client(client)

    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        # Log the error for debugging but don't expose details to user
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password"
        )

    if not response.session or not response.session.access_token:
        raise HTTPException(401, "Invalid email or password")

    return session_to_token(response.session, response.user.id if response.user else None)


# ============================================================
# SIGN UP (self-service)
# ============================================================
@router.post("/signup", status_code=201, summary="Register a new account")
def signup(payload: SignupRequest, request: Request, client: Client = Depends(get_supabase_client)):
    """
    Self-service sign-up. The chosen role is only honoured for `user` and
    `tenant`; every other role must be granted by an administrator.
    """
    email = payload.email.strip().lower()
    _throttle(request, email)

    role = Role.parse(payload.role)
    if role is None:
        raise HTTPException(400, f"Unknown role: {payload.role}")
    if role not in SELF_SERVICE_ROLES:
        raise HTTPException(403, "This role must be assigned by an administrator")

    require_client(client)

    try:
        response = client.auth.sign_up(
            {
                "email": email,
                "password": payload.password,
                "options": {"data": {"full_name": payload.full_name or "", "phone": payload.phone}},
            }
        )
    except Exception as e:
        logger.warning(f"Sign-up failed for {email}: {type(e).__name__}")
        raise HTTPException(400, "Unable to create account")

    if not response.user:
        raise HTTPException(400, "Unable to create account")

    user_id = response.user.id
    upsert_profile(client, user_id, email, payload.full_name)

    try:
        client.table("user_roles").insert({"user_id": user_id, "role": role.value}).execute()
    except Exception as e:
        logger.error(f"Role assignment failed for new user {user_id}: {e}")
        raise HTTPException(500, "Account created but role assignment failed")

    logger.info(f"New {role.value} account registered: {email}")

    return {
        "success": True,
        "data": {
            "user_id": user_id,
            "email": email,
            "role": role.value,
            # None when e-mail confirmation is required
            "session": session_to_token(response.session, user_id).model_dump() if response.session else None,
        },
    }


# ============================================================
# REFRESH
# ============================================================
@router.post("/refresh", response_model=TokenResponse, summary="Refresh session")
def refresh(payload: RefreshRequest, client: Client = Depends(get_supabase_client)):
    require_client(client)

    try:
        response = client.auth.refresh_session(payload.refresh_token)
    except Exception as e:
        logger.warning(f"Token refresh failed: {type(e).__name__}")
        raise HTTPException(401, "Invalid or expired refresh token")

    if not response.session:
        raise HTTPException(401, "Invalid or expired refresh token")

    return session_to_token(response.session, response.user.id if response.user else None)


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Sign out and clear cached access")
def logout(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    try:
        client.auth.admin.sign_out(credentials.credentials)
    except Exception as e:
        logger.warning(f"Server-side sign-out failed for {current_user.id}: {e}")

    invalidate_user_access(current_user.id)
    return {"success": True, "message": "Signed out"}


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", summary="Current authenticated user")
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": serialize_user(current_user)}


@router.patch("/me", summary="Update current user profile")
def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    """
    Users can update their own full_name and phone.
    Roles and organization membership are changed by administrators only.
    """
    changes = payload.model_dump(exclude_unset=True)
    changes = {k: (v.strip() or None) if isinstance(v, str) else v for k, v in changes.items()}

    if not changes:
        return {"success": True, "data": serialize_user(current_user)}

    update_user_metadata(client, current_user.id, {**current_user.metadata, **changes})

    if "full_name" in changes:
        safe_update(client, "profiles", {"id": current_user.id}, {"full_name": changes["full_name"]})

    logger.info(f"User {current_user.id} updated their profile")

    updated = current_user.model_copy(
        update={
            "full_name": changes.get("full_name", current_user.full_name),
            "phone": changes.get("phone", current_user.phone),
            "metadata": {**current_user.metadata, **changes},
        }
    )
    return {"success": True, "data": serialize_user(updated)}
