from typing import Optional

from pydantic import BaseModel, EmailStr, Field


# -----------------------------------------------------
# LOGIN REQUEST (using Supabase email/password)
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -----------------------------------------------------
# SIGN-UP REQUEST (self-service)
# -----------------------------------------------------
class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = None
    phone: Optional[str] = None

    # Only "user" and "tenant" are honoured; anything else is refused
    role: str = "user"


# -----------------------------------------------------
# REFRESH / LOGOUT
# -----------------------------------------------------
class RefreshRequest(BaseModel):
    refresh_token: str


# -----------------------------------------------------
# TOKEN RESPONSE (Supabase session JWT)
# -----------------------------------------------------
class TokenResponse(BaseModel):
    access_token: str         # Supabase access token (JWT)
    refresh_token: str        # Supabase refresh token
    expires_in: int           # Seconds until expiration
    token_type: str = "bearer"
    user_id: Optional[str] = None


# -----------------------------------------------------
# SELF-SERVICE PROFILE
# -----------------------------------------------------
class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
