from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from core.roles import Role
from models.enums import TenantStatus


class AdminCreateUser(BaseModel):
    """
    Payload used when provisioning a new Supabase Auth user.

    - role is required; only super_admin may hand out privileged roles
    - organization_id falls back to the caller's organization when omitted
      (admins may only create tenant users, always inside their own org)
    """

    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role
    full_name: Optional[str] = None
    organization_id: Optional[str] = None


class OrganizationCreate(BaseModel):
    org_name: str = Field(..., min_length=1)
    plan_price: float = Field(0, ge=0)
    plan_valid_until: Optional[date] = None

    # Optional first administrator
    admin_email: Optional[EmailStr] = None
    admin_password: Optional[str] = Field(None, min_length=6)
    admin_full_name: Optional[str] = None


class TenantUserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    status: TenantStatus = TenantStatus.active
    organization_id: Optional[str] = None
    property_id: Optional[str] = None
    unit_id: Optional[str] = None
    rent_amount: Optional[float] = Field(None, ge=0)


# -----------------------------------------------------
# Role / permission administration
# -----------------------------------------------------
class RoleAssignment(BaseModel):
    user_id: str
    role: Role


class PermissionGrant(BaseModel):
    user_id: str
    permission: str = Field(..., min_length=1)
