# routers/provisioning.py

from fastapi import APIRouter, Depends
from supabase import Client

from core.errors import require_client
from core.permission_helpers import requires_role
from core.roles import ADMIN_ROLES, Role
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser
from models.user_create import AdminCreateUser, OrganizationCreate, TenantUserCreate
from services import provisioning


router = APIRouter(
    prefix="/provisioning",
    tags=["Provisioning"],
)


# -----------------------------------------------------
# POST /provisioning/users
# Super admins: any role, any organization.
# Admins: tenant users in their own organization only.
# -----------------------------------------------------
@router.post("/users", status_code=201, summary="Create an auth user with a role")
def create_user(
    payload: AdminCreateUser,
    current_user: CurrentUser = Depends(requires_role(*ADMIN_ROLES)),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": provisioning.create_user(client, current_user, payload)}


@router.post("/organizations", status_code=201, summary="Create an organization (and its first admin)")
def create_organization(
    payload: OrganizationCreate,
    current_user: CurrentUser = Depends(requires_role(Role.super_admin)),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, **provisioning.create_organization(client, current_user, payload)}


@router.post("/super-admin", summary="Seed the super admin account")
def create_super_admin(client: Client = Depends(get_supabase_client)):
    """
    Idempotent bootstrap. Credentials come from SUPER_ADMIN_EMAIL /
    SUPER_ADMIN_PASSWORD, never from the request.
    """
    require_client(client)
    return {"success": True, **provisioning.bootstrap_super_admin(client)}


@router.post("/tenant-users", status_code=201, summary="Create a tenant login with ledger and portal records")
def create_tenant_user(
    payload: TenantUserCreate,
    current_user: CurrentUser = Depends(requires_role(*ADMIN_ROLES)),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, **provisioning.create_tenant_user(client, current_user, payload)}
