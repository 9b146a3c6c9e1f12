# routers/database_management.py

from fastapi import APIRouter, Depends
from supabase import Client

from core.permission_helpers import requires_role
from core.roles import Role
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser
from models.database_admin import DatabaseRequest
from services.database_admin import DatabaseConsole


router = APIRouter(
    prefix="/database-management",
    tags=["Database Management"],
)


@router.post("", summary="Super admin database console")
def database_management(
    payload: DatabaseRequest,
    current_user: CurrentUser = Depends(requires_role(Role.super_admin)),
    client: Client = Depends(get_supabase_client),
):
    console = DatabaseConsole(client, current_user.id, current_user.organization_id)
    return console.dispatch(payload)
