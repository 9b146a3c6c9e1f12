# routers/properties.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from core.errors import handle_supabase_error
from core.permission_helpers import requires_permission
from core.permissions import Permission
from core.supabase_client import get_supabase_client
from core.supabase_helpers import get_org_row, safe_delete, safe_insert, safe_update
from core.utils import sanitize
from dependencies.auth import require_organization
from models.property import PropertyCreate, PropertyUpdate


router = APIRouter(
    prefix="/properties",
    tags=["Properties"],
)


# ============================================================
# LIST PROPERTIES
# ============================================================
@router.get(
    "",
    summary="List properties of the caller's organization",
    dependencies=[Depends(requires_permission(Permission.view_properties))],
)
def list_properties(
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        query = (
            client.table("properties")
            .select("*")
            .eq("organization_id", org_id)
        )
        if search:
            query = query.ilike("name", f"%{search.strip()}%")

        res = query.order("created_at", desc=True).limit(limit).execute()
        return {"success": True, "data": res.data or []}

    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch properties")


# ============================================================
# GET PROPERTY
# ============================================================
@router.get(
    "/{property_id}",
    dependencies=[Depends(requires_permission(Permission.view_properties))],
)
def get_property(
    property_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": get_org_row(client, "properties", property_id, org_id, "Property")}


# ============================================================
# CREATE PROPERTY
# ============================================================
@router.post(
    "",
    status_code=201,
    dependencies=[Depends(requires_permission(Permission.create_properties))],
)
def create_property(
    payload: PropertyCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    data = sanitize(payload.model_dump())
    data["organization_id"] = org_id

    row = safe_insert(client, "properties", data)
    if not row:
        raise HTTPException(500, "Insert returned no data")
    return {"success": True, "data": row}


# ============================================================
# UPDATE PROPERTY
# ============================================================
@router.patch(
    "/{property_id}",
    dependencies=[Depends(requires_permission(Permission.edit_properties))],
)
def update_property(
    property_id: str,
    payload: PropertyUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    get_org_row(client, "properties", property_id, org_id, "Property")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    row = safe_update(client, "properties", {"id": property_id, "organization_id": org_id}, changes)
    return {"success": True, "data": row}


# ============================================================
# DELETE PROPERTY
# ============================================================
@router.delete(
    "/{property_id}",
    dependencies=[Depends(requires_permission(Permission.delete_properties))],
)
def delete_property(
    property_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    get_org_row(client, "properties", property_id, org_id, "Property")
    safe_delete(client, "properties", {"id": property_id, "organization_id": org_id})
    return {"success": True, "message": "Property deleted"}
