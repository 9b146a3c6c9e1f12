# routers/units.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.permissions import Permission
from core.supabase_client import get_supabase_client
from core.supabase_helpers import get_org_row, safe_delete, safe_insert, safe_update
from core.utils import sanitize
from dependencies.auth import require_organization
from models.enums import UnitAvailability
from models.unit import UnitAssignment, UnitCreate, UnitUpdate
from services.tenant_assignment import assign_tenant, unassign_tenant


router = APIRouter(
    prefix="/units",
    tags=["Units"],
)


# -------------------------------------------------------------
# LIST Units (optionally for one property)
# -------------------------------------------------------------
@router.get("", dependencies=[Depends(requires_permission(Permission.view_units))])
def list_units(
    property_id: Optional[str] = None,
    availability: Optional[UnitAvailability] = None,
    limit: int = Query(500, ge=1, le=1000),
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        query = (
            client.table("units")
            .select("*")
            .eq("organization_id", org_id)
        )
        if property_id:
            query = query.eq("property_id", property_id)
        if availability:
            query = query.eq("availability", availability.value)

        result = query.order("unit_number").limit(limit).execute()
        return {"success": True, "data": result.data or []}
    except Exception as e:
        raise handle_supabase_error(e, "Unable to fetch units")


# -------------------------------------------------------------
# GET Unit
# -------------------------------------------------------------
@router.get("/{unit_id}", dependencies=[Depends(requires_permission(Permission.view_units))])
def get_unit(
    unit_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": get_org_row(client, "units", unit_id, org_id, "Unit")}


# -------------------------------------------------------------
# CREATE Unit
# -------------------------------------------------------------
@router.post("", status_code=201, dependencies=[Depends(requires_permission(Permission.create_units))])
def create_unit(
    payload: UnitCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    # Property must be ours
    get_org_row(client, "properties", payload.property_id, org_id, "Property")
    if payload.availability == UnitAvailability.occupied:
        raise HTTPException(400, "Assign a tenant through /units/{unit_id}/assign to occupy a unit")

    data = sanitize(payload.model_dump(), drop_none=True)
    data["organization_id"] = org_id

    logger.info(f"Creating unit {data.get('unit_number')} in property {payload.property_id}")

    row = safe_insert(client, "units", data)
    if not row:
        raise HTTPException(500, "Unit creation failed - no data returned")
    return {"success": True, "data": row}


# -------------------------------------------------------------
# UPDATE Unit
# -------------------------------------------------------------
@router.patch("/{unit_id}", dependencies=[Depends(requires_permission(Permission.edit_units))])
def update_unit(
    unit_id: str,
    payload: UnitUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    unit = get_org_row(client, "units", unit_id, org_id, "Unit")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    # Occupancy follows the assigned tenant; use assign/unassign to change it
    if "availability" in changes:
        occupied = changes["availability"] == UnitAvailability.occupied.value
        if unit.get("tenant_id") and not occupied:
            raise HTTPException(400, "Unassign the tenant before changing availability")
        if occupied and not unit.get("tenant_id"):
            raise HTTPException(400, "Assign a tenant through /units/{unit_id}/assign to occupy a unit")

    row = safe_update(client, "units", {"id": unit_id, "organization_id": org_id}, changes)
    return {"success": True, "data": row}


# -------------------------------------------------------------
# DELETE Unit
# -------------------------------------------------------------
@router.delete("/{unit_id}", dependencies=[Depends(requires_permission(Permission.delete_units))])
def delete_unit(
    unit_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    unit = get_org_row(client, "units", unit_id, org_id, "Unit")
    if unit.get("tenant_id"):
        raise HTTPException(400, "Cannot delete an occupied unit")

    safe_delete(client, "units", {"id": unit_id, "organization_id": org_id})
    return {"success": True, "message": "Unit deleted"}


# -------------------------------------------------------------
# ASSIGN / UNASSIGN tenant
# -------------------------------------------------------------
@router.post("/{unit_id}/assign", dependencies=[Depends(requires_permission(Permission.edit_units))])
def assign_unit(
    unit_id: str,
    payload: UnitAssignment,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": assign_tenant(client, org_id, unit_id, payload)}


@router.post("/{unit_id}/unassign", dependencies=[Depends(requires_permission(Permission.edit_units))])
def unassign_unit(
    unit_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": unassign_tenant(client, org_id, unit_id)}
