# routers/tenants.py

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
from models.enums import TenantStatus
from models.tenant import TenantCreate, TenantUpdate


router = APIRouter(
    prefix="/tenants",
    tags=["Tenants"],
)


@router.get("", dependencies=[Depends(requires_permission(Permission.view_tenants))])
def list_tenants(
    status: Optional[TenantStatus] = None,
    search: Optional[str] = None,
    limit: int = Query(500, ge=1, le=1000),
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        query = client.table("tenants").select("*").eq("organization_id", org_id)
        if status:
            query = query.eq("status", status.value)
        if search:
            query = query.ilike("name", f"%{search.strip()}%")

        res = query.order("created_at", desc=True).limit(limit).execute()
        return {"success": True, "data": res.data or []}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch tenants")


@router.get("/{tenant_id}", dependencies=[Depends(requires_permission(Permission.view_tenants))])
def get_tenant(
    tenant_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": get_org_row(client, "tenants", tenant_id, org_id, "Tenant")}


@router.post("", status_code=201, dependencies=[Depends(requires_permission(Permission.create_tenants))])
def create_tenant(
    payload: TenantCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    if payload.unit_id:
        # Occupancy is set through /units/{id}/assign so unit and tenant stay paired
        raise HTTPException(400, "Assign units through /units/{unit_id}/assign")

    data = sanitize(payload.model_dump())
    data["organization_id"] = org_id

    row = safe_insert(client, "tenants", data)
    if not row:
        raise HTTPException(500, "Insert returned no data")
    return {"success": True, "data": row}


@router.patch("/{tenant_id}", dependencies=[Depends(requires_permission(Permission.edit_tenants))])
def update_tenant(
    tenant_id: str,
    payload: TenantUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    tenant = get_org_row(client, "tenants", tenant_id, org_id, "Tenant")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    # A housed tenant stays active until /units/{unit_id}/unassign
    if tenant.get("unit_id") and "status" in changes and changes["status"] != tenant.get("status"):
        raise HTTPException(400, "Unassign the tenant from their unit before changing status")

    row = safe_update(client, "tenants", {"id": tenant_id, "organization_id": org_id}, changes)
    return {"success": True, "data": row}


@router.delete("/{tenant_id}", dependencies=[Depends(requires_permission(Permission.delete_tenants))])
def delete_tenant(
    tenant_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    tenant = get_org_row(client, "tenants", tenant_id, org_id, "Tenant")
    if tenant.get("unit_id"):
        raise HTTPException(400, "Unassign the tenant from their unit first")

    safe_delete(client, "tenants", {"id": tenant_id, "organization_id": org_id})
    return {"success": True, "message": "Tenant deleted"}
