# routers/tenant_management.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_role
from core.roles import Role
from core.supabase_client import get_supabase_client
from core.supabase_helpers import safe_update, unwrap_rpc
from core.utils import page_range, sanitize, total_pages
from models.enums import TenantStatus
from models.tenant import TenantProfileCreate, TenantProfileUpdate


router = APIRouter(
    prefix="/tenant-management",
    tags=["Tenant Management"],
    dependencies=[Depends(requires_role(Role.super_admin))],
)

SEARCH_COLUMNS = ("full_name", "email", "tenant_code")


def search_filter(term: str) -> str:
    """PostgREST or=() filter over the searchable columns."""
    cleaned = term.replace(",", " ").replace("(", " ").replace(")", " ").strip()
    return ",".join(f"{col}.ilike.%{cleaned}%" for col in SEARCH_COLUMNS)


# -----------------------------------------------------
# GET /tenant-management/statistics
# -----------------------------------------------------
@router.get("/statistics")
def tenant_statistics(client: Client = Depends(get_supabase_client)):
    return {"success": True, "data": unwrap_rpc(client, "get_tenant_statistics", operation="Tenant statistics")}


# -----------------------------------------------------
# GET /tenant-management/tenants
# -----------------------------------------------------
@router.get("/tenants")
def list_tenant_profiles(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    status: Optional[TenantStatus] = None,
    client: Client = Depends(get_supabase_client),
):
    start, end = page_range(page, limit)

    try:
        query = client.table("tenants_profile").select("*", count="exact")
        if search and search.strip():
            query = query.or_(search_filter(search))
        if status:
            query = query.eq("status", status.value)

        res = query.order("created_at", desc=True).range(start, end).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch tenants")

    total = res.count or 0
    return {
        "success": True,
        "data": res.data or [],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages(total, limit),
        },
    }


# -----------------------------------------------------
# GET /tenant-management/tenants/{id}
# -----------------------------------------------------
@router.get("/tenants/{tenant_id}")
def tenant_details(tenant_id: str, client: Client = Depends(get_supabase_client)):
    data = unwrap_rpc(client, "get_tenant_details", {"_tenant_id": tenant_id}, "Tenant details")
    if not data:
        raise HTTPException(404, "Tenant not found")
    return {"success": True, "data": data}


# -----------------------------------------------------
# POST /tenant-management/tenants
# -----------------------------------------------------
@router.post("/tenants", status_code=201)
def create_tenant_profile(payload: TenantProfileCreate, client: Client = Depends(get_supabase_client)):
    tenant_id = unwrap_rpc(client, "create_tenant_comprehensive", payload.rpc_params(), "Tenant creation")
    logger.info(f"Tenant profile {tenant_id} created for {payload.email}")
    return {"success": True, "data": {"id": tenant_id}}


# -----------------------------------------------------
# PUT /tenant-management/tenants/{id}
# -----------------------------------------------------
@router.put("/tenants/{tenant_id}")
def update_tenant_profile(
    tenant_id: str,
    payload: TenantProfileUpdate,
    client: Client = Depends(get_supabase_client),
):
    """A status change goes through update_tenant_status; other fields are a plain row update."""
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(400, "No fields to update")

    if changes.get("status"):
        data = unwrap_rpc(
            client,
            "update_tenant_status",
            {"_tenant_id": tenant_id, "_new_status": str(changes["status"])},
            "Tenant status update",
        )
        return {"success": True, "data": data}

    row = safe_update(client, "tenants_profile", {"id": tenant_id}, sanitize(changes))
    if not row:
        raise HTTPException(404, "Tenant not found")
    return {"success": True, "data": row}


# -----------------------------------------------------
# DELETE /tenant-management/tenants/{id}  (soft delete)
# -----------------------------------------------------
@router.delete("/tenants/{tenant_id}")
def deactivate_tenant(tenant_id: str, client: Client = Depends(get_supabase_client)):
    unwrap_rpc(
        client,
        "update_tenant_status",
        {"_tenant_id": tenant_id, "_new_status": TenantStatus.inactive.value},
        "Tenant deactivation",
    )
    return {"success": True, "message": "Tenant deactivated successfully"}
