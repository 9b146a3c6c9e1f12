# routers/admin_tenant_management.py

"""
Per-tenant sub-resources for organization administrators.

Every route resolves the ledger tenant inside the caller's organization
first; a tenant of another organization is reported as not found.
"""

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from core.permission_helpers import requires_role
from core.roles import ADMIN_ROLES
from core.supabase_client import get_supabase_client
from core.supabase_helpers import get_org_row, safe_delete, safe_insert, safe_update, unwrap_rpc
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user, require_organization
from models.enums import InvoiceStatus
from models.unit import UnitAssignment
from models.tenant import (
    FamilyMemberCreate,
    FamilyMemberUpdate,
    MeterReadingCreate,
    RoomUpdate,
    TenantBillCreate,
    TenantDocumentCreate,
)
from services.tenant_assignment import assign_tenant


router = APIRouter(
    prefix="/admin-tenant-management",
    tags=["Admin Tenant Management"],
    dependencies=[Depends(requires_role(*ADMIN_ROLES))],
)


def org_tenant(tenant_id: str, org_id: str, client: Client) -> dict:
    return get_org_row(client, "tenants", tenant_id, org_id, "Tenant")


# ============================================================
# PROFILE
# ============================================================
@router.get("/{tenant_id}")
def tenant_profile(
    tenant_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    tenant = org_tenant(tenant_id, org_id, client)
    profile = unwrap_rpc(client, "get_tenant_complete_profile", {"_tenant_id": tenant_id}, "Tenant profile")
    return {"success": True, "data": profile or tenant}


# ============================================================
# BILLS
# ============================================================
@router.get("/{tenant_id}/bills")
def tenant_bills(
    tenant_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    org_tenant(tenant_id, org_id, client)
    data = unwrap_rpc(client, "get_tenant_bills_with_payments", {"_tenant_id": tenant_id}, "Tenant bills")
    return {"success": True, "data": data or []}


@router.post("/{tenant_id}/bills", status_code=201)
def create_bill(
    tenant_id: str,
    payload: TenantBillCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    tenant = org_tenant(tenant_id, org_id, client)

    data = sanitize(payload.model_dump())
    data.update(
        {
            "tenant_id": tenant_id,
            "organization_id": org_id,
            "unit_id": data.get("unit_id") or tenant.get("unit_id"),
            "status": InvoiceStatus.pending.value,
        }
    )
    return {"success": True, "data": safe_insert(client, "invoices", data)}


# ============================================================
# FAMILY MEMBERS
# ============================================================
@router.post("/{tenant_id}/family", status_code=201)
def add_family_member(
    tenant_id: str,
    payload: FamilyMemberCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    org_tenant(tenant_id, org_id, client)
    data = sanitize(payload.model_dump())
    data["tenant_id"] = tenant_id
    return {"success": True, "data": safe_insert(client, "tenant_family_members", data)}


@router.put("/{tenant_id}/family/{member_id}")
def update_family_member(
    tenant_id: str,
    member_id: str,
    payload: FamilyMemberUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    org_tenant(tenant_id, org_id, client)

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    row = safe_update(client, "tenant_family_members", {"id": member_id, "tenant_id": tenant_id}, changes)
    if not row:
        raise HTTPException(404, "Family member not found")
    return {"success": True, "data": row}


@router.delete("/{tenant_id}/family/{member_id}")
def delete_family_member(
    tenant_id: str,
    member_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    org_tenant(tenant_id, org_id, client)
    safe_delete(client, "tenant_family_members", {"id": member_id, "tenant_id": tenant_id})
    return {"success": True, "message": "Family member deleted successfully"}


# ============================================================
# DOCUMENTS
# ============================================================
@router.post("/{tenant_id}/documents", status_code=201)
def add_document(
    tenant_id: str,
    payload: TenantDocumentCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    org_tenant(tenant_id, org_id, client)
    data = sanitize(payload.model_dump())
    data["tenant_id"] = tenant_id
    return {"success": True, "data": safe_insert(client, "tenant_documents", data)}


@router.delete("/{tenant_id}/documents/{document_id}")
def delete_document(
    tenant_id: str,
    document_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    org_tenant(tenant_id, org_id, client)
    safe_delete(client, "tenant_documents", {"id": document_id, "tenant_id": tenant_id})
    return {"success": True, "message": "Document deleted successfully"}


# ============================================================
# ROOM
# ============================================================
@router.put("/{tenant_id}/room")
def update_room(
    tenant_id: str,
    payload: RoomUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    tenant = org_tenant(tenant_id, org_id, client)

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    # Moving into a unit goes through the paired unit/tenant write
    new_unit = changes.pop("unit_id", None)
    if new_unit and new_unit != tenant.get("unit_id"):
        if tenant.get("unit_id"):
            raise HTTPException(400, "Unassign the tenant from their current unit first")
        assign_tenant(
            client,
            org_id,
            new_unit,
            UnitAssignment(
                tenant_id=tenant_id,
                lease_start=payload.lease_start,
                lease_end=payload.lease_end,
                rent_amount=payload.rent_amount,
            ),
        )
        changes.pop("property_id", None)
    elif changes.get("property_id"):
        get_org_row(client, "properties", changes["property_id"], org_id, "Property")

    row = None
    if changes:
        row = safe_update(client, "tenants", {"id": tenant_id, "organization_id": org_id}, changes)
    return {"success": True, "data": row or org_tenant(tenant_id, org_id, client)}


# ============================================================
# ELECTRICITY METER
# ============================================================
@router.post("/{tenant_id}/meter", status_code=201)
def add_meter_reading(
    tenant_id: str,
    payload: MeterReadingCreate,
    org_id: str = Depends(require_organization),
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    tenant = org_tenant(tenant_id, org_id, client)

    if payload.current_reading < payload.previous_reading:
        raise HTTPException(400, "current_reading must not be below previous_reading")

    units_used = payload.current_reading - payload.previous_reading

    data = sanitize(payload.model_dump())
    data.update(
        {
            "tenant_id": tenant_id,
            "unit_id": data.get("unit_id") or tenant.get("unit_id"),
            "units_used": units_used,
            "total_amount": round(units_used * payload.unit_rate, 2),
            "recorded_by": current_user.id,
        }
    )
    return {"success": True, "data": safe_insert(client, "electricity_meter_readings", data)}
