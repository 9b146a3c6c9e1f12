# routers/invoices.py

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
from models.billing import InvoiceCreate, InvoiceUpdate
from models.enums import InvoiceStatus
from services.billing import check_invoice_transition, invoice_stats, next_invoice_number


router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)


@router.get("", dependencies=[Depends(requires_permission(Permission.view_billing))])
def list_invoices(
    status: Optional[InvoiceStatus] = None,
    tenant_id: Optional[str] = None,
    limit: int = Query(500, ge=1, le=1000),
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        query = client.table("invoices").select("*").eq("organization_id", org_id)
        if status:
            query = query.eq("status", status.value)
        if tenant_id:
            query = query.eq("tenant_id", tenant_id)

        res = query.order("due_date", desc=True).limit(limit).execute()
        return {"success": True, "data": res.data or []}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch invoices")


# Declared before /{invoice_id} so "stats" is not taken for an id
@router.get("/stats", dependencies=[Depends(requires_permission(Permission.view_billing))])
def get_invoice_stats(
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        res = (
            client.table("invoices")
            .select("status, amount, created_at")
            .eq("organization_id", org_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to compute invoice stats")

    return {"success": True, "data": invoice_stats(res.data or [])}


@router.get("/{invoice_id}", dependencies=[Depends(requires_permission(Permission.view_billing))])
def get_invoice(
    invoice_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": get_org_row(client, "invoices", invoice_id, org_id, "Invoice")}


@router.post("", status_code=201, dependencies=[Depends(requires_permission(Permission.create_billing))])
def create_invoice(
    payload: InvoiceCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    if payload.tenant_id:
        get_org_row(client, "tenants", payload.tenant_id, org_id, "Tenant")

    data = sanitize(payload.model_dump())
    data["invoice_number"] = data.get("invoice_number") or next_invoice_number()
    data["organization_id"] = org_id
    data["status"] = InvoiceStatus.pending.value

    row = safe_insert(client, "invoices", data)
    if not row:
        raise HTTPException(500, "Insert returned no data")
    return {"success": True, "data": row}


@router.patch("/{invoice_id}", dependencies=[Depends(requires_permission(Permission.edit_billing))])
def update_invoice(
    invoice_id: str,
    payload: InvoiceUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    invoice = get_org_row(client, "invoices", invoice_id, org_id, "Invoice")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    if "status" in changes and changes["status"]:
        check_invoice_transition(invoice.get("status"), changes["status"])

    row = safe_update(client, "invoices", {"id": invoice_id, "organization_id": org_id}, changes)
    return {"success": True, "data": row}


@router.delete("/{invoice_id}", dependencies=[Depends(requires_permission(Permission.delete_billing))])
def delete_invoice(
    invoice_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    get_org_row(client, "invoices", invoice_id, org_id, "Invoice")
    safe_delete(client, "invoices", {"id": invoice_id, "organization_id": org_id})
    return {"success": True, "message": "Invoice deleted"}
