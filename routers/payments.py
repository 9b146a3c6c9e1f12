# routers/payments.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from core.errors import handle_supabase_error
from core.permission_helpers import requires_permission
from core.permissions import Permission
from core.supabase_client import get_supabase_client
from core.supabase_helpers import get_org_row, safe_insert
from core.utils import sanitize, utcnow
from dependencies.auth import require_organization
from models.billing import PaymentCreate
from models.enums import InvoiceStatus, PaymentStatus
from services.billing import payment_stats, settle_invoice


router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
)


@router.get("", dependencies=[Depends(requires_permission(Permission.view_payments))])
def list_payments(
    invoice_id: Optional[str] = None,
    limit: int = Query(500, ge=1, le=1000),
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        query = client.table("payments").select("*").eq("organization_id", org_id)
        if invoice_id:
            query = query.eq("invoice_id", invoice_id)

        res = query.order("payment_date", desc=True).limit(limit).execute()
        return {"success": True, "data": res.data or []}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch payments")


@router.get("/stats", dependencies=[Depends(requires_permission(Permission.view_payments))])
def get_payment_stats(
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        payments = (
            client.table("payments")
            .select("amount, payment_date, payment_method, status")
            .eq("organization_id", org_id)
            .execute()
        )
        invoices = (
            client.table("invoices")
            .select("amount, status, due_date")
            .eq("organization_id", org_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to compute payment stats")

    return {"success": True, "data": payment_stats(payments.data or [], invoices.data or [])}


@router.post("", status_code=201, dependencies=[Depends(requires_permission(Permission.create_payments))])
def record_payment(
    payload: PaymentCreate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    """
    Records a completed payment. A payment linked to an invoice re-settles
    that invoice: once completed payments cover its amount it becomes paid.
    """
    if payload.invoice_id:
        invoice = get_org_row(client, "invoices", payload.invoice_id, org_id, "Invoice")
        if invoice.get("status") == InvoiceStatus.cancelled.value:
            raise HTTPException(400, "Cannot record a payment against a cancelled invoice")

    data = sanitize(payload.model_dump())
    data["organization_id"] = org_id
    data["status"] = PaymentStatus.completed.value
    data["payment_date"] = data.get("payment_date") or utcnow().date().isoformat()

    row = safe_insert(client, "payments", data)
    if not row:
        raise HTTPException(500, "Insert returned no data")

    invoice = None
    if payload.invoice_id:
        invoice = settle_invoice(client, org_id, payload.invoice_id, data["payment_date"])

    return {"success": True, "data": row, "invoice": invoice}
