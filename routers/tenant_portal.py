# routers/tenant_portal.py

"""
Tenant self-service portal. View only: every mutating verb on the prefix is
answered with 405 for tenant callers.
"""

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from core.errors import handle_supabase_error
from core.permission_helpers import requires_role
from core.roles import Role
from core.supabase_client import get_supabase_client
from core.supabase_helpers import unwrap_rpc
from dependencies.auth import CurrentUser


router = APIRouter(
    prefix="/tenant-portal",
    tags=["Tenant Portal"],
)

require_tenant = requires_role(Role.tenant)

METER_HISTORY_MONTHS = 12

MUTATING_METHODS = ["POST", "PUT", "PATCH", "DELETE"]


def own_tenant_id(
    current_user: CurrentUser = Depends(require_tenant),
    client: Client = Depends(get_supabase_client),
) -> str:
    """Ledger tenant row linked to the caller's auth user."""
    try:
        res = (
            client.table("tenants")
            .select("id")
            .eq("user_id", current_user.id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Tenant lookup")

    if not res.data:
        raise HTTPException(404, "Tenant profile not found")
    return res.data[0]["id"]


@router.get("")
@router.get("/profile")
def my_profile(tenant_id: str = Depends(own_tenant_id), client: Client = Depends(get_supabase_client)):
    data = unwrap_rpc(client, "get_tenant_complete_profile", {"_tenant_id": tenant_id}, "Tenant profile")
    return {"success": True, "data": data}


@router.get("/room")
def my_room(tenant_id: str = Depends(own_tenant_id), client: Client = Depends(get_supabase_client)):
    try:
        res = (
            client.table("tenants")
            .select(
                "id, lease_start, lease_end, rent_amount, security_deposit, property_id, unit_id, "
                "properties:property_id(id, name, address), "
                "units:unit_id(id, unit_number, floor, rent)"
            )
            .eq("id", tenant_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Room lookup")

    return {"success": True, "data": res.data[0] if res.data else None}


@router.get("/bills")
def my_bills(tenant_id: str = Depends(own_tenant_id), client: Client = Depends(get_supabase_client)):
    data = unwrap_rpc(client, "get_tenant_bills_with_payments", {"_tenant_id": tenant_id}, "Tenant bills")
    return {"success": True, "data": data or []}


@router.get("/payments")
def my_payments(tenant_id: str = Depends(own_tenant_id), client: Client = Depends(get_supabase_client)):
    try:
        res = (
            client.table("payments")
            .select(
                "id, amount, payment_date, payment_method, status, "
                "invoices:invoice_id(id, invoice_number, bill_type)"
            )
            .eq("tenant_id", tenant_id)
            .order("payment_date", desc=True)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Payment history")

    return {"success": True, "data": res.data or []}


@router.get("/meter")
def my_meter_readings(tenant_id: str = Depends(own_tenant_id), client: Client = Depends(get_supabase_client)):
    try:
        res = (
            client.table("electricity_meter_readings")
            .select(
                "id, reading_month, previous_reading, current_reading, units_used, "
                "unit_rate, total_amount, reading_date, units:unit_id(id, unit_number)"
            )
            .eq("tenant_id", tenant_id)
            .order("reading_month", desc=True)
            .limit(METER_HISTORY_MONTHS)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Meter readings")

    return {"success": True, "data": res.data or []}


# ============================================================
# VIEW-ONLY CONTRACT
# ============================================================
@router.api_route("", methods=MUTATING_METHODS, include_in_schema=False)
@router.api_route("/{path:path}", methods=MUTATING_METHODS, include_in_schema=False)
def reject_mutation(path: str = "", current_user: CurrentUser = Depends(require_tenant)):
    raise HTTPException(405, "Method not allowed. Tenants have view-only access.")
