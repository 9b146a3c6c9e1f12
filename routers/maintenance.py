# routers/maintenance.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from core.errors import handle_supabase_error
from core.permission_helpers import requires_permission
from core.permissions import Permission
from core.supabase_client import get_supabase_client
from core.supabase_helpers import get_org_row, safe_delete, safe_insert, safe_update
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user, require_organization
from models.enums import TicketPriority, TicketStatus
from models.maintenance import TicketCreate, TicketUpdate


router = APIRouter(
    prefix="/maintenance",
    tags=["Maintenance"],
)


@router.get("", dependencies=[Depends(requires_permission(Permission.view_maintenance))])
def list_tickets(
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    property_id: Optional[str] = None,
    limit: int = Query(500, ge=1, le=1000),
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    try:
        query = client.table("maintenance_tickets").select("*").eq("organization_id", org_id)
        if status:
            query = query.eq("status", status.value)
        if priority:
            query = query.eq("priority", priority.value)
        if property_id:
            query = query.eq("property_id", property_id)

        res = query.order("created_at", desc=True).limit(limit).execute()
        return {"success": True, "data": res.data or []}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch maintenance tickets")


@router.post("", status_code=201, dependencies=[Depends(requires_permission(Permission.create_maintenance))])
def create_ticket(
    payload: TicketCreate,
    org_id: str = Depends(require_organization),
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    if payload.property_id:
        get_org_row(client, "properties", payload.property_id, org_id, "Property")

    data = sanitize(payload.model_dump())
    data["organization_id"] = org_id
    data["status"] = TicketStatus.open.value
    data["created_by"] = current_user.id

    row = safe_insert(client, "maintenance_tickets", data)
    if not row:
        raise HTTPException(500, "Insert returned no data")
    return {"success": True, "data": row}


@router.patch("/{ticket_id}", dependencies=[Depends(requires_permission(Permission.edit_maintenance))])
def update_ticket(
    ticket_id: str,
    payload: TicketUpdate,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    # Status moves freely between open / in_progress / completed
    get_org_row(client, "maintenance_tickets", ticket_id, org_id, "Ticket")

    changes = sanitize(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(400, "No fields to update")

    row = safe_update(client, "maintenance_tickets", {"id": ticket_id, "organization_id": org_id}, changes)
    return {"success": True, "data": row}


@router.delete("/{ticket_id}", dependencies=[Depends(requires_permission(Permission.delete_maintenance))])
def delete_ticket(
    ticket_id: str,
    org_id: str = Depends(require_organization),
    client: Client = Depends(get_supabase_client),
):
    get_org_row(client, "maintenance_tickets", ticket_id, org_id, "Ticket")
    safe_delete(client, "maintenance_tickets", {"id": ticket_id, "organization_id": org_id})
    return {"success": True, "message": "Ticket deleted"}
