# services/tenant_assignment.py

"""
Tenant ↔ unit pairing.

Assigning writes two rows (the unit and the ledger tenant). PostgREST gives
no multi-statement transaction, so the unit write goes first and is restored
to its previous values if the tenant write fails. A caller never sees the
unit occupied while the tenant is still inactive, or the reverse.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.supabase_helpers import get_org_row
from core.utils import sanitize
from models.enums import TenantStatus, UnitAvailability
from models.unit import UnitAssignment


UNIT_RESTORE_FIELDS = ("tenant_id", "availability")


def _update_one(client, table: str, row_id: str, data: dict) -> Optional[dict]:
    result = (
        client.table(table)
        .update(sanitize(data), returning="representation")
        .eq("id", row_id)
        .execute()
    )
    return result.data[0] if result.data else None


def _restore_unit(client, unit: dict):
    previous = {k: unit.get(k) for k in UNIT_RESTORE_FIELDS}
    try:
        _update_one(client, "units", unit["id"], previous)
        logger.warning(f"Restored unit {unit['id']} after failed tenant update")
    except Exception as e:
        logger.error(f"Failed to restore unit {unit['id']}: {e}")


def _apply_pair(
    client,
    unit: dict,
    unit_changes: Dict[str, Any],
    tenant_id: str,
    tenant_changes: Dict[str, Any],
    operation: str,
) -> Dict[str, dict]:
    try:
        updated_unit = _update_one(client, "units", unit["id"], unit_changes)
    except Exception as e:
        raise handle_supabase_error(e, operation)

    try:
        updated_tenant = _update_one(client, "tenants", tenant_id, tenant_changes)
        if updated_tenant is None:
            raise RuntimeError(f"tenant {tenant_id} not updated")
    except Exception as e:
        _restore_unit(client, unit)
        raise handle_supabase_error(e, operation)

    return {"unit": updated_unit, "tenant": updated_tenant}


def assign_tenant(client, organization_id: str, unit_id: str, payload: UnitAssignment) -> Dict[str, dict]:
    """
    unit:   tenant_id=<tenant>, availability=occupied
    tenant: status=active, unit/property/lease fields
    """
    unit = get_org_row(client, "units", unit_id, organization_id, "Unit")
    tenant = get_org_row(client, "tenants", payload.tenant_id, organization_id, "Tenant")

    current = unit.get("tenant_id")
    if current and current != tenant["id"]:
        raise HTTPException(400, "Unit is already assigned to another tenant")

    housed_in = tenant.get("unit_id")
    if housed_in and housed_in != unit["id"]:
        raise HTTPException(400, "Tenant already occupies another unit; unassign it first")

    unit_changes = {
        "tenant_id": tenant["id"],
        "availability": UnitAvailability.occupied.value,
    }
    tenant_changes = {
        "status": TenantStatus.active.value,
        "unit_id": unit["id"],
        "property_id": unit.get("property_id"),
        "lease_start": payload.lease_start,
        "lease_end": payload.lease_end,
        "rent_amount": payload.rent_amount if payload.rent_amount is not None else unit.get("rent"),
    }

    result = _apply_pair(client, unit, unit_changes, tenant["id"], tenant_changes, "Tenant assignment")
    logger.info(f"Assigned tenant {tenant['id']} to unit {unit['id']}")
    return result


def unassign_tenant(client, organization_id: str, unit_id: str) -> Dict[str, dict]:
    """
    unit:   tenant_id=null, availability=vacant
    tenant: status=inactive
    """
    unit = get_org_row(client, "units", unit_id, organization_id, "Unit")

    tenant_id = unit.get("tenant_id")
    if not tenant_id:
        raise HTTPException(400, "Unit has no assigned tenant")

    unit_changes = {
        "tenant_id": None,
        "availability": UnitAvailability.vacant.value,
    }
    tenant_changes = {
        "status": TenantStatus.inactive.value,
        "unit_id": None,
    }

    result = _apply_pair(client, unit, unit_changes, tenant_id, tenant_changes, "Tenant unassignment")
    logger.info(f"Unassigned tenant {tenant_id} from unit {unit['id']}")
    return result
