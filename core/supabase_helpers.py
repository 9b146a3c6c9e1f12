# core/supabase_helpers.py

from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from core.errors import supabase_error
from core.logging_config import logger
from core.utils import sanitize


# =================================================================
#  SAFE SELECT / INSERT / UPDATE / DELETE: PostgREST tables
# =================================================================
# The client is passed in (it comes from Depends(get_supabase_client)).
# These helpers must NOT be used for auth.users.
# =================================================================

def safe_select(client, table: str, filters: dict = None, *, single=False):
    """
    SELECT * with equality filters.
    single=True returns the first row or None.
    """
    try:
        query = client.table(table).select("*")
        if filters:
            for key, val in filters.items():
                query = query.eq(key, val)

        if single:
            query = query.limit(1)

        result = query.execute()
    except Exception as e:
        supabase_error(e, f"Failed to fetch from {table}")

    rows = result.data or []
    if single:
        return rows[0] if rows else None
    return rows


def safe_insert(client, table: str, data: dict):
    """INSERT one row and return it."""
    cleaned = sanitize(data)

    try:
        result = (
            client.table(table)
            .insert(cleaned, returning="representation")
            .execute()
        )
    except Exception as e:
        supabase_error(e, f"Failed to insert into {table}")

    return result.data[0] if result.data else None


def safe_update(client, table: str, filters: dict, data: dict):
    """UPDATE rows matching `filters`; returns the first updated row or None."""
    cleaned = sanitize(data)

    try:
        query = client.table(table).update(
            cleaned, returning="representation"
        )
        for key, val in filters.items():
            query = query.eq(key, val)

        result = query.execute()
    except Exception as e:
        supabase_error(e, f"Failed to update {table}")

    return result.data[0] if result.data else None


def safe_delete(client, table: str, filters: dict) -> List[dict]:
    try:
        query = client.table(table).delete()
        for key, val in filters.items():
            query = query.eq(key, val)
        result = query.execute()
    except Exception as e:
        supabase_error(e, f"Failed to delete from {table}")

    return result.data or []


# =================================================================
#  ORGANIZATION-SCOPED ROWS
# =================================================================

def get_org_row(client, table: str, row_id: str, organization_id: str, label: str = None) -> dict:
    """
    Fetch one row that must belong to `organization_id`.
    Rows of other organizations are reported as missing (404).
    """
    row = safe_select(
        client, table, {"id": row_id, "organization_id": organization_id}, single=True
    )
    if not row:
        raise HTTPException(404, f"{label or table.rstrip('s').capitalize()} not found")
    return row


def unwrap_rpc(client, name: str, params: Optional[dict] = None, operation: str = None):
    """Call a Postgres function and return its data."""
    try:
        result = client.rpc(name, params or {}).execute()
    except Exception as e:
        supabase_error(e, operation or f"RPC {name}")
    return result.data


# =================================================================
#  SUPABASE AUTH ADMIN HELPERS
# =================================================================
# They MUST be used instead of CRUD on users table.
# =================================================================

def create_supabase_user(client, email: str, password: str, metadata: dict = None):
    """
    Create a confirmed user via Supabase Auth Admin API.
    """
    try:
        result = client.auth.admin.create_user(
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata or {},
            }
        )
    except Exception as e:
        message = str(getattr(e, "message", "") or e).lower()
        if "already" in message and "regist" in message:
            raise HTTPException(400, "A user with this email already exists")
        supabase_error(e, "Failed to create Supabase Auth user")

    if not result or not result.user:
        raise HTTPException(500, "Failed to create Supabase Auth user")
    return result.user


def delete_supabase_user(client, user_id: str):
    """Best-effort removal of an auth user (rollback path)."""
    try:
        client.auth.admin.delete_user(user_id)
        logger.info(f"Rolled back auth user {user_id}")
    except Exception as e:
        logger.error(f"Failed to roll back auth user {user_id}: {e}")


def update_user_metadata(client, user_id: str, metadata: dict):
    """
    Replace user_metadata with `metadata`.
    Example:
        update_user_metadata(client, user_id, {"currency": "USD"})
    """
    try:
        result = client.auth.admin.update_user_by_id(
            user_id,
            {
                "user_metadata": metadata
            }
        )
        return result.user

    except Exception as e:
        supabase_error(e, "Failed to update Supabase user metadata")


def upsert_profile(client, user_id: str, email: str, full_name: str = None, organization_id: str = None):
    data = {"id": user_id, "email": email, "full_name": full_name or ""}
    if organization_id:
        data["organization_id"] = organization_id
    try:
        client.table("profiles").upsert(data, on_conflict="id").execute()
    except Exception as e:
        supabase_error(e, "Failed to save profile")


# =================================================================
#  ACTIVITY LOG (audit trail)
# =================================================================

def log_activity(
    client,
    *,
    user_id: str,
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
):
    """
    Append an activity_log row. A failed audit write is logged and does not
    undo the action it describes.
    """
    row = {
        "user_id": user_id,
        "organization_id": organization_id,
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "details": details or {},
    }
    try:
        client.table("activity_log").insert(row).execute()
    except Exception as e:
        logger.error(f"Audit log write failed ({action} {entity_type}/{entity_id}): {e}")
