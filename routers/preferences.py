# routers/preferences.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from core.currency import Currency, format_amount
from core.errors import require_client
from core.supabase_client import get_supabase_client
from core.supabase_helpers import update_user_metadata
from dependencies.auth import CurrentUser, get_current_user
from models.preferences import Preferences, PreferencesUpdate


router = APIRouter(
    prefix="/preferences",
    tags=["Preferences"],
)


def read_preferences(metadata: dict) -> Preferences:
    """Stored values that are no longer valid fall back to the defaults."""
    prefs = Preferences()
    for field in ("currency", "theme"):
        value = (metadata or {}).get(field)
        if value is None:
            continue
        try:
            prefs = Preferences(**{**prefs.model_dump(), field: value})
        except ValueError:
            continue
    return prefs


@router.get("", summary="Display preferences of the caller")
def get_preferences(current_user: CurrentUser = Depends(get_current_user)):
    return {"success": True, "data": read_preferences(current_user.metadata).model_dump(mode="json")}


@router.put("", summary="Update display preferences")
def update_preferences(
    payload: PreferencesUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if not changes:
        raise HTTPException(400, "No preferences to update")

    require_client(client)
    metadata = {**(current_user.metadata or {}), **changes}
    update_user_metadata(client, current_user.id, metadata)

    return {"success": True, "data": read_preferences(metadata).model_dump(mode="json")}


@router.get("/format", summary="Format an amount in the caller's currency")
def format_preview(
    amount: float,
    currency: Optional[Currency] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    target = currency or read_preferences(current_user.metadata).currency
    return {"success": True, "data": {"currency": target.value, "formatted": format_amount(amount, target)}}
