# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.

    Used as a FastAPI dependency (`Depends(get_supabase_client)`), so every
    request gets its own client and tests can swap it through
    `app.dependency_overrides`.

    REQUIRED for:
        - auth.admin.create_user / delete_user
        - reading user_roles + user_permissions regardless of RLS
        - full read/write on all tables
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Ping Supabase for health checks
# ============================================================

HEALTH_TABLES = ["organizations", "properties", "units", "tenants", "invoices"]


def ping_supabase(client: Optional[Client]) -> dict:
    """
    Simple connectivity check.
    Does NOT query auth tables.
    """
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    results = {}
    status = "ok"

    for t in HEALTH_TABLES:
        try:
            res = client.table(t).select("id").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except Exception as err:
            status = "degraded"
            results[t] = {"status": "error", "detail": str(err)}

    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
