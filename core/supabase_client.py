# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# Probed by the DB health check
HEALTH_TABLES = ["profiles", "user_roles", "complaints", "notifications"]

_client: Optional[Client] = None


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Returns the process-wide Supabase client built with the SERVICE ROLE KEY.

    The service role bypasses row-level security, so every read and write
    made through this client must be scoped by core.authorization first.

    Used as a FastAPI dependency (tests override it with an in-memory double).
    """
    global _client

    if _client is not None:
        return _client

    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials")
        logger.error(f"   URL: {supabase_url}")
        logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
        return None

    try:
        _client = create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None

    return _client


# ============================================================
# Throwaway client for password sign-in
# ============================================================

def get_auth_client() -> Optional[Client]:
    """
    sign_in_with_password stores the user's session on the client it runs
    on, so it gets its own short-lived client instead of the shared one.
    """
    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials for auth client")
        return None

    try:
        return create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Auth Client Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase(client: Optional[Client]) -> dict:
    """
    Simple connectivity check. Never raises.
    """
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    results = {}
    overall = "ok"

    for t in HEALTH_TABLES:
        try:
            res = client.table(t).select("*").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except Exception as err:
            overall = "degraded"
            results[t] = {"status": "error", "detail": str(err)}

    return {
        "service": "Supabase",
        "status": overall,
        "tables": results,
    }
