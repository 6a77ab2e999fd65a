# routers/health.py

from typing import Optional

from fastapi import APIRouter, Depends
from supabase import Client

from core.config import settings
from core.realtime import change_feed
from core.supabase_client import get_supabase_client, ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + table queries
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
def health_db(client: Optional[Client] = Depends(get_supabase_client)):
    """
    Probes each core table and reports per-table status.
    Safe for external health monitors (no auth required).
    """
    status = ping_supabase(client)
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "realtime_subscribers": change_feed.subscriber_count(),
    }
