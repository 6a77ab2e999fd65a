from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from core.errors import BackendUnavailable, NotAuthenticated
from core.session import CurrentUser, SessionContext
from core.supabase_client import get_supabase_client

__all__ = [
    "CurrentUser",
    "get_session",
    "get_current_user",
    "get_db",
]


# Missing credentials are answered with 401 below, not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# DB CLIENT (overridable in tests)
# ============================================================
def get_db(client: Optional[Client] = Depends(get_supabase_client)) -> Client:
    if client is None:
        raise BackendUnavailable("Supabase client not configured")
    return client


# ============================================================
# SESSION RESOLUTION (Supabase: validates JWT + fetches profile/role)
# ============================================================
def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    client: Client = Depends(get_db),
) -> SessionContext:
    if not credentials or not credentials.credentials:
        raise NotAuthenticated("Missing bearer token")

    session = SessionContext()
    session.resolve(client, credentials.credentials)
    return session


def get_current_user(session: SessionContext = Depends(get_session)) -> CurrentUser:
    return session.user

