# core/session.py

"""
Explicit session context.

A SessionContext is created per request (or per websocket) and walks
    uninitialized → loading → resolved(principal, role, profile) → signed_out

Resolution is cheap after the first request of a session: the validated
token and the resolved identity both come from core.cache.
"""

from typing import Optional

from pydantic import BaseModel

from core import cache
from core.errors import NotAuthenticated
from core.logging_config import logger
from core.roles import effective_role, parse_role
from models.enums import BaseStrEnum, Role


class SessionState(BaseStrEnum):
    uninitialized = "uninitialized"
    loading = "loading"
    resolved = "resolved"
    signed_out = "signed_out"


# ============================================================
# Current User Model (resolved identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None

    # None when the principal has no user_roles row
    role: Optional[Role] = None

    full_name: Optional[str] = None
    wing: Optional[str] = None
    flat_number: Optional[str] = None
    phone: Optional[str] = None

    @property
    def effective_role(self) -> Role:
        return effective_role(self.role)

    def has_role(self, *roles: Role) -> bool:
        return self.role is not None and self.role in roles


# ============================================================
# Backend lookups
# ============================================================
def fetch_role(client, user_id: str) -> Optional[Role]:
    result = (
        client.table("user_roles")
        .select("role")
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return parse_role(rows[0].get("role")) if rows else None


def fetch_profile(client, user_id: str) -> dict:
    result = (
        client.table("profiles")
        .select("full_name, wing, flat_number, phone")
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else {}


def fetch_identity(client, user_id: str, email: Optional[str]) -> CurrentUser:
    role = fetch_role(client, user_id)
    profile = fetch_profile(client, user_id)

    if role is None:
        logger.warning(f"User {user_id} has no role assignment; treating as read-only resident")

    return CurrentUser(
        id=user_id,
        email=email,
        role=role,
        full_name=profile.get("full_name"),
        wing=profile.get("wing"),
        flat_number=profile.get("flat_number"),
        phone=profile.get("phone"),
    )


# ============================================================
# Session context
# ============================================================
class SessionContext:

    def __init__(self):
        self.state = SessionState.uninitialized
        self.token: Optional[str] = None
        self.user: Optional[CurrentUser] = None

    @property
    def is_resolved(self) -> bool:
        return self.state == SessionState.resolved and self.user is not None

    def resolve(self, client, token: str) -> CurrentUser:
        """
        Initial resolution. Any failure here means the caller is
        not authenticated (there is no earlier identity to fall back on).
        """
        self.state = SessionState.loading
        self.token = token

        try:
            user_id, email = self._principal(client, token)

            identity = cache.cached_identity(user_id)
            if identity is None:
                identity = fetch_identity(client, user_id, email)
                cache.cache_identity(user_id, identity)
        except NotAuthenticated:
            self._reset()
            raise
        except Exception as e:
            logger.warning(f"Session resolution failed: {type(e).__name__}: {e}")
            self._reset()
            raise NotAuthenticated("Could not resolve your session, please sign in again")

        self.user = identity
        self.state = SessionState.resolved
        return identity

    def refresh(self, client) -> CurrentUser:
        """
        Background refresh of profile + role.
        On failure the previously resolved identity stays in place.
        """
        if not self.is_resolved:
            raise NotAuthenticated()

        try:
            identity = fetch_identity(client, self.user.id, self.user.email)
        except Exception as e:
            logger.warning(f"Identity refresh failed for {self.user.id}, keeping cached value: {e}")
            return self.user

        cache.cache_identity(identity.id, identity)
        self.user = identity
        return identity

    def sign_out(self, client=None):
        if client is not None and self.token:
            try:
                client.auth.admin.sign_out(self.token)
            except Exception as e:
                logger.warning(f"Supabase sign-out failed: {e}")

        if self.token:
            cache.forget_session(self.token)
        if self.user:
            cache.invalidate_identity(self.user.id)
            logger.info(f"User {self.user.id} signed out")

        self.user = None
        self.token = None
        self.state = SessionState.signed_out

    # -----------------------------------------------------
    # Internals
    # -----------------------------------------------------
    def _principal(self, client, token: str) -> tuple:
        remembered = cache.lookup_session(token)
        if remembered:
            return remembered

        try:
            auth_resp = client.auth.get_user(token)
        except Exception:
            raise NotAuthenticated("Invalid or expired authentication token")

        if not auth_resp or not auth_resp.user:
            raise NotAuthenticated("Invalid or expired authentication token")

        user_id = str(auth_resp.user.id)
        email = auth_resp.user.email
        cache.remember_session(token, user_id, email)
        return user_id, email

    def _reset(self):
        self.user = None
        self.state = SessionState.uninitialized
