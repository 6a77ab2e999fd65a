# routers/auth.py

from fastapi import APIRouter, Depends, Query, Request
from supabase import Client

from core.config import settings
from core.errors import BackendUnavailable, NotAuthenticated, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.rate_limiter import require_rate_limit
from core.roles import ROLE_LABELS, navigation_for
from core.session import SessionContext
from core.supabase_client import get_auth_client
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user, get_db, get_session
from models.auth import LoginRequest, SignupRequest, SignupResponse, TokenResponse


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(
    payload: LoginRequest,
    request: Request,
    auth_client: Client = Depends(get_auth_client),
):
    email = payload.email.strip().lower()
    require_rate_limit(request, "login", email)

    if not auth_client:
        raise BackendUnavailable("Supabase client not configured")

    try:
        response = auth_client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        # Log for debugging, never expose details
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise NotAuthenticated("Invalid email or password")

    session = getattr(response, "session", None)
    if not session or not session.access_token:
        raise NotAuthenticated("Invalid email or password")

    return TokenResponse(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_in=getattr(session, "expires_in", None),
    )


# ============================================================
# SIGNUP: profile + exactly one role row
# ============================================================
@router.post("/signup", response_model=SignupResponse, status_code=201, summary="Create an account")
def signup(
    payload: SignupRequest,
    request: Request,
    client: Client = Depends(get_db),
):
    require_rate_limit(request, "signup")

    if payload.role.value not in settings.SIGNUP_ALLOWED_ROLES:
        raise ValidationFailed(f"Role '{payload.role.value}' cannot be chosen at signup")

    email = payload.email.strip().lower()

    try:
        created = client.auth.admin.create_user({
            "email": email,
            "password": payload.password,
            "email_confirm": True,
            "user_metadata": {"full_name": payload.full_name, "role": payload.role.value},
        })
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create account")

    if not created or not created.user:
        raise BackendUnavailable("Failed to create account")

    user_id = str(created.user.id)

    profile = sanitize({
        "full_name": payload.full_name,
        "wing": payload.wing,
        "flat_number": payload.flat_number,
        "phone": payload.phone,
    })
    profile["user_id"] = user_id

    try:
        client.table("profiles").upsert(profile, on_conflict="user_id").execute()

        # A database trigger may already have written the role; never overwrite it
        existing = (
            client.table("user_roles")
            .select("role")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not existing.data:
            client.table("user_roles").insert(
                {"user_id": user_id, "role": payload.role.value}
            ).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to set up profile")

    logger.info(f"New {payload.role.value} account created: {user_id}")
    return SignupResponse(user_id=user_id, email=email, role=payload.role)


# ============================================================
# SIGN OUT
# ============================================================
@router.post("/sign-out", summary="End the current session")
def sign_out(
    session: SessionContext = Depends(get_session),
    client: Client = Depends(get_db),
):
    session.sign_out(client)
    return {"status": session.state.value}


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=CurrentUser, summary="Current authenticated user")
def read_me(
    refresh: bool = Query(False, description="Re-fetch profile and role from the backend"),
    session: SessionContext = Depends(get_session),
    client: Client = Depends(get_db),
):
    if refresh:
        return session.refresh(client)
    return session.user


@router.get("/navigation", summary="Navigation entries for the current role")
def read_navigation(current_user: CurrentUser = Depends(get_current_user)):
    role = current_user.effective_role
    return {
        "role": current_user.role.value if current_user.role else None,
        "label": ROLE_LABELS[role],
        "items": navigation_for(current_user.role),
    }
