# routers/profiles.py

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core import cache
from core.errors import NotFound, handle_supabase_error
from core.logging_config import logger
from core.notifications import user_ids_with_role
from core.permission_helpers import requires_permission
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_db
from models.enums import Role
from models.profile import DirectoryResponse, ProfileRead, ProfileUpdate

router = APIRouter(
    tags=["Profiles"],
)

PROFILE_FIELDS = "user_id, full_name, wing, flat_number, phone"


# -----------------------------------------------------
# Helper: write a profile and drop the cached identity
# -----------------------------------------------------
def _update_profile(client: Client, user_id: str, payload: ProfileUpdate) -> dict:
    # exclude_unset: only fields the caller actually sent
    updates = sanitize(payload.model_dump(exclude_unset=True))
    if "full_name" in updates and updates["full_name"] is None:
        updates.pop("full_name")

    try:
        if updates:
            result = (
                client.table("profiles")
                .update(updates)
                .eq("user_id", user_id)
                .execute()
            )
        else:
            result = (
                client.table("profiles")
                .select(PROFILE_FIELDS)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update profile")

    if not result.data:
        raise NotFound("Profile not found")

    cache.invalidate_identity(user_id)
    return result.data[0]


@router.patch("/profiles/me", response_model=ProfileRead, summary="Update own profile")
def update_my_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(requires_permission("profiles:write_self")),
    client: Client = Depends(get_db),
):
    profile = _update_profile(client, current_user.id, payload)
    logger.info(f"User {current_user.id} updated their profile")
    return profile


@router.patch("/profiles/{user_id}", response_model=ProfileRead, summary="Update any profile (admin)")
def update_profile(
    user_id: str,
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(requires_permission("profiles:write_any")),
    client: Client = Depends(get_db),
):
    profile = _update_profile(client, user_id, payload)
    logger.info(f"Admin {current_user.id} updated profile {user_id}")
    return profile


@router.get("/profiles/staff", response_model=List[ProfileRead], summary="Maintenance staff (admin)")
def list_staff(
    current_user: CurrentUser = Depends(requires_permission("staff:read")),
    client: Client = Depends(get_db),
):
    try:
        staff_ids = user_ids_with_role(client, Role.maintenance_staff)
        if not staff_ids:
            return []
        result = (
            client.table("profiles")
            .select(PROFILE_FIELDS)
            .in_("user_id", staff_ids)
            .order("full_name")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load staff")

    return result.data or []


# -----------------------------------------------------
# Resident directory
# -----------------------------------------------------
def group_by_wing(profiles: List[dict]) -> Dict[str, List[dict]]:
    grouped: Dict[str, List[dict]] = {}
    for p in profiles:
        grouped.setdefault(p.get("wing") or "Unassigned", []).append(p)
    return grouped


def search_profiles(profiles: List[dict], search: str) -> List[dict]:
    needle = search.strip().lower()
    return [
        p for p in profiles
        if needle in (p.get("full_name") or "").lower()
        or needle in (p.get("flat_number") or "").lower()
        or needle in (p.get("wing") or "").lower()
    ]


@router.get("/directory", response_model=DirectoryResponse, summary="Resident directory")
def directory(
    search: Optional[str] = Query(None, description="Match on name, wing or flat"),
    current_user: CurrentUser = Depends(requires_permission("directory:read")),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("profiles")
            .select(PROFILE_FIELDS)
            .order("wing")
            .order("flat_number")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load directory")

    profiles = result.data or []

    if search and search.strip():
        return DirectoryResponse(search=search.strip(), members=search_profiles(profiles, search))

    return DirectoryResponse(members=profiles, by_wing=group_by_wing(profiles))
