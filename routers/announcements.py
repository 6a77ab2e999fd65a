# routers/announcements.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core.errors import NotFound, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.notifications import notify_all_residents, send_webhook_message
from core.permission_helpers import requires_permission
from core.realtime import change_feed
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_db
from models.announcement import (
    AnnouncementCreate,
    AnnouncementPosted,
    AnnouncementRead,
    AnnouncementUpdate,
)
from models.enums import NotificationType
from models.notification import FanoutResult

router = APIRouter(
    prefix="/announcements",
    tags=["Announcements"],
)


@router.get("", response_model=List[AnnouncementRead])
def list_announcements(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Newest N only (feed displays)"),
    current_user: CurrentUser = Depends(requires_permission("announcements:read")),
    client: Client = Depends(get_db),
):
    try:
        query = client.table("announcements").select("*").order("created_at", desc=True)
        if limit:
            query = query.limit(limit)
        result = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load announcements")
    return result.data or []


@router.post("", response_model=AnnouncementPosted, status_code=201)
def create_announcement(
    payload: AnnouncementCreate,
    current_user: CurrentUser = Depends(requires_permission("announcements:write")),
    client: Client = Depends(get_db),
):
    """
    Post an announcement (admin only) and notify every resident.
    Emergency announcements are also pushed to the society webhook.
    """
    record = sanitize(payload.model_dump())
    if not record.get("title") or not record.get("content"):
        raise ValidationFailed("Title and content are required")
    record["created_by"] = current_user.id

    try:
        result = (
            client.table("announcements")
            .insert(record, returning="representation")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create announcement")

    announcement = result.data[0]
    change_feed.publish("announcements", "INSERT", announcement)

    kind = NotificationType.warning if payload.is_emergency else NotificationType.announcement
    prefix = "🚨 Emergency: " if payload.is_emergency else "📢 "
    # The announcement is already saved; a failed resident lookup only skips the fan-out
    try:
        fanout = notify_all_residents(client, f"{prefix}{announcement['title']}", announcement["content"], kind)
    except Exception as e:
        logger.warning(f"Announcement {announcement.get('id')} saved but residents were not notified: {e}")
        fanout = FanoutResult(failed=1)

    if payload.is_emergency:
        send_webhook_message(f"🚨 {announcement['title']}\n{announcement['content']}")

    logger.info(f"Admin {current_user.id} posted announcement {announcement.get('id')}")
    return AnnouncementPosted(
        announcement=announcement,
        notified=fanout.delivered,
        failed=fanout.failed,
    )


@router.patch("/{announcement_id}", response_model=AnnouncementRead)
def update_announcement(
    announcement_id: str,
    payload: AnnouncementUpdate,
    current_user: CurrentUser = Depends(requires_permission("announcements:write")),
    client: Client = Depends(get_db),
):
    updates = {k: v for k, v in sanitize(payload.model_dump(exclude_unset=True)).items() if v is not None}
    if not updates:
        raise ValidationFailed("Nothing to update")

    try:
        result = (
            client.table("announcements")
            .update(updates)
            .eq("id", announcement_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update announcement")

    if not result.data:
        raise NotFound("Announcement not found")

    logger.info(f"Admin {current_user.id} updated announcement {announcement_id}")
    return result.data[0]


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: str,
    current_user: CurrentUser = Depends(requires_permission("announcements:write")),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("announcements")
            .delete()
            .eq("id", announcement_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete announcement")

    if not result.data:
        raise NotFound("Announcement not found")

    logger.info(f"Admin {current_user.id} deleted announcement {announcement_id}")
    return {"status": "deleted", "announcement_id": announcement_id}
