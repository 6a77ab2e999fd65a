# routers/notifications.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core.config import settings
from core.errors import NotFound, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.notifications import notify_all_residents, notify_users
from core.permission_helpers import requires_permission
from core.realtime import change_feed
from core.roles import parse_role
from dependencies.auth import CurrentUser, get_current_user, get_db
from models.enums import Role
from models.notification import BroadcastRequest, FanoutResult, NotificationRead, UnreadCount

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
)


# -----------------------------------------------------
# Own feed (nobody reads anyone else's notifications)
# -----------------------------------------------------
@router.get("", response_model=List[NotificationRead])
def list_notifications(
    unread_only: bool = Query(False),
    limit: Optional[int] = Query(None, ge=1, le=200),
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    try:
        query = (
            client.table("notifications")
            .select("*")
            .eq("user_id", current_user.id)
        )
        if unread_only:
            query = query.eq("is_read", False)
        result = (
            query.order("created_at", desc=True)
            .limit(limit or settings.NOTIFICATION_FEED_LIMIT)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load notifications")

    return result.data or []


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("notifications")
            .select("id")
            .eq("user_id", current_user.id)
            .eq("is_read", False)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to count notifications")

    return UnreadCount(unread=len(result.data or []))


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("notifications")
            .update({"is_read": True})
            .eq("id", notification_id)
            .eq("user_id", current_user.id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update notification")

    # Someone else's notification looks exactly like a missing one
    if not result.data:
        raise NotFound("Notification not found")

    change_feed.publish("notifications", "UPDATE", result.data[0])
    return result.data[0]


@router.post("/read-all")
def mark_all_read(
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("notifications")
            .update({"is_read": True})
            .eq("user_id", current_user.id)
            .eq("is_read", False)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update notifications")

    updated = result.data or []
    for row in updated:
        change_feed.publish("notifications", "UPDATE", row)

    return {"status": "ok", "updated": len(updated)}


# -----------------------------------------------------
# Broadcast (admin + maintenance staff)
# -----------------------------------------------------
@router.post("/broadcast", response_model=FanoutResult)
def broadcast(
    payload: BroadcastRequest,
    current_user: CurrentUser = Depends(requires_permission("notifications:broadcast")),
    client: Client = Depends(get_db),
):
    title = payload.title.strip()
    message = payload.message.strip()

    if payload.recipient_id:
        try:
            role_rows = (
                client.table("user_roles")
                .select("role")
                .eq("user_id", payload.recipient_id)
                .limit(1)
                .execute()
            ).data or []
        except Exception as e:
            raise handle_supabase_error(e, "Failed to look up recipient")

        if not role_rows or parse_role(role_rows[0].get("role")) is not Role.resident:
            raise ValidationFailed("Notifications can only be sent to a resident")

        result = notify_users(client, [payload.recipient_id], title, message, payload.type)
    else:
        try:
            result = notify_all_residents(client, title, message, payload.type)
        except Exception as e:
            raise handle_supabase_error(e, "Failed to load residents")

    logger.info(
        f"User {current_user.id} broadcast '{title}' "
        f"to {payload.recipient_id or 'all residents'}: {result.delivered} delivered"
    )
    return result
