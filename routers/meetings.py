# routers/meetings.py

from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter, Depends
from supabase import Client

from core.errors import ConflictError, NotFound, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.realtime import change_feed
from core.utils import parse_timestamp, sanitize
from dependencies.auth import CurrentUser, get_db
from models.enums import RsvpStatus
from models.meeting import MeetingCreate, MeetingRead, MeetingUpdate, RsvpRead, RsvpRequest

router = APIRouter(
    prefix="/meetings",
    tags=["Meetings"],
)


def _load_meeting(client: Client, meeting_id: str) -> dict:
    try:
        result = (
            client.table("meetings")
            .select("*")
            .eq("id", meeting_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load meeting")

    if not result.data:
        raise NotFound("Meeting not found")
    return result.data[0]


def _serialize(payload: dict) -> dict:
    data = sanitize(payload)
    if isinstance(data.get("meeting_date"), datetime):
        data["meeting_date"] = data["meeting_date"].isoformat()
    return data


def attach_rsvps(meetings: List[dict], rsvps: List[dict], user_id: str) -> List[dict]:
    """Add attending_count and the caller's own answer to each meeting."""
    attending: Dict[str, int] = {}
    mine: Dict[str, str] = {}

    for r in rsvps:
        mid = r.get("meeting_id")
        if r.get("status") == RsvpStatus.attending.value:
            attending[mid] = attending.get(mid, 0) + 1
        if r.get("user_id") == user_id:
            mine[mid] = r.get("status")

    return [
        {**m, "attending_count": attending.get(m["id"], 0), "my_rsvp": mine.get(m["id"])}
        for m in meetings
    ]


# -----------------------------------------------------
# List (everyone)
# -----------------------------------------------------
@router.get("", response_model=List[MeetingRead])
def list_meetings(
    current_user: CurrentUser = Depends(requires_permission("meetings:read")),
    client: Client = Depends(get_db),
):
    try:
        meetings = (
            client.table("meetings")
            .select("*")
            .order("meeting_date")
            .execute()
        ).data or []

        rsvps = []
        if meetings:
            rsvps = (
                client.table("meeting_rsvps")
                .select("meeting_id, user_id, status")
                .in_("meeting_id", [m["id"] for m in meetings])
                .execute()
            ).data or []
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load meetings")

    return attach_rsvps(meetings, rsvps, current_user.id)


# -----------------------------------------------------
# Admin CRUD
# -----------------------------------------------------
@router.post("", response_model=MeetingRead, status_code=201)
def create_meeting(
    payload: MeetingCreate,
    current_user: CurrentUser = Depends(requires_permission("meetings:write")),
    client: Client = Depends(get_db),
):
    record = _serialize(payload.model_dump())
    record["created_by"] = current_user.id

    try:
        result = (
            client.table("meetings")
            .insert(record, returning="representation")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to schedule meeting")

    meeting = result.data[0]
    change_feed.publish("meetings", "INSERT", meeting)
    logger.info(f"Admin {current_user.id} scheduled meeting {meeting.get('id')}")
    return meeting


@router.patch("/{meeting_id}", response_model=MeetingRead)
def update_meeting(
    meeting_id: str,
    payload: MeetingUpdate,
    current_user: CurrentUser = Depends(requires_permission("meetings:write")),
    client: Client = Depends(get_db),
):
    updates = {k: v for k, v in _serialize(payload.model_dump(exclude_unset=True)).items() if v is not None}
    if not updates:
        raise ValidationFailed("Nothing to update")

    try:
        result = (
            client.table("meetings")
            .update(updates)
            .eq("id", meeting_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update meeting")

    if not result.data:
        raise NotFound("Meeting not found")

    change_feed.publish("meetings", "UPDATE", result.data[0])
    return result.data[0]


@router.delete("/{meeting_id}")
def delete_meeting(
    meeting_id: str,
    current_user: CurrentUser = Depends(requires_permission("meetings:write")),
    client: Client = Depends(get_db),
):
    try:
        client.table("meeting_rsvps").delete().eq("meeting_id", meeting_id).execute()
        result = client.table("meetings").delete().eq("id", meeting_id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete meeting")

    if not result.data:
        raise NotFound("Meeting not found")

    logger.info(f"Admin {current_user.id} deleted meeting {meeting_id}")
    return {"status": "deleted", "meeting_id": meeting_id}


# -----------------------------------------------------
# RSVP: one answer per (meeting, user), last write wins
# -----------------------------------------------------
@router.put("/{meeting_id}/rsvp", response_model=RsvpRead)
def rsvp(
    meeting_id: str,
    payload: RsvpRequest,
    current_user: CurrentUser = Depends(requires_permission("meetings:rsvp")),
    client: Client = Depends(get_db),
):
    meeting = _load_meeting(client, meeting_id)

    when = parse_timestamp(meeting.get("meeting_date"))
    if when and when < datetime.now(timezone.utc):
        raise ConflictError("This meeting has already taken place")

    row = {
        "meeting_id": meeting_id,
        "user_id": current_user.id,
        "status": payload.status.value,
    }

    try:
        result = (
            client.table("meeting_rsvps")
            .upsert(row, on_conflict="meeting_id,user_id")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to save RSVP")

    saved = (result.data or [row])[0]
    change_feed.publish("meeting_rsvps", "UPDATE", saved)
    return saved
