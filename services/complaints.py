# services/complaints.py

"""
Complaint store: numbering, scoped reads and lifecycle writes.

Every write re-reads the complaint through the caller's scope, asks
core.complaint_lifecycle for the update, checks the touched fields
against core.authorization, and only then persists. Updates are
conditional on the status we planned from, so two racing actors cannot
both move the same complaint.
"""

import re
from typing import List, Optional

from core import authorization
from core.complaint_lifecycle import (
    invariant_violations,
    new_complaint_record,
    plan_assignment,
    plan_close,
    plan_status_update,
)
from core.config import settings
from core.errors import ConflictError, NotFound, handle_supabase_error, is_unique_violation
from core.logging_config import logger
from core.notifications import notify_quietly
from core.permission_helpers import require_permission
from core.realtime import change_feed
from core.session import CurrentUser, fetch_role
from models.enums import ComplaintStatus, NotificationType

COMPLAINTS_TABLE = "complaints"


# -----------------------------------------------------
# Numbering
# -----------------------------------------------------
def format_complaint_number(sequence: int) -> str:
    return f"{settings.COMPLAINT_NUMBER_PREFIX}-{sequence:05d}"


def parse_complaint_sequence(number: Optional[str]) -> int:
    if not number:
        return 0
    match = re.search(r"(\d+)$", number)
    return int(match.group(1)) if match else 0


def next_complaint_number(client) -> str:
    # complaint_number is text, so "CMP-100000" sorts before "CMP-99999";
    # take the highest parsed sequence instead of ordering on the column
    result = (
        client.table(COMPLAINTS_TABLE)
        .select("complaint_number")
        .execute()
    )
    latest = max(
        (parse_complaint_sequence(row.get("complaint_number")) for row in (result.data or [])),
        default=0,
    )
    return format_complaint_number(latest + 1)


# -----------------------------------------------------
# Reads (always through the caller's scope)
# -----------------------------------------------------
def list_complaints(
    client,
    user: CurrentUser,
    status: Optional[ComplaintStatus] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    try:
        query = authorization.scope_complaints(
            client.table(COMPLAINTS_TABLE).select("*"), user
        )
        if status:
            query = query.eq("status", ComplaintStatus(status).value)
        if category:
            query = query.eq("category", category)
        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)
        result = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load complaints")

    rows = authorization.visible_complaints(user, result.data or [])

    if search:
        needle = search.strip().lower()
        rows = [
            c for c in rows
            if needle in (c.get("title") or "").lower()
            or needle in (c.get("complaint_number") or "").lower()
        ]

    return rows


def get_complaint(client, user: CurrentUser, complaint_id: str) -> dict:
    """Out-of-scope complaints are reported as missing."""
    try:
        result = (
            client.table(COMPLAINTS_TABLE)
            .select("*")
            .eq("id", complaint_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load complaint")

    rows = result.data or []
    if not rows or not authorization.can_view_complaint(user, rows[0]):
        raise NotFound("Complaint not found")
    return rows[0]


# -----------------------------------------------------
# Writes
# -----------------------------------------------------
def create_complaint(client, user: CurrentUser, payload) -> dict:
    require_permission(user, "complaints:create", "Only residents can submit complaints")

    attempts = max(1, settings.COMPLAINT_NUMBER_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            number = next_complaint_number(client)
        except Exception as e:
            raise handle_supabase_error(e, "Failed to number complaint")

        record = new_complaint_record(payload, user, number)
        try:
            result = (
                client.table(COMPLAINTS_TABLE)
                .insert(record, returning="representation")
                .execute()
            )
            break
        except Exception as e:
            if is_unique_violation(e) and attempt < attempts:
                logger.warning(f"Complaint number collision on attempt {attempt}, retrying")
                continue
            raise handle_supabase_error(e, "Failed to submit complaint")

    created = result.data[0] if result.data else record
    change_feed.publish(COMPLAINTS_TABLE, "INSERT", created)
    logger.info(f"Resident {user.id} submitted complaint {created.get('complaint_number')}")
    return created


def _apply(client, complaint: dict, updates: dict, operation: str) -> dict:
    try:
        result = (
            client.table(COMPLAINTS_TABLE)
            .update(updates)
            .eq("id", complaint["id"])
            .eq("status", complaint["status"])
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, operation)

    if not result.data:
        raise ConflictError("Complaint was changed by someone else; refresh and try again")

    updated = result.data[0]
    for problem in invariant_violations(updated):
        logger.error(f"Complaint {updated.get('id')} violates lifecycle invariant: {problem}")

    change_feed.publish(COMPLAINTS_TABLE, "UPDATE", updated)
    return updated


def assign_complaint(client, actor: CurrentUser, complaint_id: str, staff_id: str) -> dict:
    require_permission(actor, "complaints:assign", "Only admins can assign complaints")
    complaint = get_complaint(client, actor, complaint_id)

    try:
        staff_role = fetch_role(client, staff_id)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to look up staff member")

    updates = plan_assignment(complaint, actor, staff_id, staff_role)
    authorization.ensure_complaint_fields(actor, updates)
    updated = _apply(client, complaint, updates, "Failed to assign complaint")

    number = updated.get("complaint_number")
    notify_quietly(
        client, [staff_id],
        "New task assigned",
        f"Complaint #{number}: {updated.get('title')} has been assigned to you.",
    )
    notify_quietly(
        client, [updated.get("resident_id")],
        "Complaint assigned",
        f"Your complaint #{number} has been assigned to maintenance staff.",
    )

    logger.info(f"Admin {actor.id} assigned complaint {number} to {staff_id}")
    return updated


def update_complaint_status(client, actor: CurrentUser, complaint_id: str, target: ComplaintStatus) -> dict:
    require_permission(actor, "complaints:progress", "Only maintenance staff can update complaint progress")
    complaint = get_complaint(client, actor, complaint_id)

    updates = plan_status_update(complaint, actor, ComplaintStatus(target))
    authorization.ensure_complaint_fields(actor, updates)
    updated = _apply(client, complaint, updates, "Failed to update complaint status")

    number = updated.get("complaint_number")
    if updated.get("status") == ComplaintStatus.resolved.value:
        title, message, kind = (
            "Complaint resolved",
            f"Your complaint #{number} has been resolved. Please rate the work to close it.",
            NotificationType.success,
        )
    else:
        title, message, kind = (
            "Work started",
            f"Work on your complaint #{number} is in progress.",
            NotificationType.complaint,
        )
    notify_quietly(client, [updated.get("resident_id")], title, message, kind)

    logger.info(f"Staff {actor.id} moved complaint {number} to {updated.get('status')}")
    return updated


def close_complaint(client, actor: CurrentUser, complaint_id: str, rating: int, rating_comment: Optional[str] = None) -> dict:
    require_permission(actor, "complaints:close", "Only residents can close complaints")
    complaint = get_complaint(client, actor, complaint_id)

    updates = plan_close(complaint, actor, rating, rating_comment)
    authorization.ensure_complaint_fields(actor, updates)
    updated = _apply(client, complaint, updates, "Failed to close complaint")

    number = updated.get("complaint_number")
    notify_quietly(
        client, [updated.get("assigned_to")],
        "Complaint closed",
        f"Complaint #{number} was closed with a rating of {updated.get('rating')}/5.",
    )

    logger.info(f"Resident {actor.id} closed complaint {number} with rating {updated.get('rating')}")
    return updated
