# core/complaint_lifecycle.py

"""
Complaint state machine.

    submitted ──admin assigns──▶ assigned ──staff──▶ in_progress ──staff──▶ resolved ──resident rates──▶ closed

Each plan_* function checks who is acting and where the complaint
currently is, and returns the column updates to persist. Nothing here
talks to the database.
"""

from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from core.errors import ConflictError, NotPermitted, ValidationFailed
from core.session import CurrentUser
from models.enums import ComplaintStatus, Role

S = ComplaintStatus

FORWARD_TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    S.submitted: frozenset({S.assigned}),
    # staff may skip straight to resolved
    S.assigned: frozenset({S.in_progress, S.resolved}),
    S.in_progress: frozenset({S.resolved}),
    S.resolved: frozenset({S.closed}),
    S.closed: frozenset(),
}

STAFF_TARGETS = frozenset({S.in_progress, S.resolved})
ASSIGNED_STATUSES = frozenset({S.assigned, S.in_progress, S.resolved, S.closed})
OPEN_STATUSES = frozenset({S.submitted, S.assigned, S.in_progress})
DONE_STATUSES = frozenset({S.resolved, S.closed})


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def current_status(complaint: dict) -> ComplaintStatus:
    return ComplaintStatus(complaint["status"])


def _require_forward(current: ComplaintStatus, target: ComplaintStatus):
    if target not in FORWARD_TRANSITIONS[current]:
        raise ConflictError(
            f"Cannot move complaint from '{current.value}' to '{target.value}'"
        )


# -----------------------------------------------------
# submitted (creation)
# -----------------------------------------------------
def new_complaint_record(
    payload,
    filer: CurrentUser,
    complaint_number: str,
    now: Optional[str] = None,
) -> dict:
    if filer.role != Role.resident:
        raise NotPermitted("Only residents can submit complaints")

    return {
        "complaint_number": complaint_number,
        "title": payload.title,
        "description": payload.description,
        "category": payload.category.value,
        "priority": payload.priority.value,
        "status": S.submitted.value,
        "resident_id": filer.id,
        "assigned_to": None,
        "wing": filer.wing,
        "flat_number": filer.flat_number,
        "rating": None,
        "rating_comment": None,
        "created_at": now or utc_now(),
    }


# -----------------------------------------------------
# submitted → assigned
# -----------------------------------------------------
def plan_assignment(
    complaint: dict,
    actor: CurrentUser,
    staff_id: str,
    staff_role: Optional[Role],
    now: Optional[str] = None,
) -> dict:
    if actor.role != Role.admin:
        raise NotPermitted("Only admins can assign complaints")

    current = current_status(complaint)
    if current != S.submitted:
        raise ConflictError(
            f"Only submitted complaints can be assigned (current status: '{current.value}')"
        )

    if staff_role != Role.maintenance_staff:
        raise ValidationFailed("Complaints can only be assigned to maintenance staff")

    return {
        "assigned_to": staff_id,
        "status": S.assigned.value,
        "assigned_at": now or utc_now(),
    }


# -----------------------------------------------------
# assigned → in_progress → resolved
# -----------------------------------------------------
def plan_status_update(
    complaint: dict,
    actor: CurrentUser,
    target: ComplaintStatus,
    now: Optional[str] = None,
) -> dict:
    if actor.role != Role.maintenance_staff or complaint.get("assigned_to") != actor.id:
        raise NotPermitted("Only the assigned staff member can update this complaint")

    if target not in STAFF_TARGETS:
        raise NotPermitted("Staff can only move complaints to 'in_progress' or 'resolved'")

    _require_forward(current_status(complaint), target)

    updates = {"status": target.value}
    if target == S.resolved:
        updates["resolved_at"] = now or utc_now()
    return updates


# -----------------------------------------------------
# resolved → closed
# -----------------------------------------------------
def plan_close(
    complaint: dict,
    actor: CurrentUser,
    rating: int,
    rating_comment: Optional[str] = None,
    now: Optional[str] = None,
) -> dict:
    if actor.role != Role.resident or complaint.get("resident_id") != actor.id:
        raise NotPermitted("Only the resident who filed this complaint can close it")

    if rating is None or not 1 <= int(rating) <= 5:
        raise ValidationFailed("Rating must be between 1 and 5")

    current = current_status(complaint)
    if current != S.resolved:
        raise ConflictError(
            f"Only resolved complaints can be rated and closed (current status: '{current.value}')"
        )

    comment = rating_comment.strip() if rating_comment else None
    return {
        "status": S.closed.value,
        "rating": int(rating),
        "rating_comment": comment or None,
        "closed_at": now or utc_now(),
    }


# -----------------------------------------------------
# Invariant check (used after writes and in tests)
# -----------------------------------------------------
def invariant_violations(complaint: dict) -> List[str]:
    problems = []
    status = current_status(complaint)

    if (complaint.get("assigned_to") is not None) != (status in ASSIGNED_STATUSES):
        problems.append("assigned_to must be set exactly when the complaint has left 'submitted'")

    if complaint.get("rating") is not None and status != S.closed:
        problems.append("rating may only be present on closed complaints")

    if status == S.closed and complaint.get("rating") is None:
        problems.append("closed complaints must carry a rating")

    if status == S.resolved and not complaint.get("resolved_at"):
        problems.append("resolved complaints must carry resolved_at")

    return problems
