# routers/staff_assignments.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from core.errors import NotFound, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.notifications import notify_quietly
from core.permission_helpers import requires_permission
from core.roles import parse_role
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_db
from models.enums import AssignmentStatus, NotificationType, Role
from models.staff_assignment import (
    StaffAssignmentCreate,
    StaffAssignmentRead,
    StaffAssignmentStatusUpdate,
)

router = APIRouter(
    prefix="/staff-assignments",
    tags=["Staff Assignments"],
)


@router.get("", response_model=List[StaffAssignmentRead])
def list_assignments(
    status: Optional[AssignmentStatus] = Query(None),
    staff_user_id: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(requires_permission("staff_assignments:read")),
    client: Client = Depends(get_db),
):
    try:
        query = client.table("staff_assignments").select("*")
        if status:
            query = query.eq("status", status.value)
        if staff_user_id:
            query = query.eq("staff_user_id", staff_user_id)
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load staff assignments")

    return result.data or []


@router.post("", response_model=StaffAssignmentRead, status_code=201)
def create_assignment(
    payload: StaffAssignmentCreate,
    current_user: CurrentUser = Depends(requires_permission("staff_assignments:write")),
    client: Client = Depends(get_db),
):
    try:
        role_rows = (
            client.table("user_roles")
            .select("role")
            .eq("user_id", payload.staff_user_id)
            .limit(1)
            .execute()
        ).data or []
    except Exception as e:
        raise handle_supabase_error(e, "Failed to verify staff member")

    if not role_rows or parse_role(role_rows[0].get("role")) is not Role.maintenance_staff:
        raise ValidationFailed("Assignments can only be given to maintenance staff")

    record = sanitize(payload.model_dump())
    record["schedule"] = payload.schedule.value
    record["status"] = AssignmentStatus.active.value
    record["assigned_by"] = current_user.id

    try:
        result = (
            client.table("staff_assignments")
            .insert(record, returning="representation")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create staff assignment")

    assignment = result.data[0]

    notify_quietly(
        client,
        [payload.staff_user_id],
        "New duty assigned",
        f"You have been assigned: {assignment['assignment_type']} ({payload.schedule.value})"
        + (f", wing {assignment['wing']}" if assignment.get("wing") else ""),
        NotificationType.info,
    )

    logger.info(f"Admin {current_user.id} assigned {assignment['assignment_type']} to {payload.staff_user_id}")
    return assignment


@router.patch("/{assignment_id}", response_model=StaffAssignmentRead)
def update_assignment_status(
    assignment_id: str,
    payload: StaffAssignmentStatusUpdate,
    current_user: CurrentUser = Depends(requires_permission("staff_assignments:write")),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("staff_assignments")
            .update({"status": payload.status.value})
            .eq("id", assignment_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update staff assignment")

    if not result.data:
        raise NotFound("Staff assignment not found")
    return result.data[0]


@router.delete("/{assignment_id}")
def delete_assignment(
    assignment_id: str,
    current_user: CurrentUser = Depends(requires_permission("staff_assignments:write")),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("staff_assignments")
            .delete()
            .eq("id", assignment_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete staff assignment")

    if not result.data:
        raise NotFound("Staff assignment not found")

    logger.info(f"Admin {current_user.id} removed staff assignment {assignment_id}")
    return {"status": "deleted", "assignment_id": assignment_id}
