# routers/complaints.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from supabase import Client

from dependencies.auth import CurrentUser, get_current_user, get_db
from models.complaint import (
    ComplaintAssign,
    ComplaintClose,
    ComplaintCreate,
    ComplaintRead,
    ComplaintStatusUpdate,
)
from models.enums import ComplaintCategory, ComplaintStatus
from services import complaints as complaint_service

router = APIRouter(
    prefix="/complaints",
    tags=["Complaints"],
)


@router.post("", response_model=ComplaintRead, status_code=201)
def submit_complaint(
    payload: ComplaintCreate,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    """
    File a new complaint (residents only).

    The complaint number, `submitted` status and wing/flat (copied from the
    resident's profile) are set by the server.
    """
    return complaint_service.create_complaint(client, current_user, payload)


@router.get("", response_model=List[ComplaintRead])
def list_complaints(
    status: Optional[ComplaintStatus] = Query(None),
    category: Optional[ComplaintCategory] = Query(None),
    search: Optional[str] = Query(None, description="Matches title or complaint number"),
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    """
    - Residents: their own complaints
    - Maintenance staff: complaints assigned to them
    - Admins: everything
    """
    return complaint_service.list_complaints(
        client,
        current_user,
        status=status,
        category=category.value if category else None,
        search=search,
    )


@router.get("/{complaint_id}", response_model=ComplaintRead)
def get_complaint(
    complaint_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    return complaint_service.get_complaint(client, current_user, complaint_id)


@router.post("/{complaint_id}/assign", response_model=ComplaintRead)
def assign_complaint(
    complaint_id: str,
    payload: ComplaintAssign,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    """Admin assigns a submitted complaint to a maintenance staff member."""
    return complaint_service.assign_complaint(client, current_user, complaint_id, payload.staff_id)


@router.post("/{complaint_id}/status", response_model=ComplaintRead)
def update_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    """Assigned staff moves the complaint to in_progress or resolved."""
    return complaint_service.update_complaint_status(client, current_user, complaint_id, payload.status)


@router.post("/{complaint_id}/close", response_model=ComplaintRead)
def close_complaint(
    complaint_id: str,
    payload: ComplaintClose,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    """The filing resident rates a resolved complaint (1–5), which closes it."""
    return complaint_service.close_complaint(
        client, current_user, complaint_id, payload.rating, payload.rating_comment
    )
