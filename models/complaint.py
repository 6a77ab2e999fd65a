from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import ComplaintCategory, ComplaintPriority, ComplaintStatus


# -------------------------------------------------
# Create Complaint (resident)
# -------------------------------------------------
class ComplaintCreate(BaseModel):
    """
    Client sends this when filing a complaint.
    complaint_number, status, wing/flat and resident_id are set by the backend.
    """
    title: str = Field(..., max_length=200)
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority = ComplaintPriority.medium

    @field_validator("title", "description")
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


# -------------------------------------------------
# Read Complaint (ALWAYS STRING SAFE ids)
# -------------------------------------------------
class ComplaintRead(BaseModel):
    id: str
    complaint_number: str
    title: str
    description: str
    category: ComplaintCategory
    priority: ComplaintPriority
    status: ComplaintStatus

    resident_id: str
    assigned_to: Optional[str] = None
    wing: Optional[str] = None
    flat_number: Optional[str] = None

    rating: Optional[int] = None
    rating_comment: Optional[str] = None

    created_at: datetime
    assigned_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @field_validator("id", "resident_id", mode="before")
    def id_to_str(cls, v):
        return str(v)


# -------------------------------------------------
# Lifecycle actions
# -------------------------------------------------
class ComplaintAssign(BaseModel):
    staff_id: str


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus


class ComplaintClose(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    rating_comment: Optional[str] = None
