from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .enums import AssignmentSchedule, AssignmentStatus


class StaffAssignmentCreate(BaseModel):
    staff_user_id: str
    assignment_type: str = Field(..., min_length=1)
    description: Optional[str] = None
    schedule: AssignmentSchedule = AssignmentSchedule.daily
    wing: Optional[str] = None


class StaffAssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus


class StaffAssignmentRead(BaseModel):
    id: str
    staff_user_id: str
    assignment_type: str
    description: Optional[str] = None
    schedule: AssignmentSchedule
    wing: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.active
    assigned_by: Optional[str] = None
    created_at: Optional[datetime] = None
