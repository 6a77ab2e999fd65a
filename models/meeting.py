from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import RsvpStatus


class MeetingBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    meeting_date: datetime
    location: Optional[str] = None

    # -------------------------------------------------
    # Normalize timestamps like "2025-01-01T00:00:00Z"
    # -------------------------------------------------
    @field_validator("meeting_date", mode="before")
    def parse_meeting_date(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v


class MeetingCreate(MeetingBase):
    pass


class MeetingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    meeting_date: Optional[datetime] = None
    location: Optional[str] = None


class MeetingRead(MeetingBase):
    id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    # Derived per request
    attending_count: int = 0
    my_rsvp: Optional[RsvpStatus] = None


class RsvpRequest(BaseModel):
    status: RsvpStatus


class RsvpRead(BaseModel):
    meeting_id: str
    user_id: str
    status: RsvpStatus
