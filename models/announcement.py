from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AnnouncementBase(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    is_emergency: bool = False


class AnnouncementCreate(AnnouncementBase):
    pass


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    is_emergency: Optional[bool] = None


class AnnouncementRead(AnnouncementBase):
    id: str
    created_by: Optional[str] = None
    created_at: datetime


class AnnouncementPosted(BaseModel):
    """Announcement plus the outcome of the resident fan-out."""
    announcement: AnnouncementRead
    notified: int
    failed: int
