from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .enums import NotificationType


class NotificationRead(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.info
    is_read: bool = False
    created_at: datetime


class BroadcastRequest(BaseModel):
    """
    Send a notification to one resident (recipient_id) or,
    when recipient_id is omitted, to every resident.
    """
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.info
    recipient_id: Optional[str] = None


class FanoutResult(BaseModel):
    attempted: int = 0
    delivered: int = 0
    failed: int = 0


class UnreadCount(BaseModel):
    unread: int
