import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import PaymentMethod, PaymentStatus

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_month(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not MONTH_PATTERN.match(v):
        raise ValueError("month must look like YYYY-MM")
    return v


class PaymentCreate(BaseModel):
    """Resident records a maintenance payment (no gateway; recorded only)."""
    amount: Optional[float] = Field(None, gt=0)
    month: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.online

    @field_validator("month")
    def check_month(cls, v):
        return validate_month(v)


class DueCreate(BaseModel):
    """Admin raises a pending due for a resident."""
    user_id: str
    month: str
    amount: Optional[float] = Field(None, gt=0)

    @field_validator("month")
    def check_month(cls, v):
        return validate_month(v)


class PaymentRead(BaseModel):
    id: str
    user_id: str
    amount: float
    month: str
    status: PaymentStatus
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PaymentSummary(BaseModel):
    month: str
    total_collected: float
    collected_this_month: float
    paid_this_month: int
    pending_dues: int
