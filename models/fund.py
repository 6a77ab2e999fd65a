from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .enums import FundEntryType

FUND_CATEGORIES = [
    "Maintenance", "Repairs", "Events", "Utilities",
    "Security", "Cleaning", "Gardening", "Miscellaneous",
]


class FundEntryCreate(BaseModel):
    title: str = Field(..., min_length=1)
    type: FundEntryType
    amount: float = Field(..., gt=0)
    category: str = "Maintenance"
    description: Optional[str] = None


class FundEntryRead(BaseModel):
    id: str
    title: str
    type: FundEntryType
    amount: float
    category: Optional[str] = None
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class FundLedger(BaseModel):
    total_income: float
    total_expense: float
    balance: float
    entries: List[FundEntryRead]
