from typing import Optional, List, Dict

from pydantic import BaseModel, Field


class ProfileRead(BaseModel):
    user_id: str
    full_name: Optional[str] = None
    wing: Optional[str] = None
    flat_number: Optional[str] = None
    phone: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Only the supplied fields change; empty strings clear a field."""
    full_name: Optional[str] = Field(None, min_length=1)
    wing: Optional[str] = None
    flat_number: Optional[str] = None
    phone: Optional[str] = None


class DirectoryResponse(BaseModel):
    search: Optional[str] = None
    members: List[ProfileRead] = []
    by_wing: Dict[str, List[ProfileRead]] = {}
