from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .enums import Role


# -----------------------------------------------------
# LOGIN REQUEST (Supabase email/password)
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -----------------------------------------------------
# TOKEN RESPONSE (Supabase session JWT)
# -----------------------------------------------------
class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"


# -----------------------------------------------------
# SIGNUP (role is chosen once, here)
# -----------------------------------------------------
class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)
    role: Role = Role.resident
    wing: Optional[str] = None
    flat_number: Optional[str] = None
    phone: Optional[str] = None


class SignupResponse(BaseModel):
    user_id: str
    email: str
    role: Role
