# app/schemas/auth.py
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.core.authorization import UserRole
from app.schemas.base import CamelModel


# Request schemas
class RegisterRequest(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name cannot be blank")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# Response schemas
class AuthResponse(CamelModel):
    """User data plus a bearer token, returned by register and login"""

    id: int
    full_name: str
    email: str
    role: UserRole
    profile_picture: Optional[str] = None
    token: str
    token_type: str = "bearer"
    expires_at: datetime
