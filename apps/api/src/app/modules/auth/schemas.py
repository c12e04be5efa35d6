"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr

from app.modules.shared.schemas import CamelModel


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class UserResponse(CamelModel):
    """User profile returned on login."""

    id: UUID
    name: str
    student_id: str | None = None
    email: str
    phone: str | None = None
    role: str
    avatar: str = ""
    is_active: bool
    is_verified: bool
    created_at: datetime


class LoginResponse(CamelModel):
    """Login response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
