"""User schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    """Minimal identity returned by auth endpoints."""

    id: UUID
    email: str
    role: str

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Schema for updating user profile."""

    full_name: str | None = Field(None, alias="fullName", max_length=200)
    phone: str | None = Field(None, max_length=20)
    bio: str | None = Field(None, max_length=2000)
    specialization: str | None = Field(None, max_length=200)

    model_config = {"populate_by_name": True}


class UserResponse(BaseModel):
    """User schema for API responses."""

    id: UUID
    email: str
    role: str
    full_name: str | None = None
    phone: str | None = None
    bio: str | None = None
    specialization: str | None = None
    doctor_license: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}
