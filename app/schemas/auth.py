"""Authentication schemas."""

from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.schemas.users import UserSummary


class RegisterRequest(BaseModel):
    """Self-registration request."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    role: Literal["patient", "doctor"]
    doctor_license: str | None = Field(None, alias="doctorLicense", max_length=100)
    profile: dict[str, Any] | None = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_doctor_license(self) -> "RegisterRequest":
        """Doctors must provide a license number."""
        if self.role == "doctor" and not self.doctor_license:
            raise ValueError("doctorLicense is required for doctors")
        return self


class LoginRequest(BaseModel):
    """Login request; username is the account email."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login response with access token and user info."""

    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class AccessTokenResponse(BaseModel):
    """Refreshed access token."""

    access_token: str
    token_type: str = "bearer"


class AuthStatusResponse(BaseModel):
    """Authentication status."""

    authenticated: bool
    user: UserSummary
