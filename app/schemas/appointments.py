"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import as_utc


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


class PartyRole(str, Enum):
    """Side of an appointment a user can list by."""

    PATIENT = "patient"
    CONSULTANT = "consultant"
    DOCTOR = "doctor"


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment."""

    consultant_id: UUID = Field(..., alias="consultantId")
    start_at: datetime = Field(..., alias="startAt")
    end_at: datetime = Field(..., alias="endAt")
    patient_notes: str | None = Field(None, alias="patientNotes", max_length=1000)

    model_config = {"populate_by_name": True}

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Store all instants as UTC."""
        return as_utc(v)

    @model_validator(mode="after")
    def validate_time_range(self) -> "AppointmentCreate":
        """Validate end time is after start time."""
        if self.end_at <= self.start_at:
            raise ValueError("endAt must be after startAt")
        return self


class AppointmentFilters(BaseModel):
    """Schema for appointment filtering."""

    role: PartyRole | None = None
    status: AppointmentStatus | None = None


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    patient_id: UUID
    consultant_id: UUID
    doctor_id: UUID | None = None
    start_at: datetime
    end_at: datetime
    status: AppointmentStatus
    booked_at: datetime
    video_room_id: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
