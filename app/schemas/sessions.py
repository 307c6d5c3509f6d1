"""Session, video and rating schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.appointments import AppointmentResponse


class SessionComplete(BaseModel):
    """Schema for completing a session."""

    notes: str | None = Field(None, max_length=5000)


class SessionRecordResponse(BaseModel):
    """Schema for session record response."""

    id: UUID
    appointment_id: UUID
    started_at: datetime | None = None
    ended_at: datetime | None = None
    participants: list[UUID]
    notes: str | None = None
    consultant_rating_by_patient: int | None = None
    patient_rating_by_consultant: int | None = None
    patient_comment: str | None = None
    consultant_comment: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionCompleteResponse(BaseModel):
    """Completed appointment together with its session record."""

    appointment: AppointmentResponse
    session_record: SessionRecordResponse


class VideoTokenResponse(BaseModel):
    """Video room join details."""

    room_id: str
    video_url: str
    video_token: str | None = None


class RatingCreate(BaseModel):
    """Schema for rating the other party of a session."""

    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class RatingResponse(BaseModel):
    """Rating submission result."""

    message: str
    session_record: SessionRecordResponse
