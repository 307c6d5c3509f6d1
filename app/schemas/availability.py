"""Availability template and slot schemas."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class AvailabilityTemplateCreate(BaseModel):
    """Schema for creating an availability template.

    Exactly one of ``day_of_week`` (recurring, 0 = Sunday) or ``date``
    (one-off override) must be given.
    """

    day_of_week: int | None = Field(None, alias="dayOfWeek", ge=0, le=6)
    on_date: date | None = Field(None, alias="date")
    start_time: time = Field(..., alias="startTime")
    end_time: time = Field(..., alias="endTime")
    slot_duration_min: int = Field(30, alias="slotDurationMin", ge=15)
    max_concurrent: int = Field(1, alias="maxConcurrent", ge=1)
    active: bool = True

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_template(self) -> "AvailabilityTemplateCreate":
        """Validate mode exclusivity and the time window."""
        if (self.day_of_week is None) == (self.on_date is None):
            raise ValueError("Exactly one of dayOfWeek or date is required")
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class AvailabilityTemplateUpdate(BaseModel):
    """Schema for updating an availability template."""

    start_time: time | None = Field(None, alias="startTime")
    end_time: time | None = Field(None, alias="endTime")
    slot_duration_min: int | None = Field(None, alias="slotDurationMin", ge=15)
    max_concurrent: int | None = Field(None, alias="maxConcurrent", ge=1)
    active: bool | None = None

    model_config = {"populate_by_name": True}


class AvailabilityTemplateResponse(BaseModel):
    """Schema for availability template response."""

    id: UUID
    consultant_id: UUID
    day_of_week: int | None = None
    on_date: date | None = Field(None, alias="date")
    start_time: time
    end_time: time
    slot_duration_min: int
    max_concurrent: int
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class Slot(BaseModel):
    """One bookable window."""

    start_at: datetime
    end_at: datetime
    max_concurrent: int = 1
    template_id: UUID


class ConsultantResponse(BaseModel):
    """Public consultant details."""

    id: UUID
    email: str
    full_name: str | None = None
    bio: str | None = None
    specialization: str | None = None

    model_config = {"from_attributes": True}


class ConsultantDetailResponse(BaseModel):
    """Consultant details with availability summary."""

    consultant: ConsultantResponse
    availability_count: int
