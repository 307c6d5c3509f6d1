"""Prescription schemas."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field


class PrescriptionField(BaseModel):
    """One form field of a prescription."""

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    type: Literal["text", "number", "date", "checkbox", "textarea"]
    value: Any = None
    order: int


class PrescriptionCreate(BaseModel):
    """Schema for writing a prescription."""

    patient_id: UUID = Field(..., alias="patientId")
    fields: list[PrescriptionField]

    model_config = {"populate_by_name": True}


class PrescriptionResponse(BaseModel):
    """Schema for prescription response."""

    id: UUID
    doctor_id: UUID
    patient_id: UUID
    fields: list[PrescriptionField]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
