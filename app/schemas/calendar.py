"""Calendar schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.schemas.appointments import AppointmentStatus


class CalendarAppointment(BaseModel):
    """Appointment entry on a calendar day."""

    id: UUID
    start_at: datetime
    end_at: datetime
    status: AppointmentStatus


class CalendarDay(BaseModel):
    """Appointments grouped under one date."""

    date: str
    count: int
    appointments: list[CalendarAppointment]
