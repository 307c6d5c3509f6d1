"""Notification inbox schemas."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class NotificationType(str, Enum):
    """Notification type tags."""

    APPOINTMENT_CREATED = "appointment_created"
    APPOINTMENT_CONFIRMED = "appointment_confirmed"
    APPOINTMENT_CANCELLED = "appointment_cancelled"
    APPOINTMENT_NO_SHOW = "appointment_no_show"
    APPOINTMENT_REMINDER = "appointment_reminder"
    SESSION_COMPLETED = "session_completed"
    OTHER = "other"


class NotificationRecord(BaseModel):
    """Schema for notification record."""

    id: UUID
    user_id: UUID
    type: str
    title: str
    body: str
    read: bool
    meta: dict[str, Any] | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
