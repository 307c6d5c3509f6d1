"""Notification inbox table model."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from app.models.base import JSONType, UTCDateTime, metadata

notifications = Table(
    "notifications",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("type", String(50), nullable=False),
    Column("title", Text, nullable=False),
    Column("body", Text, nullable=False),
    Column("read", Boolean, nullable=False, server_default=text("false")),
    Column("meta", JSONType, nullable=True),
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
    CheckConstraint(
        "type IN ('appointment_created', 'appointment_confirmed', 'appointment_cancelled', "
        "'appointment_no_show', 'appointment_reminder', 'session_completed', 'other')",
        name="notifications_type_check",
    ),
    Index("idx_notifications_user_id", "user_id"),
    Index("idx_notifications_user_read", "user_id", "read"),
    Index("idx_notifications_created_at", "created_at"),
)
