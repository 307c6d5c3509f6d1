"""Availability templates table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Table,
    Time,
    Uuid,
    func,
    text,
)

from app.models.base import UTCDateTime, metadata

availability_templates = Table(
    "availability_templates",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("consultant_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    # Recurring (day_of_week, 0 = Sunday) or one-off override (date)
    Column("day_of_week", Integer, nullable=True),
    Column("date", Date, nullable=True),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("slot_duration_min", Integer, nullable=False, server_default=text("30")),
    Column("max_concurrent", Integer, nullable=False, server_default=text("1")),
    Column("active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    CheckConstraint(
        "(day_of_week IS NULL) <> (date IS NULL)",
        name="availability_templates_mode_check",
    ),
    CheckConstraint(
        "day_of_week IS NULL OR (day_of_week BETWEEN 0 AND 6)",
        name="availability_templates_day_check",
    ),
    CheckConstraint("start_time < end_time", name="availability_templates_window_check"),
    CheckConstraint("slot_duration_min >= 15", name="availability_templates_duration_check"),
    CheckConstraint("max_concurrent >= 1", name="availability_templates_concurrent_check"),
    Index("idx_availability_consultant_day", "consultant_id", "day_of_week"),
    Index("idx_availability_consultant_date", "consultant_id", "date"),
)
