"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from app.models.base import UTCDateTime, metadata

# Name of the index that rejects double bookings
SLOT_UNIQUE_INDEX = "uq_appointments_consultant_start_active"

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Parties
    Column("patient_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("consultant_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("doctor_id", Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    # Schedule
    Column("start_at", UTCDateTime, nullable=False),
    Column("end_at", UTCDateTime, nullable=False),
    # Status management
    Column("status", Text, nullable=False, server_default=text("'pending'")),
    Column("booked_at", UTCDateTime, nullable=False, server_default=func.now()),
    Column("video_room_id", Text, nullable=True),
    Column("notes", Text, nullable=True),
    # Audit fields
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    # Constraints
    CheckConstraint(
        "status IN ('pending', 'confirmed', 'cancelled', 'completed', 'no-show')",
        name="appointments_status_check",
    ),
    CheckConstraint("end_at > start_at", name="appointments_time_range_check"),
    # At most one live booking per consultant and start time
    Index(
        SLOT_UNIQUE_INDEX,
        "consultant_id",
        "start_at",
        unique=True,
        postgresql_where=text("status <> 'cancelled'"),
        sqlite_where=text("status <> 'cancelled'"),
    ),
    Index("idx_appointments_patient_id", "patient_id"),
    Index("idx_appointments_status", "status"),
    Index("idx_appointments_start_at", "start_at"),
)
