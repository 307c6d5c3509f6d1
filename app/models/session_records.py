"""Session records table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Table,
    Text,
    Uuid,
    func,
)

from app.models.base import JSONType, UTCDateTime, metadata

session_records = Table(
    "session_records",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "appointment_id",
        Uuid,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("started_at", UTCDateTime, nullable=True),
    Column("ended_at", UTCDateTime, nullable=True),
    Column("participants", JSONType, nullable=False),
    Column("notes", Text, nullable=True),
    # Ratings
    Column("consultant_rating_by_patient", Integer, nullable=True),
    Column("patient_rating_by_consultant", Integer, nullable=True),
    Column("patient_comment", Text, nullable=True),
    Column("consultant_comment", Text, nullable=True),
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    CheckConstraint(
        "consultant_rating_by_patient IS NULL OR consultant_rating_by_patient BETWEEN 1 AND 5",
        name="session_records_consultant_rating_check",
    ),
    CheckConstraint(
        "patient_rating_by_consultant IS NULL OR patient_rating_by_consultant BETWEEN 1 AND 5",
        name="session_records_patient_rating_check",
    ),
)
