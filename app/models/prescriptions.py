"""Prescriptions table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Index, Table, Uuid, func

from app.models.base import JSONType, UTCDateTime, metadata

prescriptions = Table(
    "prescriptions",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column("doctor_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("patient_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    # Ordered form fields: [{id, label, type, value, order}]
    Column("fields", JSONType, nullable=False),
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    Index("idx_prescriptions_patient_id", "patient_id"),
)
