"""User model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from app.models.base import UTCDateTime, metadata

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Credentials
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("password_hash", Text, nullable=False),
    Column("role", Text, nullable=False, server_default=text("'patient'")),
    # Profile info (mutable)
    Column("full_name", Text),
    Column("phone", String(20)),
    Column("bio", Text),
    Column("specialization", Text),
    Column("doctor_license", Text),
    # Account state
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    # Audit
    Column("created_at", UTCDateTime, nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        UTCDateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    Column("last_login_at", UTCDateTime),
    CheckConstraint(
        "role IN ('patient', 'doctor', 'consultant', 'admin')",
        name="users_role_check",
    ),
)
