"""Initial schema - users, availability, appointments, sessions, notifications, prescriptions.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _user_fk(name: str, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    """Upgrade database schema."""
    # Enable pgcrypto extension
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Users
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False, server_default=sa.text("'patient'")),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("specialization", sa.Text(), nullable=True),
        sa.Column("doctor_license", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "role IN ('patient', 'doctor', 'consultant', 'admin')",
            name="users_role_check",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Availability templates
    op.create_table(
        "availability_templates",
        _uuid_pk(),
        _user_fk("consultant_id"),
        sa.Column("day_of_week", sa.Integer(), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_duration_min", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("max_concurrent", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint(
            "(day_of_week IS NULL) <> (date IS NULL)",
            name="availability_templates_mode_check",
        ),
        sa.CheckConstraint(
            "day_of_week IS NULL OR (day_of_week BETWEEN 0 AND 6)",
            name="availability_templates_day_check",
        ),
        sa.CheckConstraint("start_time < end_time", name="availability_templates_window_check"),
        sa.CheckConstraint(
            "slot_duration_min >= 15", name="availability_templates_duration_check"
        ),
        sa.CheckConstraint("max_concurrent >= 1", name="availability_templates_concurrent_check"),
    )
    op.create_index(
        "idx_availability_consultant_day",
        "availability_templates",
        ["consultant_id", "day_of_week"],
    )
    op.create_index(
        "idx_availability_consultant_date",
        "availability_templates",
        ["consultant_id", "date"],
    )

    # Appointments
    op.create_table(
        "appointments",
        _uuid_pk(),
        _user_fk("patient_id"),
        _user_fk("consultant_id"),
        _user_fk("doctor_id", nullable=True, ondelete="SET NULL"),
        sa.Column("start_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column(
            "booked_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("video_room_id", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed', 'no-show')",
            name="appointments_status_check",
        ),
        sa.CheckConstraint("end_at > start_at", name="appointments_time_range_check"),
    )
    op.create_index(
        "uq_appointments_consultant_start_active",
        "appointments",
        ["consultant_id", "start_at"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
    )
    op.create_index("idx_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("idx_appointments_status", "appointments", ["status"])
    op.create_index("idx_appointments_start_at", "appointments", ["start_at"])

    # Session records
    op.create_table(
        "session_records",
        _uuid_pk(),
        sa.Column(
            "appointment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("appointments.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("started_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("ended_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("participants", postgresql.JSONB(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("consultant_rating_by_patient", sa.Integer(), nullable=True),
        sa.Column("patient_rating_by_consultant", sa.Integer(), nullable=True),
        sa.Column("patient_comment", sa.Text(), nullable=True),
        sa.Column("consultant_comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "consultant_rating_by_patient IS NULL OR consultant_rating_by_patient BETWEEN 1 AND 5",
            name="session_records_consultant_rating_check",
        ),
        sa.CheckConstraint(
            "patient_rating_by_consultant IS NULL OR patient_rating_by_consultant BETWEEN 1 AND 5",
            name="session_records_patient_rating_check",
        ),
    )

    # Notifications
    op.create_table(
        "notifications",
        _uuid_pk(),
        _user_fk("user_id"),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("meta", postgresql.JSONB(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint(
            "type IN ('appointment_created', 'appointment_confirmed', 'appointment_cancelled', "
            "'appointment_no_show', 'appointment_reminder', 'session_completed', 'other')",
            name="notifications_type_check",
        ),
    )
    op.create_index("idx_notifications_user_id", "notifications", ["user_id"])
    op.create_index("idx_notifications_user_read", "notifications", ["user_id", "read"])
    op.create_index("idx_notifications_created_at", "notifications", ["created_at"])

    # Prescriptions
    op.create_table(
        "prescriptions",
        _uuid_pk(),
        _user_fk("doctor_id"),
        _user_fk("patient_id"),
        sa.Column("fields", postgresql.JSONB(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_prescriptions_patient_id", "prescriptions", ["patient_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("prescriptions")
    op.drop_table("notifications")
    op.drop_table("session_records")
    op.drop_table("appointments")
    op.drop_table("availability_templates")
    op.drop_table("users")
