"""Database models."""

from app.models.appointments import appointments
from app.models.availability_templates import availability_templates
from app.models.base import metadata
from app.models.notifications import notifications
from app.models.prescriptions import prescriptions
from app.models.session_records import session_records
from app.models.users import users

__all__ = [
    "appointments",
    "availability_templates",
    "metadata",
    "notifications",
    "prescriptions",
    "session_records",
    "users",
]
