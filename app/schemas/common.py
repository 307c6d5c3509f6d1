"""Response envelope and shared validators."""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Successful response envelope."""

    ok: bool = True
    data: DataT


class MessageResponse(BaseModel):
    """Plain message payload."""

    message: str


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
