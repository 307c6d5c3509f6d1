"""Calendar service: a user's appointments grouped by day."""

import re
from datetime import UTC, date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException, ValidationException
from app.schemas.calendar import CalendarAppointment, CalendarDay
from app.services.appointment_service import AppointmentService

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(value: str) -> tuple[int, int]:
    """
    Parse a ``YYYY-MM`` month.

    Raises:
        ValidationException: If the value is not a valid month
    """
    match = MONTH_PATTERN.match(value or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValidationException("Invalid month format, expected YYYY-MM")
    return int(match.group(1)), int(match.group(2))


class CalendarService:
    """Service for calendar views."""

    def __init__(self, db: AsyncSession, timezone: str = "UTC"):
        """Initialize service with database session and display time zone."""
        self.db = db
        self.tz = ZoneInfo(timezone)

    async def get_events(self, user: dict, user_id: UUID, month: str) -> list[CalendarDay]:
        """
        Get the appointments of a user for one month, grouped per date.

        Days are calendar days in the configured time zone.

        Raises:
            ForbiddenException: If user is neither the calendar owner nor an admin
            ValidationException: If the month is malformed
        """
        if user["role"] != "admin" and user["id"] != user_id:
            raise ForbiddenException("Not authorized to view this calendar")

        year, month_number = parse_month(month)
        start = datetime.combine(date(year, month_number, 1), datetime.min.time(), tzinfo=self.tz)
        if month_number == 12:
            next_month = date(year + 1, 1, 1)
        else:
            next_month = date(year, month_number + 1, 1)
        end = datetime.combine(next_month, datetime.min.time(), tzinfo=self.tz)

        items = await AppointmentService(self.db).list_for_user_between(
            user_id,
            start.astimezone(UTC),
            end.astimezone(UTC),
        )

        days: dict[str, CalendarDay] = {}
        for item in items:
            key = item.start_at.astimezone(self.tz).date().isoformat()
            day = days.setdefault(key, CalendarDay(date=key, count=0, appointments=[]))
            day.count += 1
            day.appointments.append(
                CalendarAppointment(
                    id=item.id,
                    start_at=item.start_at,
                    end_at=item.end_at,
                    status=item.status,
                )
            )

        return list(days.values())
