"""Availability service: templates, consultants and slot generation."""

from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from app.models.appointments import appointments
from app.models.availability_templates import availability_templates
from app.models.users import users
from app.schemas.appointments import AppointmentStatus
from app.schemas.availability import (
    AvailabilityTemplateCreate,
    AvailabilityTemplateResponse,
    AvailabilityTemplateUpdate,
    ConsultantDetailResponse,
    ConsultantResponse,
    Slot,
)

logger = structlog.get_logger(__name__)


def parse_date(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` date.

    Raises:
        ValidationException: If the value is not a calendar date
    """
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationException("Invalid date format, expected YYYY-MM-DD")


def day_of_week(value: date) -> int:
    """Weekday index with 0 = Sunday through 6 = Saturday."""
    return value.isoweekday() % 7


def select_templates(templates: list[dict[str, Any]], target_date: date) -> list[dict[str, Any]]:
    """
    Pick the templates that apply to ``target_date``.

    Date-specific templates replace the recurring ones for that day.
    """
    overrides = [t for t in templates if t["date"] == target_date]
    if overrides:
        return overrides

    weekday = day_of_week(target_date)
    return [t for t in templates if t["date"] is None and t["day_of_week"] == weekday]


def build_slots(
    templates: Iterable[dict[str, Any]],
    target_date: date,
    tz: ZoneInfo,
) -> list[Slot]:
    """
    Expand templates into consecutive slots for one day.

    Times of day are read in ``tz`` and the window is stepped in UTC, so a
    day with a DST change has fewer or more slots rather than repeated ones.
    A trailing window shorter than the slot duration is dropped. The result is
    sorted by start time, keeping template order for equal starts.
    """
    slots = []

    for template in templates:
        duration = timedelta(minutes=template["slot_duration_min"])
        cursor = datetime.combine(target_date, template["start_time"], tzinfo=tz).astimezone(UTC)
        window_end = datetime.combine(target_date, template["end_time"], tzinfo=tz).astimezone(UTC)

        while cursor + duration <= window_end:
            slots.append(
                Slot(
                    start_at=cursor,
                    end_at=cursor + duration,
                    max_concurrent=template["max_concurrent"],
                    template_id=template["id"],
                )
            )
            cursor += duration

    return sorted(slots, key=lambda slot: slot.start_at)


class AvailabilityService:
    """Service for consultant availability."""

    def __init__(self, db: AsyncSession, timezone: str = "UTC"):
        """Initialize service with database session and availability time zone."""
        self.db = db
        self.tz = ZoneInfo(timezone)

    async def _get_consultant_row(self, consultant_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(
            select(users).where(users.c.id == consultant_id, users.c.role == "consultant")
        )
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Consultant not found")

        return dict(row)

    @staticmethod
    def _check_owner(user: dict, consultant_id: UUID) -> None:
        if user["role"] != "admin" and user["id"] != consultant_id:
            raise ForbiddenException("Not authorized to manage availability for this consultant")

    async def list_consultants(self, specialization: str | None = None) -> list[ConsultantResponse]:
        """List active consultants, optionally by specialization substring."""
        conditions = [users.c.role == "consultant", users.c.is_active.is_(True)]
        if specialization:
            conditions.append(users.c.specialization.ilike(f"%{specialization}%"))

        query = select(users).where(*conditions).order_by(users.c.full_name, users.c.email)
        result = await self.db.execute(query)

        return [ConsultantResponse.model_validate(dict(row)) for row in result.mappings()]

    async def get_consultant(self, consultant_id: UUID) -> ConsultantDetailResponse:
        """
        Get consultant details with the number of active templates.

        Raises:
            NotFoundException: If no consultant has this ID
        """
        consultant = await self._get_consultant_row(consultant_id)

        count_query = (
            select(func.count())
            .select_from(availability_templates)
            .where(
                availability_templates.c.consultant_id == consultant_id,
                availability_templates.c.active.is_(True),
            )
        )
        result = await self.db.execute(count_query)

        return ConsultantDetailResponse(
            consultant=ConsultantResponse.model_validate(consultant),
            availability_count=result.scalar() or 0,
        )

    async def generate_slots(self, consultant_id: UUID, target_date: date) -> list[Slot]:
        """
        Generate the bookable slots of a consultant for one day.

        Args:
            consultant_id: Consultant ID
            target_date: Calendar day in the availability time zone

        Returns:
            Free slots ordered by start time; empty when nothing applies
        """
        query = (
            select(availability_templates)
            .where(
                availability_templates.c.consultant_id == consultant_id,
                availability_templates.c.active.is_(True),
                or_(
                    availability_templates.c.day_of_week == day_of_week(target_date),
                    availability_templates.c.date == target_date,
                ),
            )
            .order_by(availability_templates.c.start_time, availability_templates.c.created_at)
        )
        result = await self.db.execute(query)
        templates = select_templates([dict(row) for row in result.mappings()], target_date)

        slots = build_slots(templates, target_date, self.tz)
        if not slots:
            return []

        booked_query = select(appointments.c.start_at).where(
            appointments.c.consultant_id == consultant_id,
            appointments.c.status != AppointmentStatus.CANCELLED.value,
            appointments.c.start_at >= slots[0].start_at,
            appointments.c.start_at <= slots[-1].start_at,
        )
        result = await self.db.execute(booked_query)
        booked = set(result.scalars())

        return [slot for slot in slots if slot.start_at not in booked]

    async def list_templates(self, user: dict, consultant_id: UUID) -> list[AvailabilityTemplateResponse]:
        """List all templates of a consultant, including disabled ones."""
        self._check_owner(user, consultant_id)

        query = (
            select(availability_templates)
            .where(availability_templates.c.consultant_id == consultant_id)
            .order_by(
                availability_templates.c.day_of_week,
                availability_templates.c.date,
                availability_templates.c.start_time,
            )
        )
        result = await self.db.execute(query)

        return [AvailabilityTemplateResponse.model_validate(dict(row)) for row in result.mappings()]

    async def create_template(
        self,
        user: dict,
        consultant_id: UUID,
        data: AvailabilityTemplateCreate,
    ) -> AvailabilityTemplateResponse:
        """
        Create an availability template for a consultant.

        Raises:
            ForbiddenException: If user is not this consultant or an admin
            NotFoundException: If no consultant has this ID
        """
        self._check_owner(user, consultant_id)
        await self._get_consultant_row(consultant_id)

        now = datetime.now(UTC)
        values = {
            "consultant_id": consultant_id,
            "day_of_week": data.day_of_week,
            "date": data.on_date,
            "start_time": data.start_time,
            "end_time": data.end_time,
            "slot_duration_min": data.slot_duration_min,
            "max_concurrent": data.max_concurrent,
            "active": data.active,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.db.execute(
            insert(availability_templates).values(**values).returning(availability_templates)
        )
        row = result.mappings().one()
        await self.db.commit()

        logger.info(
            "availability_template_created",
            template_id=str(row["id"]),
            consultant_id=str(consultant_id),
        )
        return AvailabilityTemplateResponse.model_validate(dict(row))

    async def update_template(
        self,
        user: dict,
        consultant_id: UUID,
        template_id: UUID,
        data: AvailabilityTemplateUpdate,
    ) -> AvailabilityTemplateResponse:
        """
        Update a template; ``active=False`` disables it without deleting.

        Raises:
            ForbiddenException: If user is not this consultant or an admin
            NotFoundException: If the template does not belong to the consultant
            ValidationException: If the resulting window is empty
        """
        self._check_owner(user, consultant_id)

        result = await self.db.execute(
            select(availability_templates).where(
                availability_templates.c.id == template_id,
                availability_templates.c.consultant_id == consultant_id,
            )
        )
        current = result.mappings().first()
        if not current:
            raise NotFoundException("Availability template not found")

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return AvailabilityTemplateResponse.model_validate(dict(current))

        start_time = update_data.get("start_time", current["start_time"])
        end_time = update_data.get("end_time", current["end_time"])
        if start_time >= end_time:
            raise ValidationException("startTime must be before endTime")

        update_data["updated_at"] = datetime.now(UTC)
        result = await self.db.execute(
            update(availability_templates)
            .where(availability_templates.c.id == template_id)
            .values(**update_data)
            .returning(availability_templates)
        )
        row = result.mappings().one()
        await self.db.commit()

        logger.info("availability_template_updated", template_id=str(template_id))
        return AvailabilityTemplateResponse.model_validate(dict(row))
