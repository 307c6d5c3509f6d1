"""
Appointment reminder scheduler.

Every tick, for each configured lead time ("24h before", "10m before", ...),
finds confirmed appointments starting in the minute that lies exactly that far
ahead and reminds both parties in-app and by email.

Runs as an asyncio task in the application lifespan. A Redis marker per
(appointment, lead time) keeps overlapping ticks from reminding twice. A tick
that never runs (process down) is not caught up later.
"""

import asyncio
import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.mailer import Mailer
from app.core.redis_client import RedisStore
from app.models.appointments import appointments
from app.models.users import users
from app.schemas.appointments import AppointmentStatus
from app.schemas.notifications import NotificationType
from app.services.notification_service import NotificationService

logger = structlog.get_logger(__name__)

LEAD_TIME_PATTERN = re.compile(r"^(\d+)\s*([hm])\s+before$", re.IGNORECASE)
SENT_KEY_TTL = 2 * 86400  # longer than any sensible lead time window


def parse_lead_time(entry: str) -> int | None:
    """
    Parse a lead time entry into minutes.

    Args:
        entry: ``"<N>h before"`` or ``"<N>m before"``

    Returns:
        Lead time in minutes, or None if the entry is malformed
    """
    match = LEAD_TIME_PATTERN.match(entry.strip())
    if not match:
        return None

    amount = int(match.group(1))
    return amount * 60 if match.group(2).lower() == "h" else amount


def parse_schedule(entries: list[str]) -> list[int]:
    """Parse lead time entries, logging and skipping malformed ones."""
    lead_times = []
    for entry in entries:
        minutes = parse_lead_time(entry)
        if minutes is None:
            logger.warning("reminder_lead_time_invalid", entry=entry)
            continue
        lead_times.append(minutes)
    return lead_times


def sent_key(appointment_id: Any, lead_minutes: int) -> str:
    """Redis key marking a reminder as sent."""
    return f"reminder:sent:{appointment_id}:{lead_minutes}"


class ReminderScheduler:
    """Periodic reminder sweep over confirmed appointments."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        mailer: Mailer,
        store: RedisStore,
        lead_times: list[str],
        interval_seconds: int = 60,
    ):
        """Initialize scheduler with its collaborators and lead time entries."""
        self.session_factory = session_factory
        self.mailer = mailer
        self.store = store
        self.lead_times = parse_schedule(lead_times)
        self.interval_seconds = interval_seconds

    async def run_forever(self) -> None:
        """Run ticks until cancelled; a failing tick is logged and the loop goes on."""
        logger.info(
            "reminder_scheduler_started",
            lead_times=self.lead_times,
            interval_seconds=self.interval_seconds,
        )

        try:
            while True:
                try:
                    await self.run_once()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("reminder_tick_failed")

                await asyncio.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            logger.info("reminder_scheduler_stopped")

    async def run_once(self, now: datetime | None = None) -> int:
        """
        Run one sweep.

        Args:
            now: Reference time, defaults to the current UTC time

        Returns:
            Number of appointments reminded
        """
        now = now or datetime.now(UTC)
        reminded = 0

        async with self.session_factory() as db:
            for lead_minutes in self.lead_times:
                window_start = (now + timedelta(minutes=lead_minutes)).replace(second=0, microsecond=0)
                window_end = window_start + timedelta(minutes=1)

                try:
                    matches = await self._find_due(db, window_start, window_end)
                except Exception:
                    await db.rollback()
                    logger.exception("reminder_window_failed", lead_minutes=lead_minutes)
                    continue

                logger.info(
                    "reminder_window_checked",
                    lead_minutes=lead_minutes,
                    window_start=window_start.isoformat(),
                    matches=len(matches),
                )

                for appointment in matches:
                    try:
                        if await self._remind(db, appointment, lead_minutes):
                            reminded += 1
                    except Exception:
                        await db.rollback()
                        logger.exception(
                            "reminder_failed",
                            appointment_id=str(appointment["id"]),
                            lead_minutes=lead_minutes,
                        )

        return reminded

    async def _find_due(
        self,
        db: AsyncSession,
        window_start: datetime,
        window_end: datetime,
    ) -> list[dict[str, Any]]:
        patient = users.alias("patient")
        consultant = users.alias("consultant")

        query = (
            select(
                appointments.c.id,
                appointments.c.patient_id,
                appointments.c.consultant_id,
                appointments.c.start_at,
                patient.c.email.label("patient_email"),
                consultant.c.email.label("consultant_email"),
            )
            .join(patient, patient.c.id == appointments.c.patient_id)
            .join(consultant, consultant.c.id == appointments.c.consultant_id)
            .where(
                appointments.c.status == AppointmentStatus.CONFIRMED.value,
                appointments.c.start_at >= window_start,
                appointments.c.start_at < window_end,
            )
            .order_by(appointments.c.start_at)
        )
        result = await db.execute(query)
        return [dict(row) for row in result.mappings()]

    async def _remind(self, db: AsyncSession, appointment: dict[str, Any], lead_minutes: int) -> bool:
        key = sent_key(appointment["id"], lead_minutes)
        if not self.store.claim(key, ttl=SENT_KEY_TTL):
            logger.debug("reminder_already_sent", appointment_id=str(appointment["id"]))
            return False

        patient_body = f"Your appointment with {appointment['consultant_email']} is starting soon."
        consultant_body = f"Your appointment with {appointment['patient_email']} is starting soon."
        meta = {"appointment_id": appointment["id"], "lead_minutes": lead_minutes}

        try:
            await NotificationService.add(
                db,
                NotificationService.build(
                    appointment["patient_id"],
                    NotificationType.APPOINTMENT_REMINDER,
                    "Appointment Reminder",
                    patient_body,
                    meta,
                ),
                NotificationService.build(
                    appointment["consultant_id"],
                    NotificationType.APPOINTMENT_REMINDER,
                    "Appointment Reminder",
                    consultant_body,
                    meta,
                ),
            )
            await db.commit()
        except Exception:
            # Let a later tick in the same window retry
            self.store.delete(key)
            raise

        await self._send_email(appointment, appointment["patient_email"], patient_body)
        await self._send_email(appointment, appointment["consultant_email"], consultant_body)

        logger.info(
            "reminder_sent",
            appointment_id=str(appointment["id"]),
            lead_minutes=lead_minutes,
        )
        return True

    async def _send_email(self, appointment: dict[str, Any], to: str, body: str) -> None:
        try:
            await self.mailer.send(to, "Appointment Reminder", body)
        except Exception as e:
            logger.error(
                "reminder_email_failed",
                appointment_id=str(appointment["id"]),
                to=to,
                error=str(e),
            )
