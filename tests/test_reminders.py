"""Tests for the appointment reminder scheduler."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import insert, select

from app.core.mailer import Mailer
from app.core.redis_client import RedisStore
from app.models import appointments, notifications
from app.services.notification_service import NotificationService
from app.services.reminder_service import (
    SENT_KEY_TTL,
    ReminderScheduler,
    parse_lead_time,
    parse_schedule,
    sent_key,
)

NOW = datetime(2031, 3, 3, 8, 0, 30, tzinfo=UTC)
START = datetime(2031, 3, 3, 9, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "entry,expected",
    [
        ("24h before", 1440),
        ("1h before", 60),
        ("10m before", 10),
        ("15 m before", 15),
        ("  2H BEFORE ", 120),
        ("10 minutes before", None),
        ("1d before", None),
        ("before", None),
        ("", None),
    ],
)
def test_parse_lead_time(entry, expected):
    assert parse_lead_time(entry) == expected


def test_parse_schedule_skips_malformed():
    assert parse_schedule(["24h before", "soon", "10m before"]) == [1440, 10]


async def add_appointment(db_session, patient, consultant, start=START, status="confirmed"):
    appointment_id = uuid4()
    await db_session.execute(
        insert(appointments).values(
            id=appointment_id,
            patient_id=patient["id"],
            consultant_id=consultant["id"],
            start_at=start,
            end_at=start + timedelta(minutes=30),
            status=status,
            booked_at=NOW,
            created_at=NOW,
            updated_at=NOW,
        )
    )
    await db_session.commit()
    return appointment_id


async def reminders_for(db_session, user_id) -> list[dict]:
    result = await db_session.execute(
        select(notifications).where(
            notifications.c.user_id == user_id,
            notifications.c.type == "appointment_reminder",
        )
    )
    return [dict(row) for row in result.mappings()]


@pytest.fixture
def store(fake_redis) -> RedisStore:
    return RedisStore(fake_redis)


@pytest.fixture
def mailer() -> MagicMock:
    mock = MagicMock(spec=Mailer)
    mock.send = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def scheduler(session_factory, mailer, store) -> ReminderScheduler:
    return ReminderScheduler(
        session_factory=session_factory,
        mailer=mailer,
        store=store,
        lead_times=["1h before"],
    )


@pytest.mark.asyncio
async def test_reminds_both_parties_once(scheduler, db_session, patient, consultant, mailer):
    appointment_id = await add_appointment(db_session, patient, consultant)

    reminded = await scheduler.run_once(NOW)

    assert reminded == 1
    patient_inbox = await reminders_for(db_session, patient["id"])
    consultant_inbox = await reminders_for(db_session, consultant["id"])
    assert len(patient_inbox) == 1
    assert len(consultant_inbox) == 1
    assert patient_inbox[0]["title"] == "Appointment Reminder"
    assert consultant["email"] in patient_inbox[0]["body"]
    assert patient["email"] in consultant_inbox[0]["body"]
    assert patient_inbox[0]["meta"] == {"appointment_id": str(appointment_id), "lead_minutes": "60"}
    assert {call.args[0] for call in mailer.send.await_args_list} == {
        patient["email"],
        consultant["email"],
    }


@pytest.mark.asyncio
async def test_adjacent_ticks_do_not_match(scheduler, db_session, patient, consultant):
    await add_appointment(db_session, patient, consultant)

    before = await scheduler.run_once(NOW - timedelta(minutes=1))
    after = await scheduler.run_once(NOW + timedelta(minutes=1))

    assert before == 0
    assert after == 0
    assert await reminders_for(db_session, patient["id"]) == []


@pytest.mark.asyncio
async def test_repeated_tick_is_deduplicated(scheduler, db_session, patient, consultant, fake_redis):
    appointment_id = await add_appointment(db_session, patient, consultant)

    first = await scheduler.run_once(NOW)
    second = await scheduler.run_once(NOW + timedelta(seconds=20))

    assert (first, second) == (1, 0)
    assert len(await reminders_for(db_session, patient["id"])) == 1
    assert fake_redis.ttls[sent_key(appointment_id, 60)] == SENT_KEY_TTL


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["pending", "cancelled", "completed"])
async def test_only_confirmed_appointments(scheduler, db_session, patient, consultant, status):
    await add_appointment(db_session, patient, consultant, status=status)

    assert await scheduler.run_once(NOW) == 0


@pytest.mark.asyncio
async def test_each_lead_time_fires_separately(session_factory, mailer, store, db_session, patient, consultant):
    await add_appointment(db_session, patient, consultant)
    scheduler = ReminderScheduler(
        session_factory=session_factory,
        mailer=mailer,
        store=store,
        lead_times=["1h before", "10m before"],
    )

    at_one_hour = await scheduler.run_once(NOW)
    at_ten_minutes = await scheduler.run_once(NOW + timedelta(minutes=50))

    assert (at_one_hour, at_ten_minutes) == (1, 1)
    assert len(await reminders_for(db_session, patient["id"])) == 2


@pytest.mark.asyncio
async def test_email_failure_keeps_notifications(scheduler, db_session, patient, consultant, mailer):
    mailer.send.side_effect = OSError("connection refused")
    await add_appointment(db_session, patient, consultant)

    reminded = await scheduler.run_once(NOW)

    assert reminded == 1
    assert mailer.send.await_count == 2
    assert len(await reminders_for(db_session, patient["id"])) == 1
    assert len(await reminders_for(db_session, consultant["id"])) == 1


@pytest.mark.asyncio
async def test_disabled_mailer_skips_sending(session_factory, store, db_session, patient, consultant):
    await add_appointment(db_session, patient, consultant)
    scheduler = ReminderScheduler(
        session_factory=session_factory,
        mailer=Mailer(host=""),
        store=store,
        lead_times=["60m before"],
    )

    assert await scheduler.run_once(NOW) == 1


@pytest.mark.asyncio
async def test_failed_write_releases_marker(scheduler, db_session, patient, consultant, fake_redis):
    appointment_id = await add_appointment(db_session, patient, consultant)

    with patch.object(NotificationService, "add", new=AsyncMock(side_effect=RuntimeError("db down"))):
        failed = await scheduler.run_once(NOW)

    assert failed == 0
    assert sent_key(appointment_id, 60) not in fake_redis.data

    assert await scheduler.run_once(NOW + timedelta(seconds=20)) == 1
    assert len(await reminders_for(db_session, patient["id"])) == 1


@pytest.mark.asyncio
async def test_failed_window_does_not_stop_other_lead_times(
    session_factory, mailer, store, db_session, patient, consultant
):
    await add_appointment(db_session, patient, consultant)
    scheduler = ReminderScheduler(
        session_factory=session_factory,
        mailer=mailer,
        store=store,
        lead_times=["1h before", "10m before"],
    )
    find_due = scheduler._find_due
    windows = []

    async def find_due_failing_first(db, window_start, window_end):
        windows.append(window_start)
        if len(windows) == 1:
            raise RuntimeError("statement timeout")
        return await find_due(db, window_start, window_end)

    with patch.object(scheduler, "_find_due", new=find_due_failing_first):
        reminded = await scheduler.run_once(NOW + timedelta(minutes=50))

    assert len(windows) == 2
    assert reminded == 1
    assert len(await reminders_for(db_session, patient["id"])) == 1
