"""Tests for appointment booking and status transitions."""

import asyncio
import os
from unittest.mock import patch
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import Insert, func, select

from app.core.exceptions import InvalidStatusException, SlotAlreadyBookedException
from app.models import appointments, notifications
from app.schemas.appointments import AppointmentCreate, AppointmentStatus
from app.services.appointment_service import AppointmentService, next_status

START = "2031-03-03T09:00:00Z"
END = "2031-03-03T09:30:00Z"


async def book(client: AsyncClient, patient: dict, consultant: dict, headers, start=START, end=END):
    return await client.post(
        "/api/appointments",
        json={"consultantId": str(consultant["id"]), "startAt": start, "endAt": end},
        headers=headers(patient),
    )


async def notifications_for(db_session, user_id, notification_type=None) -> list[dict]:
    query = select(notifications).where(notifications.c.user_id == user_id)
    if notification_type:
        query = query.where(notifications.c.type == notification_type)
    result = await db_session.execute(query)
    return [dict(row) for row in result.mappings()]


@pytest.mark.parametrize(
    "current,action,expected",
    [
        ("pending", "confirm", AppointmentStatus.CONFIRMED),
        ("pending", "cancel", AppointmentStatus.CANCELLED),
        ("confirmed", "cancel", AppointmentStatus.CANCELLED),
        ("confirmed", "complete", AppointmentStatus.COMPLETED),
        ("confirmed", "no_show", AppointmentStatus.NO_SHOW),
    ],
)
def test_allowed_transitions(current, action, expected):
    assert next_status(current, action) == expected


@pytest.mark.parametrize(
    "current,action",
    [
        ("pending", "complete"),
        ("pending", "no_show"),
        ("confirmed", "confirm"),
        ("cancelled", "confirm"),
        ("cancelled", "cancel"),
        ("completed", "cancel"),
        ("no-show", "complete"),
    ],
)
def test_rejected_transitions(current, action):
    with pytest.raises(InvalidStatusException):
        next_status(current, action)


@pytest.mark.asyncio
async def test_create_appointment(client: AsyncClient, db_session, patient, consultant, headers):
    response = await client.post(
        "/api/appointments",
        json={
            "consultantId": str(consultant["id"]),
            "startAt": START,
            "endAt": END,
            "patientNotes": "Follow-up on blood pressure",
        },
        headers=headers(patient),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["patient_id"] == str(patient["id"])
    assert data["consultant_id"] == str(consultant["id"])
    assert data["notes"] == "Follow-up on blood pressure"

    inbox = await notifications_for(db_session, consultant["id"], "appointment_created")
    assert len(inbox) == 1
    assert inbox[0]["title"] == "New Appointment Request"
    assert patient["email"] in inbox[0]["body"]
    assert inbox[0]["meta"] == {"appointment_id": data["id"]}


@pytest.mark.asyncio
async def test_double_booking_rejected(client: AsyncClient, db_session, patient, other_patient, consultant, headers):
    first = await book(client, patient, consultant, headers)
    second = await book(client, other_patient, consultant, headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "SLOT_BOOKED"

    count = await db_session.scalar(
        select(func.count()).select_from(appointments).where(appointments.c.consultant_id == consultant["id"])
    )
    assert count == 1
    # The losing booking must not leave a notification behind
    inbox = await notifications_for(db_session, consultant["id"])
    assert len(inbox) == 1


@pytest.mark.asyncio
async def test_booking_committed_after_validation_wins(
    session_factory, db_session, patient, other_patient, consultant
):
    """A rival booking that commits between the consultant check and the insert wins."""
    data = AppointmentCreate(consultant_id=consultant["id"], start_at=START, end_at=END)

    async with session_factory() as winner_db, session_factory() as loser_db:
        execute = loser_db.execute

        async def execute_after_rival(statement, *args, **kwargs):
            if isinstance(statement, Insert) and statement.table is appointments:
                await AppointmentService(winner_db).create_appointment(patient, data)
            return await execute(statement, *args, **kwargs)

        with patch.object(loser_db, "execute", new=execute_after_rival):
            with pytest.raises(SlotAlreadyBookedException):
                await AppointmentService(loser_db).create_appointment(other_patient, data)

    result = await db_session.execute(
        select(appointments.c.patient_id).where(appointments.c.consultant_id == consultant["id"])
    )
    assert result.scalars().all() == [patient["id"]]
    assert len(await notifications_for(db_session, consultant["id"])) == 1


# Needs real concurrent writers: set TEST_DATABASE_URL to a PostgreSQL database
@pytest.mark.skipif(not os.getenv("TEST_DATABASE_URL"), reason="requires PostgreSQL")
@pytest.mark.asyncio
async def test_concurrent_booking_single_winner(client: AsyncClient, patient, other_patient, consultant, headers):
    responses = await asyncio.gather(
        book(client, patient, consultant, headers),
        book(client, other_patient, consultant, headers),
    )

    assert sorted(response.status_code for response in responses) == [201, 409]


@pytest.mark.asyncio
async def test_rebooking_cancelled_slot(client: AsyncClient, patient, other_patient, consultant, headers):
    first = await book(client, patient, consultant, headers)
    await client.put(f"/api/appointments/{first.json()['data']['id']}/cancel", headers=headers(patient))

    second = await book(client, other_patient, consultant, headers)

    assert second.status_code == 201


@pytest.mark.asyncio
async def test_consultant_cannot_book(client: AsyncClient, consultant, make_user, headers):
    other = await make_user("consultant")

    response = await book(client, consultant, other, headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_booking_requires_consultant(client: AsyncClient, patient, doctor, headers):
    response = await book(client, patient, doctor, headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CONSULTANT"


@pytest.mark.asyncio
async def test_booking_rejects_inverted_window(client: AsyncClient, patient, consultant, headers):
    response = await book(client, patient, consultant, headers, start=END, end=START)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_booking_requires_authentication(client: AsyncClient, consultant):
    response = await client.post(
        "/api/appointments",
        json={"consultantId": str(consultant["id"]), "startAt": START, "endAt": END},
    )

    assert response.status_code == 401
    assert response.json()["ok"] is False


@pytest.mark.asyncio
async def test_confirm_appointment(client: AsyncClient, db_session, patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)
    appointment_id = booking.json()["data"]["id"]

    response = await client.put(
        f"/api/appointments/{appointment_id}/confirm", headers=headers(consultant)
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "confirmed"
    inbox = await notifications_for(db_session, patient["id"], "appointment_confirmed")
    assert len(inbox) == 1


@pytest.mark.asyncio
async def test_patient_cannot_confirm(client: AsyncClient, patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)

    response = await client.put(
        f"/api/appointments/{booking.json()['data']['id']}/confirm", headers=headers(patient)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_other_consultant_cannot_confirm(client: AsyncClient, patient, consultant, make_user, headers):
    other = await make_user("consultant")
    booking = await book(client, patient, consultant, headers)

    response = await client.put(
        f"/api/appointments/{booking.json()['data']['id']}/confirm", headers=headers(other)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_confirm_twice_is_invalid(client: AsyncClient, patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)
    url = f"/api/appointments/{booking.json()['data']['id']}/confirm"

    await client.put(url, headers=headers(consultant))
    response = await client.put(url, headers=headers(consultant))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_cancel_notifies_other_party_only(client: AsyncClient, db_session, patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)

    response = await client.put(
        f"/api/appointments/{booking.json()['data']['id']}/cancel", headers=headers(patient)
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"
    assert len(await notifications_for(db_session, consultant["id"], "appointment_cancelled")) == 1
    assert await notifications_for(db_session, patient["id"], "appointment_cancelled") == []


@pytest.mark.asyncio
async def test_admin_cancel_notifies_both(client: AsyncClient, db_session, patient, consultant, admin, headers):
    booking = await book(client, patient, consultant, headers)

    response = await client.put(
        f"/api/appointments/{booking.json()['data']['id']}/cancel", headers=headers(admin)
    )

    assert response.status_code == 200
    assert len(await notifications_for(db_session, consultant["id"], "appointment_cancelled")) == 1
    assert len(await notifications_for(db_session, patient["id"], "appointment_cancelled")) == 1


@pytest.mark.asyncio
async def test_stranger_cannot_cancel(client: AsyncClient, patient, other_patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)

    response = await client.put(
        f"/api/appointments/{booking.json()['data']['id']}/cancel", headers=headers(other_patient)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cancel_cancelled_is_invalid(client: AsyncClient, patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)
    url = f"/api/appointments/{booking.json()['data']['id']}/cancel"

    await client.put(url, headers=headers(patient))
    response = await client.put(url, headers=headers(patient))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_no_show_requires_confirmed(client: AsyncClient, patient, consultant, headers):
    booking = await book(client, patient, consultant, headers)
    appointment_id = booking.json()["data"]["id"]

    early = await client.put(f"/api/appointments/{appointment_id}/no-show", headers=headers(consultant))
    await client.put(f"/api/appointments/{appointment_id}/confirm", headers=headers(consultant))
    marked = await client.put(f"/api/appointments/{appointment_id}/no-show", headers=headers(consultant))

    assert early.status_code == 400
    assert marked.status_code == 200
    assert marked.json()["data"]["status"] == "no-show"


@pytest.mark.asyncio
async def test_get_appointment_access(client: AsyncClient, patient, other_patient, consultant, admin, headers):
    booking = await book(client, patient, consultant, headers)
    url = f"/api/appointments/{booking.json()['data']['id']}"

    assert (await client.get(url, headers=headers(patient))).status_code == 200
    assert (await client.get(url, headers=headers(consultant))).status_code == 200
    assert (await client.get(url, headers=headers(admin))).status_code == 200
    assert (await client.get(url, headers=headers(other_patient))).status_code == 403


@pytest.mark.asyncio
async def test_get_missing_appointment(client: AsyncClient, patient, headers):
    response = await client.get(f"/api/appointments/{uuid4()}", headers=headers(patient))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_list_appointments_by_side(client: AsyncClient, patient, other_patient, consultant, headers):
    await book(client, patient, consultant, headers)
    await book(
        client,
        other_patient,
        consultant,
        headers,
        start="2031-03-03T10:00:00Z",
        end="2031-03-03T10:30:00Z",
    )

    mine = await client.get("/api/appointments", headers=headers(patient))
    theirs = await client.get("/api/appointments", headers=headers(consultant))
    as_patient = await client.get(
        "/api/appointments", params={"role": "patient"}, headers=headers(consultant)
    )

    assert len(mine.json()["data"]) == 1
    starts = [item["start_at"] for item in theirs.json()["data"]]
    assert len(starts) == 2
    assert starts == sorted(starts, reverse=True)
    assert as_patient.json()["data"] == []


@pytest.mark.asyncio
async def test_list_appointments_by_status(client: AsyncClient, patient, consultant, headers):
    first = await book(client, patient, consultant, headers)
    await book(
        client,
        patient,
        consultant,
        headers,
        start="2031-03-03T10:00:00Z",
        end="2031-03-03T10:30:00Z",
    )
    await client.put(
        f"/api/appointments/{first.json()['data']['id']}/confirm", headers=headers(consultant)
    )

    response = await client.get(
        "/api/appointments", params={"status": "confirmed"}, headers=headers(patient)
    )

    assert [item["id"] for item in response.json()["data"]] == [first.json()["data"]["id"]]
