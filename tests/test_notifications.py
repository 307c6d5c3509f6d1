"""Tests for the notification inbox."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import insert

from app.models import notifications
from app.schemas.notifications import NotificationType
from app.services.notification_service import INBOX_LIMIT, NotificationService


async def seed_inbox(db_session, user_id, count: int) -> list:
    base = datetime(2031, 1, 1, tzinfo=UTC)
    rows = [
        {
            "id": uuid4(),
            "user_id": user_id,
            "type": NotificationType.OTHER.value,
            "title": f"Notice {index}",
            "body": "Body",
            "read": False,
            "meta": {},
            "created_at": base + timedelta(minutes=index),
        }
        for index in range(count)
    ]
    await db_session.execute(insert(notifications), rows)
    await db_session.commit()
    return rows


@pytest.mark.asyncio
async def test_create_notification(db_session, patient):
    record = await NotificationService.create(
        db_session,
        patient["id"],
        NotificationType.APPOINTMENT_CONFIRMED,
        "Appointment Confirmed",
        "Your appointment has been confirmed",
        {"appointment_id": uuid4()},
    )

    assert record.user_id == patient["id"]
    assert record.type == "appointment_confirmed"
    assert record.read is False
    assert isinstance(record.meta["appointment_id"], str)


@pytest.mark.asyncio
async def test_list_newest_first(client: AsyncClient, db_session, patient, headers):
    await seed_inbox(db_session, patient["id"], 3)

    response = await client.get("/api/notifications", headers=headers(patient))

    assert response.status_code == 200
    assert [item["title"] for item in response.json()["data"]] == [
        "Notice 2",
        "Notice 1",
        "Notice 0",
    ]


@pytest.mark.asyncio
async def test_list_is_capped(client: AsyncClient, db_session, patient, headers):
    await seed_inbox(db_session, patient["id"], INBOX_LIMIT + 5)

    response = await client.get("/api/notifications", headers=headers(patient))

    assert len(response.json()["data"]) == INBOX_LIMIT


@pytest.mark.asyncio
async def test_mark_read_and_filter_unread(client: AsyncClient, db_session, patient, headers):
    rows = await seed_inbox(db_session, patient["id"], 2)

    marked = await client.put(
        f"/api/notifications/{rows[0]['id']}/read", headers=headers(patient)
    )
    unread = await client.get(
        "/api/notifications", params={"unread": "true"}, headers=headers(patient)
    )

    assert marked.status_code == 200
    assert marked.json()["data"]["read"] is True
    assert [item["id"] for item in unread.json()["data"]] == [str(rows[1]["id"])]


@pytest.mark.asyncio
async def test_cannot_read_other_users_notification(
    client: AsyncClient, db_session, patient, other_patient, headers
):
    rows = await seed_inbox(db_session, patient["id"], 1)

    response = await client.put(
        f"/api/notifications/{rows[0]['id']}/read", headers=headers(other_patient)
    )
    inbox = await client.get("/api/notifications", headers=headers(other_patient))

    assert response.status_code == 404
    assert inbox.json()["data"] == []


@pytest.mark.asyncio
async def test_inbox_requires_authentication(client: AsyncClient):
    response = await client.get("/api/notifications")

    assert response.status_code == 401
