"""Tests for user accounts and request plumbing."""

import pytest
from httpx import AsyncClient

from app.core.security import verify_password
from app.services.user_service import UserService


@pytest.mark.asyncio
async def test_ensure_consultant_creates_account(db_session):
    user = await UserService.ensure_consultant(db_session, "Lead@Clinic.org", "s3cret-pass")

    assert user["email"] == "lead@clinic.org"
    assert user["role"] == "consultant"
    assert verify_password("s3cret-pass", user["password_hash"])


@pytest.mark.asyncio
async def test_ensure_consultant_refreshes_existing(db_session, make_user):
    existing = await make_user("patient", is_active=False)

    user = await UserService.ensure_consultant(db_session, existing["email"], "new-password")

    assert user["id"] == existing["id"]
    assert user["role"] == "consultant"
    assert user["is_active"] is True
    assert verify_password("new-password", user["password_hash"])


@pytest.mark.asyncio
async def test_create_user_keeps_known_profile_fields(db_session):
    user = await UserService.create_user(
        db_session,
        email="doc@clinic.org",
        password="secret123",
        role="doctor",
        doctor_license="MCI-1",
        profile={"full_name": "Dr. Rao", "is_active": False, "password_hash": "x"},
    )

    assert user["full_name"] == "Dr. Rao"
    assert user["is_active"] is True
    assert user["doctor_license"] == "MCI-1"


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    generated = await client.get("/api/ping")
    forwarded = await client.get("/api/ping", headers={"X-Request-ID": "req-123"})

    assert generated.headers["x-request-id"]
    assert forwarded.headers["x-request-id"] == "req-123"
    assert "x-process-time" in forwarded.headers


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"ok": False, "error": {"code": "NOT_FOUND", "message": "Not Found"}}


@pytest.mark.asyncio
async def test_validation_error_details(client: AsyncClient, patient, headers):
    response = await client.post("/api/appointments", json={}, headers=headers(patient))

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {tuple(item["loc"]) for item in error["details"]} >= {("body", "consultantId")}
