"""Session service: video access, session records and ratings."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ForbiddenException,
    InvalidStatusException,
    NotFoundException,
)
from app.core.video import VideoRoomProvider
from app.models.appointments import appointments
from app.models.session_records import session_records
from app.schemas.appointments import AppointmentStatus
from app.schemas.sessions import (
    RatingCreate,
    RatingResponse,
    SessionRecordResponse,
    VideoTokenResponse,
)
from app.services.appointment_service import is_party

logger = structlog.get_logger(__name__)


class SessionService:
    """Service for video sessions and their records."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _get_appointment(self, appointment_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(appointments).where(appointments.c.id == appointment_id))
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Appointment not found")

        return dict(row)

    async def _get_record(self, appointment_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(
            select(session_records).where(session_records.c.appointment_id == appointment_id)
        )
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Session record not found")

        return dict(row)

    async def get_video_token(
        self,
        user: dict,
        appointment_id: UUID,
        provider: VideoRoomProvider,
    ) -> VideoTokenResponse:
        """
        Get video room join details for a confirmed appointment.

        The room id is assigned on first request and reused afterwards. The
        consultant joins as room owner.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If user is neither patient, consultant nor admin
            InvalidStatusException: If the appointment is not confirmed
            VideoProviderException: If the video provider call fails
        """
        appointment = await self._get_appointment(appointment_id)

        if user["role"] != "admin" and user["id"] not in (
            appointment["patient_id"],
            appointment["consultant_id"],
        ):
            raise ForbiddenException("Not authorized to access this appointment")

        if appointment["status"] != AppointmentStatus.CONFIRMED.value:
            raise InvalidStatusException("Appointment must be confirmed to generate video token")

        room_id = appointment["video_room_id"]
        if not room_id:
            room_id = f"appointment-{appointment_id}"
            await self.db.execute(
                update(appointments)
                .where(appointments.c.id == appointment_id)
                .values(video_room_id=room_id, updated_at=datetime.now(UTC))
            )
            await self.db.commit()

        room = await provider.join(room_id, is_owner=user["id"] == appointment["consultant_id"])

        logger.info("video_token_issued", appointment_id=str(appointment_id), user_id=str(user["id"]))
        return VideoTokenResponse(
            room_id=room.room_id,
            video_url=room.video_url,
            video_token=room.video_token,
        )

    async def get_session_record(self, user: dict, appointment_id: UUID) -> SessionRecordResponse:
        """Get the session record of an appointment (party or admin)."""
        appointment = await self._get_appointment(appointment_id)

        if user["role"] != "admin" and not is_party(user, appointment):
            raise ForbiddenException("Not authorized to view this session")

        return SessionRecordResponse.model_validate(await self._get_record(appointment_id))

    async def submit_rating(
        self,
        user: dict,
        appointment_id: UUID,
        data: RatingCreate,
    ) -> RatingResponse:
        """
        Rate the other party of a completed session.

        The patient rates the consultant and the consultant rates the
        patient; each may only write their own rating and comment.

        Args:
            user: Rating user
            appointment_id: Appointment ID
            data: Rating (1-5) and optional comment

        Returns:
            Updated session record

        Raises:
            NotFoundException: If the appointment or its session record is missing
            InvalidStatusException: If the appointment is not completed
            ForbiddenException: If user is neither patient nor consultant
        """
        appointment = await self._get_appointment(appointment_id)

        if appointment["status"] != AppointmentStatus.COMPLETED.value:
            raise InvalidStatusException("Appointment must be completed to submit rating")

        record = await self._get_record(appointment_id)

        if user["id"] == appointment["patient_id"]:
            values: dict[str, Any] = {"consultant_rating_by_patient": data.rating}
            if data.comment:
                values["patient_comment"] = data.comment
        elif user["id"] == appointment["consultant_id"]:
            values = {"patient_rating_by_consultant": data.rating}
            if data.comment:
                values["consultant_comment"] = data.comment
        else:
            raise ForbiddenException("Not authorized to rate this appointment")

        values["updated_at"] = datetime.now(UTC)
        result = await self.db.execute(
            update(session_records)
            .where(session_records.c.id == record["id"])
            .values(**values)
            .returning(session_records)
        )
        row = result.mappings().one()
        await self.db.commit()

        logger.info(
            "session_rated",
            appointment_id=str(appointment_id),
            rated_by=str(user["id"]),
            rating=data.rating,
        )
        return RatingResponse(
            message="Rating submitted successfully",
            session_record=SessionRecordResponse.model_validate(dict(row)),
        )
