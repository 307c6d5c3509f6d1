"""Appointment service for the booking lifecycle."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AppException,
    ForbiddenException,
    InvalidConsultantException,
    InvalidStatusException,
    NotFoundException,
    SessionCompletedException,
    SlotAlreadyBookedException,
)
from app.models.appointments import SLOT_UNIQUE_INDEX, appointments
from app.models.session_records import session_records
from app.models.users import users
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentResponse,
    AppointmentStatus,
)
from app.schemas.notifications import NotificationType
from app.schemas.sessions import SessionCompleteResponse, SessionRecordResponse
from app.services.notification_service import NotificationService

logger = structlog.get_logger(__name__)

# Legal status changes: (current status, action) -> new status
TRANSITIONS: dict[tuple[AppointmentStatus, str], AppointmentStatus] = {
    (AppointmentStatus.PENDING, "confirm"): AppointmentStatus.CONFIRMED,
    (AppointmentStatus.PENDING, "cancel"): AppointmentStatus.CANCELLED,
    (AppointmentStatus.CONFIRMED, "cancel"): AppointmentStatus.CANCELLED,
    (AppointmentStatus.CONFIRMED, "complete"): AppointmentStatus.COMPLETED,
    (AppointmentStatus.CONFIRMED, "no_show"): AppointmentStatus.NO_SHOW,
}


def next_status(current: str, action: str) -> AppointmentStatus:
    """
    Resolve the status an action moves an appointment to.

    Raises:
        InvalidStatusException: If the action is not allowed from ``current``
    """
    target = TRANSITIONS.get((AppointmentStatus(current), action))
    if target is None:
        raise InvalidStatusException(
            f"Cannot {action.replace('_', '-')} an appointment that is {current}"
        )
    return target


def is_party(user: dict, appointment: dict) -> bool:
    """Check whether the user is referenced by the appointment."""
    return user["id"] in (
        appointment["patient_id"],
        appointment["consultant_id"],
        appointment["doctor_id"],
    )


def is_slot_conflict(exc: IntegrityError) -> bool:
    """Check whether an integrity error came from the double-booking index."""
    message = str(exc.orig)
    return SLOT_UNIQUE_INDEX in message or "appointments.consultant_id" in message


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _get_row(self, appointment_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(appointments).where(appointments.c.id == appointment_id))
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Appointment not found")

        return dict(row)

    async def create_appointment(
        self,
        patient: dict,
        data: AppointmentCreate,
    ) -> AppointmentResponse:
        """
        Book a new appointment.

        The appointment and the consultant's notification are committed
        together. A concurrent booking of the same consultant and start time
        loses on the unique index and surfaces as ``SlotAlreadyBookedException``.

        Args:
            patient: Booking user (must be a patient)
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            ForbiddenException: If the caller is not a patient
            InvalidConsultantException: If the target is not a consultant
            SlotAlreadyBookedException: If the slot is already taken
        """
        if patient["role"] != "patient":
            raise ForbiddenException("Only patients can create appointments")

        result = await self.db.execute(select(users.c.id, users.c.role).where(users.c.id == data.consultant_id))
        consultant = result.mappings().first()
        if not consultant or consultant["role"] != "consultant":
            raise InvalidConsultantException()

        now = datetime.now(UTC)
        appointment_id = uuid4()
        values = {
            "id": appointment_id,
            "patient_id": patient["id"],
            "consultant_id": data.consultant_id,
            "start_at": data.start_at,
            "end_at": data.end_at,
            "status": AppointmentStatus.PENDING.value,
            "booked_at": now,
            "notes": data.patient_notes,
            "created_at": now,
            "updated_at": now,
        }
        notification = NotificationService.build(
            data.consultant_id,
            NotificationType.APPOINTMENT_CREATED,
            "New Appointment Request",
            f"You have a new appointment request from {patient['email']}",
            {"appointment_id": appointment_id},
        )

        try:
            result = await self.db.execute(insert(appointments).values(**values).returning(appointments))
            row = result.mappings().one()
            await NotificationService.add(self.db, notification)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_slot_conflict(e):
                logger.info(
                    "appointment_slot_conflict",
                    consultant_id=str(data.consultant_id),
                    start_at=data.start_at.isoformat(),
                )
                raise SlotAlreadyBookedException()
            logger.error("appointment_create_failed", error=str(e))
            raise AppException("Error creating appointment", code="CREATE_ERROR")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("appointment_create_failed", error=str(e))
            raise AppException("Error creating appointment", code="CREATE_ERROR")

        logger.info(
            "appointment_created",
            appointment_id=str(appointment_id),
            patient_id=str(patient["id"]),
            consultant_id=str(data.consultant_id),
        )
        return AppointmentResponse.model_validate(dict(row))

    async def get_appointment(
        self,
        user: dict,
        appointment_id: UUID,
    ) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If user is neither a party nor an admin
        """
        row = await self._get_row(appointment_id)

        if user["role"] != "admin" and not is_party(user, row):
            raise ForbiddenException("Not authorized to view this appointment")

        return AppointmentResponse.model_validate(row)

    async def list_appointments(
        self,
        user: dict,
        filters: AppointmentFilters,
    ) -> list[AppointmentResponse]:
        """
        List appointments visible to the user, latest first.

        Without a role filter a user sees the appointments on their own side
        (patient, consultant or doctor). Admins without a role filter see
        everything.

        Args:
            user: Requesting user
            filters: Optional side and status filters

        Returns:
            Matching appointments
        """
        side = filters.role.value if filters.role else user["role"]
        conditions = []

        if side in ("patient", "consultant", "doctor"):
            conditions.append(appointments.c[f"{side}_id"] == user["id"])
        elif user["role"] != "admin":
            raise ForbiddenException("Not authorized to view these appointments")

        if filters.status:
            conditions.append(appointments.c.status == filters.status.value)

        query = select(appointments).where(*conditions).order_by(appointments.c.start_at.desc())
        result = await self.db.execute(query)

        return [AppointmentResponse.model_validate(dict(row)) for row in result.mappings()]

    async def list_for_user_between(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[AppointmentResponse]:
        """List appointments where the user is a party, starting in ``[start, end)``."""
        query = (
            select(appointments)
            .where(
                or_(
                    appointments.c.patient_id == user_id,
                    appointments.c.consultant_id == user_id,
                    appointments.c.doctor_id == user_id,
                ),
                appointments.c.start_at >= start,
                appointments.c.start_at < end,
            )
            .order_by(appointments.c.start_at)
        )
        result = await self.db.execute(query)

        return [AppointmentResponse.model_validate(dict(row)) for row in result.mappings()]

    async def _apply_transition(
        self,
        row: dict[str, Any],
        action: str,
        notifications: list[dict[str, Any]],
    ) -> AppointmentResponse:
        """
        Move the appointment to the status ``action`` leads to.

        The update is conditional on the status read earlier, so a concurrent
        change makes this call fail instead of overwriting it.
        """
        target = next_status(row["status"], action)

        query = (
            update(appointments)
            .where(
                appointments.c.id == row["id"],
                appointments.c.status == row["status"],
            )
            .values(status=target.value, updated_at=datetime.now(UTC))
            .returning(appointments)
        )
        result = await self.db.execute(query)
        updated = result.mappings().first()

        if not updated:
            await self.db.rollback()
            raise InvalidStatusException("Appointment status changed, please retry")

        await NotificationService.add(self.db, *notifications)
        await self.db.commit()

        logger.info(
            "appointment_status_changed",
            appointment_id=str(row["id"]),
            from_status=row["status"],
            to_status=target.value,
        )
        return AppointmentResponse.model_validate(dict(updated))

    async def confirm_appointment(
        self,
        user: dict,
        appointment_id: UUID,
    ) -> AppointmentResponse:
        """
        Confirm a pending appointment and notify the patient.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If user is not the consultant or an admin
            InvalidStatusException: If the appointment is not pending
        """
        row = await self._get_row(appointment_id)

        if user["role"] != "admin" and row["consultant_id"] != user["id"]:
            raise ForbiddenException("Not authorized to confirm this appointment")

        notification = NotificationService.build(
            row["patient_id"],
            NotificationType.APPOINTMENT_CONFIRMED,
            "Appointment Confirmed",
            f"Your appointment with {user['email']} has been confirmed",
            {"appointment_id": appointment_id},
        )
        return await self._apply_transition(row, "confirm", [notification])

    async def cancel_appointment(
        self,
        user: dict,
        appointment_id: UUID,
    ) -> AppointmentResponse:
        """
        Cancel a pending or confirmed appointment.

        The other party is notified. When an admin cancels, both parties are.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If user is neither patient, consultant nor admin
            InvalidStatusException: If the appointment already ended
        """
        row = await self._get_row(appointment_id)

        if user["id"] == row["patient_id"]:
            recipients = [row["consultant_id"]]
        elif user["id"] == row["consultant_id"]:
            recipients = [row["patient_id"]]
        elif user["role"] == "admin":
            recipients = [row["patient_id"], row["consultant_id"]]
        else:
            raise ForbiddenException("Not authorized to cancel this appointment")

        notifications = [
            NotificationService.build(
                recipient,
                NotificationType.APPOINTMENT_CANCELLED,
                "Appointment Cancelled",
                f"Appointment with {user['email']} has been cancelled",
                {"appointment_id": appointment_id},
            )
            for recipient in recipients
        ]
        return await self._apply_transition(row, "cancel", notifications)

    async def mark_no_show(
        self,
        user: dict,
        appointment_id: UUID,
    ) -> AppointmentResponse:
        """Record that the patient did not attend a confirmed appointment."""
        row = await self._get_row(appointment_id)

        if user["role"] != "admin" and row["consultant_id"] != user["id"]:
            raise ForbiddenException("Not authorized to update this appointment")

        notification = NotificationService.build(
            row["patient_id"],
            NotificationType.APPOINTMENT_NO_SHOW,
            "Missed Appointment",
            "You were marked as not attending your appointment",
            {"appointment_id": appointment_id},
        )
        return await self._apply_transition(row, "no_show", [notification])

    async def complete_session(
        self,
        user: dict,
        appointment_id: UUID,
        notes: str | None = None,
    ) -> SessionCompleteResponse:
        """
        Complete a confirmed appointment and open it for rating.

        Marks the appointment completed, writes its session record and asks
        both parties to rate each other, all in one transaction.

        Args:
            user: Consultant of the appointment or an admin
            appointment_id: Appointment ID
            notes: Session notes

        Returns:
            Completed appointment and its session record

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If user is not the consultant or an admin
            SessionCompletedException: If the session was already completed
            InvalidStatusException: If the appointment is not confirmed
        """
        row = await self._get_row(appointment_id)

        if user["role"] != "admin" and row["consultant_id"] != user["id"]:
            raise ForbiddenException("Only consultant can complete session")

        if row["status"] == AppointmentStatus.COMPLETED.value:
            raise SessionCompletedException()

        target = next_status(row["status"], "complete")
        now = datetime.now(UTC)

        result = await self.db.execute(
            update(appointments)
            .where(
                appointments.c.id == appointment_id,
                appointments.c.status == AppointmentStatus.CONFIRMED.value,
            )
            .values(status=target.value, updated_at=now)
            .returning(appointments)
        )
        updated = result.mappings().first()

        if not updated:
            await self.db.rollback()
            raise SessionCompletedException()

        session_id = uuid4()
        try:
            result = await self.db.execute(
                insert(session_records)
                .values(
                    id=session_id,
                    appointment_id=appointment_id,
                    started_at=row["start_at"],
                    ended_at=now,
                    participants=[str(row["patient_id"]), str(row["consultant_id"])],
                    notes=notes,
                    created_at=now,
                    updated_at=now,
                )
                .returning(session_records)
            )
            record = result.mappings().one()
        except IntegrityError:
            await self.db.rollback()
            raise SessionCompletedException()

        meta = {"appointment_id": appointment_id, "session_id": session_id}
        await NotificationService.add(
            self.db,
            NotificationService.build(
                row["patient_id"],
                NotificationType.SESSION_COMPLETED,
                "Session Completed",
                "Your session has been completed. Please rate your consultant.",
                meta,
            ),
            NotificationService.build(
                row["consultant_id"],
                NotificationType.SESSION_COMPLETED,
                "Session Completed",
                "Your session has been completed. Please rate your patient.",
                meta,
            ),
        )
        await self.db.commit()

        logger.info(
            "session_completed",
            appointment_id=str(appointment_id),
            session_id=str(session_id),
        )
        return SessionCompleteResponse(
            appointment=AppointmentResponse.model_validate(dict(updated)),
            session_record=SessionRecordResponse.model_validate(dict(record)),
        )
