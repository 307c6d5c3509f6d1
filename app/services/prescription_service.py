"""Prescription service for business logic."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import desc, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException, InvalidPatientException
from app.models.prescriptions import prescriptions
from app.models.users import users
from app.schemas.prescriptions import PrescriptionCreate, PrescriptionResponse

logger = structlog.get_logger(__name__)


class PrescriptionService:
    """Service for prescriptions written by doctors."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def create_prescription(self, doctor: dict, data: PrescriptionCreate) -> PrescriptionResponse:
        """
        Write a prescription for a patient.

        Raises:
            ForbiddenException: If the author is not a doctor
            InvalidPatientException: If the target is not a patient
        """
        if doctor["role"] != "doctor":
            raise ForbiddenException("Only doctors can create prescriptions")

        result = await self.db.execute(select(users.c.role).where(users.c.id == data.patient_id))
        patient_role = result.scalar()
        if patient_role != "patient":
            raise InvalidPatientException()

        now = datetime.now(UTC)
        query = (
            insert(prescriptions)
            .values(
                doctor_id=doctor["id"],
                patient_id=data.patient_id,
                fields=[field.model_dump(mode="json") for field in data.fields],
                created_at=now,
                updated_at=now,
            )
            .returning(prescriptions)
        )
        result = await self.db.execute(query)
        row = result.mappings().one()
        await self.db.commit()

        logger.info(
            "prescription_created",
            prescription_id=str(row["id"]),
            doctor_id=str(doctor["id"]),
            patient_id=str(data.patient_id),
        )
        return PrescriptionResponse.model_validate(dict(row))

    async def list_prescriptions(self, user: dict, patient_id: UUID) -> list[PrescriptionResponse]:
        """List a patient's prescriptions, newest first (patient self, doctor or admin)."""
        if user["role"] not in ("admin", "doctor") and user["id"] != patient_id:
            raise ForbiddenException("Not authorized to view these prescriptions")

        query = (
            select(prescriptions)
            .where(prescriptions.c.patient_id == patient_id)
            .order_by(desc(prescriptions.c.created_at))
        )
        result = await self.db.execute(query)

        return [PrescriptionResponse.model_validate(dict(row)) for row in result.mappings()]
