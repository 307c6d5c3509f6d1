"""Prescription endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import CurrentUser, DatabaseSession, DoctorUser
from app.schemas.common import ApiResponse
from app.schemas.prescriptions import PrescriptionCreate, PrescriptionResponse
from app.services.prescription_service import PrescriptionService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[PrescriptionResponse],
    status_code=status.HTTP_201_CREATED,
    tags=["Prescriptions"],
    summary="Write prescription",
)
async def create_prescription(
    data: PrescriptionCreate,
    current_user: DoctorUser,
    db: DatabaseSession,
) -> ApiResponse[PrescriptionResponse]:
    """Write a prescription for a patient (doctors only)."""
    service = PrescriptionService(db)
    return ApiResponse(data=await service.create_prescription(current_user, data))


@router.get(
    "",
    response_model=ApiResponse[list[PrescriptionResponse]],
    status_code=status.HTTP_200_OK,
    tags=["Prescriptions"],
    summary="List prescriptions of a patient",
)
async def list_prescriptions(
    current_user: CurrentUser,
    db: DatabaseSession,
    patient_id: UUID = Query(...),
) -> ApiResponse[list[PrescriptionResponse]]:
    """List a patient's prescriptions, newest first."""
    service = PrescriptionService(db)
    return ApiResponse(data=await service.list_prescriptions(current_user, patient_id))
