"""Appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import ConsultantOrAdmin, CurrentUser, DatabaseSession, PatientUser
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentResponse,
    AppointmentStatus,
    PartyRole,
)
from app.schemas.common import ApiResponse
from app.services.appointment_service import AppointmentService

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: PatientUser,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Book an appointment with a consultant.

    Args:
        data: Consultant, start and end time, optional notes
        current_user: Authenticated patient
        db: Database session

    Returns:
        Created appointment in ``pending`` status

    Raises:
        InvalidConsultantException: If the consultant does not exist
        SlotAlreadyBookedException: If the slot was taken in the meantime
    """
    service = AppointmentService(db)
    return ApiResponse(data=await service.create_appointment(current_user, data))


@router.get(
    "",
    response_model=ApiResponse[list[AppointmentResponse]],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    current_user: CurrentUser,
    db: DatabaseSession,
    role: PartyRole | None = Query(None),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
) -> ApiResponse[list[AppointmentResponse]]:
    """
    List the caller's appointments.

    Args:
        current_user: Authenticated user
        db: Database session
        role: Side of the appointment to list by, defaults to the caller's role
        status_filter: Filter by status

    Returns:
        Appointments, latest first
    """
    filters = AppointmentFilters(role=role, status=status_filter)
    service = AppointmentService(db)
    return ApiResponse(data=await service.list_appointments(current_user, filters))


@router.get(
    "/{appointment_id}",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Get an appointment the caller is a party of."""
    service = AppointmentService(db)
    return ApiResponse(data=await service.get_appointment(current_user, appointment_id))


@router.put(
    "/{appointment_id}/cancel",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Cancel a pending or confirmed appointment and notify the other party."""
    service = AppointmentService(db)
    return ApiResponse(data=await service.cancel_appointment(current_user, appointment_id))


@router.put(
    "/{appointment_id}/confirm",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Confirm appointment",
)
async def confirm_appointment(
    appointment_id: UUID,
    current_user: ConsultantOrAdmin,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Confirm a pending appointment and notify the patient."""
    service = AppointmentService(db)
    return ApiResponse(data=await service.confirm_appointment(current_user, appointment_id))


@router.put(
    "/{appointment_id}/no-show",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Mark patient as no-show",
)
async def mark_no_show(
    appointment_id: UUID,
    current_user: ConsultantOrAdmin,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Mark a confirmed appointment as missed by the patient."""
    service = AppointmentService(db)
    return ApiResponse(data=await service.mark_no_show(current_user, appointment_id))
