"""Video session endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import ConsultantOrAdmin, CurrentUser, DatabaseSession, VideoProvider
from app.schemas.common import ApiResponse
from app.schemas.sessions import (
    SessionComplete,
    SessionCompleteResponse,
    SessionRecordResponse,
    VideoTokenResponse,
)
from app.services.appointment_service import AppointmentService
from app.services.session_service import SessionService

router = APIRouter()


@router.post(
    "/{appointment_id}/token",
    response_model=ApiResponse[VideoTokenResponse],
    status_code=status.HTTP_200_OK,
    tags=["Sessions"],
    summary="Get video room token",
)
async def get_video_token(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
    provider: VideoProvider,
) -> ApiResponse[VideoTokenResponse]:
    """
    Get join details for the video room of a confirmed appointment.

    Args:
        appointment_id: Appointment ID
        current_user: Patient or consultant of the appointment, or an admin
        db: Database session
        provider: Video room provider

    Returns:
        Room id, room URL and meeting token
    """
    service = SessionService(db)
    return ApiResponse(data=await service.get_video_token(current_user, appointment_id, provider))


@router.post(
    "/{appointment_id}/complete",
    response_model=ApiResponse[SessionCompleteResponse],
    status_code=status.HTTP_200_OK,
    tags=["Sessions"],
    summary="Complete session",
)
async def complete_session(
    appointment_id: UUID,
    data: SessionComplete,
    current_user: ConsultantOrAdmin,
    db: DatabaseSession,
) -> ApiResponse[SessionCompleteResponse]:
    """Complete a confirmed appointment and ask both parties for a rating."""
    service = AppointmentService(db)
    return ApiResponse(
        data=await service.complete_session(current_user, appointment_id, data.notes)
    )


@router.get(
    "/{appointment_id}",
    response_model=ApiResponse[SessionRecordResponse],
    status_code=status.HTTP_200_OK,
    tags=["Sessions"],
    summary="Get session record",
)
async def get_session_record(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> ApiResponse[SessionRecordResponse]:
    """Get the session record of a completed appointment."""
    service = SessionService(db)
    return ApiResponse(data=await service.get_session_record(current_user, appointment_id))
