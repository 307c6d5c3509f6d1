"""Rating endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import CurrentUser, DatabaseSession
from app.schemas.common import ApiResponse
from app.schemas.sessions import RatingCreate, RatingResponse
from app.services.session_service import SessionService

router = APIRouter()


@router.post(
    "/{appointment_id}/rate",
    response_model=ApiResponse[RatingResponse],
    status_code=status.HTTP_200_OK,
    tags=["Ratings"],
    summary="Rate the other party of a session",
)
async def submit_rating(
    appointment_id: UUID,
    data: RatingCreate,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> ApiResponse[RatingResponse]:
    """
    Rate a completed session.

    The patient rates the consultant and the consultant rates the patient.
    Anyone else is rejected.
    """
    service = SessionService(db)
    return ApiResponse(data=await service.submit_rating(current_user, appointment_id, data))
