"""Calendar endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import AppSettings, CurrentUser, DatabaseSession
from app.schemas.calendar import CalendarDay
from app.schemas.common import ApiResponse
from app.services.calendar_service import CalendarService

router = APIRouter()


@router.get(
    "/{user_id}/events",
    response_model=ApiResponse[list[CalendarDay]],
    status_code=status.HTTP_200_OK,
    tags=["Calendar"],
    summary="Get calendar events for a month",
)
async def get_events(
    user_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
    settings: AppSettings,
    month: str = Query(..., description="Month in YYYY-MM"),
) -> ApiResponse[list[CalendarDay]]:
    """Get a user's appointments for a month grouped by date (self or admin)."""
    service = CalendarService(db, settings.availability_timezone)
    return ApiResponse(data=await service.get_events(current_user, user_id, month))
