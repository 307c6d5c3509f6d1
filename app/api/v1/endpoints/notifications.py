"""Notification inbox endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import CurrentUser, DatabaseSession
from app.schemas.common import ApiResponse
from app.schemas.notifications import NotificationRecord
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=ApiResponse[list[NotificationRecord]],
    status_code=status.HTTP_200_OK,
    summary="List notifications",
)
async def list_notifications(
    current_user: CurrentUser,
    db: DatabaseSession,
    unread: bool = Query(False, description="Only unread notifications"),
) -> ApiResponse[list[NotificationRecord]]:
    """
    List the caller's notifications, newest first.

    Args:
        current_user: Authenticated user
        db: Database session
        unread: Only return unread notifications

    Returns:
        Up to 50 notifications
    """
    items = await NotificationService.list_for_user(db, current_user["id"], unread_only=unread)
    return ApiResponse(data=items)


@router.put(
    "/{notification_id}/read",
    response_model=ApiResponse[NotificationRecord],
    status_code=status.HTTP_200_OK,
    summary="Mark notification as read",
)
async def mark_notification_read(
    notification_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> ApiResponse[NotificationRecord]:
    """Mark one of the caller's notifications as read."""
    record = await NotificationService.mark_read(db, current_user["id"], notification_id)
    return ApiResponse(data=record)
