"""Consultant and availability endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.core.exceptions import ValidationException
from app.dependencies import AppSettings, ConsultantOrAdmin, DatabaseSession
from app.schemas.availability import (
    AvailabilityTemplateCreate,
    AvailabilityTemplateResponse,
    AvailabilityTemplateUpdate,
    ConsultantDetailResponse,
    ConsultantResponse,
    Slot,
)
from app.schemas.common import ApiResponse
from app.services.availability_service import AvailabilityService, parse_date

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[ConsultantResponse]],
    status_code=status.HTTP_200_OK,
    tags=["Consultants"],
    summary="List consultants",
)
async def list_consultants(
    db: DatabaseSession,
    settings: AppSettings,
    specialization: str | None = Query(None, max_length=200),
) -> ApiResponse[list[ConsultantResponse]]:
    """List active consultants, optionally filtered by specialization."""
    service = AvailabilityService(db, settings.availability_timezone)
    return ApiResponse(data=await service.list_consultants(specialization))


@router.get(
    "/{consultant_id}",
    response_model=ApiResponse[ConsultantDetailResponse],
    status_code=status.HTTP_200_OK,
    tags=["Consultants"],
    summary="Get consultant",
)
async def get_consultant(
    consultant_id: UUID,
    db: DatabaseSession,
    settings: AppSettings,
) -> ApiResponse[ConsultantDetailResponse]:
    """Get consultant details with the number of active availability templates."""
    service = AvailabilityService(db, settings.availability_timezone)
    return ApiResponse(data=await service.get_consultant(consultant_id))


@router.get(
    "/{consultant_id}/availability",
    response_model=ApiResponse[list[Slot]],
    status_code=status.HTTP_200_OK,
    tags=["Consultants"],
    summary="Get bookable slots for a day",
)
async def get_availability(
    consultant_id: UUID,
    db: DatabaseSession,
    settings: AppSettings,
    date: str | None = Query(None, description="Day in YYYY-MM-DD"),
) -> ApiResponse[list[Slot]]:
    """
    Get the free slots of a consultant for one day.

    Args:
        consultant_id: Consultant ID
        db: Database session
        settings: Application settings
        date: Calendar day, ``YYYY-MM-DD``

    Returns:
        Slots ordered by start time

    Raises:
        ValidationException: If the date is missing or malformed
    """
    if not date:
        raise ValidationException("Date query parameter is required")

    target_date = parse_date(date)
    service = AvailabilityService(db, settings.availability_timezone)
    return ApiResponse(data=await service.generate_slots(consultant_id, target_date))


@router.post(
    "/{consultant_id}/availability",
    response_model=ApiResponse[AvailabilityTemplateResponse],
    status_code=status.HTTP_201_CREATED,
    tags=["Consultants"],
    summary="Create availability template",
)
async def create_availability(
    consultant_id: UUID,
    data: AvailabilityTemplateCreate,
    current_user: ConsultantOrAdmin,
    db: DatabaseSession,
    settings: AppSettings,
) -> ApiResponse[AvailabilityTemplateResponse]:
    """Create a recurring (``dayOfWeek``) or one-off (``date``) template."""
    service = AvailabilityService(db, settings.availability_timezone)
    return ApiResponse(data=await service.create_template(current_user, consultant_id, data))


@router.get(
    "/{consultant_id}/availability/templates",
    response_model=ApiResponse[list[AvailabilityTemplateResponse]],
    status_code=status.HTTP_200_OK,
    tags=["Consultants"],
    summary="List availability templates",
)
async def list_availability_templates(
    consultant_id: UUID,
    current_user: ConsultantOrAdmin,
    db: DatabaseSession,
    settings: AppSettings,
) -> ApiResponse[list[AvailabilityTemplateResponse]]:
    """List all templates of a consultant, including disabled ones."""
    service = AvailabilityService(db, settings.availability_timezone)
    return ApiResponse(data=await service.list_templates(current_user, consultant_id))


@router.put(
    "/{consultant_id}/availability/{template_id}",
    response_model=ApiResponse[AvailabilityTemplateResponse],
    status_code=status.HTTP_200_OK,
    tags=["Consultants"],
    summary="Update availability template",
)
async def update_availability(
    consultant_id: UUID,
    template_id: UUID,
    data: AvailabilityTemplateUpdate,
    current_user: ConsultantOrAdmin,
    db: DatabaseSession,
    settings: AppSettings,
) -> ApiResponse[AvailabilityTemplateResponse]:
    """Update a template; send ``active: false`` to disable it."""
    service = AvailabilityService(db, settings.availability_timezone)
    return ApiResponse(
        data=await service.update_template(current_user, consultant_id, template_id, data)
    )
