"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.core.redis_client import check_redis_connection
from app.database import check_database_connection
from app.dependencies import AppSettings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health of dependencies and background work."""

    database: str
    redis: str
    reminders: str
    reminder_lead_times: list[str]
    video_provider: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check(settings: AppSettings) -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(settings: AppSettings) -> DetailedHealthResponse:
    """
    Detailed health check with database and Redis status.

    Redis being down only degrades the service: revocation checks and
    reminder markers fail open.

    Returns:
        ``unhealthy`` without a database, ``degraded`` without Redis
    """
    db_healthy = await check_database_connection()
    redis_healthy = await check_redis_connection()

    if not db_healthy:
        overall = "unhealthy"
    elif not redis_healthy:
        overall = "degraded"
    else:
        overall = "healthy"

    return DetailedHealthResponse(
        status=overall,
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
        reminders="enabled" if settings.reminders_enabled else "disabled",
        reminder_lead_times=settings.reminder_lead_times,
        video_provider=settings.video_provider or "none",
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    """Simple ping endpoint."""
    return {"message": "pong"}
