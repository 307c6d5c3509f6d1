"""FastAPI dependencies."""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any
from uuid import UUID

import redis
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.core.redis_client import RedisStore, get_redis_client
from app.core.security import decode_access_token, token_subject
from app.core.video import VideoRoomProvider
from app.database import get_db
from app.services.user_service import UserService

# Security
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        UnauthorizedException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Invalid or expired token")

    user_id = token_subject(payload)
    if user_id is None:
        raise UnauthorizedException("Invalid user ID format")

    return user_id


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get current user from database.

    Raises:
        UnauthorizedException: If user not found or deactivated
    """
    user = await UserService.get_user_by_id(db, user_id)

    if not user or not user["is_active"]:
        raise UnauthorizedException("User not found")

    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return user


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, dict]]:
    """
    Build a dependency that only lets users with one of ``roles`` through.

    Args:
        roles: Allowed role names

    Returns:
        Dependency returning the current user
    """

    async def checker(user: Annotated[dict, Depends(get_current_user)]) -> dict:
        if user["role"] not in roles:
            raise ForbiddenException(f"Requires role: {', '.join(roles)}")
        return user

    return checker


def get_redis_store(
    redis_client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> RedisStore:
    """Get key/value store backed by the shared Redis client."""
    return RedisStore(redis_client)


def get_video_provider(
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoRoomProvider:
    """Get video room provider from settings."""
    return VideoRoomProvider.from_settings(settings)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
PatientUser = Annotated[dict, Depends(require_roles("patient"))]
DoctorUser = Annotated[dict, Depends(require_roles("doctor"))]
ConsultantOrAdmin = Annotated[dict, Depends(require_roles("consultant", "admin"))]
AppSettings = Annotated[Settings, Depends(get_settings)]
Store = Annotated[RedisStore, Depends(get_redis_store)]
VideoProvider = Annotated[VideoRoomProvider, Depends(get_video_provider)]
