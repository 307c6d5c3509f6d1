"""User service for business logic."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UserExistsException
from app.core.security import get_password_hash
from app.models.users import users
from app.schemas.users import UserUpdate

logger = structlog.get_logger(__name__)

# Columns callers may set from a registration profile
PROFILE_FIELDS = ("full_name", "phone", "bio", "specialization")


class UserService:
    """Service for user operations."""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        role: str,
        doctor_license: str | None = None,
        profile: dict[str, Any] | None = None,
    ) -> dict:
        """
        Create a new user with a hashed password.

        Raises:
            UserExistsException: If the email is already registered
        """
        now = datetime.now(UTC)
        values = {
            "email": email.lower(),
            "password_hash": get_password_hash(password),
            "role": role,
            "doctor_license": doctor_license,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        values.update({key: value for key, value in (profile or {}).items() if key in PROFILE_FIELDS})

        try:
            result = await db.execute(insert(users).values(**values).returning(users))
            user = result.mappings().one()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise UserExistsException()

        logger.info("user_created", user_id=str(user["id"]), role=role)
        return dict(user)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> dict | None:
        """Get user by internal ID."""
        query = select(users).where(users.c.id == user_id)
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> dict | None:
        """Get user by email."""
        query = select(users).where(users.c.email == email.lower())
        result = await db.execute(query)
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def update_user(db: AsyncSession, user_id: UUID, user_data: UserUpdate) -> dict | None:
        """Update user profile."""
        update_data = user_data.model_dump(exclude_unset=True)
        if not update_data:
            return await UserService.get_user_by_id(db, user_id)

        update_data["updated_at"] = datetime.now(UTC)

        query = update(users).where(users.c.id == user_id).values(**update_data).returning(users)

        result = await db.execute(query)
        user = result.mappings().first()
        await db.commit()

        return dict(user) if user else None

    @staticmethod
    async def update_last_login(db: AsyncSession, user_id: UUID) -> None:
        """Update user's last login timestamp."""
        query = update(users).where(users.c.id == user_id).values(last_login_at=datetime.now(UTC))
        await db.execute(query)
        await db.commit()

    @staticmethod
    async def ensure_consultant(db: AsyncSession, email: str, password: str) -> dict:
        """
        Create or refresh the configured consultant account.

        An existing account with this email is promoted to consultant,
        reactivated and given the configured password.
        """
        existing = await UserService.get_user_by_email(db, email)
        if not existing:
            return await UserService.create_user(db, email, password, "consultant")

        query = (
            update(users)
            .where(users.c.id == existing["id"])
            .values(
                role="consultant",
                is_active=True,
                password_hash=get_password_hash(password),
                updated_at=datetime.now(UTC),
            )
            .returning(users)
        )
        result = await db.execute(query)
        user = result.mappings().one()
        await db.commit()

        logger.info("consultant_account_refreshed", user_id=str(user["id"]))
        return dict(user)
