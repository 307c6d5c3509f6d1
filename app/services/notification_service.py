"""Notification inbox service."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import desc, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.models.notifications import notifications
from app.schemas.notifications import NotificationRecord, NotificationType

logger = structlog.get_logger(__name__)

# Most recent entries returned by the inbox listing
INBOX_LIMIT = 50


class NotificationService:
    """Service for the per-user notification inbox."""

    @staticmethod
    def build(
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        body: str,
        meta: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Build insert values for one notification.

        The caller executes the insert inside its own transaction so the
        notification commits or rolls back together with the domain change.

        Args:
            user_id: Recipient
            notification_type: Type tag
            title: Notification title
            body: Notification body
            meta: Related ids (appointment_id, session_id, ...)

        Returns:
            Column values for ``notifications``
        """
        return {
            "id": uuid4(),
            "user_id": user_id,
            "type": notification_type.value,
            "title": title,
            "body": body,
            "read": False,
            "meta": {key: str(value) for key, value in (meta or {}).items()},
            "created_at": datetime.now(UTC),
        }

    @staticmethod
    async def add(db: AsyncSession, *values: dict[str, Any]) -> None:
        """Queue notification inserts on the session without committing."""
        if values:
            await db.execute(insert(notifications), list(values))

    @staticmethod
    async def create(
        db: AsyncSession,
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        body: str,
        meta: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        """Write a single notification and commit."""
        values = NotificationService.build(user_id, notification_type, title, body, meta)
        result = await db.execute(insert(notifications).values(**values).returning(notifications))
        row = result.mappings().one()
        await db.commit()

        logger.info(
            "notification_created",
            user_id=str(user_id),
            notification_type=notification_type.value,
        )
        return NotificationRecord.model_validate(dict(row))

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: UUID,
        unread_only: bool = False,
    ) -> list[NotificationRecord]:
        """
        List a user's notifications, newest first.

        Args:
            db: Database session
            user_id: Inbox owner
            unread_only: Only return unread entries

        Returns:
            Up to ``INBOX_LIMIT`` notifications
        """
        conditions = [notifications.c.user_id == user_id]
        if unread_only:
            conditions.append(notifications.c.read.is_(False))

        query = (
            select(notifications)
            .where(*conditions)
            .order_by(desc(notifications.c.created_at))
            .limit(INBOX_LIMIT)
        )
        result = await db.execute(query)
        return [NotificationRecord.model_validate(dict(row)) for row in result.mappings()]

    @staticmethod
    async def mark_read(
        db: AsyncSession,
        user_id: UUID,
        notification_id: UUID,
    ) -> NotificationRecord:
        """
        Mark one of the user's notifications as read.

        Raises:
            NotFoundException: If the notification does not exist or belongs to
                another user
        """
        query = (
            update(notifications)
            .where(
                notifications.c.id == notification_id,
                notifications.c.user_id == user_id,
            )
            .values(read=True)
            .returning(notifications)
        )
        result = await db.execute(query)
        row = result.mappings().first()

        if not row:
            await db.rollback()
            raise NotFoundException("Notification not found")

        await db.commit()
        return NotificationRecord.model_validate(dict(row))
