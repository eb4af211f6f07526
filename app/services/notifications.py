"""
Notification service - in-app notifications for space activity.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.config import settings
from app.db.models import Notification
from app.exceptions import NotAuthorizedError, NotificationNotFoundError
from app.models.api import NotificationType
from app.models.domain import NotificationData

logger = get_logger(__name__)


def _to_data(notification: Notification) -> NotificationData:
    return NotificationData(
        notification_id=notification.id,
        recipient_id=notification.recipient_id,
        message=notification.message,
        type=NotificationType(notification.type),
        read=notification.read,
        created_at=notification.created_at,
    )


class NotificationService:
    """Create, list and acknowledge notifications."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add_notification(
        self,
        recipient_id: UUID,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> Notification:
        """Stage a notification in the caller's transaction (no commit)."""
        notification = Notification(recipient_id=recipient_id, message=message, type=type.value)
        self.session.add(notification)
        return notification

    async def list_notifications(self, user_id: UUID) -> list[NotificationData]:
        """Newest notifications for the user, capped at notification_list_limit."""
        stmt = (
            select(Notification)
            .where(Notification.recipient_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(settings.notification_list_limit)
        )
        result = await self.session.execute(stmt)
        return [_to_data(n) for n in result.scalars().all()]

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> NotificationData:
        """
        Mark a notification read.

        Raises:
            NotificationNotFoundError: Notification doesn't exist
            NotAuthorizedError: Caller is not the recipient
        """
        notification = await self.session.get(Notification, notification_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id)

        if notification.recipient_id != user_id:
            logger.warning(
                "notification_access_denied",
                notification_id=str(notification_id),
                user_id=str(user_id),
            )
            raise NotAuthorizedError(user_id, "read this notification")

        notification.read = True
        await self.session.flush()
        await self.session.commit()
        return _to_data(notification)
