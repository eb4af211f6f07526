"""
Notification Routes - The caller's in-app notifications.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user
from app.db.models import User
from app.db.session import get_db
from app.exceptions import NotAuthorizedError, NotificationNotFoundError
from app.models.api import NotificationResponse
from app.models.domain import NotificationData
from app.services.notifications import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _notification_response(notification: NotificationData) -> NotificationResponse:
    return NotificationResponse(
        id=notification.notification_id,
        recipient_id=notification.recipient_id,
        message=notification.message,
        type=notification.type,
        read=notification.read,
        created_at=notification.created_at,
    )


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationResponse]:
    """Newest notifications for the caller."""
    service = NotificationService(db)
    notifications = await service.list_notifications(user.id)
    return [_notification_response(n) for n in notifications]


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    """Mark one of the caller's notifications as read."""
    service = NotificationService(db)

    try:
        notification = await service.mark_as_read(notification_id, user.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        ) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not your notification",
        ) from exc

    return _notification_response(notification)
