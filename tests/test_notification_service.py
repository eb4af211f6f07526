"""
Tests for NotificationService.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.db.models import Notification
from app.exceptions import NotAuthorizedError, NotificationNotFoundError
from app.models.api import NotificationType
from app.services.notifications import NotificationService

from conftest import create_mock_notification, make_result


@pytest.fixture
def notification_service(db_session: AsyncMock) -> NotificationService:
    """NotificationService with mocked database session."""
    return NotificationService(db_session)


class TestNotifications:
    """Tests for staging, listing and reading notifications."""

    def test_add_notification_stages_without_commit(
        self, notification_service: NotificationService, db_session: AsyncMock
    ) -> None:
        recipient = uuid4()

        notification = notification_service.add_notification(
            recipient, "Welcome", NotificationType.SYSTEM
        )

        assert isinstance(notification, Notification)
        assert notification.recipient_id == recipient
        assert notification.type == "SYSTEM"
        db_session.add.assert_called_once_with(notification)
        db_session.commit.assert_not_awaited()

    async def test_list_maps_rows(
        self, notification_service: NotificationService, db_session: AsyncMock
    ) -> None:
        user_id = uuid4()
        rows = [
            create_mock_notification(recipient_id=user_id, type="JOIN"),
            create_mock_notification(recipient_id=user_id, read=True),
        ]
        db_session.execute = AsyncMock(return_value=make_result(scalars=rows))

        notifications = await notification_service.list_notifications(user_id)

        assert [n.type for n in notifications] == [NotificationType.JOIN, NotificationType.INFO]
        assert [n.read for n in notifications] == [False, True]
        stmt = db_session.execute.await_args.args[0]
        assert stmt._limit_clause.value == 20

    async def test_recipient_marks_read(
        self, notification_service: NotificationService, db_session: AsyncMock
    ) -> None:
        user_id = uuid4()
        notification = create_mock_notification(recipient_id=user_id)
        db_session.get = AsyncMock(return_value=notification)

        result = await notification_service.mark_as_read(notification.id, user_id)

        assert result.read is True
        assert notification.read is True
        db_session.commit.assert_awaited_once()

    async def test_other_user_cannot_mark_read(
        self, notification_service: NotificationService, db_session: AsyncMock
    ) -> None:
        notification = create_mock_notification()
        db_session.get = AsyncMock(return_value=notification)

        with pytest.raises(NotAuthorizedError):
            await notification_service.mark_as_read(notification.id, uuid4())

        assert notification.read is False

    async def test_missing_notification(
        self, notification_service: NotificationService
    ) -> None:
        with pytest.raises(NotificationNotFoundError):
            await notification_service.mark_as_read(uuid4(), uuid4())
