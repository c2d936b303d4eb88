"""
Notification fan-out.

``NotificationService.create_notification`` is the all-or-nothing write;
``NotificationDispatcher`` wraps it for lifecycle side effects, where a
failure must never undo the mutation that triggered it.
"""
from typing import Iterable, List, Optional, Callable
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.db import session as db_session
from app.db.models.notification import Notification, NotificationType
from app.db.repositories import notifications as notifications_repo
from app.db.repositories import users as users_repo
from app.core.exceptions import NotFoundError, ErrorCode
from app.core.logging import logger
from app.events import publisher
from app.schemas import UserNotificationOut
from app.services.notification_content import NotificationContent


def _unique(user_ids: Iterable[UUID]) -> List[UUID]:
    seen = []
    for user_id in user_ids:
        if user_id not in seen:
            seen.append(user_id)
    return seen


class NotificationService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_notification(
        self, user_ids: Iterable[UUID], type: NotificationType, title: str, content: str
    ) -> Notification:
        """
        Create one notification delivered to every user in ``user_ids``.

        Raises:
            NotFoundError: if any recipient does not exist; nothing is written
        """
        recipients = _unique(user_ids)
        found = await users_repo.get_users_by_ids(self.session, recipients)
        if len(found) != len(recipients):
            raise NotFoundError("Some users not found", ErrorCode.USER_NOT_FOUND)
        return await notifications_repo.create_with_recipients(self.session, recipients, type, title, content)

    async def list_user_notifications(self, user_id: UUID, unread_only: bool = False) -> List[UserNotificationOut]:
        rows = await notifications_repo.list_for_user(self.session, user_id, unread_only)
        return [
            UserNotificationOut(
                id=n.id,
                type=n.type,
                title=n.title,
                content=n.content,
                created_at=n.created_at,
                is_read=un.is_read,
                read_at=un.read_at,
            )
            for n, un in rows
        ]

    async def _get_for_user(self, user_id: UUID, notification_id: UUID):
        row = await notifications_repo.get_for_user(self.session, user_id, notification_id)
        if row is None:
            raise NotFoundError("Notification not found", ErrorCode.NOTIFICATION_NOT_FOUND)
        return row

    async def mark_as_read(self, user_id: UUID, notification_id: UUID) -> UserNotificationOut:
        notification, user_notification = await self._get_for_user(user_id, notification_id)
        await notifications_repo.mark_read(self.session, user_notification)
        return UserNotificationOut(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            content=notification.content,
            created_at=notification.created_at,
            is_read=True,
            read_at=user_notification.read_at,
        )

    async def delete_notification(self, user_id: UUID, notification_id: UUID) -> None:
        """Hide a notification from one recipient's inbox."""
        _, user_notification = await self._get_for_user(user_id, notification_id)
        await notifications_repo.soft_delete_for_user(self.session, user_notification)


class NotificationDispatcher:
    """
    Best-effort delivery of lifecycle notifications.

    Runs in its own session so a failed fan-out cannot roll back or expire
    anything in the caller's session. Errors are logged and swallowed.
    """

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self._session_factory = session_factory

    def _new_session(self) -> AsyncSession:
        factory = self._session_factory or db_session.AsyncSessionLocal
        return factory()

    async def dispatch(self, content: NotificationContent, user_ids: Iterable[UUID]) -> Optional[Notification]:
        recipients = [user_id for user_id in _unique(user_ids) if user_id is not None]
        if not recipients:
            return None
        try:
            async with self._new_session() as session:
                notification = await NotificationService(session).create_notification(
                    recipients, content.type, content.title, content.content
                )
        except Exception as e:
            logger.warning(f"Notification {content.type.value} to {len(recipients)} user(s) failed: {e!r}")
            return None

        try:
            await publisher.publish_event(
                "notification.created",
                {
                    "type": "notification.created",
                    "notification_id": str(notification.id),
                    "user_ids": [str(user_id) for user_id in recipients],
                    "notification": {
                        "type": content.type.value,
                        "title": content.title,
                        "content": content.content,
                    },
                },
            )
        except Exception as e:
            logger.warning(f"Publishing notification {notification.id} failed: {e!r}")
        return notification
