from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.notification import Notification, UserNotification, NotificationType
from app.db.models.mixins import utcnow


async def create_with_recipients(
    db: AsyncSession, user_ids: List[UUID], type: NotificationType, title: str, content: str
) -> Notification:
    """
    Persist a notification and its fan-out rows in one transaction.

    Any failure rolls back both, so readers never see a notification without
    recipients.
    """
    notification = Notification(type=type, title=title, content=content)
    try:
        db.add(notification)
        await db.flush()
        db.add_all(
            UserNotification(notification_id=notification.id, user_id=user_id)
            for user_id in user_ids
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return notification


async def list_for_user(
    db: AsyncSession, user_id: UUID, unread_only: bool = False
) -> List[Tuple[Notification, UserNotification]]:
    q = (
        select(Notification, UserNotification)
        .join(UserNotification, UserNotification.notification_id == Notification.id)
        .where(
            UserNotification.user_id == user_id,
            UserNotification.is_deleted.is_(False),
            Notification.is_deleted.is_(False),
        )
        .order_by(Notification.created_at.desc())
    )
    if unread_only:
        q = q.where(UserNotification.is_read.is_(False))
    res = await db.execute(q)
    return [(n, un) for n, un in res.all()]


async def get_for_user(
    db: AsyncSession, user_id: UUID, notification_id: UUID
) -> Optional[Tuple[Notification, UserNotification]]:
    q = (
        select(Notification, UserNotification)
        .join(UserNotification, UserNotification.notification_id == Notification.id)
        .where(
            UserNotification.user_id == user_id,
            UserNotification.notification_id == notification_id,
            UserNotification.is_deleted.is_(False),
            Notification.is_deleted.is_(False),
        )
    )
    row = (await db.execute(q)).first()
    return (row[0], row[1]) if row else None


async def mark_read(db: AsyncSession, user_notification: UserNotification) -> UserNotification:
    if not user_notification.is_read:
        user_notification.is_read = True
        user_notification.read_at = utcnow()
        await db.commit()
    return user_notification


async def soft_delete_for_user(db: AsyncSession, user_notification: UserNotification) -> UserNotification:
    user_notification.is_deleted = True
    await db.commit()
    return user_notification
