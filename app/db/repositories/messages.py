from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.message import EventMessage, MessageSeen
from app.db.models.mixins import utcnow


async def create_message(db: AsyncSession, event_id: UUID, sender_id: UUID, content: str) -> EventMessage:
    message = EventMessage(event_id=event_id, sender_id=sender_id, content=content, sent_at=utcnow())
    db.add(message)
    await db.commit()
    return message


async def get_message(db: AsyncSession, message_id: UUID) -> Optional[EventMessage]:
    q = select(EventMessage).where(EventMessage.id == message_id)
    return (await db.execute(q)).scalars().first()


async def list_messages(db: AsyncSession, event_id: UUID, limit: int, offset: int) -> Tuple[int, List[EventMessage]]:
    """Oldest first, the order a chat window renders."""
    total = (await db.execute(
        select(func.count(EventMessage.id)).where(EventMessage.event_id == event_id)
    )).scalar() or 0
    q = (
        select(EventMessage)
        .where(EventMessage.event_id == event_id)
        .order_by(EventMessage.sent_at.asc())
        .limit(limit)
        .offset(offset)
    )
    return total, list((await db.execute(q)).scalars().all())


async def mark_seen(db: AsyncSession, message_id: UUID, user_id: UUID) -> None:
    """Idempotent: seeing a message twice keeps the first ``seen_at``."""
    existing = await db.execute(
        select(MessageSeen.id).where(MessageSeen.message_id == message_id, MessageSeen.user_id == user_id)
    )
    if existing.scalar() is not None:
        return
    db.add(MessageSeen(message_id=message_id, user_id=user_id, seen_at=utcnow()))
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent request recorded it first
        await db.rollback()


async def list_seen_user_ids(db: AsyncSession, message_id: UUID) -> List[UUID]:
    q = select(MessageSeen.user_id).where(MessageSeen.message_id == message_id).order_by(MessageSeen.seen_at.asc())
    return list((await db.execute(q)).scalars().all())
