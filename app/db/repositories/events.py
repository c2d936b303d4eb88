from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import ValidationError, ErrorCode
from app.db.models.event import Event
from app.db.models.participant import Participant, ParticipationStatus
from app.cache.cache_decorators import cached
from app.cache.redis_client import cache
from app.schemas import EventOut

PUBLIC_EVENTS_CACHE_PREFIX = "events:public"


async def invalidate_public_events_cache() -> None:
    await cache.delete_pattern(f"{PUBLIC_EVENTS_CACHE_PREFIX}:*")


async def create_event(db: AsyncSession, organizer_id: UUID, fields: dict) -> Event:
    ev = Event(**fields, organizer_id=organizer_id)
    db.add(ev)
    await db.commit()
    if ev.is_public:
        await invalidate_public_events_cache()
    return ev


async def get_event(db: AsyncSession, event_id: UUID, include_deleted: bool = False) -> Optional[Event]:
    q = select(Event).where(Event.id == event_id)
    if not include_deleted:
        q = q.where(Event.is_deleted.is_(False))
    res = await db.execute(q)
    return res.scalars().first()


async def update_event(db: AsyncSession, ev: Event, changes: dict) -> Event:
    for field, value in changes.items():
        setattr(ev, field, value)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Event update violates a required field", ErrorCode.VALIDATION_ERROR)
    await invalidate_public_events_cache()
    return ev


def _apply_public_filters(q, category: Optional[str], search: Optional[str]):
    q = q.where(Event.is_public.is_(True), Event.is_deleted.is_(False))
    if category:
        q = q.where(Event.category == category)
    if search:
        pattern = f"%{search}%"
        q = q.where(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))
    return q


@cached(PUBLIC_EVENTS_CACHE_PREFIX)
async def list_public_events(
    db: AsyncSession,
    limit: int = 20,
    offset: int = 0,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> dict:
    """
    Page of public, live events as JSON-ready dicts (cached).

    Returns ``{"total": int, "items": [...]}`` so the count and the page are
    cached together.
    """
    count_q = _apply_public_filters(select(func.count(Event.id)), category, search)
    total = (await db.execute(count_q)).scalar() or 0

    q = _apply_public_filters(select(Event), category, search)
    q = q.order_by(Event.created_at.desc()).limit(limit).offset(offset)
    events = (await db.execute(q)).scalars().all()
    return {
        "total": total,
        "items": [EventOut.model_validate(ev).model_dump(mode="json") for ev in events],
    }


async def _paginate(db: AsyncSession, q, limit: int, offset: int, descending: bool) -> Tuple[int, List[Event]]:
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar() or 0
    order = Event.created_at.desc() if descending else Event.created_at.asc()
    res = await db.execute(q.order_by(order).limit(limit).offset(offset))
    return total, list(res.scalars().all())


async def list_organized_events(
    db: AsyncSession, organizer_id: UUID, limit: int, offset: int, descending: bool = True
) -> Tuple[int, List[Event]]:
    q = select(Event).where(Event.organizer_id == organizer_id, Event.is_deleted.is_(False))
    return await _paginate(db, q, limit, offset, descending)


async def list_joined_events(
    db: AsyncSession, user_id: UUID, limit: int, offset: int, descending: bool = True
) -> Tuple[int, List[Event]]:
    """Events where the user holds an ACCEPTED participation."""
    q = (
        select(Event)
        .join(Participant, Participant.event_id == Event.id)
        .where(
            Participant.user_id == user_id,
            Participant.status == ParticipationStatus.ACCEPTED,
            Event.is_deleted.is_(False),
        )
    )
    return await _paginate(db, q, limit, offset, descending)
