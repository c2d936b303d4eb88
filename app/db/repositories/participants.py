from typing import Optional, List
from uuid import UUID
from datetime import datetime
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.participant import Participant, ParticipationStatus
from app.core.exceptions import ConflictError, ErrorCode


async def get_participant(db: AsyncSession, event_id: UUID, user_id: UUID) -> Optional[Participant]:
    q = (
        select(Participant)
        .where(Participant.event_id == event_id, Participant.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return res.scalars().first()


async def add_participant(
    db: AsyncSession,
    event_id: UUID,
    user_id: UUID,
    status: ParticipationStatus,
    invited_at: datetime,
    responded_at: Optional[datetime] = None,
) -> Participant:
    """
    Insert the (event, user) membership row.

    A concurrent join for the same pair loses on ``uq_event_participant``
    and surfaces as a conflict.
    """
    participant = Participant(
        event_id=event_id,
        user_id=user_id,
        status=status,
        invited_at=invited_at,
        responded_at=responded_at,
    )
    db.add(participant)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(
            "User already joined or sent a request to this event",
            ErrorCode.ALREADY_JOINED,
        )
    return participant


async def resolve_pending(
    db: AsyncSession,
    event_id: UUID,
    user_id: UUID,
    status: ParticipationStatus,
    responded_at: datetime,
) -> bool:
    """
    Move a PENDING participation to ``status``.

    The UPDATE only matches while the row is still PENDING, so two racing
    responses cannot both win. Returns False when nothing matched.
    """
    stmt = (
        update(Participant)
        .where(
            Participant.event_id == event_id,
            Participant.user_id == user_id,
            Participant.status == ParticipationStatus.PENDING,
        )
        .values(status=status, responded_at=responded_at)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    await db.commit()
    return res.rowcount == 1


async def count_accepted(db: AsyncSession, event_id: UUID) -> int:
    q = select(func.count(Participant.id)).where(
        Participant.event_id == event_id,
        Participant.status == ParticipationStatus.ACCEPTED,
    )
    return (await db.execute(q)).scalar() or 0


async def list_participants(
    db: AsyncSession, event_id: UUID, status: Optional[ParticipationStatus] = None
) -> List[Participant]:
    q = select(Participant).where(Participant.event_id == event_id)
    if status is not None:
        q = q.where(Participant.status == status)
    res = await db.execute(q.order_by(Participant.invited_at.asc()))
    return list(res.scalars().all())


async def list_member_ids(db: AsyncSession, event_id: UUID) -> List[UUID]:
    """User ids of every ACCEPTED participant."""
    q = select(Participant.user_id).where(
        Participant.event_id == event_id,
        Participant.status == ParticipationStatus.ACCEPTED,
    )
    res = await db.execute(q)
    return list(res.scalars().all())
