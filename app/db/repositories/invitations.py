from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.invitation import Invitation, RSVP, RSVPResponse
from app.db.models.mixins import utcnow
from app.core.exceptions import ConflictError, ErrorCode


async def create_invitation(
    db: AsyncSession, event_id: UUID, invitor_id: UUID, invitee_id: UUID, content: Optional[str]
) -> Invitation:
    invitation = Invitation(
        event_id=event_id,
        invitor_id=invitor_id,
        invitee_id=invitee_id,
        content=content,
        sent_at=utcnow(),
    )
    db.add(invitation)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Invitation already exists", ErrorCode.INVITATION_EXISTS)
    return invitation


async def get_live_invitation(db: AsyncSession, invitation_id: UUID) -> Optional[Invitation]:
    q = select(Invitation).where(Invitation.id == invitation_id, Invitation.is_deleted.is_(False))
    return (await db.execute(q)).scalars().first()


async def get_invitation(db: AsyncSession, invitation_id: UUID) -> Optional[Invitation]:
    """Invitation by id, soft-deleted ones included."""
    q = select(Invitation).where(Invitation.id == invitation_id)
    return (await db.execute(q)).scalars().first()


async def find_live_invitation(db: AsyncSession, event_id: UUID, invitee_id: UUID) -> Optional[Invitation]:
    q = select(Invitation).where(
        Invitation.event_id == event_id,
        Invitation.invitee_id == invitee_id,
        Invitation.is_deleted.is_(False),
    )
    return (await db.execute(q)).scalars().first()


async def soft_delete_invitation(db: AsyncSession, invitation: Invitation) -> Invitation:
    invitation.is_deleted = True
    await db.commit()
    return invitation


async def _page(db: AsyncSession, q, order_col, limit: int, offset: int, descending: bool):
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar() or 0
    order = order_col.desc() if descending else order_col.asc()
    res = await db.execute(q.order_by(order).limit(limit).offset(offset))
    return total, list(res.scalars().all())


async def list_received_invitations(
    db: AsyncSession, invitee_id: UUID, limit: int, offset: int, descending: bool = True
) -> Tuple[int, List[Invitation]]:
    q = select(Invitation).where(Invitation.invitee_id == invitee_id, Invitation.is_deleted.is_(False))
    return await _page(db, q, Invitation.created_at, limit, offset, descending)


async def list_sent_invitations(
    db: AsyncSession, invitor_id: UUID, limit: int, offset: int, descending: bool = True
) -> Tuple[int, List[Invitation]]:
    q = select(Invitation).where(Invitation.invitor_id == invitor_id, Invitation.is_deleted.is_(False))
    return await _page(db, q, Invitation.created_at, limit, offset, descending)


async def create_rsvp(db: AsyncSession, invitation_id: UUID, response: RSVPResponse) -> RSVP:
    rsvp = RSVP(invitation_id=invitation_id, response=response, responded_at=utcnow())
    db.add(rsvp)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("RSVP already exists for this invitation", ErrorCode.RSVP_EXISTS)
    return rsvp


async def get_live_rsvp(db: AsyncSession, rsvp_id: UUID) -> Optional[RSVP]:
    q = select(RSVP).where(RSVP.id == rsvp_id, RSVP.is_deleted.is_(False))
    return (await db.execute(q)).scalars().first()


async def find_live_rsvp(db: AsyncSession, invitation_id: UUID) -> Optional[RSVP]:
    q = select(RSVP).where(RSVP.invitation_id == invitation_id, RSVP.is_deleted.is_(False))
    return (await db.execute(q)).scalars().first()


async def soft_delete_rsvp(db: AsyncSession, rsvp: RSVP) -> RSVP:
    rsvp.is_deleted = True
    await db.commit()
    return rsvp


async def list_rsvps_for_invitee(
    db: AsyncSession, invitee_id: UUID, limit: int, offset: int, descending: bool = True
) -> Tuple[int, List[RSVP]]:
    q = (
        select(RSVP)
        .join(Invitation, Invitation.id == RSVP.invitation_id)
        .where(
            Invitation.invitee_id == invitee_id,
            Invitation.is_deleted.is_(False),
            RSVP.is_deleted.is_(False),
        )
    )
    return await _page(db, q, RSVP.created_at, limit, offset, descending)
