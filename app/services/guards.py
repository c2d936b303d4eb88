"""
Capability checks applied before every mutation.

Each check returns quietly or raises ``ForbiddenError``. None of them hide
existence: callers look the object up (404) before checking access (403).
"""
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import ForbiddenError, ErrorCode
from app.db.models.event import Event
from app.db.models.invitation import Invitation
from app.db.models.participant import ParticipationStatus
from app.db.repositories import participants as participants_repo


def is_organizer(event: Event, user_id: UUID) -> bool:
    return event.organizer_id == user_id


def ensure_organizer(event: Event, user_id: UUID, message: str = "Only the organizer can perform this action") -> None:
    if not is_organizer(event, user_id):
        raise ForbiddenError(message, ErrorCode.FORBIDDEN)


def ensure_self(caller_id: UUID, user_id: UUID) -> None:
    if caller_id != user_id:
        raise ForbiddenError("You can only modify your own profile", ErrorCode.FORBIDDEN)


def ensure_invitor(invitation: Invitation, user_id: UUID, message: str) -> None:
    if invitation.invitor_id != user_id:
        raise ForbiddenError(message, ErrorCode.FORBIDDEN)


def ensure_invitee(invitation: Invitation, user_id: UUID, message: str) -> None:
    if invitation.invitee_id != user_id:
        raise ForbiddenError(message, ErrorCode.FORBIDDEN)


def ensure_invitation_party(invitation: Invitation, user_id: UUID, message: str) -> None:
    if user_id not in (invitation.invitor_id, invitation.invitee_id):
        raise ForbiddenError(message, ErrorCode.ACCESS_DENIED)


async def ensure_can_view_event(session: AsyncSession, event: Event, user_id: Optional[UUID]) -> None:
    """Private events are visible to the organizer and anyone holding a participation record."""
    if event.is_public or (user_id is not None and is_organizer(event, user_id)):
        return
    if user_id is not None and await participants_repo.get_participant(session, event.id, user_id):
        return
    raise ForbiddenError("Access denied to private event", ErrorCode.ACCESS_DENIED)


async def ensure_member_or_organizer(session: AsyncSession, event: Event, user_id: UUID) -> None:
    """Organizer or ACCEPTED participant; used for event-scoped discussions."""
    if is_organizer(event, user_id):
        return
    participant = await participants_repo.get_participant(session, event.id, user_id)
    if participant is None or participant.status != ParticipationStatus.ACCEPTED:
        raise ForbiddenError("You are not authorized to access this event", ErrorCode.ACCESS_DENIED)
