"""
Participation state machine.

    NONE -> PENDING -> ACCEPTED | DENIED     (private events)
    NONE -> ACCEPTED                         (public events, auto-accepted)

Transitions out of PENDING happen once; decisions are never revised.
"""
from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import NotFoundError, ForbiddenError, ConflictError, ValidationError, ErrorCode
from app.core.logging import logger
from app.db.models.event import Event
from app.db.models.mixins import utcnow
from app.db.models.participant import Participant, ParticipationStatus
from app.db.repositories import events as events_repo
from app.db.repositories import participants as participants_repo
from app.db.repositories import users as users_repo
from app.services import guards
from app.services import notification_content as contents
from app.services.notification_service import NotificationDispatcher


class ParticipationService:
    def __init__(self, session: AsyncSession, dispatcher: NotificationDispatcher = None):
        self.session = session
        self.dispatcher = dispatcher or NotificationDispatcher()

    async def _get_event(self, event_id: UUID) -> Event:
        event = await events_repo.get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)
        return event

    async def _ensure_capacity(self, event: Event) -> None:
        if not event.has_capacity_limit:
            return
        accepted = await participants_repo.count_accepted(self.session, event.id)
        if accepted >= event.capacity:
            raise ConflictError(
                f"Event has reached the maximum limit of {event.capacity} participants",
                ErrorCode.EVENT_FULL,
            )

    async def join_event(self, event_id: UUID, user_id: UUID) -> Participant:
        """
        Request to join an event.

        Public events accept immediately; private ones record a PENDING
        request for the organizer. One record per user and event, whatever
        its status.
        """
        event = await self._get_event(event_id)
        if not event.is_open:
            raise ForbiddenError("Event is closed", ErrorCode.EVENT_CLOSED)

        user = await users_repo.get_user(self.session, user_id)
        if not user:
            raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)

        if guards.is_organizer(event, user_id):
            raise ConflictError("Organizer cannot join their own event", ErrorCode.ORGANIZER_CANNOT_JOIN)

        if await participants_repo.get_participant(self.session, event_id, user_id):
            raise ConflictError(
                "User already joined or sent a request to this event",
                ErrorCode.ALREADY_JOINED,
            )

        if event.is_public:
            await self._ensure_capacity(event)

        # captured before the insert commits
        event_title, organizer_id, is_public = event.title, event.organizer_id, event.is_public
        requester_name = user.display_name

        now = utcnow()
        participant = await participants_repo.add_participant(
            self.session,
            event_id=event_id,
            user_id=user_id,
            status=ParticipationStatus.ACCEPTED if is_public else ParticipationStatus.PENDING,
            invited_at=now,
            responded_at=now if is_public else None,
        )
        logger.info(f"User {user_id} joined event {event_id} as {participant.status.value}")

        if is_public:
            await self.dispatcher.dispatch(contents.join_accepted(event_title), [user_id])
            await self.dispatcher.dispatch(contents.participant_joined(event_title, requester_name), [organizer_id])
        else:
            await self.dispatcher.dispatch(contents.join_requested(event_title, requester_name), [organizer_id])
        return participant

    async def respond_join(
        self, event_id: UUID, organizer_id: UUID, target_user_id: UUID, decision: ParticipationStatus
    ) -> Participant:
        """Organizer accepts or denies a PENDING join request."""
        if decision not in (ParticipationStatus.ACCEPTED, ParticipationStatus.DENIED):
            raise ValidationError("Decision must be ACCEPTED or DENIED")

        event = await self._get_event(event_id)
        guards.ensure_organizer(event, organizer_id, "Only the organizer can respond to join requests")

        participant = await participants_repo.get_participant(self.session, event_id, target_user_id)
        if participant is None:
            raise NotFoundError("Participant not found", ErrorCode.PARTICIPANT_NOT_FOUND)
        if participant.status != ParticipationStatus.PENDING:
            raise ConflictError("Participant already replied", ErrorCode.ALREADY_RESPONDED)

        if decision == ParticipationStatus.ACCEPTED:
            await self._ensure_capacity(event)

        event_title = event.title
        updated = await participants_repo.resolve_pending(
            self.session, event_id, target_user_id, decision, utcnow()
        )
        if not updated:
            # another response landed between the read and the update
            raise ConflictError("Participant already replied", ErrorCode.ALREADY_RESPONDED)

        participant = await participants_repo.get_participant(self.session, event_id, target_user_id)
        logger.info(f"Organizer {organizer_id} set {target_user_id} to {decision.value} in event {event_id}")

        content = (
            contents.join_accepted(event_title)
            if decision == ParticipationStatus.ACCEPTED
            else contents.join_denied(event_title)
        )
        await self.dispatcher.dispatch(content, [target_user_id])
        return participant

    async def list_participants(self, user_id: UUID, event_id: UUID) -> List[Participant]:
        event = await self._get_event(event_id)
        await guards.ensure_can_view_event(self.session, event, user_id)
        if guards.is_organizer(event, user_id):
            return await participants_repo.list_participants(self.session, event_id)
        return await participants_repo.list_participants(self.session, event_id, ParticipationStatus.ACCEPTED)
