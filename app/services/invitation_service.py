"""
Invitations and RSVPs.

An organizer invites an ACCEPTED participant; the invitee answers once.
A missing RSVP means the invitation is still implicitly PENDING.
"""
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import NotFoundError, ConflictError, ValidationError, ErrorCode
from app.core.logging import logger
from app.db.models.invitation import Invitation, RSVP, RSVPResponse
from app.db.models.participant import ParticipationStatus
from app.db.repositories import events as events_repo
from app.db.repositories import invitations as invitations_repo
from app.db.repositories import participants as participants_repo
from app.db.repositories import users as users_repo
from app.services import guards
from app.services import notification_content as contents
from app.services.notification_service import NotificationDispatcher


class InvitationService:
    def __init__(self, session: AsyncSession, dispatcher: NotificationDispatcher = None):
        self.session = session
        self.dispatcher = dispatcher or NotificationDispatcher()

    async def create_invitation(
        self, invitor_id: UUID, event_id: UUID, invitee_id: UUID, content: Optional[str] = None
    ) -> Invitation:
        event = await events_repo.get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)
        guards.ensure_organizer(event, invitor_id, "Only the organizer can send invitations")

        invitee = await users_repo.get_user(self.session, invitee_id)
        if not invitee:
            raise NotFoundError("Invitee not found", ErrorCode.USER_NOT_FOUND)

        participant = await participants_repo.get_participant(self.session, event_id, invitee_id)
        if participant is None or participant.status != ParticipationStatus.ACCEPTED:
            raise ConflictError(
                "Invitee must be an accepted participant of the event",
                ErrorCode.INVALID_INVITEE,
            )

        if await invitations_repo.find_live_invitation(self.session, event_id, invitee_id):
            raise ConflictError("Invitation already exists", ErrorCode.INVITATION_EXISTS)

        invitor = await users_repo.get_user(self.session, invitor_id)
        event_title = event.title
        invitor_name = invitor.display_name if invitor else "The organizer"

        invitation = await invitations_repo.create_invitation(
            self.session, event_id, invitor_id, invitee_id, content
        )
        logger.info(f"Invitation {invitation.id} sent by {invitor_id} to {invitee_id} for event {event_id}")

        await self.dispatcher.dispatch(contents.invitation_sent(event_title, invitor_name), [invitee_id])
        return invitation

    async def _get_live_invitation(self, invitation_id: UUID) -> Invitation:
        invitation = await invitations_repo.get_live_invitation(self.session, invitation_id)
        if not invitation:
            raise NotFoundError("Invitation not found", ErrorCode.INVITATION_NOT_FOUND)
        return invitation

    async def get_invitation_by_id(self, user_id: UUID, invitation_id: UUID) -> Invitation:
        invitation = await self._get_live_invitation(invitation_id)
        guards.ensure_invitation_party(invitation, user_id, "Access denied to this invitation")
        return invitation

    async def delete_invitation(self, user_id: UUID, invitation_id: UUID) -> Invitation:
        invitation = await self._get_live_invitation(invitation_id)
        guards.ensure_invitor(invitation, user_id, "Only the invitor can delete this invitation")
        return await invitations_repo.soft_delete_invitation(self.session, invitation)

    async def list_received_invitations(
        self, user_id: UUID, limit: int, offset: int, descending: bool = True
    ) -> Tuple[int, List[Invitation]]:
        return await invitations_repo.list_received_invitations(self.session, user_id, limit, offset, descending)

    async def list_sent_invitations(
        self, user_id: UUID, limit: int, offset: int, descending: bool = True
    ) -> Tuple[int, List[Invitation]]:
        return await invitations_repo.list_sent_invitations(self.session, user_id, limit, offset, descending)

    async def create_rsvp(self, user_id: UUID, invitation_id: UUID, response: RSVPResponse) -> RSVP:
        """
        Record the invitee's answer.

        Only one live RSVP may exist per invitation; there is no update path.
        """
        if response == RSVPResponse.PENDING:
            raise ValidationError("RSVP response must be ACCEPTED or DENIED")

        invitation = await self._get_live_invitation(invitation_id)
        guards.ensure_invitee(invitation, user_id, "Only the invitee can respond to this invitation")

        if await invitations_repo.find_live_rsvp(self.session, invitation_id):
            raise ConflictError("RSVP already exists for this invitation", ErrorCode.RSVP_EXISTS)

        invitor_id = invitation.invitor_id
        event = await events_repo.get_event(self.session, invitation.event_id, include_deleted=True)
        invitee = await users_repo.get_user(self.session, user_id)
        event_title = event.title if event else "an event"
        invitee_name = invitee.display_name if invitee else "The invitee"

        rsvp = await invitations_repo.create_rsvp(self.session, invitation_id, response)
        logger.info(f"RSVP {rsvp.id} ({response.value}) recorded for invitation {invitation_id}")

        content = (
            contents.rsvp_accepted(event_title, invitee_name)
            if response == RSVPResponse.ACCEPTED
            else contents.rsvp_denied(event_title, invitee_name)
        )
        await self.dispatcher.dispatch(content, [invitor_id])
        return rsvp

    async def _get_live_rsvp_with_invitation(self, rsvp_id: UUID) -> Tuple[RSVP, Invitation]:
        rsvp = await invitations_repo.get_live_rsvp(self.session, rsvp_id)
        if not rsvp:
            raise NotFoundError("RSVP not found", ErrorCode.RSVP_NOT_FOUND)
        invitation = await invitations_repo.get_invitation(self.session, rsvp.invitation_id)
        if not invitation:
            raise NotFoundError("Associated invitation not found", ErrorCode.INVITATION_NOT_FOUND)
        return rsvp, invitation

    async def get_rsvp_by_id(self, user_id: UUID, rsvp_id: UUID) -> RSVP:
        rsvp, invitation = await self._get_live_rsvp_with_invitation(rsvp_id)
        guards.ensure_invitation_party(invitation, user_id, "Access denied to this RSVP")
        return rsvp

    async def delete_rsvp(self, user_id: UUID, rsvp_id: UUID) -> RSVP:
        rsvp, invitation = await self._get_live_rsvp_with_invitation(rsvp_id)
        guards.ensure_invitee(invitation, user_id, "Only the invitee can delete this RSVP")
        return await invitations_repo.soft_delete_rsvp(self.session, rsvp)

    async def list_rsvps(
        self, user_id: UUID, limit: int, offset: int, descending: bool = True
    ) -> Tuple[int, List[RSVP]]:
        return await invitations_repo.list_rsvps_for_invitee(self.session, user_id, limit, offset, descending)
