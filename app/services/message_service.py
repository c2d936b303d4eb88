"""
Per-event chat.

Messages are stored first, then announced on the bus so every API instance
can push them to the room members it holds sockets for. A failed publish
is logged; the message stays stored and shows up on the next fetch.
"""
from typing import List, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import NotFoundError, ErrorCode
from app.core.logging import logger
from app.db.models.event import Event
from app.db.models.message import EventMessage
from app.db.repositories import events as events_repo
from app.db.repositories import messages as messages_repo
from app.db.repositories import participants as participants_repo
from app.events import publisher
from app.schemas import MessageOut
from app.services import guards


class MessageService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_event_for_member(self, event_id: UUID, user_id: UUID) -> Event:
        event = await events_repo.get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)
        await guards.ensure_member_or_organizer(self.session, event, user_id)
        return event

    async def _room_member_ids(self, event: Event) -> List[UUID]:
        return [event.organizer_id] + await participants_repo.list_member_ids(self.session, event.id)

    async def _announce(self, routing_key: str, payload: dict, user_ids: List[UUID]) -> None:
        payload = {"type": routing_key, "user_ids": [str(u) for u in user_ids], **payload}
        try:
            await publisher.publish_event(routing_key, payload)
        except Exception as e:
            logger.warning(f"Publishing {routing_key} failed: {e!r}")

    async def list_messages(
        self, user_id: UUID, event_id: UUID, limit: int, offset: int
    ) -> Tuple[int, List[EventMessage]]:
        await self._get_event_for_member(event_id, user_id)
        return await messages_repo.list_messages(self.session, event_id, limit, offset)

    async def send_message(self, user_id: UUID, event_id: UUID, content: str) -> EventMessage:
        event = await self._get_event_for_member(event_id, user_id)
        room = await self._room_member_ids(event)

        message = await messages_repo.create_message(self.session, event_id, user_id, content)
        logger.info(f"Message {message.id} sent to event {event_id} by {user_id}")

        await self._announce(
            "message.created",
            {"event_id": str(event_id), "message": MessageOut.model_validate(message).model_dump(mode="json")},
            room,
        )
        return message

    async def mark_seen(self, user_id: UUID, message_id: UUID) -> List[UUID]:
        """Record that ``user_id`` read the message; returns everyone who has, in reading order."""
        message = await messages_repo.get_message(self.session, message_id)
        if not message:
            raise NotFoundError("Message not found", ErrorCode.MESSAGE_NOT_FOUND)
        event_id = message.event_id
        event = await self._get_event_for_member(event_id, user_id)
        room = await self._room_member_ids(event)

        await messages_repo.mark_seen(self.session, message_id, user_id)
        seen_by = await messages_repo.list_seen_user_ids(self.session, message_id)

        await self._announce(
            "message.seen",
            {
                "event_id": str(event_id),
                "message_id": str(message_id),
                "seen_by": [str(u) for u in seen_by],
            },
            room,
        )
        return seen_by
