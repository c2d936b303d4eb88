from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import EventCreate, EventUpdate
from app.core.exceptions import NotFoundError, ValidationError, ErrorCode
from app.core.logging import logger
from app.db.models.event import Event
from app.db.repositories import events as events_repo
from app.db.repositories import participants as participants_repo
from app.services import guards
from app.services import notification_content as contents
from app.services.notification_service import NotificationDispatcher
from typing import List, Optional, Tuple
from uuid import UUID


class EventService:
    def __init__(self, session: AsyncSession, dispatcher: NotificationDispatcher = None):
        self.session = session
        self.dispatcher = dispatcher or NotificationDispatcher()

    async def _get_event(self, event_id: UUID) -> Event:
        event = await events_repo.get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)
        return event

    async def create_event(self, payload: EventCreate, user_id: UUID) -> Event:
        event = await events_repo.create_event(self.session, user_id, payload.model_dump())
        logger.info(f"Event {event.id} created by {user_id}")
        return event

    async def get_event(self, user_id: Optional[UUID], event_id: UUID) -> Event:
        event = await self._get_event(event_id)
        await guards.ensure_can_view_event(self.session, event, user_id)
        return event

    async def update_event(self, user_id: UUID, event_id: UUID, payload: EventUpdate) -> Event:
        event = await self._get_event(event_id)
        guards.ensure_organizer(event, user_id, "Only the organizer can update this event")

        changes = payload.model_dump(exclude_unset=True)
        starts_at = changes.get("starts_at", event.starts_at)
        ends_at = changes.get("ends_at", event.ends_at)
        if starts_at and ends_at and ends_at < starts_at:
            raise ValidationError("ends_at must not be before starts_at", ErrorCode.VALIDATION_ERROR)

        event = await events_repo.update_event(self.session, event, changes)
        member_ids = await participants_repo.list_member_ids(self.session, event.id)
        await self.dispatcher.dispatch(contents.event_updated(event.title), member_ids)
        return event

    async def delete_event(self, user_id: UUID, event_id: UUID) -> Event:
        """Soft-delete an event and tell its participants it was cancelled."""
        event = await self._get_event(event_id)
        guards.ensure_organizer(event, user_id, "Only the organizer can delete this event")

        event = await events_repo.update_event(self.session, event, {"is_deleted": True})
        logger.info(f"Event {event.id} cancelled by {user_id}")
        member_ids = await participants_repo.list_member_ids(self.session, event.id)
        await self.dispatcher.dispatch(contents.event_cancelled(event.title), member_ids)
        return event

    async def set_open(self, user_id: UUID, event_id: UUID, is_open: bool) -> Event:
        """Open or close an event for new join requests."""
        event = await self._get_event(event_id)
        guards.ensure_organizer(event, user_id, "Only the organizer can open or close this event")
        return await events_repo.update_event(self.session, event, {"is_open": is_open})

    async def list_public_events(
        self,
        skip: int,
        limit: int,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[int, List[dict]]:
        """
        List public events with pagination support.
        Returns tuple of (total_count, events).
        """
        page = await events_repo.list_public_events(
            self.session, limit=limit, offset=skip, category=category, search=search
        )
        return page["total"], page["items"]

    async def list_organized_events(
        self, user_id: UUID, skip: int, limit: int, descending: bool = True
    ) -> Tuple[int, List[Event]]:
        return await events_repo.list_organized_events(self.session, user_id, limit, skip, descending)

    async def list_joined_events(
        self, user_id: UUID, skip: int, limit: int, descending: bool = True
    ) -> Tuple[int, List[Event]]:
        return await events_repo.list_joined_events(self.session, user_id, limit, skip, descending)
