from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import (
    ApiResponse,
    EventCategory,
    EventCreate,
    EventOpenUpdate,
    EventOut,
    EventUpdate,
    PaginatedResponse,
    ParticipantOut,
    RespondJoinRequest,
)
from app.db.session import get_session
from app.db.models.participant import ParticipationStatus
from app.db.models.user import User
from app.services.event_service import EventService
from app.services.participation_service import ParticipationService
from app.auth import get_current_user, get_optional_user
from app.api.v1.pagination import PageParams

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)


def get_participation_service(session: AsyncSession = Depends(get_session)) -> ParticipationService:
    return ParticipationService(session)


@router.post("", response_model=ApiResponse[EventOut], status_code=201)
async def create_event_endpoint(
    payload: EventCreate,
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.create_event(payload, user.id)
    return ApiResponse(message="Event created", content=EventOut.model_validate(ev))


@router.get("", response_model=ApiResponse[PaginatedResponse[EventOut]])
async def get_events(
    params: PageParams = Depends(),
    search: Optional[str] = Query(None, description="Search in event title and description"),
    category: Optional[EventCategory] = Query(None, description="Filter by event category"),
    event_service: EventService = Depends(get_event_service)
):
    """
    List public events with pagination, filtering, and search support.
    - page: Page number, 1-indexed
    - per_page: Number of items per page
    - search: Case-insensitive match on title and description
    - category: Filter by event category
    """
    total_count, events = await event_service.list_public_events(
        skip=params.offset,
        limit=params.per_page,
        category=category.value if category else None,
        search=search,
    )
    return ApiResponse(content=params.wrap(total_count, events, EventOut))


@router.get("/organized", response_model=ApiResponse[PaginatedResponse[EventOut]])
async def get_organized_events(
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    total, events = await event_service.list_organized_events(
        user.id, params.offset, params.per_page, params.descending
    )
    return ApiResponse(content=params.wrap(total, events, EventOut))


@router.get("/joined", response_model=ApiResponse[PaginatedResponse[EventOut]])
async def get_joined_events(
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    total, events = await event_service.list_joined_events(
        user.id, params.offset, params.per_page, params.descending
    )
    return ApiResponse(content=params.wrap(total, events, EventOut))


@router.get("/{event_id}", response_model=ApiResponse[EventOut])
async def get_event_detail(
    event_id: UUID,
    user: Optional[User] = Depends(get_optional_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.get_event(user.id if user else None, event_id)
    return ApiResponse(content=EventOut.model_validate(ev))


@router.patch("/{event_id}", response_model=ApiResponse[EventOut])
async def update_event_endpoint(
    event_id: UUID,
    payload: EventUpdate,
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.update_event(user.id, event_id, payload)
    return ApiResponse(message="Event updated", content=EventOut.model_validate(ev))


@router.delete("/{event_id}", response_model=ApiResponse[EventOut])
async def delete_event_endpoint(
    event_id: UUID,
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.delete_event(user.id, event_id)
    return ApiResponse(message="Event deleted", content=EventOut.model_validate(ev))


@router.patch("/{event_id}/open", response_model=ApiResponse[EventOut])
async def set_event_open(
    event_id: UUID,
    payload: EventOpenUpdate,
    user: User = Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.set_open(user.id, event_id, payload.is_open)
    return ApiResponse(
        message="Event opened" if payload.is_open else "Event closed",
        content=EventOut.model_validate(ev),
    )


@router.get("/{event_id}/participants", response_model=ApiResponse[List[ParticipantOut]])
async def get_participants(
    event_id: UUID,
    user: User = Depends(get_current_user),
    participation_service: ParticipationService = Depends(get_participation_service)
):
    """Organizers see every request; everyone else sees accepted participants only."""
    participants = await participation_service.list_participants(user.id, event_id)
    return ApiResponse(content=[ParticipantOut.model_validate(p) for p in participants])


@router.post("/{event_id}/join", response_model=ApiResponse[ParticipantOut])
async def join_event_endpoint(
    event_id: UUID,
    user: User = Depends(get_current_user),
    participation_service: ParticipationService = Depends(get_participation_service)
):
    participant = await participation_service.join_event(event_id, user.id)
    message = (
        "Joined event"
        if participant.status == ParticipationStatus.ACCEPTED
        else "Join request sent to the organizer"
    )
    return ApiResponse(message=message, content=ParticipantOut.model_validate(participant))


@router.post("/{event_id}/respond", response_model=ApiResponse[ParticipantOut])
async def respond_join_endpoint(
    event_id: UUID,
    payload: RespondJoinRequest,
    user: User = Depends(get_current_user),
    participation_service: ParticipationService = Depends(get_participation_service)
):
    """Organizer accepts or denies a pending join request."""
    participant = await participation_service.respond_join(
        event_id, user.id, payload.user_id, ParticipationStatus(payload.status.value)
    )
    return ApiResponse(
        message=f"Join request {payload.status.value.lower()}",
        content=ParticipantOut.model_validate(participant),
    )
