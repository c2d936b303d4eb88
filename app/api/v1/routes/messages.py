"""Event chat: history over HTTP, live delivery over the notification websocket."""
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ApiResponse, PaginatedResponse, MessageCreate, MessageOut, MessageSeenOut
from app.db.session import get_session
from app.db.models.user import User
from app.services.message_service import MessageService
from app.auth import get_current_user
from app.api.v1.pagination import PageParams

router = APIRouter(tags=["messages"])


def get_message_service(session: AsyncSession = Depends(get_session)) -> MessageService:
    return MessageService(session)


@router.get("/events/{event_id}/messages", response_model=ApiResponse[PaginatedResponse[MessageOut]])
async def list_messages_endpoint(
    event_id: UUID,
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    total, messages = await message_service.list_messages(user.id, event_id, params.per_page, params.offset)
    return ApiResponse(content=params.wrap(total, messages, MessageOut))


@router.post("/events/{event_id}/messages", response_model=ApiResponse[MessageOut], status_code=status.HTTP_201_CREATED)
async def send_message_endpoint(
    event_id: UUID,
    payload: MessageCreate,
    user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    message = await message_service.send_message(user.id, event_id, payload.content)
    return ApiResponse(message="Message sent", content=MessageOut.model_validate(message))


@router.post("/messages/{message_id}/seen", response_model=ApiResponse[MessageSeenOut])
async def mark_message_seen_endpoint(
    message_id: UUID,
    user: User = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    seen_by = await message_service.mark_seen(user.id, message_id)
    return ApiResponse(message="Message marked as seen", content=MessageSeenOut(message_id=message_id, seen_by=seen_by))
