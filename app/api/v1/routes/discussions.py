"""Event discussion board: posts under an event and replies under a post."""
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ApiResponse, PaginatedResponse, PostCreate, PostOut, ReplyCreate, ReplyOut
from app.db.session import get_session
from app.db.models.user import User
from app.services.discussion_service import DiscussionService
from app.auth import get_current_user
from app.api.v1.pagination import PageParams

router = APIRouter(tags=["discussions"])


def get_discussion_service(session: AsyncSession = Depends(get_session)) -> DiscussionService:
    return DiscussionService(session)


@router.post("/events/{event_id}/posts", response_model=ApiResponse[PostOut], status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    event_id: UUID,
    payload: PostCreate,
    user: User = Depends(get_current_user),
    discussion_service: DiscussionService = Depends(get_discussion_service)
):
    post = await discussion_service.create_post(user.id, event_id, payload.content, payload.images)
    return ApiResponse(message="Post created", content=PostOut.model_validate(post))


@router.get("/events/{event_id}/posts", response_model=ApiResponse[PaginatedResponse[PostOut]])
async def list_posts_endpoint(
    event_id: UUID,
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    discussion_service: DiscussionService = Depends(get_discussion_service)
):
    total, posts = await discussion_service.list_posts(user.id, event_id, params.per_page, params.offset)
    return ApiResponse(content=params.wrap(total, posts, PostOut))


@router.delete("/posts/{post_id}", response_model=ApiResponse[None])
async def delete_post_endpoint(
    post_id: UUID,
    user: User = Depends(get_current_user),
    discussion_service: DiscussionService = Depends(get_discussion_service)
):
    await discussion_service.delete_post(user.id, post_id)
    return ApiResponse(message="Post deleted")


@router.post("/posts/{post_id}/replies", response_model=ApiResponse[ReplyOut], status_code=status.HTTP_201_CREATED)
async def create_reply_endpoint(
    post_id: UUID,
    payload: ReplyCreate,
    user: User = Depends(get_current_user),
    discussion_service: DiscussionService = Depends(get_discussion_service)
):
    reply = await discussion_service.create_reply(user.id, post_id, payload.content)
    return ApiResponse(message="Reply created", content=ReplyOut.model_validate(reply))


@router.get("/posts/{post_id}/replies", response_model=ApiResponse[PaginatedResponse[ReplyOut]])
async def list_replies_endpoint(
    post_id: UUID,
    params: PageParams = Depends(),
    user: User = Depends(get_current_user),
    discussion_service: DiscussionService = Depends(get_discussion_service)
):
    total, replies = await discussion_service.list_replies(user.id, post_id, params.per_page, params.offset)
    return ApiResponse(content=params.wrap(total, replies, ReplyOut))


@router.delete("/replies/{reply_id}", response_model=ApiResponse[None])
async def delete_reply_endpoint(
    reply_id: UUID,
    user: User = Depends(get_current_user),
    discussion_service: DiscussionService = Depends(get_discussion_service)
):
    await discussion_service.delete_reply(user.id, reply_id)
    return ApiResponse(message="Reply deleted")
