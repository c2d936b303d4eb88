from typing import List, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import NotFoundError, ForbiddenError, ErrorCode
from app.db.models.discussion import DiscussionPost, DiscussionReply
from app.db.models.event import Event
from app.db.repositories import discussions as discussions_repo
from app.db.repositories import events as events_repo
from app.db.repositories import participants as participants_repo
from app.db.repositories import users as users_repo
from app.services import guards
from app.services import notification_content as contents
from app.services.notification_service import NotificationDispatcher


class DiscussionService:
    """Event-scoped posts and replies, readable by the organizer and accepted participants."""

    def __init__(self, session: AsyncSession, dispatcher: NotificationDispatcher = None):
        self.session = session
        self.dispatcher = dispatcher or NotificationDispatcher()

    async def _get_event_for_member(self, event_id: UUID, user_id: UUID) -> Event:
        event = await events_repo.get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)
        await guards.ensure_member_or_organizer(self.session, event, user_id)
        return event

    async def _get_post(self, post_id: UUID) -> DiscussionPost:
        post = await discussions_repo.get_post(self.session, post_id)
        if not post:
            raise NotFoundError("Post not found", ErrorCode.POST_NOT_FOUND)
        return post

    async def _author_name(self, user_id: UUID) -> str:
        user = await users_repo.get_user(self.session, user_id)
        return user.display_name if user else "Someone"

    async def create_post(self, user_id: UUID, event_id: UUID, content: str, images: List[str]) -> DiscussionPost:
        event = await self._get_event_for_member(event_id, user_id)
        event_title, organizer_id = event.title, event.organizer_id
        author_name = await self._author_name(user_id)

        post = await discussions_repo.create_post(self.session, event_id, user_id, content, images)

        recipients = [organizer_id] + await participants_repo.list_member_ids(self.session, event_id)
        recipients = [r for r in recipients if r != user_id]
        await self.dispatcher.dispatch(contents.new_post(event_title, author_name), recipients)
        return post

    async def list_posts(self, user_id: UUID, event_id: UUID, limit: int, offset: int) -> Tuple[int, List[DiscussionPost]]:
        await self._get_event_for_member(event_id, user_id)
        return await discussions_repo.list_posts(self.session, event_id, limit, offset)

    async def delete_post(self, user_id: UUID, post_id: UUID) -> None:
        post = await self._get_post(post_id)
        event = await events_repo.get_event(self.session, post.event_id, include_deleted=True)
        if post.author_id != user_id and not (event and guards.is_organizer(event, user_id)):
            raise ForbiddenError("Only the author or the organizer can delete this post", ErrorCode.FORBIDDEN)
        await discussions_repo.soft_delete(self.session, post)

    async def create_reply(self, user_id: UUID, post_id: UUID, content: str) -> DiscussionReply:
        post = await self._get_post(post_id)
        event = await self._get_event_for_member(post.event_id, user_id)
        event_title, post_author_id = event.title, post.author_id
        author_name = await self._author_name(user_id)

        earlier_repliers = await discussions_repo.list_reply_author_ids(self.session, post_id)
        reply = await discussions_repo.create_reply(self.session, post_id, user_id, content)

        if post_author_id != user_id:
            await self.dispatcher.dispatch(contents.new_reply(event_title, author_name), [post_author_id])
        # everyone else already in the thread hears about the new comment
        others = [r for r in earlier_repliers if r not in (user_id, post_author_id)]
        await self.dispatcher.dispatch(contents.new_comment(event_title, author_name), others)
        return reply

    async def list_replies(self, user_id: UUID, post_id: UUID, limit: int, offset: int) -> Tuple[int, List[DiscussionReply]]:
        post = await self._get_post(post_id)
        await self._get_event_for_member(post.event_id, user_id)
        return await discussions_repo.list_replies(self.session, post_id, limit, offset)

    async def delete_reply(self, user_id: UUID, reply_id: UUID) -> None:
        reply = await discussions_repo.get_reply(self.session, reply_id)
        if not reply:
            raise NotFoundError("Reply not found", ErrorCode.REPLY_NOT_FOUND)
        if reply.author_id != user_id:
            raise ForbiddenError("Only the author can delete this reply", ErrorCode.FORBIDDEN)
        await discussions_repo.soft_delete(self.session, reply)
