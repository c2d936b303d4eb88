from typing import Optional, List, Tuple
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.discussion import DiscussionPost, DiscussionReply


async def create_post(db: AsyncSession, event_id: UUID, author_id: UUID, content: str, images: List[str]) -> DiscussionPost:
    post = DiscussionPost(event_id=event_id, author_id=author_id, content=content, images=images)
    db.add(post)
    await db.commit()
    return post


async def get_post(db: AsyncSession, post_id: UUID) -> Optional[DiscussionPost]:
    q = select(DiscussionPost).where(DiscussionPost.id == post_id, DiscussionPost.is_deleted.is_(False))
    return (await db.execute(q)).scalars().first()


async def list_posts(db: AsyncSession, event_id: UUID, limit: int, offset: int) -> Tuple[int, List[DiscussionPost]]:
    where = (DiscussionPost.event_id == event_id, DiscussionPost.is_deleted.is_(False))
    total = (await db.execute(select(func.count(DiscussionPost.id)).where(*where))).scalar() or 0
    q = select(DiscussionPost).where(*where).order_by(DiscussionPost.created_at.desc()).limit(limit).offset(offset)
    return total, list((await db.execute(q)).scalars().all())


async def create_reply(db: AsyncSession, post_id: UUID, author_id: UUID, content: str) -> DiscussionReply:
    reply = DiscussionReply(post_id=post_id, author_id=author_id, content=content)
    db.add(reply)
    await db.commit()
    return reply


async def get_reply(db: AsyncSession, reply_id: UUID) -> Optional[DiscussionReply]:
    q = select(DiscussionReply).where(DiscussionReply.id == reply_id, DiscussionReply.is_deleted.is_(False))
    return (await db.execute(q)).scalars().first()


async def list_replies(db: AsyncSession, post_id: UUID, limit: int, offset: int) -> Tuple[int, List[DiscussionReply]]:
    where = (DiscussionReply.post_id == post_id, DiscussionReply.is_deleted.is_(False))
    total = (await db.execute(select(func.count(DiscussionReply.id)).where(*where))).scalar() or 0
    q = select(DiscussionReply).where(*where).order_by(DiscussionReply.created_at.asc()).limit(limit).offset(offset)
    return total, list((await db.execute(q)).scalars().all())


async def soft_delete(db: AsyncSession, obj) -> None:
    obj.is_deleted = True
    await db.commit()


async def list_reply_author_ids(db: AsyncSession, post_id: UUID) -> List[UUID]:
    q = (
        select(DiscussionReply.author_id)
        .where(DiscussionReply.post_id == post_id, DiscussionReply.is_deleted.is_(False))
        .distinct()
    )
    return list((await db.execute(q)).scalars().all())
