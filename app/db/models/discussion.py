from sqlalchemy import Column, Text, ForeignKey, Index, Boolean, JSON, Uuid
import uuid
from app.db.session import Base
from app.db.models.mixins import TimestampMixin


class DiscussionPost(TimestampMixin, Base):
    __tablename__ = "discussion_posts"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False)
    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    is_deleted = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_post_event_created", "event_id", "created_at"),
    )


class DiscussionReply(TimestampMixin, Base):
    __tablename__ = "discussion_replies"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(Uuid(as_uuid=True), ForeignKey("discussion_posts.id"), nullable=False)
    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_reply_post_created", "post_id", "created_at"),
    )
