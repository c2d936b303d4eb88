from sqlalchemy import Column, Text, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
import uuid
from app.db.session import Base
from app.db.models.mixins import utcnow


class EventMessage(Base):
    """A chat line in an event's room."""
    __tablename__ = "event_messages"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False)
    sender_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_message_event_sent", "event_id", "sent_at"),
    )


class MessageSeen(Base):
    __tablename__ = "message_seen"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    message_id = Column(Uuid(as_uuid=True), ForeignKey("event_messages.id"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    seen_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_seen"),
    )
