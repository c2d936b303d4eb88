from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum, Index, Boolean, UniqueConstraint, Uuid
import uuid
from app.db.session import Base
from app.db.models.mixins import utcnow
import enum


class NotificationType(str, enum.Enum):
    INVITATION = "INVITATION"
    RSVP_ACCEPT = "RSVP_ACCEPT"
    RSVP_DENIED = "RSVP_DENIED"
    REQUEST_JOIN = "REQUEST_JOIN"
    REQUEST_ACCEPT = "REQUEST_ACCEPT"
    REQUEST_DENIED = "REQUEST_DENIED"
    REPLY = "REPLY"
    COMMENT = "COMMENT"
    NEW_POST = "NEW_POST"
    UPDATE_EVENT = "UPDATE_EVENT"
    DELETE_EVENT = "DELETE_EVENT"


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(Enum(NotificationType, name="notificationtype"), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_notification_type", "type"),
    )


class UserNotification(Base):
    """Fan-out row delivering one notification to one recipient."""
    __tablename__ = "user_notifications"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    notification_id = Column(Uuid(as_uuid=True), ForeignKey("notifications.id"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_user_notification"),
        Index("idx_user_notification_user", "user_id", "is_read"),
    )
