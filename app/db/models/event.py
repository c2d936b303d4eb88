from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index, Boolean, JSON, Uuid
import uuid
from app.db.session import Base
from app.db.models.mixins import TimestampMixin
import enum


class EventCategory(str, enum.Enum):
    SOCIAL = "SOCIAL"
    EDUCATION = "EDUCATION"
    BUSINESS = "BUSINESS"
    ENTERTAINMENT = "ENTERTAINMENT"
    OTHER = "OTHER"


class Event(TimestampMixin, Base):
    """
    An organized event.

    The organizer owns every mutation and is never stored as a participant;
    participants live in ``event_participants`` (see ``Participant``).
    """
    __tablename__ = "events"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(Enum(EventCategory, name="eventcategory"), nullable=False, default=EventCategory.OTHER)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    location = Column(String(200), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    capacity = Column(Integer, nullable=True, default=0)
    organizer_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    is_open = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_event_starts_at", "starts_at"),
        Index("idx_event_organizer", "organizer_id"),
        Index("idx_event_created_at", "created_at"),
        Index("idx_event_category", "category"),
    )

    @property
    def has_capacity_limit(self) -> bool:
        return bool(self.capacity and self.capacity > 0)
