from sqlalchemy import Column, DateTime, ForeignKey, Enum, Index, UniqueConstraint, Uuid
import uuid
from app.db.session import Base
from app.db.models.mixins import utcnow
import enum


class ParticipationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DENIED = "DENIED"
    # Reserved for organizer-initiated invites; nothing creates it yet.
    INVITED = "INVITED"


class Participant(Base):
    """
    Membership of a user in an event.

    One row per (event, user); the unique constraint is what serializes
    concurrent joins. Rows are never deleted, only their status moves.
    """
    __tablename__ = "event_participants"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    status = Column(
        Enum(ParticipationStatus, name="participationstatus"),
        nullable=False,
        default=ParticipationStatus.PENDING,
    )
    invited_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participant"),
        Index("idx_participant_user", "user_id"),
        Index("idx_participant_event_status", "event_id", "status"),
    )
