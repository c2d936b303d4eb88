from sqlalchemy import Column, DateTime, ForeignKey, Enum, Index, Boolean, Text, Uuid, text
import uuid
from app.db.session import Base
from app.db.models.mixins import utcnow
import enum


class RSVPResponse(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DENIED = "DENIED"


class Invitation(Base):
    """Organizer-issued invitation addressed to an accepted participant."""
    __tablename__ = "invitations"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id"), nullable=False)
    invitor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    invitee_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        # One live invitation per (event, invitee); soft-deleted rows are exempt.
        Index(
            "uq_live_invitation_event_invitee",
            "event_id",
            "invitee_id",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
        Index("idx_invitation_invitee", "invitee_id"),
        Index("idx_invitation_invitor", "invitor_id"),
    )


class RSVP(Base):
    """The invitee's single answer to an invitation."""
    __tablename__ = "rsvps"
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invitation_id = Column(Uuid(as_uuid=True), ForeignKey("invitations.id"), nullable=False)
    response = Column(Enum(RSVPResponse, name="rsvpresponse"), nullable=False, default=RSVPResponse.PENDING)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index(
            "uq_live_rsvp_invitation",
            "invitation_id",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
    )
