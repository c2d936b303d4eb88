"""Database models package."""
from app.db.models.user import User
from app.db.models.event import Event, EventCategory
from app.db.models.participant import Participant, ParticipationStatus
from app.db.models.invitation import Invitation, RSVP, RSVPResponse
from app.db.models.notification import Notification, UserNotification, NotificationType
from app.db.models.discussion import DiscussionPost, DiscussionReply
from app.db.models.message import EventMessage, MessageSeen

__all__ = [
    "User",
    "Event",
    "EventCategory",
    "Participant",
    "ParticipationStatus",
    "Invitation",
    "RSVP",
    "RSVPResponse",
    "Notification",
    "UserNotification",
    "NotificationType",
    "DiscussionPost",
    "DiscussionReply",
    "EventMessage",
    "MessageSeen",
]
