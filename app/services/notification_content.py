"""
Builders for notification payloads.

Pure functions: they only format text, so any service can reuse them.
"""
from typing import NamedTuple
from app.db.models.notification import NotificationType


class NotificationContent(NamedTuple):
    type: NotificationType
    title: str
    content: str


def invitation_sent(event_title: str, invitor_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.INVITATION,
        "New invitation",
        f"{invitor_name} invited you to an activity in \"{event_title}\".",
    )


def rsvp_accepted(event_title: str, invitee_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.RSVP_ACCEPT,
        "Invitation accepted",
        f"{invitee_name} accepted your invitation for \"{event_title}\".",
    )


def rsvp_denied(event_title: str, invitee_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.RSVP_DENIED,
        "Invitation declined",
        f"{invitee_name} declined your invitation for \"{event_title}\".",
    )


def new_reply(event_title: str, author_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.REPLY,
        "New reply",
        f"{author_name} replied to your post in \"{event_title}\".",
    )


def new_comment(event_title: str, author_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.COMMENT,
        "New comment",
        f"{author_name} commented in \"{event_title}\".",
    )


def new_post(event_title: str, author_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.NEW_POST,
        "New post",
        f"{author_name} posted in \"{event_title}\".",
    )


def event_updated(event_title: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.UPDATE_EVENT,
        "Event updated",
        f"\"{event_title}\" has been updated. Check the latest details.",
    )


def event_cancelled(event_title: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.DELETE_EVENT,
        "Event cancelled",
        f"\"{event_title}\" has been cancelled by the organizer.",
    )


def join_requested(event_title: str, requester_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.REQUEST_JOIN,
        "New join request",
        f"{requester_name} asked to join \"{event_title}\".",
    )


def join_accepted(event_title: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.REQUEST_ACCEPT,
        "Join request accepted",
        f"You are now a participant of \"{event_title}\".",
    )


def join_denied(event_title: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.REQUEST_DENIED,
        "Join request denied",
        f"Your request to join \"{event_title}\" was denied.",
    )


def participant_joined(event_title: str, participant_name: str) -> NotificationContent:
    return NotificationContent(
        NotificationType.REQUEST_JOIN,
        "New participant",
        f"{participant_name} joined \"{event_title}\".",
    )
