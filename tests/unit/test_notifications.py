"""
Unit tests for notification creation, inbox operations and best-effort dispatch.
"""
import uuid
import pytest
from sqlalchemy import select, func

from app.core.exceptions import ErrorCode, NotFoundError
from app.db.models.notification import Notification, NotificationType, UserNotification
from app.services import notification_content as contents
from app.services.notification_service import NotificationDispatcher, NotificationService


async def _count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar()


@pytest.mark.unit
class TestCreateNotification:

    async def test_fans_out_to_every_recipient(self, db_session, test_user, other_user):
        notification = await NotificationService(db_session).create_notification(
            [test_user.id, other_user.id], NotificationType.NEW_POST, "New post", "Someone posted"
        )

        assert notification.id is not None
        assert await _count(db_session, UserNotification) == 2
        for user in (test_user, other_user):
            inbox = await NotificationService(db_session).list_user_notifications(user.id)
            assert [n.id for n in inbox] == [notification.id]
            assert inbox[0].is_read is False

    async def test_duplicate_recipients_get_one_row(self, db_session, test_user):
        await NotificationService(db_session).create_notification(
            [test_user.id, test_user.id], NotificationType.REPLY, "New reply", "Someone replied"
        )
        assert await _count(db_session, UserNotification) == 1

    async def test_unknown_recipient_writes_nothing(self, db_session, test_user):
        with pytest.raises(NotFoundError) as exc:
            await NotificationService(db_session).create_notification(
                [test_user.id, uuid.uuid4()], NotificationType.INVITATION, "New invitation", "You are invited"
            )

        assert exc.value.message == "Some users not found"
        assert exc.value.code == ErrorCode.USER_NOT_FOUND
        assert await _count(db_session, Notification) == 0
        assert await _count(db_session, UserNotification) == 0


@pytest.mark.unit
class TestInbox:

    async def test_mark_as_read(self, db_session, test_user):
        service = NotificationService(db_session)
        notification = await service.create_notification(
            [test_user.id], NotificationType.COMMENT, "New comment", "Someone commented"
        )

        read = await service.mark_as_read(test_user.id, notification.id)
        assert read.is_read is True
        assert read.read_at is not None
        assert await service.list_user_notifications(test_user.id, unread_only=True) == []

    async def test_delete_hides_for_one_recipient_only(self, db_session, test_user, other_user):
        service = NotificationService(db_session)
        notification = await service.create_notification(
            [test_user.id, other_user.id], NotificationType.UPDATE_EVENT, "Event updated", "Details changed"
        )

        await service.delete_notification(test_user.id, notification.id)

        assert await service.list_user_notifications(test_user.id) == []
        assert len(await service.list_user_notifications(other_user.id)) == 1

    async def test_foreign_notification_not_found(self, db_session, test_user, other_user):
        service = NotificationService(db_session)
        notification = await service.create_notification(
            [test_user.id], NotificationType.REPLY, "New reply", "Someone replied"
        )

        with pytest.raises(NotFoundError):
            await service.mark_as_read(other_user.id, notification.id)


@pytest.mark.unit
class TestDispatcher:

    async def test_dispatch_persists_and_publishes(self, db_session, test_user, published_events):
        notification = await NotificationDispatcher().dispatch(contents.join_accepted("Picnic"), [test_user.id])

        assert notification is not None
        routing_key, payload = published_events[0]
        assert routing_key == "notification.created"
        assert payload["user_ids"] == [str(test_user.id)]
        assert payload["notification"]["type"] == "REQUEST_ACCEPT"

    async def test_dispatch_swallows_unknown_recipient(self, db_session, test_user, published_events):
        result = await NotificationDispatcher().dispatch(
            contents.event_updated("Picnic"), [test_user.id, uuid.uuid4()]
        )

        assert result is None
        assert published_events == []
        assert await _count(db_session, Notification) == 0

    async def test_dispatch_with_no_recipients(self, db_session, published_events):
        assert await NotificationDispatcher().dispatch(contents.event_cancelled("Picnic"), []) is None
        assert published_events == []

    async def test_publish_failure_keeps_notification(self, db_session, test_user, monkeypatch):
        async def broken_publish(routing_key, payload):
            raise ConnectionError("broker unavailable")

        from app.events import publisher
        monkeypatch.setattr(publisher, "publish_event", broken_publish)

        notification = await NotificationDispatcher().dispatch(contents.new_post("Picnic", "Ann"), [test_user.id])
        assert notification is not None
        assert await _count(db_session, UserNotification) == 1


@pytest.mark.unit
class TestNotificationContent:

    def test_builders_pick_matching_types(self):
        assert contents.invitation_sent("Picnic", "Ann").type == NotificationType.INVITATION
        assert contents.rsvp_accepted("Picnic", "Ben").type == NotificationType.RSVP_ACCEPT
        assert contents.rsvp_denied("Picnic", "Ben").type == NotificationType.RSVP_DENIED
        assert contents.join_requested("Picnic", "Ben").type == NotificationType.REQUEST_JOIN
        assert contents.participant_joined("Picnic", "Ben").type == NotificationType.REQUEST_JOIN
        assert contents.join_denied("Picnic").type == NotificationType.REQUEST_DENIED
        assert contents.new_reply("Picnic", "Ann").type == NotificationType.REPLY
        assert contents.new_comment("Picnic", "Ann").type == NotificationType.COMMENT
        assert contents.event_cancelled("Picnic").type == NotificationType.DELETE_EVENT

    def test_text_names_event_and_actor(self):
        content = contents.invitation_sent("Picnic", "Ann")
        assert "Picnic" in content.content
        assert "Ann" in content.content
