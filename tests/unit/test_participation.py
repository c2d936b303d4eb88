"""
Unit tests for the participation state machine.
Covers join requests, organizer responses, capacity and notification side effects.
"""
import uuid
from types import SimpleNamespace
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, ErrorCode, ForbiddenError, NotFoundError, ValidationError
from app.db.models.notification import NotificationType
from app.db.models.participant import ParticipationStatus
from app.db.repositories import notifications as notifications_repo
from app.db.repositories import participants as participants_repo
from app.services.notification_service import NotificationService
from app.services.participation_service import ParticipationService


async def _notification_types(db_session: AsyncSession, user_id) -> list:
    items = await NotificationService(db_session).list_user_notifications(user_id)
    return [n.type for n in items]


@pytest.mark.unit
class TestJoinEvent:

    async def test_join_public_event_is_auto_accepted(self, db_session, public_event, organizer, test_user):
        participant = await ParticipationService(db_session).join_event(public_event.id, test_user.id)

        assert participant.status == ParticipationStatus.ACCEPTED
        assert participant.responded_at is not None
        assert await _notification_types(db_session, test_user.id) == [NotificationType.REQUEST_ACCEPT]
        assert await _notification_types(db_session, organizer.id) == [NotificationType.REQUEST_JOIN]

    async def test_join_private_event_is_pending(self, db_session, private_event, organizer, test_user):
        participant = await ParticipationService(db_session).join_event(private_event.id, test_user.id)

        assert participant.status == ParticipationStatus.PENDING
        assert participant.responded_at is None
        assert await _notification_types(db_session, organizer.id) == [NotificationType.REQUEST_JOIN]
        assert await _notification_types(db_session, test_user.id) == []

    async def test_join_twice_conflicts(self, db_session, private_event, test_user):
        service = ParticipationService(db_session)
        await service.join_event(private_event.id, test_user.id)

        with pytest.raises(ConflictError) as exc:
            await service.join_event(private_event.id, test_user.id)
        assert exc.value.code == ErrorCode.ALREADY_JOINED

    async def test_denied_user_cannot_rejoin(self, db_session, private_event, test_user, add_participant):
        await add_participant(private_event, test_user, ParticipationStatus.DENIED)

        with pytest.raises(ConflictError) as exc:
            await ParticipationService(db_session).join_event(private_event.id, test_user.id)
        assert exc.value.code == ErrorCode.ALREADY_JOINED

    async def test_organizer_cannot_join_own_event(self, db_session, private_event, organizer):
        with pytest.raises(ConflictError) as exc:
            await ParticipationService(db_session).join_event(private_event.id, organizer.id)
        assert exc.value.code == ErrorCode.ORGANIZER_CANNOT_JOIN

    async def test_join_closed_event_forbidden(self, db_session, make_event, organizer, test_user):
        event = await make_event(organizer, is_public=True, is_open=False)

        with pytest.raises(ForbiddenError) as exc:
            await ParticipationService(db_session).join_event(event.id, test_user.id)
        assert exc.value.code == ErrorCode.EVENT_CLOSED

    async def test_join_missing_event(self, db_session, test_user):
        with pytest.raises(NotFoundError) as exc:
            await ParticipationService(db_session).join_event(uuid.uuid4(), test_user.id)
        assert exc.value.code == ErrorCode.EVENT_NOT_FOUND

    async def test_join_deleted_event(self, db_session, make_event, organizer, test_user):
        event = await make_event(organizer, is_public=True, is_deleted=True)

        with pytest.raises(NotFoundError):
            await ParticipationService(db_session).join_event(event.id, test_user.id)

    async def test_join_full_public_event(self, db_session, make_event, organizer, test_user, other_user):
        event = await make_event(organizer, is_public=True, capacity=1)
        service = ParticipationService(db_session)
        await service.join_event(event.id, test_user.id)

        with pytest.raises(ConflictError) as exc:
            await service.join_event(event.id, other_user.id)
        assert exc.value.code == ErrorCode.EVENT_FULL

    async def test_notification_failure_does_not_fail_join(self, db_session, public_event, test_user, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("database went away")

        monkeypatch.setattr(notifications_repo, "create_with_recipients", broken)

        participant = await ParticipationService(db_session).join_event(public_event.id, test_user.id)
        assert participant.status == ParticipationStatus.ACCEPTED


@pytest.mark.unit
class TestRespondJoin:

    async def test_accept_pending_request(self, db_session, private_event, organizer, test_user, add_participant):
        await add_participant(private_event, test_user, ParticipationStatus.PENDING)

        participant = await ParticipationService(db_session).respond_join(
            private_event.id, organizer.id, test_user.id, ParticipationStatus.ACCEPTED
        )

        assert participant.status == ParticipationStatus.ACCEPTED
        assert participant.responded_at is not None
        assert await _notification_types(db_session, test_user.id) == [NotificationType.REQUEST_ACCEPT]

    async def test_deny_pending_request(self, db_session, private_event, organizer, test_user, add_participant):
        await add_participant(private_event, test_user, ParticipationStatus.PENDING)

        participant = await ParticipationService(db_session).respond_join(
            private_event.id, organizer.id, test_user.id, ParticipationStatus.DENIED
        )

        assert participant.status == ParticipationStatus.DENIED
        assert await _notification_types(db_session, test_user.id) == [NotificationType.REQUEST_DENIED]

    async def test_second_response_conflicts(self, db_session, private_event, organizer, test_user, add_participant):
        await add_participant(private_event, test_user, ParticipationStatus.PENDING)
        service = ParticipationService(db_session)
        await service.respond_join(private_event.id, organizer.id, test_user.id, ParticipationStatus.ACCEPTED)

        with pytest.raises(ConflictError) as exc:
            await service.respond_join(private_event.id, organizer.id, test_user.id, ParticipationStatus.DENIED)
        assert exc.value.code == ErrorCode.ALREADY_RESPONDED

    async def test_only_organizer_can_respond(self, db_session, private_event, test_user, other_user, add_participant):
        await add_participant(private_event, test_user, ParticipationStatus.PENDING)

        with pytest.raises(ForbiddenError):
            await ParticipationService(db_session).respond_join(
                private_event.id, other_user.id, test_user.id, ParticipationStatus.ACCEPTED
            )

    async def test_respond_without_request(self, db_session, private_event, organizer, test_user):
        with pytest.raises(NotFoundError) as exc:
            await ParticipationService(db_session).respond_join(
                private_event.id, organizer.id, test_user.id, ParticipationStatus.ACCEPTED
            )
        assert exc.value.code == ErrorCode.PARTICIPANT_NOT_FOUND

    async def test_pending_is_not_a_decision(self, db_session, private_event, organizer, test_user, add_participant):
        await add_participant(private_event, test_user, ParticipationStatus.PENDING)

        with pytest.raises(ValidationError) as exc:
            await ParticipationService(db_session).respond_join(
                private_event.id, organizer.id, test_user.id, ParticipationStatus.PENDING
            )
        assert exc.value.code == ErrorCode.VALIDATION_ERROR
        assert exc.value.status_code == 400

    async def test_accept_respects_capacity(
        self, db_session, make_event, organizer, test_user, other_user, add_participant
    ):
        event = await make_event(organizer, capacity=1)
        await add_participant(event, other_user, ParticipationStatus.ACCEPTED)
        await add_participant(event, test_user, ParticipationStatus.PENDING)

        with pytest.raises(ConflictError) as exc:
            await ParticipationService(db_session).respond_join(
                event.id, organizer.id, test_user.id, ParticipationStatus.ACCEPTED
            )
        assert exc.value.code == ErrorCode.EVENT_FULL


@pytest.mark.unit
class TestListParticipants:

    async def test_organizer_sees_pending_requests(
        self, db_session, private_event, organizer, test_user, other_user, add_participant
    ):
        await add_participant(private_event, test_user, ParticipationStatus.ACCEPTED)
        await add_participant(private_event, other_user, ParticipationStatus.PENDING)

        participants = await ParticipationService(db_session).list_participants(organizer.id, private_event.id)
        assert {p.user_id for p in participants} == {test_user.id, other_user.id}

    async def test_participant_sees_accepted_only(
        self, db_session, private_event, test_user, other_user, add_participant
    ):
        await add_participant(private_event, test_user, ParticipationStatus.ACCEPTED)
        await add_participant(private_event, other_user, ParticipationStatus.PENDING)

        participants = await ParticipationService(db_session).list_participants(test_user.id, private_event.id)
        assert [p.user_id for p in participants] == [test_user.id]

    async def test_outsider_cannot_list_private_event(self, db_session, private_event, test_user):
        with pytest.raises(ForbiddenError):
            await ParticipationService(db_session).list_participants(test_user.id, private_event.id)


@pytest.mark.unit
class TestConcurrentParticipation:
    """The database constraints decide when two requests pass the read checks together."""

    async def test_duplicate_insert_hits_unique_constraint(self, db_session, private_event, test_user, monkeypatch):
        event_id, user_id = private_event.id, test_user.id
        service = ParticipationService(db_session)
        await service.join_event(event_id, user_id)

        async def not_seen_yet(*args, **kwargs):
            return None

        monkeypatch.setattr(participants_repo, "get_participant", not_seen_yet)

        with pytest.raises(ConflictError) as exc:
            await service.join_event(event_id, user_id)
        assert exc.value.code == ErrorCode.ALREADY_JOINED

        monkeypatch.undo()
        assert len(await participants_repo.list_participants(db_session, event_id)) == 1

    async def test_stale_pending_read_loses_the_update(
        self, db_session, private_event, organizer, test_user, add_participant, monkeypatch
    ):
        await add_participant(private_event, test_user, ParticipationStatus.PENDING)
        event_id, organizer_id, user_id = private_event.id, organizer.id, test_user.id
        service = ParticipationService(db_session)
        await service.respond_join(event_id, organizer_id, user_id, ParticipationStatus.DENIED)

        async def stale_read(*args, **kwargs):
            return SimpleNamespace(status=ParticipationStatus.PENDING)

        monkeypatch.setattr(participants_repo, "get_participant", stale_read)

        with pytest.raises(ConflictError) as exc:
            await service.respond_join(event_id, organizer_id, user_id, ParticipationStatus.ACCEPTED)
        assert exc.value.code == ErrorCode.ALREADY_RESPONDED

        monkeypatch.undo()
        participant = await participants_repo.get_participant(db_session, event_id, user_id)
        assert participant.status == ParticipationStatus.DENIED
