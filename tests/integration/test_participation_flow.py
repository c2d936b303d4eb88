"""
End-to-end lifecycle through the HTTP API: join, respond, invite, RSVP,
discussion and the notifications each step leaves behind.
"""
import pytest
from httpx import AsyncClient


async def _inbox_types(client: AsyncClient, headers: dict) -> list:
    response = await client.get("/api/v1/notifications", headers=headers)
    assert response.status_code == 200
    return [n["type"] for n in response.json()["content"]]


@pytest.mark.integration
class TestPrivateEventLifecycle:

    async def test_join_respond_invite_rsvp(
        self, client: AsyncClient, organizer, test_user, headers_for, published_events
    ):
        org_headers, user_headers = headers_for(organizer), headers_for(test_user)

        created = await client.post(
            "/api/v1/events", headers=org_headers, json={"title": "Board Games", "is_public": False}
        )
        event_id = created.json()["content"]["id"]

        join = await client.post(f"/api/v1/events/{event_id}/join", headers=user_headers)
        assert join.status_code == 200
        assert join.json()["content"]["status"] == "PENDING"
        assert join.json()["content"]["responded_at"] is None
        assert await _inbox_types(client, org_headers) == ["REQUEST_JOIN"]

        respond = await client.post(
            f"/api/v1/events/{event_id}/respond",
            headers=org_headers,
            json={"user_id": str(test_user.id), "status": "ACCEPTED"},
        )
        assert respond.status_code == 200
        assert respond.json()["content"]["status"] == "ACCEPTED"
        assert respond.json()["content"]["responded_at"] is not None

        invite = await client.post(
            "/api/v1/invitations",
            headers=org_headers,
            json={"event_id": event_id, "invitee_id": str(test_user.id), "content": "join sub-activity"},
        )
        assert invite.status_code == 201
        invitation_id = invite.json()["content"]["id"]
        assert await _inbox_types(client, user_headers) == ["INVITATION", "REQUEST_ACCEPT"]

        rsvp = await client.post(
            f"/api/v1/invitations/{invitation_id}/rsvp", headers=user_headers, json={"response": "ACCEPTED"}
        )
        assert rsvp.status_code == 201
        assert rsvp.json()["content"]["response"] == "ACCEPTED"
        assert (await _inbox_types(client, org_headers))[0] == "RSVP_ACCEPT"

        again = await client.post(
            f"/api/v1/invitations/{invitation_id}/rsvp", headers=user_headers, json={"response": "DENIED"}
        )
        assert again.status_code == 400
        assert again.json()["code"] == "RSVP_EXISTS"

        # every stored notification was also announced on the bus
        assert len(published_events) == 4
        assert all(key == "notification.created" for key, _ in published_events)

    async def test_second_response_is_rejected(self, client: AsyncClient, private_event, organizer, test_user, headers_for):
        await client.post(f"/api/v1/events/{private_event.id}/join", headers=headers_for(test_user))
        body = {"user_id": str(test_user.id), "status": "DENIED"}

        first = await client.post(f"/api/v1/events/{private_event.id}/respond", headers=headers_for(organizer), json=body)
        second = await client.post(f"/api/v1/events/{private_event.id}/respond", headers=headers_for(organizer), json=body)

        assert first.json()["content"]["status"] == "DENIED"
        assert second.status_code == 400
        assert second.json()["code"] == "ALREADY_RESPONDED"

    async def test_respond_rejects_pending_decision(self, client: AsyncClient, private_event, organizer, test_user, headers_for):
        response = await client.post(
            f"/api/v1/events/{private_event.id}/respond",
            headers=headers_for(organizer),
            json={"user_id": str(test_user.id), "status": "PENDING"},
        )
        assert response.status_code == 422

    async def test_rsvp_pending_is_invalid(self, client: AsyncClient, private_event, organizer, test_user,
                                           add_participant, headers_for):
        await add_participant(private_event, test_user)
        invite = await client.post(
            "/api/v1/invitations",
            headers=headers_for(organizer),
            json={"event_id": str(private_event.id), "invitee_id": str(test_user.id)},
        )

        response = await client.post(
            f"/api/v1/invitations/{invite.json()['content']['id']}/rsvp",
            headers=headers_for(test_user),
            json={"response": "PENDING"},
        )
        assert response.status_code == 422

    async def test_invitation_visibility(
        self, client: AsyncClient, private_event, organizer, test_user, other_user, add_participant, headers_for
    ):
        await add_participant(private_event, test_user)
        invite = await client.post(
            "/api/v1/invitations",
            headers=headers_for(organizer),
            json={"event_id": str(private_event.id), "invitee_id": str(test_user.id)},
        )
        invitation_id = invite.json()["content"]["id"]

        received = (await client.get("/api/v1/invitations/received", headers=headers_for(test_user))).json()
        sent = (await client.get("/api/v1/invitations/sent", headers=headers_for(organizer))).json()
        stranger = await client.get(f"/api/v1/invitations/{invitation_id}", headers=headers_for(other_user))

        assert [i["id"] for i in received["content"]["items"]] == [invitation_id]
        assert [i["id"] for i in sent["content"]["items"]] == [invitation_id]
        assert stranger.status_code == 403

        deleted = await client.delete(f"/api/v1/invitations/{invitation_id}", headers=headers_for(organizer))
        assert deleted.status_code == 200
        gone = await client.get(f"/api/v1/invitations/{invitation_id}", headers=headers_for(test_user))
        assert gone.status_code == 404


@pytest.mark.integration
class TestPublicEventJoin:

    async def test_public_join_is_immediate(self, client: AsyncClient, public_event, organizer, test_user, headers_for):
        response = await client.post(f"/api/v1/events/{public_event.id}/join", headers=headers_for(test_user))

        assert response.status_code == 200
        participant = response.json()["content"]
        assert participant["status"] == "ACCEPTED"
        assert participant["responded_at"] == participant["invited_at"]
        assert await _inbox_types(client, headers_for(organizer)) == ["REQUEST_JOIN"]

        again = await client.post(f"/api/v1/events/{public_event.id}/join", headers=headers_for(test_user))
        assert again.status_code == 400
        assert again.json()["code"] == "ALREADY_JOINED"

    async def test_participants_listing(
        self, client: AsyncClient, public_event, organizer, test_user, headers_for
    ):
        await client.post(f"/api/v1/events/{public_event.id}/join", headers=headers_for(test_user))

        response = await client.get(f"/api/v1/events/{public_event.id}/participants", headers=headers_for(organizer))
        assert [p["user_id"] for p in response.json()["content"]] == [str(test_user.id)]


@pytest.mark.integration
class TestRSVPEndpoints:

    async def test_list_read_delete(
        self, client: AsyncClient, private_event, organizer, test_user, add_participant, headers_for
    ):
        await add_participant(private_event, test_user)
        invite = await client.post(
            "/api/v1/invitations",
            headers=headers_for(organizer),
            json={"event_id": str(private_event.id), "invitee_id": str(test_user.id)},
        )
        rsvp = await client.post(
            f"/api/v1/invitations/{invite.json()['content']['id']}/rsvp",
            headers=headers_for(test_user),
            json={"response": "DENIED"},
        )
        rsvp_id = rsvp.json()["content"]["id"]

        mine = (await client.get("/api/v1/rsvps", headers=headers_for(test_user))).json()["content"]
        assert [r["id"] for r in mine["items"]] == [rsvp_id]

        as_invitor = await client.get(f"/api/v1/rsvps/{rsvp_id}", headers=headers_for(organizer))
        assert as_invitor.status_code == 200

        assert (await client.delete(f"/api/v1/rsvps/{rsvp_id}", headers=headers_for(organizer))).status_code == 403
        assert (await client.delete(f"/api/v1/rsvps/{rsvp_id}", headers=headers_for(test_user))).status_code == 200
        assert (await client.get(f"/api/v1/rsvps/{rsvp_id}", headers=headers_for(test_user))).status_code == 404


@pytest.mark.integration
class TestNotificationEndpoints:

    async def test_mark_read_and_delete(self, client: AsyncClient, public_event, test_user, headers_for):
        headers = headers_for(test_user)
        await client.post(f"/api/v1/events/{public_event.id}/join", headers=headers)
        notification_id = (await client.get("/api/v1/notifications", headers=headers)).json()["content"][0]["id"]

        read = await client.patch(f"/api/v1/notifications/{notification_id}/read", headers=headers)
        assert read.json()["content"]["is_read"] is True

        unread = await client.get("/api/v1/notifications?unread_only=true", headers=headers)
        assert unread.json()["content"] == []

        assert (await client.delete(f"/api/v1/notifications/{notification_id}", headers=headers)).status_code == 200
        assert await _inbox_types(client, headers) == []


@pytest.mark.integration
class TestDiscussions:

    async def test_posts_and_replies_notify_members(
        self, client: AsyncClient, public_event, organizer, test_user, other_user, add_participant, headers_for
    ):
        await add_participant(public_event, test_user)
        await add_participant(public_event, other_user)

        post = await client.post(
            f"/api/v1/events/{public_event.id}/posts", headers=headers_for(test_user), json={"content": "Who brings chairs?"}
        )
        assert post.status_code == 201
        post_id = post.json()["content"]["id"]
        assert await _inbox_types(client, headers_for(organizer)) == ["NEW_POST"]
        assert await _inbox_types(client, headers_for(other_user)) == ["NEW_POST"]
        assert await _inbox_types(client, headers_for(test_user)) == []

        reply = await client.post(
            f"/api/v1/posts/{post_id}/replies", headers=headers_for(other_user), json={"content": "I will"}
        )
        assert reply.status_code == 201
        assert await _inbox_types(client, headers_for(test_user)) == ["REPLY"]

        replies = (await client.get(f"/api/v1/posts/{post_id}/replies", headers=headers_for(organizer))).json()
        assert replies["content"]["pagination"]["total"] == 1

    async def test_outsider_cannot_post(self, client: AsyncClient, public_event, test_user, headers_for):
        response = await client.post(
            f"/api/v1/events/{public_event.id}/posts", headers=headers_for(test_user), json={"content": "Hi"}
        )
        assert response.status_code == 403

    async def test_delete_post_by_organizer(
        self, client: AsyncClient, public_event, organizer, test_user, add_participant, headers_for
    ):
        await add_participant(public_event, test_user)
        post = await client.post(
            f"/api/v1/events/{public_event.id}/posts", headers=headers_for(test_user), json={"content": "Spam"}
        )
        post_id = post.json()["content"]["id"]

        assert (await client.delete(f"/api/v1/posts/{post_id}", headers=headers_for(organizer))).status_code == 200
        listing = (await client.get(f"/api/v1/events/{public_event.id}/posts", headers=headers_for(organizer))).json()
        assert listing["content"]["items"] == []


@pytest.mark.integration
class TestEventChat:

    async def test_send_list_and_mark_seen(
        self, client: AsyncClient, public_event, organizer, test_user, add_participant, headers_for, published_events
    ):
        await add_participant(public_event, test_user)

        sent = await client.post(
            f"/api/v1/events/{public_event.id}/messages", headers=headers_for(organizer), json={"content": "Doors at 7"}
        )
        assert sent.status_code == 201
        message_id = sent.json()["content"]["id"]
        assert published_events[-1][0] == "message.created"

        history = (await client.get(f"/api/v1/events/{public_event.id}/messages", headers=headers_for(test_user))).json()
        assert [m["content"] for m in history["content"]["items"]] == ["Doors at 7"]

        seen = await client.post(f"/api/v1/messages/{message_id}/seen", headers=headers_for(test_user))
        assert seen.status_code == 200
        assert seen.json()["content"]["seen_by"] == [str(test_user.id)]

    async def test_blank_message_rejected(self, client: AsyncClient, public_event, organizer, headers_for):
        response = await client.post(
            f"/api/v1/events/{public_event.id}/messages", headers=headers_for(organizer), json={"content": "   "}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_outsider_cannot_read_history(self, client: AsyncClient, public_event, other_user, headers_for):
        response = await client.get(f"/api/v1/events/{public_event.id}/messages", headers=headers_for(other_user))
        assert response.status_code == 403
