"""Tests for ChatRoomService: access control, messaging and completion."""

import pytest

from app.core.enums import ChatRoomStatus, PostStatus
from app.core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    RoomClosedException,
    ValidationException,
)
from app.services.chat_room_service import ChatRoomService


@pytest.fixture
def service(db):
    return ChatRoomService(db)


@pytest.fixture
def trading_pair(alice, bob, make_post):
    return (
        make_post(alice, status=PostStatus.TRADING),
        make_post(bob, status=PostStatus.TRADING),
    )


@pytest.fixture
def room(service, alice, bob, trading_pair):
    p, q = trading_pair
    return service.create(p.id, q.id, alice.id, bob.id)


class TestOpenRoom:
    def test_create_is_idempotent_for_a_pair(self, service, alice, bob, trading_pair, room):
        p, q = trading_pair

        again = service.create(q.id, p.id, bob.id, alice.id)

        assert again.id == room.id
        assert room.status == ChatRoomStatus.ACTIVE.value

    def test_participants_must_differ(self, service, alice, make_post):
        p = make_post(alice)
        q = make_post(alice, give="Other")

        with pytest.raises(ValidationException):
            service.create(p.id, q.id, alice.id, alice.id)

    def test_list_rooms_for_user(self, service, alice, bob, carol, room):
        assert [r.id for r in service.list_rooms_for_user(alice.id)] == [room.id]
        assert [r.id for r in service.list_rooms_for_user(bob.id)] == [room.id]
        assert service.list_rooms_for_user(carol.id) == []


class TestAccess:
    def test_get_room_for_participant(self, service, alice, room):
        loaded = service.get_room(room.id, alice.id)

        assert loaded.post1 is not None
        assert loaded.user2 is not None

    def test_outsider_is_forbidden(self, service, carol, room):
        with pytest.raises(ForbiddenException):
            service.get_room(room.id, carol.id)
        with pytest.raises(ForbiddenException):
            service.post_message(room.id, carol.id, "hi")
        with pytest.raises(ForbiddenException):
            service.complete(room.id, carol.id)

    def test_missing_room(self, service, alice):
        with pytest.raises(NotFoundException):
            service.get_room("01ARZ3NDEKTSV4RRFFQ69G5FAV", alice.id)


class TestMessages:
    def test_messages_are_stably_ordered(self, service, alice, bob, room):
        sent = [
            service.post_message(room.id, alice.id, "hi"),
            service.post_message(room.id, bob.id, "hello"),
            service.post_message(room.id, alice.id, "meet at gate 3?"),
        ]

        first = [m.id for m in service.list_messages(room.id, bob.id)]
        second = [m.id for m in service.list_messages(room.id, alice.id)]

        assert first == [m.id for m in sent]
        assert second == first
        stamps = [m.created_at for m in service.list_messages(room.id, alice.id)]
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == len(stamps)

    def test_after_id_returns_only_newer(self, service, alice, bob, room):
        first = service.post_message(room.id, alice.id, "one")
        second = service.post_message(room.id, bob.id, "two")
        third = service.post_message(room.id, alice.id, "three")

        newer = service.list_messages(room.id, alice.id, after_id=first.id)

        assert [m.id for m in newer] == [second.id, third.id]

    def test_blank_message_rejected(self, service, alice, room):
        with pytest.raises(ValidationException):
            service.post_message(room.id, alice.id, "   ")

    def test_message_body_is_trimmed(self, service, alice, room):
        message = service.post_message(room.id, alice.id, "  hi  ")

        assert message.message == "hi"
        assert message.sender_id == alice.id


class TestComplete:
    def test_complete_closes_room_and_posts(self, service, alice, bob, trading_pair, room):
        p, q = trading_pair

        completed = service.complete(room.id, bob.id)

        assert completed.status == ChatRoomStatus.COMPLETED.value
        assert completed.completed_by_id == bob.id
        assert completed.completed_at is not None
        lifecycle = service.post_lifecycle
        assert lifecycle.get_post(p.id).status == PostStatus.COMPLETED.value
        assert lifecycle.get_post(q.id).status == PostStatus.COMPLETED.value

    def test_complete_twice(self, service, alice, bob, trading_pair, room):
        service.complete(room.id, alice.id)

        with pytest.raises(InvalidStateException):
            service.complete(room.id, bob.id)

        reloaded = service.get_room(room.id, alice.id)
        assert reloaded.status == ChatRoomStatus.COMPLETED.value
        assert reloaded.completed_by_id == alice.id
        for post_id in reloaded.post_ids:
            assert service.post_lifecycle.get_post(post_id).status == PostStatus.COMPLETED.value

    def test_no_messages_after_completion(self, service, alice, room):
        service.post_message(room.id, alice.id, "done?")
        service.complete(room.id, alice.id)

        with pytest.raises(RoomClosedException) as exc_info:
            service.post_message(room.id, alice.id, "one more")

        assert exc_info.value.code == "ROOM_CLOSED"
        # History stays readable
        assert len(service.list_messages(room.id, alice.id)) == 1
