"""Tests for the server side of the instant-match hand-off."""

import pytest

from app.core.enums import ChatRoomStatus, PostStatus
from app.core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from app.domain.event_trade import TradeItem
from app.models.chat_room import ChatRoom
from app.services.event_match_service import EventMatchService

EVENT_ID = "fanmeet-2026"


@pytest.fixture
def service(db):
    return EventMatchService(db)


def _start(service, actor, matched_post, **overrides):
    kwargs = dict(
        actor_id=actor.id,
        event_id=EVENT_ID,
        matched_post_id=matched_post.id,
        give_items=[TradeItem("CharA", 1), TradeItem("  ", 3)],
        want_items=[TradeItem("CharB", 2)],
        zone_code="Z1",
    )
    kwargs.update(overrides)
    return service.start_chat(**kwargs)


def test_start_chat_creates_post_and_room(service, db, alice, bob, make_post):
    matched = make_post(bob, event_id=EVENT_ID)

    result = _start(service, alice, matched)

    own = service.post_lifecycle.get_post(result.post_id)
    assert own.owner_id == alice.id
    assert own.event_id == EVENT_ID
    assert own.zone_code == "Z1"
    assert own.give_description == "CharA x1"
    assert own.want_description == "CharB x2"
    assert own.status == PostStatus.TRADING.value
    assert service.post_lifecycle.get_post(matched.id).status == PostStatus.TRADING.value

    room = db.get(ChatRoom, result.chat_room_id)
    assert room.status == ChatRoomStatus.ACTIVE.value
    assert set(room.post_ids) == {own.id, matched.id}


def test_taken_post_cannot_be_matched_twice(service, alice, bob, carol, make_post):
    matched = make_post(bob, event_id=EVENT_ID)
    _start(service, alice, matched)

    with pytest.raises(InvalidStateException):
        _start(service, carol, matched)

    assert len(service.post_lifecycle.list_user_posts(carol.id)) == 0


def test_cannot_match_own_post(service, alice, make_post):
    mine = make_post(alice, event_id=EVENT_ID)

    with pytest.raises(ForbiddenException):
        _start(service, alice, mine)


def test_unknown_post(service, alice, bob, make_post):
    ghost = make_post(bob)
    ghost_id = ghost.id
    service.post_lifecycle.delete(ghost_id, bob.id)

    with pytest.raises(NotFoundException):
        service.start_chat(
            actor_id=alice.id,
            event_id=EVENT_ID,
            matched_post_id=ghost_id,
            give_items=[TradeItem("CharA")],
            want_items=[TradeItem("CharB")],
        )


@pytest.mark.parametrize(
    "give,want",
    [
        ([], [TradeItem("CharB")]),
        ([TradeItem("   ")], [TradeItem("CharB")]),
        ([TradeItem("CharA", 0)], [TradeItem("CharB")]),
    ],
)
def test_invalid_criteria(service, alice, bob, make_post, give, want):
    matched = make_post(bob, event_id=EVENT_ID)

    with pytest.raises(ValidationException):
        _start(service, alice, matched, give_items=give, want_items=want)

    assert service.post_lifecycle.get_post(matched.id).status == PostStatus.ACTIVE.value


def test_event_id_required(service, alice, bob, make_post):
    matched = make_post(bob)

    with pytest.raises(ValidationException):
        _start(service, alice, matched, event_id="  ")
