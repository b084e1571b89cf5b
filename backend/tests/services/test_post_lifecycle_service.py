"""Tests for PostLifecycleService status transitions."""

import pytest

from app.core.enums import OfferStatus, PostStatus
from app.core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from app.models.trade_offer import TradeOffer
from app.models.trade_post import TradePost
from app.services.post_lifecycle_service import PostLifecycleService


@pytest.fixture
def service(db):
    return PostLifecycleService(db)


class TestCreatePost:
    def test_creates_active_post(self, service, alice):
        post = service.create_post(
            owner_id=alice.id,
            give_description="  Photocard A ",
            want_description="Photocard B",
            zone_code=" Z1 ",
        )

        assert post.status == PostStatus.ACTIVE.value
        assert post.owner_id == alice.id
        assert post.give_description == "Photocard A"
        assert post.zone_code == "Z1"

    @pytest.mark.parametrize("give,want", [("", "B"), ("A", "   ")])
    def test_rejects_blank_give_or_want(self, service, alice, give, want):
        with pytest.raises(ValidationException):
            service.create_post(owner_id=alice.id, give_description=give, want_description=want)


class TestPrivacy:
    def test_set_private_and_republish(self, service, alice, make_post):
        post = make_post(alice)

        assert service.set_private(post.id, alice.id).status == PostStatus.PRIVATE.value
        assert service.republish(post.id, alice.id).status == PostStatus.ACTIVE.value

    def test_only_owner_can_hide(self, service, alice, bob, make_post):
        post = make_post(alice)

        with pytest.raises(ForbiddenException):
            service.set_private(post.id, bob.id)

    def test_trading_post_cannot_go_private(self, service, alice, make_post):
        post = make_post(alice, status=PostStatus.TRADING)

        with pytest.raises(InvalidTransitionException) as exc_info:
            service.set_private(post.id, alice.id)

        assert exc_info.value.details["current_status"] == PostStatus.TRADING.value
        assert service.get_post(post.id).status == PostStatus.TRADING.value

    def test_private_post_hidden_from_others(self, service, alice, bob, make_post):
        post = make_post(alice, status=PostStatus.PRIVATE)

        assert service.get_visible_post(post.id, alice.id).id == post.id
        with pytest.raises(NotFoundException):
            service.get_visible_post(post.id, bob.id)
        with pytest.raises(NotFoundException):
            service.get_visible_post(post.id, None)

    def test_public_listing_excludes_private(self, service, alice, make_post):
        visible = make_post(alice)
        make_post(alice, status=PostStatus.PRIVATE)

        ids = [p.id for p in service.list_posts()]

        assert ids == [visible.id]
        assert len(service.list_user_posts(alice.id)) == 2


class TestInternalTransitions:
    def test_trading_then_completed(self, service, db, alice, make_post):
        post = make_post(alice)

        service.mark_trading(post.id)
        service.mark_completed(post.id)
        db.commit()

        assert service.get_post(post.id).status == PostStatus.COMPLETED.value

    def test_trading_never_returns_to_active(self, service, alice, make_post):
        post = make_post(alice, status=PostStatus.TRADING)

        with pytest.raises(InvalidTransitionException):
            service.republish(post.id, alice.id)
        with pytest.raises(InvalidTransitionException):
            service.mark_trading(post.id)

        assert service.get_post(post.id).status == PostStatus.TRADING.value

    def test_completed_requires_trading(self, service, alice, make_post):
        post = make_post(alice)

        with pytest.raises(InvalidTransitionException):
            service.mark_completed(post.id)


class TestDelete:
    def test_delete_active_post(self, service, db, alice, make_post):
        post = make_post(alice)

        service.delete(post.id, alice.id)

        assert db.get(TradePost, post.id) is None

    def test_cannot_delete_trading_post(self, service, alice, make_post):
        post = make_post(alice, status=PostStatus.TRADING)

        with pytest.raises(InvalidTransitionException):
            service.delete(post.id, alice.id)

    @pytest.mark.parametrize("offer_status", [OfferStatus.PENDING, OfferStatus.REJECTED])
    def test_cannot_delete_post_proposed_in_an_offer(
        self, service, db, alice, bob, make_post, offer_status
    ):
        target = make_post(alice)
        counter = make_post(bob)
        offer = TradeOffer(
            post_id=target.id,
            author_id=bob.id,
            content="Swap?",
            is_offer=True,
            related_post_id=counter.id,
            offer_status=offer_status.value,
        )
        db.add(offer)
        db.commit()

        with pytest.raises(InvalidStateException):
            service.delete(counter.id, bob.id)

        db.refresh(offer)
        assert offer.is_offer is True
        assert offer.related_post_id == counter.id
        assert offer.offer_status == offer_status.value
        assert db.get(TradePost, counter.id) is not None


class TestUpdatePost:
    @pytest.mark.parametrize("status", [PostStatus.ACTIVE, PostStatus.PRIVATE])
    def test_edits_text_of_open_post(self, service, alice, make_post, status):
        post = make_post(alice, give="Card A", want="Card B", status=status)

        updated = service.update_post(
            post.id,
            alice.id,
            give_description=" Card C ",
            description="Mint condition",
            location_name="Gate 3",
        )

        assert updated.give_description == "Card C"
        assert updated.want_description == "Card B"
        assert updated.description == "Mint condition"
        assert updated.location_name == "Gate 3"
        assert updated.status == status.value

    def test_empty_optional_text_clears_it(self, service, alice, make_post):
        post = make_post(alice)
        service.update_post(post.id, alice.id, description="Note")

        updated = service.update_post(post.id, alice.id, description="")

        assert updated.description is None
        assert updated.give_description == post.give_description

    @pytest.mark.parametrize("status", [PostStatus.TRADING, PostStatus.COMPLETED])
    def test_cannot_edit_committed_post(self, service, alice, make_post, status):
        post = make_post(alice, status=status)

        with pytest.raises(InvalidTransitionException):
            service.update_post(post.id, alice.id, give_description="Other")

    def test_only_owner_can_edit(self, service, alice, bob, make_post):
        post = make_post(alice)

        with pytest.raises(ForbiddenException):
            service.update_post(post.id, bob.id, give_description="Mine now")

    @pytest.mark.parametrize(
        "changes",
        [{"give_description": "   "}, {"want_description": ""}, {"give_description": "x" * 501}],
    )
    def test_rejects_invalid_items(self, service, alice, make_post, changes):
        post = make_post(alice, give="Card A", want="Card B")

        with pytest.raises(ValidationException):
            service.update_post(post.id, alice.id, **changes)

        assert service.get_post(post.id).give_description == "Card A"
