# backend/app/services/offer_negotiation_service.py
"""
Offer Negotiation Service

Manages comments and exchange proposals attached to a post and drives the
acceptance that commits two posts to each other:

1. The post owner accepts one pending offer.
2. Every other pending offer touching either committed post is rejected.
3. Both posts move to trading.
4. A chat room is opened for the two owners.

All four steps share one transaction. Acceptance is first-writer-wins:
the offer and both posts are moved with guarded updates, so a second
concurrent acceptance fails cleanly with InvalidStateException and never
produces a second room.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import OfferStatus
from ..core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from ..domain.offer_rules import CommittedPair, select_superseded_offers
from ..models.trade_offer import TradeOffer
from ..models.trade_post import TradePost
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.offer_repository import OfferRepository
from ..repositories.post_repository import PostRepository
from .base import BaseService
from .chat_room_service import ChatRoomService
from .post_lifecycle_service import PostLifecycleService

logger = logging.getLogger(__name__)

ALREADY_HANDLED = "This offer has already been handled. Refresh to see the latest state."


@dataclass(frozen=True)
class AcceptOfferResult:
    my_post_id: str
    partner_post_id: str
    chat_room_id: str
    rejected_offer_ids: List[str] = field(default_factory=list)


class OfferNegotiationService(BaseService):
    """
    Service for offers on trade posts.

    Repositories and collaborating services are injectable so the
    acceptance path can be exercised against fakes.
    """

    def __init__(
        self,
        db: Session,
        offer_repository: Optional[OfferRepository] = None,
        post_repository: Optional[PostRepository] = None,
        post_lifecycle: Optional[PostLifecycleService] = None,
        chat_rooms: Optional[ChatRoomService] = None,
    ):
        super().__init__(db)
        self.offer_repository = offer_repository or RepositoryFactory.create_offer_repository(db)
        self.post_repository = post_repository or RepositoryFactory.create_post_repository(db)
        self.post_lifecycle = post_lifecycle or PostLifecycleService(
            db, post_repository=self.post_repository, offer_repository=self.offer_repository
        )
        self.chat_rooms = chat_rooms or ChatRoomService(db, post_lifecycle=self.post_lifecycle)

    @BaseService.measure_operation("create_offer")
    def create_offer(
        self,
        post_id: str,
        author_id: str,
        content: str,
        related_post_id: Optional[str] = None,
        is_offer: Optional[bool] = None,
    ) -> TradeOffer:
        """
        Add a comment to a post, optionally proposing one of the author's posts.

        A related_post_id implies an exchange proposal. Plain comments are
        allowed from anyone who can see the post, including its owner.

        Raises:
            ValidationException: Blank content, or is_offer without a counter-post
            NotFoundException: Post or related post does not exist
            ForbiddenException: Proposing on one's own post, or proposing someone else's post
            InvalidStateException: Target or related post is not active
        """
        body = (content or "").strip()
        if not body:
            raise ValidationException("Comment cannot be empty")
        if len(body) > settings.offer_content_max_length:
            raise ValidationException(
                f"Comment must be at most {settings.offer_content_max_length} characters",
                details={"max_length": settings.offer_content_max_length},
            )
        if is_offer and not related_post_id:
            raise ValidationException(
                "An exchange offer must reference one of your posts",
                details={"field": "related_post_id"},
            )
        proposing = bool(related_post_id)

        post = self.post_lifecycle.get_visible_post(post_id, author_id)
        if proposing:
            self._check_proposal(post, author_id, related_post_id)

        with self.transaction():
            offer = self.offer_repository.create(
                post_id=post.id,
                author_id=author_id,
                content=body,
                is_offer=proposing,
                related_post_id=related_post_id if proposing else None,
                offer_status=OfferStatus.PENDING.value if proposing else None,
            )

        self.logger.info(
            "Offer created" if proposing else "Comment created",
            extra={
                "offer_id": offer.id,
                "post_id": post.id,
                "author_id": author_id,
                "related_post_id": offer.related_post_id,
            },
        )
        return offer

    def _check_proposal(self, post: TradePost, author_id: str, related_post_id: str) -> None:
        if post.is_owned_by(author_id):
            raise ForbiddenException(
                "You cannot make an exchange offer on your own post",
                details={"post_id": post.id},
            )
        if not post.is_active:
            raise InvalidStateException(
                "This post is no longer accepting offers",
                details={"post_id": post.id, "status": post.status},
            )
        if related_post_id == post.id:
            raise ValidationException(
                "An offer cannot propose the post it is made on",
                details={"related_post_id": related_post_id},
            )

        related = self.post_repository.get_by_id(related_post_id, load_relationships=False)
        if related is None:
            raise NotFoundException(
                "Offered post not found", details={"related_post_id": related_post_id}
            )
        if not related.is_owned_by(author_id):
            raise ForbiddenException(
                "You can only offer your own posts",
                details={"related_post_id": related_post_id},
            )
        if not related.is_active:
            raise InvalidStateException(
                "The offered post is not available for trade",
                details={"related_post_id": related_post_id, "status": related.status},
            )

    def list_offers(self, post_id: str, viewer_id: Optional[str] = None) -> List[TradeOffer]:
        """Offers and comments of a post in insertion order."""
        post = self.post_lifecycle.get_visible_post(post_id, viewer_id)
        return self.offer_repository.list_for_post(post.id)

    @BaseService.measure_operation("accept_offer")
    def accept_offer(self, post_id: str, offer_id: str, actor_id: str) -> AcceptOfferResult:
        """
        Accept a pending offer on the actor's post.

        Raises:
            NotFoundException: Post or offer does not exist
            ForbiddenException: Actor is not the post owner
            InvalidStateException: Offer already decided, post or counter-post
                no longer active, or a concurrent acceptance won
        """
        post = self._get_owned_post(post_id, actor_id)

        with self.transaction():
            offer = self._get_offer(post.id, offer_id)

            # Re-read under this transaction; a concurrent accept may have landed
            self.offer_repository.refresh(offer)
            self.post_repository.refresh(post)
            self._ensure_pending(offer)
            if not post.is_active:
                raise InvalidStateException(
                    ALREADY_HANDLED, details={"post_id": post.id, "status": post.status}
                )

            related = (
                self.post_repository.get_by_id(offer.related_post_id, load_relationships=False)
                if offer.related_post_id
                else None
            )
            if related is None or not related.is_active:
                raise InvalidStateException(
                    "The offered post is no longer available for trade",
                    details={
                        "offer_id": offer.id,
                        "related_post_id": offer.related_post_id,
                        "status": related.status if related is not None else None,
                    },
                )

            if not self.offer_repository.decide(offer.id, OfferStatus.ACCEPTED):
                raise InvalidStateException(ALREADY_HANDLED, details={"offer_id": offer.id})

            try:
                self.post_lifecycle.mark_trading(post.id)
                self.post_lifecycle.mark_trading(related.id)
            except InvalidTransitionException as exc:
                raise InvalidStateException(ALREADY_HANDLED, details=exc.details) from exc

            pair = CommittedPair(post_id=post.id, partner_post_id=related.id)
            superseded = select_superseded_offers(
                offer.id, pair, self.offer_repository.list_pending_involving(pair.post_ids)
            )
            rejected_ids = []
            for other in superseded:
                if self.offer_repository.decide(other.id, OfferStatus.REJECTED):
                    rejected_ids.append(other.id)

            room, _ = self.chat_rooms.open_room(
                post.id, related.id, post.owner_id, offer.author_id, source="offer"
            )

        prometheus_metrics.inc_offer_decided("accepted")
        for _ in rejected_ids:
            prometheus_metrics.inc_offer_decided("rejected", reason="superseded")
        self.logger.info(
            "Offer accepted",
            extra={
                "offer_id": offer.id,
                "post_id": post.id,
                "partner_post_id": related.id,
                "chat_room_id": room.id,
                "rejected_offer_ids": rejected_ids,
            },
        )
        return AcceptOfferResult(
            my_post_id=post.id,
            partner_post_id=related.id,
            chat_room_id=room.id,
            rejected_offer_ids=rejected_ids,
        )

    @BaseService.measure_operation("reject_offer")
    def reject_offer(self, post_id: str, offer_id: str, actor_id: str) -> str:
        """
        Reject a pending offer. The post status is never touched.

        Returns:
            The rejected offer id
        """
        post = self._get_owned_post(post_id, actor_id)

        with self.transaction():
            offer = self._get_offer(post.id, offer_id)
            self._ensure_pending(offer)
            if not self.offer_repository.decide(offer.id, OfferStatus.REJECTED):
                raise InvalidStateException(ALREADY_HANDLED, details={"offer_id": offer.id})

        prometheus_metrics.inc_offer_decided("rejected")
        self.logger.info("Offer rejected", extra={"offer_id": offer_id, "post_id": post_id})
        return offer_id

    # Helpers

    def _get_owned_post(self, post_id: str, actor_id: str) -> TradePost:
        post = self.post_lifecycle.get_post(post_id)
        if not post.is_owned_by(actor_id):
            raise ForbiddenException(
                "Only the post owner can decide on offers",
                details={"post_id": post_id},
            )
        return post

    def _get_offer(self, post_id: str, offer_id: str) -> TradeOffer:
        offer = self.offer_repository.get_for_post(post_id, offer_id)
        if offer is None:
            raise NotFoundException(
                "Offer not found", details={"post_id": post_id, "offer_id": offer_id}
            )
        return offer

    @staticmethod
    def _ensure_pending(offer: TradeOffer) -> None:
        if not offer.is_offer:
            raise InvalidStateException(
                "This comment is not an exchange offer", details={"offer_id": offer.id}
            )
        if offer.offer_status != OfferStatus.PENDING.value:
            raise InvalidStateException(
                ALREADY_HANDLED,
                details={"offer_id": offer.id, "offer_status": offer.offer_status},
            )
