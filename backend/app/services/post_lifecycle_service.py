# backend/app/services/post_lifecycle_service.py
"""
Post Lifecycle Service

Owns the status of a give/want listing:

    active -> trading -> completed
    active <-> private

Public operations (create, update, set_private, republish, delete) run in their
own transaction. mark_trading and mark_completed are called by the offer
and chat room services from inside their transactions and only flush.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_ITEM_DESCRIPTION_LENGTH, MAX_ZONE_CODE_LENGTH
from ..core.enums import PostStatus
from ..core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from ..models.trade_post import TradePost
from ..repositories.factory import RepositoryFactory
from ..repositories.offer_repository import OfferRepository
from ..repositories.post_repository import PostRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _validate_items(give: Optional[str], want: Optional[str]) -> None:
    if not give or not want:
        raise ValidationException(
            "Both what you give and what you want are required",
            details={"give_description": bool(give), "want_description": bool(want)},
        )
    for field, value in (("give_description", give), ("want_description", want)):
        if len(value) > MAX_ITEM_DESCRIPTION_LENGTH:
            raise ValidationException(
                f"{field} must be at most {MAX_ITEM_DESCRIPTION_LENGTH} characters",
                details={"field": field},
            )


class PostLifecycleService(BaseService):
    """Service owning TradePost creation and status transitions."""

    def __init__(
        self,
        db: Session,
        post_repository: Optional[PostRepository] = None,
        offer_repository: Optional[OfferRepository] = None,
    ):
        super().__init__(db)
        self.post_repository = post_repository or RepositoryFactory.create_post_repository(db)
        self.offer_repository = offer_repository or RepositoryFactory.create_offer_repository(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_post(self, post_id: str) -> TradePost:
        """
        Fetch a post or raise NotFoundException.
        """
        post = self.post_repository.get_by_id(post_id)
        if post is None:
            raise NotFoundException("Post not found", details={"post_id": post_id})
        return post

    def get_visible_post(self, post_id: str, viewer_id: Optional[str]) -> TradePost:
        """Private posts are only visible to their owner."""
        post = self.get_post(post_id)
        if post.status == PostStatus.PRIVATE.value and not post.is_owned_by(viewer_id):
            raise NotFoundException("Post not found", details={"post_id": post_id})
        return post

    @BaseService.measure_operation("list_posts")
    def list_posts(
        self,
        status: Optional[PostStatus] = None,
        event_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[TradePost]:
        return self.post_repository.list_public(
            status=status, event_id=event_id, limit=limit, offset=offset
        )

    def list_user_posts(self, owner_id: str) -> List[TradePost]:
        return self.post_repository.list_by_owner(owner_id)

    def list_active_posts_for_user(self, user_id: str) -> List[TradePost]:
        """Posts the user may still offer as a counter-item."""
        return self.post_repository.list_active_by_owner(user_id)

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_post")
    def create_post(
        self,
        owner_id: str,
        give_description: str,
        want_description: str,
        description: Optional[str] = None,
        location_name: Optional[str] = None,
        event_id: Optional[str] = None,
        zone_code: Optional[str] = None,
    ) -> TradePost:
        """
        Create an active listing.

        Raises:
            ValidationException: If give or want is blank or too long
        """
        give = _clean(give_description)
        want = _clean(want_description)
        _validate_items(give, want)
        zone = _clean(zone_code)
        if zone and len(zone) > MAX_ZONE_CODE_LENGTH:
            raise ValidationException(
                f"zone_code must be at most {MAX_ZONE_CODE_LENGTH} characters",
                details={"field": "zone_code"},
            )

        with self.transaction():
            post = self.post_repository.create(
                owner_id=owner_id,
                give_description=give,
                want_description=want,
                description=_clean(description),
                location_name=_clean(location_name),
                event_id=_clean(event_id),
                zone_code=zone,
                status=PostStatus.ACTIVE.value,
            )

        self.logger.info(
            "Post created",
            extra={"post_id": post.id, "owner_id": owner_id, "event_id": post.event_id},
        )
        return post

    @BaseService.measure_operation("update_post")
    def update_post(
        self,
        post_id: str,
        actor_id: str,
        give_description: Optional[str] = None,
        want_description: Optional[str] = None,
        description: Optional[str] = None,
        location_name: Optional[str] = None,
    ) -> TradePost:
        """
        Edit the text of a listing that is not committed to a trade yet.

        Fields left as None keep their value; give and want cannot be
        blanked. An empty description or location_name clears it.

        Raises:
            NotFoundException: Post does not exist
            ForbiddenException: Actor is not the owner
            InvalidTransitionException: Post is trading or completed
            ValidationException: Same rules as create_post
        """
        post = self._get_owned_post(post_id, actor_id)
        if not post.is_editable:
            raise InvalidTransitionException("post", post.status, "edited", entity_id=post_id)

        give = post.give_description if give_description is None else _clean(give_description)
        want = post.want_description if want_description is None else _clean(want_description)
        _validate_items(give, want)

        values = {"give_description": give, "want_description": want}
        if description is not None:
            values["description"] = _clean(description)
        if location_name is not None:
            values["location_name"] = _clean(location_name)

        with self.transaction():
            # Loses against a concurrent accept that already committed the post
            if not self.post_repository.update_details(post.id, post.status, **values):
                self.post_repository.refresh(post)
                raise InvalidTransitionException(
                    "post", post.status, "edited", entity_id=post.id
                )

        self.logger.info(
            "Post edited", extra={"post_id": post.id, "fields": sorted(values)}
        )
        return post

    @BaseService.measure_operation("set_private")
    def set_private(self, post_id: str, actor_id: str) -> TradePost:
        """
        Hide an active listing from the public feed.

        Raises:
            NotFoundException: Post does not exist
            ForbiddenException: Actor is not the owner
            InvalidTransitionException: Post is not active
        """
        post = self._get_owned_post(post_id, actor_id)
        with self.transaction():
            self._transition(post, PostStatus.ACTIVE, PostStatus.PRIVATE)
        return post

    @BaseService.measure_operation("republish")
    def republish(self, post_id: str, actor_id: str) -> TradePost:
        """Inverse of set_private; only legal from private."""
        post = self._get_owned_post(post_id, actor_id)
        with self.transaction():
            self._transition(post, PostStatus.PRIVATE, PostStatus.ACTIVE)
        return post

    @BaseService.measure_operation("delete_post")
    def delete(self, post_id: str, actor_id: str) -> None:
        """
        Delete an untouched listing.

        Never allowed once a trade is in flight. A post that was put up as
        the counter-item of any offer stays, so every proposal keeps its
        counter-post; the owner can hide it with set_private instead.

        Raises:
            InvalidTransitionException: Post is not active
            InvalidStateException: Post is referenced by an offer
        """
        post = self._get_owned_post(post_id, actor_id)
        if not post.is_deletable:
            raise InvalidTransitionException(
                "post", post.status, "deleted", entity_id=post_id
            )
        if self.offer_repository.is_proposed(post_id):
            raise InvalidStateException(
                "This post was offered in a trade proposal and cannot be deleted. "
                "Make it private instead.",
                details={"post_id": post_id},
            )

        with self.transaction():
            self.post_repository.delete(post_id)

        self.logger.info("Post deleted", extra={"post_id": post_id})

    # ------------------------------------------------------------------
    # Internal transitions (caller owns the transaction)
    # ------------------------------------------------------------------

    def mark_trading(self, post_id: str) -> None:
        """
        Commit a post to a trade. Legal only from active.

        Raises:
            InvalidTransitionException: If another writer already moved the post
        """
        post = self.get_post(post_id)
        self._transition(post, PostStatus.ACTIVE, PostStatus.TRADING)

    def mark_completed(self, post_id: str) -> None:
        """Close out a traded post. Legal only from trading."""
        post = self.get_post(post_id)
        self._transition(post, PostStatus.TRADING, PostStatus.COMPLETED)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_owned_post(self, post_id: str, actor_id: str) -> TradePost:
        post = self.get_post(post_id)
        if not post.is_owned_by(actor_id):
            raise ForbiddenException(
                "Only the owner can change this post",
                details={"post_id": post_id},
            )
        return post

    def _transition(self, post: TradePost, from_status: PostStatus, to_status: PostStatus) -> None:
        if not self.post_repository.transition_status(post.id, from_status, to_status):
            self.post_repository.refresh(post)
            raise InvalidTransitionException(
                "post", post.status, to_status.value, entity_id=post.id
            )
        self.logger.info(
            "Post status changed",
            extra={
                "post_id": post.id,
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
