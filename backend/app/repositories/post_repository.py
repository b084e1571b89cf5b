# backend/app/repositories/post_repository.py
"""
Post Repository for trade listings.

Provides data access for TradePost, including the guarded status
transition used by the post lifecycle:

    UPDATE trade_posts SET status = :to WHERE id = :id AND status = :from

A caller that loses a race gets False back instead of silently
overwriting a status another request already changed.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..core.enums import PostStatus
from ..models.trade_post import TradePost
from .base_repository import BaseRepository


class PostRepository(BaseRepository[TradePost]):
    """
    Repository for TradePost entity operations.

    Handles:
    - Public and per-owner listings
    - Active counter-post candidates for offers
    - Guarded status transitions
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        super().__init__(db, TradePost)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(TradePost.owner))

    def transition_status(
        self, post_id: str, from_status: PostStatus, to_status: PostStatus
    ) -> bool:
        """
        Move a post between statuses only if it is still in ``from_status``.

        Returns:
            True if the row was updated, False if the post is missing or
            no longer in the expected status
        """
        return self.update_if(
            post_id,
            {"status": from_status.value},
            status=to_status.value,
            updated_at=datetime.now(timezone.utc),
        )

    def update_details(self, post_id: str, expected_status: str, **values: Any) -> bool:
        """Edit listing text while the post is still in ``expected_status``."""
        return self.update_if(
            post_id,
            {"status": expected_status},
            updated_at=datetime.now(timezone.utc),
            **values,
        )

    def list_public(
        self,
        status: Optional[PostStatus] = None,
        event_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[TradePost]:
        """
        List posts visible to everyone, newest first.

        Private posts never appear in the public listing, even when
        explicitly requested.
        """
        query = self._apply_eager_loading(self._build_query()).filter(
            TradePost.status != PostStatus.PRIVATE.value
        )
        if status is not None:
            query = query.filter(TradePost.status == status.value)
        if event_id is not None:
            query = query.filter(TradePost.event_id == event_id)
        query = query.order_by(TradePost.created_at.desc(), TradePost.id.desc())
        return self._execute_query(query.offset(offset).limit(limit))

    def list_by_owner(self, owner_id: str) -> List[TradePost]:
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(TradePost.owner_id == owner_id)
            .order_by(TradePost.created_at.desc(), TradePost.id.desc())
        )
        return self._execute_query(query)

    def list_active_by_owner(self, owner_id: str) -> List[TradePost]:
        """Active posts of a user; the candidates they may propose in an offer."""
        query = (
            self._build_query()
            .filter(
                TradePost.owner_id == owner_id,
                TradePost.status == PostStatus.ACTIVE.value,
            )
            .order_by(TradePost.created_at.desc(), TradePost.id.desc())
        )
        return self._execute_query(query)
