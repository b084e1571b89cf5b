# backend/app/repositories/offer_repository.py
"""
Offer Repository for comments and exchange proposals on posts.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, joinedload

from ..core.enums import OfferStatus
from ..models.trade_offer import TradeOffer
from .base_repository import BaseRepository


class OfferRepository(BaseRepository[TradeOffer]):
    """
    Repository for TradeOffer entity operations.

    Offers are listed in insertion order: (created_at, id) ascending.
    ULIDs are time sortable, so id breaks ties between offers created in
    the same instant.
    """

    def __init__(self, db: Session):
        super().__init__(db, TradeOffer)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(TradeOffer.author),
            joinedload(TradeOffer.related_post),
        )

    def get_for_post(self, post_id: str, offer_id: str) -> Optional[TradeOffer]:
        """Fetch an offer only if it is attached to the given post."""
        return (
            self._apply_eager_loading(self._build_query())
            .filter(TradeOffer.id == offer_id, TradeOffer.post_id == post_id)
            .first()
        )

    def list_for_post(self, post_id: str) -> List[TradeOffer]:
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(TradeOffer.post_id == post_id)
            .order_by(TradeOffer.created_at.asc(), TradeOffer.id.asc())
        )
        return self._execute_query(query)

    def list_pending_involving(self, post_ids: Iterable[str]) -> List[TradeOffer]:
        """
        Pending offers that target or propose any of the given posts.

        Used to find the offers superseded when those posts are committed
        to a trade.
        """
        ids = list(post_ids)
        if not ids:
            return []
        query = (
            self._build_query()
            .filter(
                TradeOffer.is_offer.is_(True),
                TradeOffer.offer_status == OfferStatus.PENDING.value,
                or_(TradeOffer.post_id.in_(ids), TradeOffer.related_post_id.in_(ids)),
            )
            .order_by(TradeOffer.created_at.asc(), TradeOffer.id.asc())
        )
        return self._execute_query(query)

    def is_proposed(self, post_id: str) -> bool:
        """True if any offer, decided or not, put this post up as its counter-item."""
        return (
            self._build_query().filter(TradeOffer.related_post_id == post_id).first() is not None
        )

    def decide(self, offer_id: str, new_status: OfferStatus) -> bool:
        """
        Move a pending offer to accepted or rejected.

        Returns False if the offer was already decided by someone else.
        """
        return self.update_if(
            offer_id,
            {"offer_status": OfferStatus.PENDING.value},
            offer_status=new_status.value,
            updated_at=datetime.now(timezone.utc),
        )
