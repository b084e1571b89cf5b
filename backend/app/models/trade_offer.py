# backend/app/models/trade_offer.py
"""
TradeOffer model: a comment on a post that may propose an exchange.

A plain comment has is_offer = False and no offer_status. An exchange
proposal references one of the author's own posts (related_post_id) and
starts out pending; only the post owner can accept or reject it.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import OfferStatus
from ..database import Base


class TradeOffer(Base):
    """Comment attached to a TradePost, optionally proposing a counter-post."""

    __tablename__ = "trade_offers"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    post_id = Column(String(26), ForeignKey("trade_posts.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(String(1000), nullable=False)
    is_offer = Column(Boolean, nullable=False, default=False)
    related_post_id = Column(
        String(26), ForeignKey("trade_posts.id", ondelete="RESTRICT"), nullable=True
    )
    offer_status = Column(String(20), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    post = relationship("TradePost", back_populates="offers", foreign_keys=[post_id])
    related_post = relationship("TradePost", foreign_keys=[related_post_id])
    author = relationship("User", foreign_keys=[author_id])

    __table_args__ = (
        CheckConstraint(
            "offer_status IS NULL OR offer_status IN ('pending', 'accepted', 'rejected')",
            name="ck_trade_offers_status",
        ),
        Index("idx_trade_offers_post", "post_id", "created_at"),
        Index("idx_trade_offers_related_post", "related_post_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<TradeOffer(id={self.id}, post={self.post_id}, author={self.author_id}, "
            f"status={self.offer_status})>"
        )

    @property
    def is_pending(self) -> bool:
        return bool(self.is_offer) and self.offer_status == OfferStatus.PENDING.value
