# backend/app/models/trade_post.py
"""
TradePost model: one give/want listing.

Status lifecycle:
    active -> trading -> completed
    active <-> private   (only while no offer has been accepted)

Transitions are performed by PostLifecycleService; the model only
exposes predicates so the services can check legality.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import MAX_ITEM_DESCRIPTION_LENGTH, MAX_ZONE_CODE_LENGTH
from ..core.enums import PostStatus
from ..database import Base


class TradePost(Base):
    """
    Give/want listing owned by a single user.

    Attributes:
        id: ULID primary key
        owner_id: User who created the listing
        give_description: What the owner gives away
        want_description: What the owner wants in return
        description: Optional free text
        location_name: Optional meeting place
        event_id: Set for posts created during a live event
        zone_code: Display-only location tag inside an event venue
        status: active | trading | completed | private
    """

    __tablename__ = "trade_posts"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    owner_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    give_description = Column(String(MAX_ITEM_DESCRIPTION_LENGTH), nullable=False)
    want_description = Column(String(MAX_ITEM_DESCRIPTION_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    location_name = Column(String(200), nullable=True)
    event_id = Column(String(64), nullable=True)
    zone_code = Column(String(MAX_ZONE_CODE_LENGTH), nullable=True)
    status = Column(String(20), nullable=False, default=PostStatus.ACTIVE.value)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    owner = relationship("User", back_populates="posts", foreign_keys=[owner_id])
    offers = relationship(
        "TradeOffer",
        back_populates="post",
        foreign_keys="TradeOffer.post_id",
        order_by="TradeOffer.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'trading', 'completed', 'private')",
            name="ck_trade_posts_status",
        ),
        Index("idx_trade_posts_owner", "owner_id"),
        Index("idx_trade_posts_status", "status"),
        Index("idx_trade_posts_event", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<TradePost(id={self.id}, owner={self.owner_id}, status={self.status})>"

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.owner_id == user_id

    @property
    def is_active(self) -> bool:
        return bool(self.status == PostStatus.ACTIVE.value)

    @property
    def is_deletable(self) -> bool:
        """Only untouched listings may be removed; never while a trade is in flight."""
        return self.is_active

    @property
    def is_editable(self) -> bool:
        """Text can change until the post is committed to a trade."""
        return self.status in (PostStatus.ACTIVE.value, PostStatus.PRIVATE.value)
