# backend/app/models/user.py
"""
User model for the trade platform.

Identity and sessions are owned by the upstream auth service. This table
keeps the projection the trade core needs: who owns a post, who wrote an
offer, and the public summary shown next to chat messages.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Minimal user record referenced by posts, offers and chat rooms.

    Attributes:
        id: ULID primary key (matches the id issued by the auth service)
        username: Unique handle
        display_name: Optional name shown in the UI
        avatar_url: Optional avatar image URL
        is_active: Inactive users cannot act on the trade core
        created_at: Account creation timestamp
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    username = Column(String(50), unique=True, index=True, nullable=False)
    display_name = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    posts = relationship("TradePost", back_populates="owner", foreign_keys="TradePost.owner_id")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
