# backend/app/models/chat_room.py
"""
Chat room model for agreed trades.

A room links exactly two posts and their two owners. It is opened either
when a post owner accepts an offer or when an instant match starts a chat,
and it is closed exactly once when a participant marks the trade complete.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import ChatRoomStatus
from ..database import Base


class ChatRoom(Base):
    """
    1:1 channel between the owners of two committed posts.

    Attributes:
        id: ULID primary key
        post1_id / post2_id: The two posts being exchanged
        user1_id / user2_id: Their owners (always distinct)
        status: active | completed | cancelled
        completed_at / completed_by_id: Set by the completing participant
    """

    __tablename__ = "trade_chat_rooms"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    post1_id = Column(String(26), ForeignKey("trade_posts.id"), nullable=False)
    post2_id = Column(String(26), ForeignKey("trade_posts.id"), nullable=False)
    user1_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user2_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=ChatRoomStatus.ACTIVE.value)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)
    completed_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    post1 = relationship("TradePost", foreign_keys=[post1_id])
    post2 = relationship("TradePost", foreign_keys=[post2_id])
    user1 = relationship("User", foreign_keys=[user1_id])
    user2 = relationship("User", foreign_keys=[user2_id])
    messages = relationship(
        "ChatMessage",
        back_populates="room",
        order_by="ChatMessage.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'completed', 'cancelled')",
            name="ck_trade_chat_rooms_status",
        ),
        CheckConstraint("user1_id <> user2_id", name="ck_trade_chat_rooms_distinct_users"),
        CheckConstraint("post1_id <> post2_id", name="ck_trade_chat_rooms_distinct_posts"),
        Index("idx_trade_chat_rooms_user1", "user1_id"),
        Index("idx_trade_chat_rooms_user2", "user2_id"),
        Index("idx_trade_chat_rooms_posts", "post1_id", "post2_id"),
    )

    def __repr__(self) -> str:
        return f"<ChatRoom(id={self.id}, users=({self.user1_id}, {self.user2_id}), status={self.status})>"

    def is_participant(self, user_id: str) -> bool:
        """Check if a user is one of the two room members."""
        return user_id in (self.user1_id, self.user2_id)

    @property
    def is_active(self) -> bool:
        return bool(self.status == ChatRoomStatus.ACTIVE.value)

    @property
    def post_ids(self) -> tuple[str, str]:
        return str(self.post1_id), str(self.post2_id)


class ChatMessage(Base):
    """
    Message appended to an active chat room.

    created_at is assigned by the repository and is strictly increasing
    within a room, so (created_at, id) gives a stable total order.
    """

    __tablename__ = "trade_chat_messages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    room_id = Column(
        String(26), ForeignKey("trade_chat_rooms.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    room = relationship("ChatRoom", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id])

    __table_args__ = (Index("idx_trade_chat_messages_room_created", "room_id", "created_at"),)
