# backend/app/repositories/chat_room_repository.py
"""
Chat Room Repository for trade chats.

Provides data access methods for the 1:1 rooms opened between the
owners of two committed posts.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence, cast

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session, joinedload

from ..core.enums import ChatRoomStatus
from ..models.chat_room import ChatRoom
from .base_repository import BaseRepository


class ChatRoomRepository(BaseRepository[ChatRoom]):
    """
    Repository for ChatRoom entity operations.

    Handles:
    - Finding the active room for a post pair in either order
    - Listing rooms for a participant
    - Guarded completion
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        super().__init__(db, ChatRoom)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(ChatRoom.post1),
            joinedload(ChatRoom.post2),
            joinedload(ChatRoom.user1),
            joinedload(ChatRoom.user2),
        )

    def find_active_by_posts(self, post_a_id: str, post_b_id: str) -> Optional[ChatRoom]:
        """
        Find the active room linking two posts.

        Matches regardless of which post was stored as post1.
        """
        result = (
            self.db.query(ChatRoom)
            .filter(
                ChatRoom.status == ChatRoomStatus.ACTIVE.value,
                or_(
                    and_(ChatRoom.post1_id == post_a_id, ChatRoom.post2_id == post_b_id),
                    and_(ChatRoom.post1_id == post_b_id, ChatRoom.post2_id == post_a_id),
                ),
            )
            .first()
        )
        return cast(Optional[ChatRoom], result)

    def find_for_user(
        self,
        user_id: str,
        status: Optional[ChatRoomStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[ChatRoom]:
        """
        Rooms where a user is a participant, most recently updated first.
        """
        query = self._apply_eager_loading(self._build_query()).filter(
            or_(ChatRoom.user1_id == user_id, ChatRoom.user2_id == user_id)
        )
        if status is not None:
            query = query.filter(ChatRoom.status == status.value)
        query = query.order_by(ChatRoom.updated_at.desc(), ChatRoom.id.desc())
        return self._execute_query(query.offset(offset).limit(limit))

    def mark_completed(self, room_id: str, completed_by_id: str) -> bool:
        """
        Complete an active room.

        Returns False if the room is missing or no longer active.
        """
        now = datetime.now(timezone.utc)
        return self.update_if(
            room_id,
            {"status": ChatRoomStatus.ACTIVE.value},
            status=ChatRoomStatus.COMPLETED.value,
            completed_at=now,
            completed_by_id=completed_by_id,
            updated_at=now,
        )
