# backend/app/repositories/chat_message_repository.py
"""
Chat Message Repository.

Messages are ordered by (created_at, id). created_at is assigned here and
kept strictly increasing per room, so two messages posted within the same
clock tick still sort in the order they were appended.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from ..models.chat_room import ChatMessage
from .base_repository import BaseRepository

_MIN_STEP = timedelta(microseconds=1)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ChatMessageRepository(BaseRepository[ChatMessage]):
    def __init__(self, db: Session):
        super().__init__(db, ChatMessage)

    def get_last(self, room_id: str) -> Optional[ChatMessage]:
        return (
            self._build_query()
            .filter(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .first()
        )

    def append(self, room_id: str, sender_id: str, text: str) -> ChatMessage:
        """
        Append a message with a created_at later than any existing one in the room.
        """
        now = datetime.now(timezone.utc)
        last = self.get_last(room_id)
        if last is not None:
            floor = _as_utc(last.created_at) + _MIN_STEP
            if now < floor:
                now = floor
        return self.create(room_id=room_id, sender_id=sender_id, message=text, created_at=now)

    def list_for_room(
        self, room_id: str, after_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[ChatMessage]:
        """
        Messages of a room in (created_at, id) order.

        Args:
            room_id: Room to read
            after_id: Only return messages strictly after this one. An id
                that is not in the room yields the full history.
            limit: Optional cap on the number of messages
        """
        query = (
            self._build_query()
            .options(joinedload(ChatMessage.sender))
            .filter(ChatMessage.room_id == room_id)
        )

        if after_id:
            anchor = self.find_one_by(id=after_id, room_id=room_id)
            if anchor is not None:
                query = query.filter(
                    or_(
                        ChatMessage.created_at > anchor.created_at,
                        and_(
                            ChatMessage.created_at == anchor.created_at,
                            ChatMessage.id > anchor.id,
                        ),
                    )
                )

        query = query.order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        if limit is not None:
            query = query.limit(limit)
        return self._execute_query(query)
