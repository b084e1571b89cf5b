# backend/app/services/chat_room_service.py
"""
Chat Room Service for agreed trades.

Handles business logic for trade chat rooms including:
- Opening the room for two committed posts (idempotent per post pair)
- Posting and listing messages with access control
- Completing the trade, which closes both posts
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import ChatRoomStatus
from ..core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    RoomClosedException,
    ValidationException,
)
from ..models.chat_room import ChatMessage, ChatRoom
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.chat_message_repository import ChatMessageRepository
from ..repositories.chat_room_repository import ChatRoomRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .post_lifecycle_service import PostLifecycleService

logger = logging.getLogger(__name__)


class ChatRoomService(BaseService):
    """
    Service for the 1:1 rooms between the owners of two committed posts.

    Only the two participants can read, write or complete a room.
    """

    def __init__(
        self,
        db: Session,
        chat_room_repository: Optional[ChatRoomRepository] = None,
        chat_message_repository: Optional[ChatMessageRepository] = None,
        post_lifecycle: Optional[PostLifecycleService] = None,
    ):
        """
        Initialize chat room service.

        Args:
            db: Database session
            chat_room_repository: Optional repository for rooms
            chat_message_repository: Optional repository for messages
            post_lifecycle: Optional post lifecycle service used on completion
        """
        super().__init__(db)
        self.chat_room_repository = (
            chat_room_repository or RepositoryFactory.create_chat_room_repository(db)
        )
        self.chat_message_repository = (
            chat_message_repository or RepositoryFactory.create_chat_message_repository(db)
        )
        self.post_lifecycle = post_lifecycle or PostLifecycleService(db)

    def open_room(
        self,
        post_a_id: str,
        post_b_id: str,
        user_a_id: str,
        user_b_id: str,
        source: str = "offer",
    ) -> Tuple[ChatRoom, bool]:
        """
        Return the active room for a post pair, creating it if needed.

        The pair is matched in either order, so a retried accept or a
        repeated start-chat lands in the same room. Called from inside the
        caller's transaction; only flushes.

        Returns:
            Tuple of (room, created)

        Raises:
            ValidationException: If both sides are the same user or post
        """
        if user_a_id == user_b_id:
            raise ValidationException(
                "A chat room needs two different participants",
                details={"user_id": user_a_id},
            )
        if post_a_id == post_b_id:
            raise ValidationException(
                "A chat room needs two different posts",
                details={"post_id": post_a_id},
            )

        existing = self.chat_room_repository.find_active_by_posts(post_a_id, post_b_id)
        if existing is not None:
            self.logger.info(
                "Reusing active chat room",
                extra={"room_id": existing.id, "post_ids": [post_a_id, post_b_id]},
            )
            return existing, False

        room = self.chat_room_repository.create(
            post1_id=post_a_id,
            post2_id=post_b_id,
            user1_id=user_a_id,
            user2_id=user_b_id,
            status=ChatRoomStatus.ACTIVE.value,
        )
        prometheus_metrics.inc_chat_room_opened(source)
        self.logger.info(
            "Chat room opened",
            extra={
                "room_id": room.id,
                "post_ids": [post_a_id, post_b_id],
                "user_ids": [user_a_id, user_b_id],
                "source": source,
            },
        )
        return room, True

    @BaseService.measure_operation("create_chat_room")
    def create(self, post_a_id: str, post_b_id: str, user_a_id: str, user_b_id: str) -> ChatRoom:
        """Standalone, idempotent room creation in its own transaction."""
        with self.transaction():
            room, _ = self.open_room(post_a_id, post_b_id, user_a_id, user_b_id)
        return room

    def get_room(self, room_id: str, actor_id: str) -> ChatRoom:
        """
        Get a room with both posts and both users loaded.

        Raises:
            NotFoundException: Room does not exist
            ForbiddenException: Actor is not a participant
        """
        room = self.chat_room_repository.get_by_id(room_id)
        if room is None:
            raise NotFoundException("Chat room not found", details={"room_id": room_id})
        if not room.is_participant(actor_id):
            raise ForbiddenException(
                "You are not a participant in this chat room",
                details={"room_id": room_id},
            )
        return room

    def list_rooms_for_user(
        self,
        user_id: str,
        status: Optional[ChatRoomStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ChatRoom]:
        return list(
            self.chat_room_repository.find_for_user(
                user_id, status=status, limit=limit, offset=offset
            )
        )

    @BaseService.measure_operation("post_message")
    def post_message(self, room_id: str, sender_id: str, text: str) -> ChatMessage:
        """
        Append a message to an active room.

        Raises:
            NotFoundException: Room does not exist
            ForbiddenException: Sender is not a participant
            RoomClosedException: Room is no longer active
            ValidationException: Message is blank or too long
        """
        room = self.get_room(room_id, sender_id)
        if not room.is_active:
            raise RoomClosedException(room.id, room.status)

        body = (text or "").strip()
        if not body:
            raise ValidationException("Message cannot be empty")
        if len(body) > settings.chat_message_max_length:
            raise ValidationException(
                f"Message must be at most {settings.chat_message_max_length} characters",
                details={"max_length": settings.chat_message_max_length},
            )

        with self.transaction():
            message = self.chat_message_repository.append(room.id, sender_id, body)
            room.updated_at = message.created_at
            self.chat_room_repository.flush()

        prometheus_metrics.inc_chat_message()
        self.logger.debug(
            "Chat message posted", extra={"room_id": room.id, "message_id": message.id}
        )
        return message

    def list_messages(
        self, room_id: str, actor_id: str, after_id: Optional[str] = None
    ) -> List[ChatMessage]:
        """
        Ordered messages of a room, oldest first.

        Reading is allowed after completion; the history stays available
        to both participants.
        """
        room = self.get_room(room_id, actor_id)
        return self.chat_message_repository.list_for_room(room.id, after_id=after_id)

    @BaseService.measure_operation("complete_chat_room")
    def complete(self, room_id: str, actor_id: str) -> ChatRoom:
        """
        Mark the trade done. Single terminal transition of the room.

        Both linked posts move to completed in the same transaction.

        Raises:
            ForbiddenException: Actor is not a participant
            InvalidStateException: Room is not active (including a repeated call)
        """
        room = self.get_room(room_id, actor_id)
        if not room.is_active:
            raise InvalidStateException(
                "This trade has already been closed",
                details={"room_id": room.id, "status": room.status},
            )

        with self.transaction():
            if not self.chat_room_repository.mark_completed(room.id, actor_id):
                raise InvalidStateException(
                    "This trade has already been closed",
                    details={"room_id": room.id},
                )
            for post_id in room.post_ids:
                self.post_lifecycle.mark_completed(post_id)

        prometheus_metrics.inc_chat_room_completed()
        self.logger.info(
            "Chat room completed",
            extra={"room_id": room.id, "completed_by": actor_id, "post_ids": list(room.post_ids)},
        )
        return room
