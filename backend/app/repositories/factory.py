# backend/app/repositories/factory.py
"""
Repository Factory for the trade platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .chat_message_repository import ChatMessageRepository
    from .chat_room_repository import ChatRoomRepository
    from .offer_repository import OfferRepository
    from .post_repository import PostRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for user lookups."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_post_repository(db: Session) -> "PostRepository":
        """Create repository for trade post operations."""
        from .post_repository import PostRepository

        return PostRepository(db)

    @staticmethod
    def create_offer_repository(db: Session) -> "OfferRepository":
        """Create repository for offers and comments on posts."""
        from .offer_repository import OfferRepository

        return OfferRepository(db)

    @staticmethod
    def create_chat_room_repository(db: Session) -> "ChatRoomRepository":
        """Create repository for trade chat rooms."""
        from .chat_room_repository import ChatRoomRepository

        return ChatRoomRepository(db)

    @staticmethod
    def create_chat_message_repository(db: Session) -> "ChatMessageRepository":
        """Create repository for chat room messages."""
        from .chat_message_repository import ChatMessageRepository

        return ChatMessageRepository(db)
