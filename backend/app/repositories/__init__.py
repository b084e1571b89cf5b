# backend/app/repositories/__init__.py
"""
Repository layer for TradeSwap.

Repositories own queries and flush; services own commits. Every status
change that can race goes through BaseRepository.update_if, a guarded
UPDATE whose rowcount says whether this writer won.

Usage:
    from app.repositories import RepositoryFactory

    posts = RepositoryFactory.create_post_repository(db)
    won = posts.transition_status(post_id, PostStatus.ACTIVE, PostStatus.TRADING)
"""

from .base_repository import BaseRepository, IRepository
from .chat_message_repository import ChatMessageRepository
from .chat_room_repository import ChatRoomRepository
from .factory import RepositoryFactory
from .offer_repository import OfferRepository
from .post_repository import PostRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "IRepository",
    "RepositoryFactory",
    "UserRepository",
    "PostRepository",
    "OfferRepository",
    "ChatRoomRepository",
    "ChatMessageRepository",
]
