"""
Database models for the trade platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Users (projection of the auth service identity)
- Trade posts and the offers attached to them
- Chat rooms and their messages
"""

from .chat_room import ChatMessage, ChatRoom
from .trade_offer import TradeOffer
from .trade_post import TradePost
from .user import User

__all__ = [
    "ChatMessage",
    "ChatRoom",
    "TradeOffer",
    "TradePost",
    "User",
]
