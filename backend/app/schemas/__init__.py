# backend/app/schemas/__init__.py
"""Pydantic request/response schemas for the TradeSwap API."""

from .chat_room import (
    ChatMessageListResponse,
    ChatMessageResponse,
    ChatRoomListResponse,
    ChatRoomResponse,
    MessageCreate,
)
from .common import PostSummary, UserSummary
from .event_match import StartChatRequest, StartChatResponse, TradeItemSchema
from .offer import (
    AcceptOfferResponse,
    OfferCreate,
    OfferListResponse,
    OfferResponse,
    RejectOfferResponse,
)
from .post import PostCreate, PostListResponse, PostResponse, PostUpdate

__all__ = [
    "UserSummary",
    "PostSummary",
    "PostCreate",
    "PostResponse",
    "PostListResponse",
    "PostUpdate",
    "OfferCreate",
    "OfferResponse",
    "OfferListResponse",
    "AcceptOfferResponse",
    "RejectOfferResponse",
    "ChatRoomResponse",
    "ChatRoomListResponse",
    "MessageCreate",
    "ChatMessageResponse",
    "ChatMessageListResponse",
    "TradeItemSchema",
    "StartChatRequest",
    "StartChatResponse",
]
