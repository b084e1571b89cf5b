# backend/app/schemas/chat_room.py
"""
Pydantic schemas for trade chat rooms.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .common import PostSummary, UserSummary


class ChatRoomResponse(BaseModel):
    """Room with both posts and both participants embedded."""

    id: str
    status: str
    post1: PostSummary
    post2: PostSummary
    user1: UserSummary
    user2: UserSummary
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    completed_by_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ChatRoomListResponse(BaseModel):
    rooms: List[ChatRoomResponse]


class MessageCreate(BaseModel):
    """Request body for POST /chat-rooms/{id}/messages.

    Length is checked by the service against settings.chat_message_max_length.
    """

    message: str


class ChatMessageResponse(BaseModel):
    id: str
    room_id: str
    sender_id: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChatMessageListResponse(BaseModel):
    """
    Ordered messages plus the room status.

    Pollers stop once room_status is no longer active.
    """

    messages: List[ChatMessageResponse]
    room_status: str
