# backend/app/routes/v1/chat_rooms.py
"""
Trade chat room routes - API v1

Versioned chat endpoints under /api/v1/chat-rooms.
All business logic delegated to ChatRoomService.

Endpoints:
    GET  /my                       -> Caller's rooms
    GET  /{room_id}                -> Room with both posts and users
    GET  /{room_id}/messages       -> Ordered messages (poll; after_id for deltas)
    POST /{room_id}/messages       -> Send a message
    POST /{room_id}/complete       -> Mark the trade complete
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_chat_room_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.enums import ChatRoomStatus
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.chat_room import (
    ChatMessageListResponse,
    ChatMessageResponse,
    ChatRoomListResponse,
    ChatRoomResponse,
    MessageCreate,
)
from ...services.chat_room_service import ChatRoomService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat-rooms-v1"])


@router.get("/my", response_model=ChatRoomListResponse)
async def list_my_chat_rooms(
    status_filter: Optional[ChatRoomStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    service: ChatRoomService = Depends(get_chat_room_service),
) -> ChatRoomListResponse:
    rooms = await asyncio.to_thread(
        service.list_rooms_for_user,
        current_user.id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return ChatRoomListResponse(rooms=[ChatRoomResponse.model_validate(r) for r in rooms])


@router.get("/{room_id}", response_model=ChatRoomResponse)
async def get_chat_room(
    room_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: ChatRoomService = Depends(get_chat_room_service),
) -> ChatRoomResponse:
    try:
        room = await asyncio.to_thread(service.get_room, room_id, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return ChatRoomResponse.model_validate(room)


@router.get("/{room_id}/messages", response_model=ChatMessageListResponse)
async def list_messages(
    room_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    after_id: Optional[str] = Query(None, pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: ChatRoomService = Depends(get_chat_room_service),
) -> ChatMessageListResponse:
    """
    Ordered, restartable message history.

    Clients poll this endpoint; room_status tells them when to stop.
    """

    def _load():
        room = service.get_room(room_id, current_user.id)
        messages = service.list_messages(room.id, current_user.id, after_id=after_id)
        return room.status, messages

    try:
        room_status, messages = await asyncio.to_thread(_load)
    except DomainException as exc:
        handle_domain_exception(exc)
    return ChatMessageListResponse(
        messages=[ChatMessageResponse.model_validate(m) for m in messages],
        room_status=room_status,
    )


@router.post(
    "/{room_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    payload: MessageCreate,
    room_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: ChatRoomService = Depends(get_chat_room_service),
) -> ChatMessageResponse:
    try:
        message = await asyncio.to_thread(
            service.post_message, room_id, current_user.id, payload.message
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return ChatMessageResponse.model_validate(message)


@router.post(
    "/{room_id}/complete",
    response_model=ChatRoomResponse,
    responses={409: {"description": "Room already completed"}},
)
async def complete_chat_room(
    room_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: ChatRoomService = Depends(get_chat_room_service),
) -> ChatRoomResponse:
    try:
        room = await asyncio.to_thread(service.complete, room_id, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return ChatRoomResponse.model_validate(room)
