# backend/app/routes/v1/event_matches.py
"""
Event match routes - API v1

Endpoints:
    POST /event-matches/start-chat -> Create the caller's event post and open
                                      a chat with the matched post

Candidate search (POST /event-matches/search) is served by the matching
collaborator, not by this API.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_event_match_service
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.event_match import StartChatRequest, StartChatResponse
from ...services.event_match_service import EventMatchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["event-matches-v1"])


@router.post(
    "/start-chat",
    response_model=StartChatResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Matched post already taken"}},
)
async def start_chat(
    payload: StartChatRequest,
    current_user: User = Depends(get_current_user),
    service: EventMatchService = Depends(get_event_match_service),
) -> StartChatResponse:
    try:
        result = await asyncio.to_thread(
            service.start_chat,
            actor_id=current_user.id,
            event_id=payload.event_id,
            matched_post_id=payload.matched_post_id,
            give_items=[item.to_domain() for item in payload.give_items],
            want_items=[item.to_domain() for item in payload.want_items],
            zone_code=payload.zone_code,
            description=payload.description,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return StartChatResponse(chat_room_id=result.chat_room_id, post_id=result.post_id)
