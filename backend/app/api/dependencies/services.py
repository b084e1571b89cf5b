# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. Every service built
for one request shares that request's session, so a cross-service
operation commits or rolls back as a unit.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.chat_room_service import ChatRoomService
from ...services.event_match_service import EventMatchService
from ...services.offer_negotiation_service import OfferNegotiationService
from ...services.post_lifecycle_service import PostLifecycleService
from .database import get_db


def get_post_lifecycle_service(db: Session = Depends(get_db)) -> PostLifecycleService:
    """Get PostLifecycleService instance."""
    return PostLifecycleService(db)


def get_chat_room_service(
    db: Session = Depends(get_db),
    post_lifecycle: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> ChatRoomService:
    """Get ChatRoomService wired to the request's post lifecycle service."""
    return ChatRoomService(db, post_lifecycle=post_lifecycle)


def get_offer_negotiation_service(
    db: Session = Depends(get_db),
    post_lifecycle: PostLifecycleService = Depends(get_post_lifecycle_service),
    chat_rooms: ChatRoomService = Depends(get_chat_room_service),
) -> OfferNegotiationService:
    """
    Get offer negotiation service instance with all dependencies.

    Args:
        db: Database session
        post_lifecycle: Moves both posts to trading on accept
        chat_rooms: Opens the room for the accepted pair

    Returns:
        OfferNegotiationService instance
    """
    return OfferNegotiationService(
        db,
        post_repository=post_lifecycle.post_repository,
        offer_repository=post_lifecycle.offer_repository,
        post_lifecycle=post_lifecycle,
        chat_rooms=chat_rooms,
    )


def get_event_match_service(
    db: Session = Depends(get_db),
    post_lifecycle: PostLifecycleService = Depends(get_post_lifecycle_service),
    chat_rooms: ChatRoomService = Depends(get_chat_room_service),
) -> EventMatchService:
    """Get EventMatchService for the instant-match hand-off."""
    return EventMatchService(
        db,
        post_repository=post_lifecycle.post_repository,
        post_lifecycle=post_lifecycle,
        chat_rooms=chat_rooms,
    )
