# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, get_current_user_optional
from .database import get_db
from .services import (
    get_chat_room_service,
    get_event_match_service,
    get_offer_negotiation_service,
    get_post_lifecycle_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "get_current_user_optional",
    # Database
    "get_db",
    # Services
    "get_chat_room_service",
    "get_event_match_service",
    "get_offer_negotiation_service",
    "get_post_lifecycle_service",
]
