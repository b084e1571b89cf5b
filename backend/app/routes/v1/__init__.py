# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
All new endpoints should be added here.
"""

from . import chat_rooms, event_matches, offers, posts

__all__ = [
    "chat_rooms",
    "event_matches",
    "offers",
    "posts",
]
