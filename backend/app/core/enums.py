# backend/app/core/enums.py
"""
Core enums for the trade platform.

Status values are stored as plain strings in the database; these enums
give the services a single source of truth for the legal values.
"""

from enum import Enum


class PostStatus(str, Enum):
    """Lifecycle of a give/want listing."""

    ACTIVE = "active"
    TRADING = "trading"
    COMPLETED = "completed"
    PRIVATE = "private"


class OfferStatus(str, Enum):
    """Decision state of an exchange proposal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ChatRoomStatus(str, Enum):
    """Lifecycle of a trade chat room."""

    ACTIVE = "active"
    COMPLETED = "completed"
    # Reserved for abandonment flows; no operation reaches it yet.
    CANCELLED = "cancelled"
