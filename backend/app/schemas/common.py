# backend/app/schemas/common.py
"""Shared response fragments."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Minimal user info embedded in offers and chat rooms."""

    id: str
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PostSummary(BaseModel):
    """Compact post view embedded in offers and chat rooms."""

    id: str
    owner_id: str
    give_description: str
    want_description: str
    status: str
    event_id: Optional[str] = None
    zone_code: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
