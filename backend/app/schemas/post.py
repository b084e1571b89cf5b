# backend/app/schemas/post.py
"""
Pydantic schemas for trade post endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import MAX_ITEM_DESCRIPTION_LENGTH, MAX_ZONE_CODE_LENGTH
from .common import UserSummary


class PostCreate(BaseModel):
    """Request body for POST /posts. Blank values are rejected by the service."""

    give_description: str = Field(..., max_length=MAX_ITEM_DESCRIPTION_LENGTH)
    want_description: str = Field(..., max_length=MAX_ITEM_DESCRIPTION_LENGTH)
    description: Optional[str] = None
    location_name: Optional[str] = Field(None, max_length=200)
    event_id: Optional[str] = Field(None, max_length=64)
    zone_code: Optional[str] = Field(None, max_length=MAX_ZONE_CODE_LENGTH)


class PostUpdate(BaseModel):
    """Request body for PUT /posts/{id}. Omitted fields keep their value."""

    give_description: Optional[str] = Field(None, max_length=MAX_ITEM_DESCRIPTION_LENGTH)
    want_description: Optional[str] = Field(None, max_length=MAX_ITEM_DESCRIPTION_LENGTH)
    description: Optional[str] = None
    location_name: Optional[str] = Field(None, max_length=200)


class PostResponse(BaseModel):
    id: str
    owner_id: str
    owner: Optional[UserSummary] = None
    give_description: str
    want_description: str
    description: Optional[str] = None
    location_name: Optional[str] = None
    event_id: Optional[str] = None
    zone_code: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostListResponse(BaseModel):
    """Response for GET /posts and the per-user listings."""

    posts: List[PostResponse]
    count: int
