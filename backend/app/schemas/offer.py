# backend/app/schemas/offer.py
"""
Pydantic schemas for offers on trade posts.

The accept and reject responses keep the camelCase keys existing
clients read (myPostId, partnerPostId, chatRoomId, commentId).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import PostSummary, UserSummary


class OfferCreate(BaseModel):
    """Request body for POST /posts/{id}/offers."""

    content: str = Field(..., max_length=1000)
    is_offer: Optional[bool] = None
    related_post_id: Optional[str] = None


class OfferResponse(BaseModel):
    id: str
    post_id: str
    author_id: str
    author: Optional[UserSummary] = None
    content: str
    is_offer: bool
    related_post_id: Optional[str] = None
    related_post: Optional[PostSummary] = None
    offer_status: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OfferListResponse(BaseModel):
    """Response for GET /posts/{id}/offers, in insertion order."""

    offers: List[OfferResponse]


class AcceptOfferResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    my_post_id: str = Field(..., alias="myPostId")
    partner_post_id: str = Field(..., alias="partnerPostId")
    chat_room_id: str = Field(..., alias="chatRoomId")
    rejected_offer_ids: List[str] = Field(
        default_factory=list, alias="rejectedOfferIds"
    )


class RejectOfferResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    comment_id: str = Field(..., alias="commentId")
