# backend/app/schemas/event_match.py
"""
Pydantic schemas for the instant-match hand-off during events.

Quantities are range-checked by the service so that a zero quantity
reports VALIDATION_ERROR like every other criteria problem.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.constants import MAX_ZONE_CODE_LENGTH
from ..domain.event_trade import TradeItem


class TradeItemSchema(BaseModel):
    character_name: str = ""
    quantity: int = 1

    def to_domain(self) -> TradeItem:
        return TradeItem(character_name=self.character_name, quantity=self.quantity)


class StartChatRequest(BaseModel):
    """Request body for POST /event-matches/start-chat."""

    event_id: str
    matched_post_id: str
    give_items: List[TradeItemSchema] = Field(default_factory=list)
    want_items: List[TradeItemSchema] = Field(default_factory=list)
    zone_code: Optional[str] = Field(None, max_length=MAX_ZONE_CODE_LENGTH)
    description: Optional[str] = None


class StartChatResponse(BaseModel):
    chat_room_id: str
    post_id: str
