# backend/app/routes/v1/offers.py
"""
Offer routes - API v1

Endpoints:
    GET  /posts/{post_id}/offers                      -> Offers in insertion order
    POST /posts/{post_id}/offers                      -> Comment or propose an exchange
    POST /posts/{post_id}/offers/{offer_id}/accept    -> Accept (owner only)
    POST /posts/{post_id}/offers/{offer_id}/reject    -> Reject (owner only)

A lost acceptance race answers 409 with code INVALID_STATE; clients
should refresh the post rather than retry.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, status

from ...api.dependencies.auth import get_current_user, get_current_user_optional
from ...api.dependencies.services import get_offer_negotiation_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.offer import (
    AcceptOfferResponse,
    OfferCreate,
    OfferListResponse,
    OfferResponse,
    RejectOfferResponse,
)
from ...services.offer_negotiation_service import OfferNegotiationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["offers-v1"])


@router.get("/posts/{post_id}/offers", response_model=OfferListResponse)
async def list_offers(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: OfferNegotiationService = Depends(get_offer_negotiation_service),
) -> OfferListResponse:
    try:
        offers = await asyncio.to_thread(
            service.list_offers, post_id, current_user.id if current_user else None
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return OfferListResponse(offers=[OfferResponse.model_validate(o) for o in offers])


@router.post(
    "/posts/{post_id}/offers",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_offer(
    payload: OfferCreate,
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: OfferNegotiationService = Depends(get_offer_negotiation_service),
) -> OfferResponse:
    """Create a comment; with related_post_id it becomes a pending exchange offer."""
    try:
        offer = await asyncio.to_thread(
            service.create_offer,
            post_id=post_id,
            author_id=current_user.id,
            content=payload.content,
            related_post_id=payload.related_post_id,
            is_offer=payload.is_offer,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return OfferResponse.model_validate(offer)


@router.post(
    "/posts/{post_id}/offers/{offer_id}/accept",
    response_model=AcceptOfferResponse,
    responses={409: {"description": "Offer already handled or post no longer active"}},
)
async def accept_offer(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    offer_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: OfferNegotiationService = Depends(get_offer_negotiation_service),
) -> AcceptOfferResponse:
    try:
        result = await asyncio.to_thread(service.accept_offer, post_id, offer_id, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return AcceptOfferResponse(
        my_post_id=result.my_post_id,
        partner_post_id=result.partner_post_id,
        chat_room_id=result.chat_room_id,
        rejected_offer_ids=result.rejected_offer_ids,
    )


@router.post("/posts/{post_id}/offers/{offer_id}/reject", response_model=RejectOfferResponse)
async def reject_offer(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    offer_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: OfferNegotiationService = Depends(get_offer_negotiation_service),
) -> RejectOfferResponse:
    try:
        comment_id = await asyncio.to_thread(
            service.reject_offer, post_id, offer_id, current_user.id
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return RejectOfferResponse(comment_id=comment_id)
