"""
Pure rules for deciding offers.

Kept free of the ORM session so the acceptance invariants can be
exercised directly with plain objects.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from ..core.enums import OfferStatus


class OfferLike(Protocol):
    id: str
    post_id: str
    is_offer: bool
    related_post_id: Optional[str]
    offer_status: Optional[str]


@dataclass(frozen=True)
class CommittedPair:
    """The two posts an accepted offer commits to each other."""

    post_id: str
    partner_post_id: str

    @property
    def post_ids(self) -> frozenset:
        return frozenset((self.post_id, self.partner_post_id))


def is_pending(offer: OfferLike) -> bool:
    return bool(offer.is_offer) and offer.offer_status == OfferStatus.PENDING.value


def select_superseded_offers(
    accepted_offer_id: str, pair: CommittedPair, candidates: Iterable[OfferLike]
) -> List[OfferLike]:
    """
    Pending offers that can no longer succeed once ``pair`` is committed.

    An offer is superseded when it targets either committed post or
    proposes either committed post as its counter-item. The accepted
    offer itself is never returned. Input order is preserved.
    """
    committed = pair.post_ids
    superseded = []
    for offer in candidates:
        if offer.id == accepted_offer_id or not is_pending(offer):
            continue
        if offer.post_id in committed or offer.related_post_id in committed:
            superseded.append(offer)
    return superseded
