# backend/app/services/event_match_service.py
"""
Event Match Service

Server side of the instant-match hand-off during live events. The
initiator picked a candidate post from the match results; we create the
initiator's own event post from their criteria and open a chat room with
the candidate, skipping the offer step entirely.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from ..core.enums import PostStatus
from ..core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    InvalidTransitionException,
    ValidationException,
)
from ..domain.event_trade import TradeItem, render_items, validate_criteria
from ..repositories.factory import RepositoryFactory
from ..repositories.post_repository import PostRepository
from .base import BaseService
from .chat_room_service import ChatRoomService
from .post_lifecycle_service import PostLifecycleService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartChatResult:
    chat_room_id: str
    post_id: str


class EventMatchService(BaseService):
    def __init__(
        self,
        db: Session,
        post_repository: Optional[PostRepository] = None,
        post_lifecycle: Optional[PostLifecycleService] = None,
        chat_rooms: Optional[ChatRoomService] = None,
    ):
        super().__init__(db)
        self.post_repository = post_repository or RepositoryFactory.create_post_repository(db)
        self.post_lifecycle = post_lifecycle or PostLifecycleService(
            db, post_repository=self.post_repository
        )
        self.chat_rooms = chat_rooms or ChatRoomService(db, post_lifecycle=self.post_lifecycle)

    @BaseService.measure_operation("start_event_chat")
    def start_chat(
        self,
        actor_id: str,
        event_id: str,
        matched_post_id: str,
        give_items: Sequence[TradeItem],
        want_items: Sequence[TradeItem],
        zone_code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StartChatResult:
        """
        Commit the initiator and the matched post to a trade.

        Raises:
            ValidationException: Criteria invalid or event_id missing
            NotFoundException: Matched post does not exist
            ForbiddenException: Matched post belongs to the initiator
            InvalidStateException: Matched post is no longer active
        """
        if not (event_id or "").strip():
            raise ValidationException("event_id is required", details={"field": "event_id"})
        give, want = validate_criteria(give_items, want_items)

        matched = self.post_lifecycle.get_post(matched_post_id)
        if matched.is_owned_by(actor_id):
            raise ForbiddenException(
                "You cannot start a trade with your own post",
                details={"post_id": matched_post_id},
            )
        if matched.status != PostStatus.ACTIVE.value:
            raise InvalidStateException(
                "This post has already been taken",
                details={"post_id": matched_post_id, "status": matched.status},
            )

        with self.transaction():
            own_post = self.post_repository.create(
                owner_id=actor_id,
                give_description=render_items(give),
                want_description=render_items(want),
                description=(description or "").strip() or None,
                event_id=event_id.strip(),
                zone_code=(zone_code or "").strip() or None,
                status=PostStatus.ACTIVE.value,
            )
            try:
                self.post_lifecycle.mark_trading(matched.id)
                self.post_lifecycle.mark_trading(own_post.id)
            except InvalidTransitionException as exc:
                raise InvalidStateException(
                    "This post has already been taken", details=exc.details
                ) from exc

            room, _ = self.chat_rooms.open_room(
                own_post.id, matched.id, actor_id, matched.owner_id, source="event_match"
            )

        self.logger.info(
            "Event match chat started",
            extra={
                "event_id": event_id,
                "post_id": own_post.id,
                "matched_post_id": matched.id,
                "chat_room_id": room.id,
            },
        )
        return StartChatResult(chat_room_id=room.id, post_id=own_post.id)
