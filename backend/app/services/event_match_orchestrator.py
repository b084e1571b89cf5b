# backend/app/services/event_match_orchestrator.py
"""
Event Match Orchestrator

Client-side workflow used during live events to find an instant-trade
partner and hand off into a chat room:

    CriteriaStep --search--> ResultsStep --start_chat--> StartingStep
                                  ^                          |
                                  +------- failure ----------+
                                                             |
                                                   success -> ChatStartedStep

The current step is one of four frozen dataclasses, so there is no way
to hold candidates without criteria, or to select a candidate while a
start-chat request is outstanding.
"""

import dataclasses
from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Tuple, Union

from ..core.config import settings
from ..core.exceptions import DomainException, InvalidStateException, ValidationException
from ..domain.event_trade import TradeItem, validate_criteria
from ..integrations.trade_api_client import MatchCandidate, TradeApiClient
from .base import BaseAsyncWorkflow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CriteriaStep:
    give_items: Tuple[TradeItem, ...] = ()
    want_items: Tuple[TradeItem, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class ResultsStep:
    criteria: CriteriaStep
    matches: Tuple[MatchCandidate, ...]
    total_count: int
    has_more: bool
    error: Optional[str] = None

    def candidate(self, post_id: str) -> Optional[MatchCandidate]:
        return next((m for m in self.matches if m.post_id == post_id), None)


@dataclass(frozen=True)
class StartingStep:
    results: ResultsStep
    post_id: str


@dataclass(frozen=True)
class ChatStartedStep:
    chat_room_id: str
    matched_post_id: str
    post_id: Optional[str] = None


MatchStep = Union[CriteriaStep, ResultsStep, StartingStep, ChatStartedStep]


class EventMatchOrchestrator(BaseAsyncWorkflow):
    """
    Drives one user's match session against the trade API.

    Only one start-chat call can be in flight; the step switches to
    StartingStep before the request is awaited, so a second call on the
    same event loop sees it and is refused.
    """

    def __init__(
        self,
        client: TradeApiClient,
        event_id: str,
        *,
        page_size: Optional[int] = None,
        zone_code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        super().__init__()
        if not event_id:
            raise ValueError("event_id must be provided")
        self.client = client
        self.event_id = event_id
        self.page_size = page_size or settings.event_match_page_size
        self.zone_code = zone_code
        self.description = description
        self._step: MatchStep = CriteriaStep()

    @property
    def step(self) -> MatchStep:
        return self._step

    @property
    def can_select(self) -> bool:
        return isinstance(self._step, ResultsStep)

    def set_criteria(
        self, give_items: Sequence[TradeItem], want_items: Sequence[TradeItem]
    ) -> CriteriaStep:
        """Replace the criteria; any loaded results are discarded."""
        self._ensure_idle("change criteria")
        self._step = CriteriaStep(give_items=tuple(give_items), want_items=tuple(want_items))
        return self._step

    def validate(self) -> Tuple[Tuple[TradeItem, ...], Tuple[TradeItem, ...]]:
        """
        Return the cleaned criteria, blank rows dropped.

        Raises:
            ValidationException: Unless both lists hold a named row with quantity >= 1
        """
        criteria = self._criteria()
        give, want = validate_criteria(criteria.give_items, criteria.want_items)
        return tuple(give), tuple(want)

    @BaseAsyncWorkflow.measure_operation("event_match_search")
    async def search(self, offset: int = 0, limit: Optional[int] = None) -> ResultsStep:
        """
        Run the match query and move to ResultsStep.

        On failure the previous step is kept with the error recorded, and
        the exception is re-raised.
        """
        self._ensure_idle("search")
        try:
            give, want = self.validate()
        except ValidationException as exc:
            self._record_error(exc)
            raise

        previous = self._step
        page_limit = limit or self.page_size
        try:
            page = await self.client.search_event_matches(
                event_id=self.event_id,
                give_items=give,
                want_items=want,
                offset=offset,
                limit=page_limit,
            )
        except DomainException as exc:
            self._record_error(exc)
            raise

        # A start-chat may have begun while the query was outstanding
        if self._step is not previous:
            raise InvalidStateException(
                "Selection changed while searching", details={"event_id": self.event_id}
            )

        self._step = ResultsStep(
            criteria=CriteriaStep(give_items=give, want_items=want),
            matches=tuple(page.matches),
            total_count=page.total_count,
            has_more=page.has_more,
        )
        self.logger.info(
            "Event match search completed",
            extra={
                "event_id": self.event_id,
                "offset": offset,
                "returned": len(page.matches),
                "total_count": page.total_count,
            },
        )
        return self._step

    @BaseAsyncWorkflow.measure_operation("event_match_load_more")
    async def load_more(self) -> ResultsStep:
        """
        Append the next page to the current results.

        Candidates already shown are not repeated, even if the collaborator
        returns them again after the underlying data shifted.
        """
        current = self._step
        if not isinstance(current, ResultsStep):
            raise InvalidStateException("Search before loading more results")
        if not current.has_more:
            return current

        try:
            page = await self.client.search_event_matches(
                event_id=self.event_id,
                give_items=current.criteria.give_items,
                want_items=current.criteria.want_items,
                offset=len(current.matches),
                limit=self.page_size,
            )
        except DomainException as exc:
            self._record_error(exc)
            raise

        # The step may have moved while we were waiting
        if self._step is not current:
            raise InvalidStateException("Results changed while loading more")

        seen = {m.post_id for m in current.matches}
        fresh = []
        for candidate in page.matches:
            if candidate.post_id not in seen:
                seen.add(candidate.post_id)
                fresh.append(candidate)

        self._step = dataclasses.replace(
            current,
            matches=current.matches + tuple(fresh),
            total_count=page.total_count,
            has_more=page.has_more and bool(page.matches),
            error=None,
        )
        return self._step

    @BaseAsyncWorkflow.measure_operation("event_match_start_chat")
    async def start_chat(self, post_id: str) -> ChatStartedStep:
        """
        Start a chat with one of the listed candidates.

        Raises:
            InvalidStateException: No results loaded, or a start-chat is already in flight
            ValidationException: post_id is not one of the listed candidates
        """
        current = self._step
        if isinstance(current, StartingStep):
            raise InvalidStateException(
                "A chat is already being started",
                details={"post_id": current.post_id},
            )
        if not isinstance(current, ResultsStep):
            raise InvalidStateException("Search for matches before starting a chat")
        if current.candidate(post_id) is None:
            raise ValidationException(
                "Select one of the listed matches", details={"post_id": post_id}
            )

        starting = StartingStep(results=dataclasses.replace(current, error=None), post_id=post_id)
        self._step = starting
        self.logger.info(
            "Starting event match chat", extra={"event_id": self.event_id, "post_id": post_id}
        )
        try:
            started = await self.client.start_event_chat(
                event_id=self.event_id,
                matched_post_id=post_id,
                give_items=current.criteria.give_items,
                want_items=current.criteria.want_items,
                zone_code=self.zone_code,
                description=self.description,
            )
        except DomainException as exc:
            self._step = dataclasses.replace(current, error=exc.message)
            self.logger.warning(
                "Event match chat failed",
                extra={"event_id": self.event_id, "post_id": post_id, "code": exc.code},
            )
            raise
        except BaseException:
            # Cancelled (view closed) or unexpected failure: selection is open again
            if self._step is starting:
                self._step = dataclasses.replace(current, error="Starting the chat was interrupted")
            raise

        self._step = ChatStartedStep(
            chat_room_id=started.chat_room_id,
            matched_post_id=post_id,
            post_id=started.post_id,
        )
        return self._step

    def reset(self) -> CriteriaStep:
        self._ensure_idle("reset")
        self._step = CriteriaStep()
        return self._step

    # Helpers

    def _criteria(self) -> CriteriaStep:
        step = self._step
        if isinstance(step, CriteriaStep):
            return step
        if isinstance(step, ResultsStep):
            return step.criteria
        raise InvalidStateException("No criteria in the current step")

    def _ensure_idle(self, action: str) -> None:
        if isinstance(self._step, StartingStep):
            raise InvalidStateException(
                f"Cannot {action} while a chat is being started",
                details={"post_id": self._step.post_id},
            )

    def _record_error(self, exc: DomainException) -> None:
        step = self._step
        if isinstance(step, (CriteriaStep, ResultsStep)):
            self._step = dataclasses.replace(step, error=exc.message)
