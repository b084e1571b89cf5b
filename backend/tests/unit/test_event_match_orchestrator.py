"""
Tests for EventMatchOrchestrator.

The collaborator is simulated with an httpx.MockTransport serving a
fixed ranked list of candidate posts.
"""

import asyncio
import json

import httpx
from httpx import MockTransport, Response
import pytest
import pytest_asyncio

from app.core.exceptions import InvalidStateException, NotFoundException, ValidationException
from app.domain.event_trade import TradeItem
from app.integrations.trade_api_client import TradeApiClient
from app.monitoring.prometheus_metrics import REGISTRY
from app.services.event_match_orchestrator import (
    ChatStartedStep,
    CriteriaStep,
    EventMatchOrchestrator,
    ResultsStep,
    StartingStep,
)

BASE_URL = "http://trade.test/api/v1"
GIVE = [TradeItem("CharA", 1)]
WANT = [TradeItem("CharB", 2)]


class FakeTradeApi:
    """Serves a ranked candidate list and records start-chat calls."""

    def __init__(self, total: int = 25):
        self.post_ids = [f"P{i:02d}" for i in range(total)]
        self.searches = []
        self.start_calls = []
        self.start_gate = None
        self.search_gate = None
        self.start_status = 201

    async def __call__(self, request: httpx.Request) -> Response:
        body = json.loads(request.read() or b"{}")
        if request.url.path.endswith("/event-matches/search"):
            self.searches.append(body)
            if self.search_gate is not None:
                await self.search_gate.wait()
            offset, limit = body["offset"], body["limit"]
            page = self.post_ids[offset : offset + limit]
            return Response(
                200,
                json={
                    "matches": [{"post_id": pid} for pid in page],
                    "total_count": len(self.post_ids),
                    "has_more": offset + len(page) < len(self.post_ids),
                },
            )
        if request.url.path.endswith("/event-matches/start-chat"):
            self.start_calls.append(body)
            if self.start_gate is not None:
                await self.start_gate.wait()
            if self.start_status != 201:
                return Response(
                    self.start_status,
                    json={"detail": "This post has already been taken", "code": "INVALID_STATE"},
                )
            return Response(201, json={"chat_room_id": "ROOM1", "post_id": "MINE"})
        return Response(404, json={"detail": "unknown", "code": "NOT_FOUND"})


@pytest.fixture
def api():
    return FakeTradeApi()


@pytest_asyncio.fixture
async def orchestrator(api):
    client = TradeApiClient(user_id="USER1", base_url=BASE_URL, transport=MockTransport(api))
    workflow = EventMatchOrchestrator(client, "E1", page_size=10)
    workflow.set_criteria(GIVE, WANT)
    yield workflow
    await client.aclose()


@pytest.mark.asyncio
async def test_search_then_load_more_pages_without_duplicates(orchestrator, api):
    first = await orchestrator.search()

    assert isinstance(first, ResultsStep)
    assert len(first.matches) == 10
    assert first.total_count == 25
    assert first.has_more is True
    assert api.searches[0]["offset"] == 0
    assert api.searches[0]["limit"] == 10

    second = await orchestrator.load_more()

    assert api.searches[1]["offset"] == 10
    ids = [m.post_id for m in second.matches]
    assert len(ids) == 20
    assert len(set(ids)) == 20

    third = await orchestrator.load_more()
    assert len(third.matches) == 25
    assert third.has_more is False


@pytest.mark.asyncio
async def test_load_more_skips_candidates_already_shown(orchestrator, api):
    await orchestrator.search()
    # A new post ranked first shifts every later candidate by one
    api.post_ids.insert(0, "NEW")

    step = await orchestrator.load_more()

    ids = [m.post_id for m in step.matches]
    assert len(ids) == len(set(ids))
    assert "P09" in ids
    assert ids[10] == "P10"


@pytest.mark.asyncio
async def test_search_requires_both_sides(orchestrator, api):
    orchestrator.set_criteria([TradeItem("  ")], WANT)

    with pytest.raises(ValidationException):
        await orchestrator.search()

    assert api.searches == []
    assert isinstance(orchestrator.step, CriteriaStep)
    assert orchestrator.step.error


@pytest.mark.asyncio
async def test_start_chat_success(orchestrator, api):
    await orchestrator.search()

    step = await orchestrator.start_chat("P03")

    assert step == ChatStartedStep(chat_room_id="ROOM1", matched_post_id="P03", post_id="MINE")
    assert api.start_calls[0]["matched_post_id"] == "P03"
    assert api.start_calls[0]["give_items"] == [{"character_name": "CharA", "quantity": 1}]


@pytest.mark.asyncio
async def test_only_one_start_chat_in_flight(orchestrator, api):
    await orchestrator.search()
    api.start_gate = asyncio.Event()

    first = asyncio.create_task(orchestrator.start_chat("P01"))
    while not api.start_calls:
        await asyncio.sleep(0)

    assert isinstance(orchestrator.step, StartingStep)
    assert orchestrator.can_select is False
    with pytest.raises(InvalidStateException):
        await orchestrator.start_chat("P02")
    with pytest.raises(InvalidStateException):
        await orchestrator.search()

    api.start_gate.set()
    step = await first

    assert isinstance(step, ChatStartedStep)
    assert len(api.start_calls) == 1


@pytest.mark.asyncio
async def test_search_finishing_during_start_chat_keeps_selection_locked(orchestrator, api):
    await orchestrator.search()
    api.search_gate = asyncio.Event()
    refresh = asyncio.create_task(orchestrator.search())
    while len(api.searches) < 2:
        await asyncio.sleep(0)

    api.start_gate = asyncio.Event()
    first = asyncio.create_task(orchestrator.start_chat("P00"))
    while not api.start_calls:
        await asyncio.sleep(0)

    api.search_gate.set()
    with pytest.raises(InvalidStateException):
        await refresh

    assert isinstance(orchestrator.step, StartingStep)
    with pytest.raises(InvalidStateException):
        await orchestrator.start_chat("P01")

    api.start_gate.set()
    await first
    assert len(api.start_calls) == 1


@pytest.mark.asyncio
async def test_cancelled_start_chat_reopens_selection(orchestrator, api):
    await orchestrator.search()
    api.start_gate = asyncio.Event()

    task = asyncio.create_task(orchestrator.start_chat("P01"))
    while not api.start_calls:
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    step = orchestrator.step
    assert isinstance(step, ResultsStep)
    assert step.error
    assert len(step.matches) == 10
    assert orchestrator.can_select is True
    assert orchestrator.reset() == CriteriaStep()


@pytest.mark.asyncio
async def test_failed_start_returns_to_results(orchestrator, api):
    await orchestrator.search()
    api.start_status = 409

    with pytest.raises(InvalidStateException):
        await orchestrator.start_chat("P01")

    step = orchestrator.step
    assert isinstance(step, ResultsStep)
    assert step.error == "This post has already been taken"
    assert len(step.matches) == 10
    assert orchestrator.can_select is True


@pytest.mark.asyncio
async def test_start_chat_needs_a_listed_candidate(orchestrator, api):
    with pytest.raises(InvalidStateException):
        await orchestrator.start_chat("P01")

    await orchestrator.search()
    with pytest.raises(ValidationException):
        await orchestrator.start_chat("NOT-LISTED")

    assert api.start_calls == []


@pytest.mark.asyncio
async def test_search_failure_keeps_previous_step(api):
    def broken(request: httpx.Request) -> Response:
        return Response(404, json={"detail": "Unknown event", "code": "NOT_FOUND"})

    async with TradeApiClient(
        user_id="USER1", base_url=BASE_URL, transport=MockTransport(broken)
    ) as client:
        workflow = EventMatchOrchestrator(client, "E1")
        workflow.set_criteria(GIVE, WANT)

        with pytest.raises(NotFoundException):
            await workflow.search()

    assert isinstance(workflow.step, CriteriaStep)
    assert workflow.step.error == "Unknown event"


@pytest.mark.asyncio
async def test_reset_clears_results(orchestrator):
    await orchestrator.search()

    assert orchestrator.reset() == CriteriaStep()


@pytest.mark.asyncio
async def test_workflow_timings_are_labelled_with_workflow_class(orchestrator):
    labels = {
        "service": "EventMatchOrchestrator",
        "operation": "event_match_search",
        "status": "success",
    }
    before = REGISTRY.get_sample_value("tradeswap_service_operations_total", labels) or 0.0

    await orchestrator.search()

    assert REGISTRY.get_sample_value("tradeswap_service_operations_total", labels) == before + 1
