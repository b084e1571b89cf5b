"""Tests for TradeApiClient using httpx.MockTransport."""

import httpx
from httpx import MockTransport, Response
import pytest

from app.core.constants import USER_ID_HEADER
from app.core.exceptions import (
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    RoomClosedException,
    TransportException,
    ValidationException,
)
from app.domain.event_trade import TradeItem
from app.integrations.trade_api_client import TradeApiClient

BASE_URL = "http://trade.test/api/v1"


def _client(handler) -> TradeApiClient:
    return TradeApiClient(user_id="USER1", base_url=BASE_URL, transport=MockTransport(handler))


def _problem(status: int, code: str, /, **errors) -> Response:
    body = {"status": status, "detail": "nope", "code": code}
    if errors:
        body["errors"] = errors
    return Response(status, json=body)


@pytest.mark.asyncio
async def test_search_sends_criteria_and_parses_page():
    seen = {}

    def handler(request: httpx.Request) -> Response:
        seen["url"] = str(request.url)
        seen["user"] = request.headers.get(USER_ID_HEADER)
        seen["body"] = request.read()
        return Response(
            200,
            json={
                "matches": [{"post_id": "P1", "score": 3}, {"id": "P2"}],
                "total_count": 12,
                "has_more": True,
            },
        )

    async with _client(handler) as client:
        page = await client.search_event_matches(
            event_id="E1",
            give_items=[TradeItem("CharA")],
            want_items=[TradeItem("CharB", 2)],
            offset=0,
            limit=10,
        )

    assert seen["url"] == f"{BASE_URL}/event-matches/search"
    assert seen["user"] == "USER1"
    assert b'"character_name":"CharB"' in seen["body"].replace(b" ", b"")
    assert [m.post_id for m in page.matches] == ["P1", "P2"]
    assert page.matches[0].data["score"] == 3
    assert page.total_count == 12
    assert page.has_more is True


@pytest.mark.asyncio
async def test_idempotent_read_is_retried_once():
    calls = []

    def handler(request: httpx.Request) -> Response:
        calls.append(request.url.path)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return Response(200, json={"messages": [{"id": "M1"}], "room_status": "active"})

    async with _client(handler) as client:
        batch = await client.list_messages("R1")

    assert len(calls) == 2
    assert batch.messages == [{"id": "M1"}]
    assert batch.room_status == "active"


@pytest.mark.asyncio
async def test_read_gives_up_after_second_failure():
    calls = []

    def handler(request: httpx.Request) -> Response:
        calls.append(request.url.path)
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportException):
            await client.get_chat_room("R1")

    assert len(calls) == 2


@pytest.mark.parametrize(
    "call",
    [
        lambda c: c.accept_offer("P1", "O1"),
        lambda c: c.reject_offer("P1", "O1"),
        lambda c: c.complete_chat_room("R1"),
        lambda c: c.post_message("R1", "hi"),
        lambda c: c.start_event_chat(
            event_id="E1",
            matched_post_id="P1",
            give_items=[TradeItem("CharA")],
            want_items=[TradeItem("CharB")],
        ),
    ],
)
@pytest.mark.asyncio
async def test_mutations_are_never_retried(call):
    calls = []

    def handler(request: httpx.Request) -> Response:
        calls.append(request.url.path)
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(TransportException):
            await call(client)

    assert len(calls) == 1


@pytest.mark.parametrize(
    "response,expected",
    [
        (_problem(400, "VALIDATION_ERROR"), ValidationException),
        (_problem(422, "validation_error"), ValidationException),
        (_problem(403, "FORBIDDEN"), ForbiddenException),
        (_problem(404, "NOT_FOUND"), NotFoundException),
        (_problem(409, "INVALID_STATE"), InvalidStateException),
        (_problem(500, "SERVICE_ERROR"), TransportException),
    ],
)
@pytest.mark.asyncio
async def test_error_statuses_map_to_domain_exceptions(response, expected):
    async with _client(lambda request: response) as client:
        with pytest.raises(expected):
            await client.accept_offer("P1", "O1")


@pytest.mark.asyncio
async def test_room_closed_is_preserved():
    response = _problem(409, "ROOM_CLOSED", room_id="R1", status="completed")

    async with _client(lambda request: response) as client:
        with pytest.raises(RoomClosedException) as exc_info:
            await client.post_message("R1", "hi")

    assert exc_info.value.details == {"room_id": "R1", "status": "completed"}


@pytest.mark.asyncio
async def test_http_errors_are_not_retried():
    calls = []

    def handler(request: httpx.Request) -> Response:
        calls.append(request.url.path)
        return _problem(404, "NOT_FOUND")

    async with _client(handler) as client:
        with pytest.raises(NotFoundException):
            await client.list_messages("R1")

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_create_offer_body():
    seen = {}

    def handler(request: httpx.Request) -> Response:
        seen["body"] = request.read()
        return Response(201, json={"id": "O1"})

    async with _client(handler) as client:
        await client.create_offer("P1", content="Swap?", related_post_id="Q1")

    body = seen["body"].replace(b" ", b"")
    assert b'"is_offer":true' in body
    assert b'"related_post_id":"Q1"' in body


def test_user_id_required():
    with pytest.raises(ValueError):
        TradeApiClient(user_id="", base_url=BASE_URL)
