"""Async client for the trade API consumed by client-side workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, cast

import httpx

from ..core.config import settings
from ..core.constants import USER_ID_HEADER
from ..core.exceptions import (
    DomainException,
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
    RoomClosedException,
    TransportException,
    UnauthorizedException,
    ValidationException,
)
from ..domain.event_trade import TradeItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchCandidate:
    """One post returned by the match search. Fields beyond post_id are opaque."""

    post_id: str
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MatchCandidate":
        post_id = payload.get("post_id") or payload.get("id")
        if not post_id:
            raise TransportException("Match candidate without post id", details=payload)
        return cls(post_id=str(post_id), data=payload)


@dataclass(frozen=True)
class MatchPage:
    matches: List[MatchCandidate]
    total_count: int
    has_more: bool


@dataclass(frozen=True)
class MessageBatch:
    messages: List[Dict[str, Any]]
    room_status: Optional[str] = None


@dataclass(frozen=True)
class StartedChat:
    chat_room_id: str
    post_id: Optional[str] = None


def _error_from_response(response: httpx.Response) -> DomainException:
    """Map an error response back onto the domain exception it came from."""

    status = response.status_code
    try:
        body = response.json()
    except json.JSONDecodeError:
        body = {"detail": response.text[:500]}
    if not isinstance(body, dict):
        body = {"detail": body}

    message = body.get("detail") if isinstance(body.get("detail"), str) else None
    message = message or f"Trade API responded with status {status}"
    code = body.get("code") if isinstance(body.get("code"), str) else None
    details = body.get("errors") if isinstance(body.get("errors"), dict) else {}

    if status in (400, 422):
        return ValidationException(message, code=code, details=details)
    if status == 401:
        return UnauthorizedException(message, code=code, details=details)
    if status == 403:
        return ForbiddenException(message, code=code, details=details)
    if status == 404:
        return NotFoundException(message, code=code, details=details)
    if status == 409:
        if code == RoomClosedException.default_code:
            return RoomClosedException(
                str(details.get("room_id", "")), str(details.get("status", ""))
            )
        return InvalidStateException(message, code=code, details=details)
    return TransportException(message, status_code=status, details=details)


class TradeApiClient:
    """
    Thin async client for the trade API.

    Every call carries a timeout. Connection failures and timeouts are
    retried once for idempotent reads only; mutations are never retried
    so a lost response cannot produce a duplicate side effect.
    """

    READ_ATTEMPTS = 2

    def __init__(
        self,
        *,
        user_id: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not user_id:
            raise ValueError("user_id must be provided")
        self._base_url = (base_url or settings.trade_api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.trade_api_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=transport,
            headers={"Accept": "application/json", USER_ID_HEADER: user_id},
        )

    async def __aenter__(self) -> "TradeApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # Event matches

    async def search_event_matches(
        self,
        *,
        event_id: str,
        give_items: Sequence[TradeItem],
        want_items: Sequence[TradeItem],
        offset: int = 0,
        limit: int = 10,
    ) -> MatchPage:
        """Query the match collaborator. Ranking is whatever it returns."""

        payload = await self.request(
            "POST",
            "/event-matches/search",
            json_body={
                "event_id": event_id,
                "give_items": [item.to_dict() for item in give_items],
                "want_items": [item.to_dict() for item in want_items],
                "offset": offset,
                "limit": limit,
            },
            idempotent=True,
        )
        matches = [MatchCandidate.from_payload(m) for m in payload.get("matches") or []]
        total = int(payload.get("total_count", len(matches)))
        has_more = bool(payload.get("has_more", offset + len(matches) < total))
        return MatchPage(matches=matches, total_count=total, has_more=has_more)

    async def start_event_chat(
        self,
        *,
        event_id: str,
        matched_post_id: str,
        give_items: Sequence[TradeItem],
        want_items: Sequence[TradeItem],
        zone_code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StartedChat:
        body: Dict[str, Any] = {
            "event_id": event_id,
            "matched_post_id": matched_post_id,
            "give_items": [item.to_dict() for item in give_items],
            "want_items": [item.to_dict() for item in want_items],
        }
        if zone_code:
            body["zone_code"] = zone_code
        if description:
            body["description"] = description
        payload = await self.request("POST", "/event-matches/start-chat", json_body=body)
        return StartedChat(chat_room_id=str(payload["chat_room_id"]), post_id=payload.get("post_id"))

    # Chat rooms

    async def get_chat_room(self, room_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/chat-rooms/{room_id}", idempotent=True)

    async def list_messages(
        self, room_id: str, *, after_id: Optional[str] = None
    ) -> MessageBatch:
        params = {"after_id": after_id} if after_id else None
        payload = await self.request(
            "GET", f"/chat-rooms/{room_id}/messages", params=params, idempotent=True
        )
        return MessageBatch(
            messages=cast(List[Dict[str, Any]], payload.get("messages", [])),
            room_status=payload.get("room_status"),
        )

    async def post_message(self, room_id: str, message: str) -> Dict[str, Any]:
        return await self.request(
            "POST", f"/chat-rooms/{room_id}/messages", json_body={"message": message}
        )

    async def complete_chat_room(self, room_id: str) -> Dict[str, Any]:
        return await self.request("POST", f"/chat-rooms/{room_id}/complete")

    # Offers

    async def list_offers(self, post_id: str) -> List[Dict[str, Any]]:
        payload = await self.request("GET", f"/posts/{post_id}/offers", idempotent=True)
        return cast(List[Dict[str, Any]], payload.get("offers", []))

    async def create_offer(
        self,
        post_id: str,
        *,
        content: str,
        related_post_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"content": content, "is_offer": bool(related_post_id)}
        if related_post_id:
            body["related_post_id"] = related_post_id
        return await self.request("POST", f"/posts/{post_id}/offers", json_body=body)

    async def accept_offer(self, post_id: str, offer_id: str) -> Dict[str, Any]:
        return await self.request("POST", f"/posts/{post_id}/offers/{offer_id}/accept")

    async def reject_offer(self, post_id: str, offer_id: str) -> Dict[str, Any]:
        return await self.request("POST", f"/posts/{post_id}/offers/{offer_id}/reject")

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
        params: Dict[str, Any] | None = None,
        idempotent: bool = False,
    ) -> Dict[str, Any]:
        """Perform a raw API request and return the parsed JSON payload."""

        attempts = self.READ_ATTEMPTS if idempotent else 1
        last_error: Optional[httpx.RequestError] = None

        for attempt in range(1, attempts + 1):
            request = self._client.build_request(method, path, json=json_body, params=params)
            try:
                response = await self._client.send(request)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "Trade API error %s for %s %s: %s",
                    exc.response.status_code,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise _error_from_response(exc.response) from exc
            except httpx.RequestError as exc:
                last_error = exc
                logger.warning(
                    "Trade API request failure for %s %s (attempt %s/%s): %s",
                    method,
                    path,
                    attempt,
                    attempts,
                    str(exc),
                )
                continue

            try:
                return cast(Dict[str, Any], response.json())
            except json.JSONDecodeError as exc:
                logger.error("Invalid JSON from trade API for %s %s", method, path)
                raise TransportException(
                    "Received malformed JSON from trade API", status_code=response.status_code
                ) from exc

        raise TransportException(
            "Failed to reach trade API", details={"method": method, "path": path}
        ) from last_error
