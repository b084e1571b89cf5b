# backend/app/services/messaging/chat_poller.py
"""
Pull loop that keeps a chat view fresh.

Messages are fetched every ``interval`` seconds while the view is
visible. While hidden the loop only sleeps ``hidden_interval`` seconds at
a time without fetching, and becoming visible again wakes it up at once.
Polling ends when stop() is called or the room is no longer active.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ...core.config import settings
from ...core.enums import ChatRoomStatus
from ...core.exceptions import TransportException
from ...integrations.trade_api_client import TradeApiClient
from ..base import BaseAsyncWorkflow

logger = logging.getLogger(__name__)

MessagesCallback = Callable[[List[Dict[str, Any]]], Union[None, Awaitable[None]]]


class ChatMessagePoller(BaseAsyncWorkflow):
    def __init__(
        self,
        client: TradeApiClient,
        room_id: str,
        on_messages: MessagesCallback,
        *,
        interval: Optional[float] = None,
        hidden_interval: Optional[float] = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.room_id = room_id
        self.on_messages = on_messages
        self.interval = interval if interval is not None else settings.chat_poll_interval_seconds
        self.hidden_interval = (
            hidden_interval
            if hidden_interval is not None
            else settings.chat_poll_hidden_interval_seconds
        )
        self.visible = True
        self.room_status: Optional[str] = None
        self.polls = 0
        self._last_ids: Optional[Tuple[str, ...]] = None
        self._stopped = False
        self._wake: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the loop on the running event loop."""
        if self.running:
            return self._task  # type: ignore[return-value]
        self._stopped = False
        self._task = asyncio.create_task(self.run(), name=f"chat-poll-{self.room_id}")
        return self._task

    def stop(self) -> None:
        self._stopped = True
        if self._wake is not None:
            self._wake.set()

    async def wait(self) -> None:
        """Wait for the loop to finish, re-raising anything that ended it."""
        if self._task is not None:
            await self._task

    def set_visible(self, visible: bool) -> None:
        was_hidden = not self.visible
        self.visible = visible
        if visible and was_hidden and self._wake is not None:
            self._wake.set()

    async def run(self) -> None:
        self._wake = asyncio.Event()
        self.logger.debug("Chat polling started", extra={"room_id": self.room_id})
        while not self._stopped:
            if not self.visible:
                await self._sleep(self.hidden_interval)
                continue

            try:
                finished = await self.poll_once()
            except TransportException as exc:
                self.logger.warning(
                    "Chat poll failed, will retry",
                    extra={"room_id": self.room_id, "error": exc.message},
                )
                finished = False
            if finished:
                break
            await self._sleep(self.interval)
        self.logger.debug(
            "Chat polling stopped",
            extra={"room_id": self.room_id, "room_status": self.room_status},
        )

    async def poll_once(self) -> bool:
        """
        Fetch once and deliver if the sequence changed.

        Returns:
            True when the room left active and polling should end
        """
        batch = await self.client.list_messages(self.room_id)
        self.polls += 1
        ids = tuple(str(m.get("id")) for m in batch.messages)
        if ids != self._last_ids:
            self._last_ids = ids
            result = self.on_messages(batch.messages)
            if inspect.isawaitable(result):
                await result

        self.room_status = batch.room_status
        if batch.room_status and batch.room_status != ChatRoomStatus.ACTIVE.value:
            self._stopped = True
            return True
        return False

    async def _sleep(self, seconds: float) -> None:
        wake = self._wake
        if wake is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(wake.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
        finally:
            wake.clear()
