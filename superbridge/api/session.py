"""Per-connection remote session over a WebSocket."""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any, Callable

from loguru import logger

from superbridge.bridge.facade import Bridge


class RemoteSession:
    """
    One connected remote.

    Request frames are dispatched as independent tasks so a slow upstream call
    never holds back other requests; outbound frames are serialized by a lock.
    """

    def __init__(self, websocket: Any, bridge: Bridge, *, initial_state_delay_s: float = 1.0):
        self.websocket = websocket
        self.bridge = bridge
        self.connection_key = f"remote_{uuid.uuid4().hex[:12]}"
        self._initial_state_delay_s = initial_state_delay_s
        self._send_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._unsubscribe: Callable[[], None] | None = None
        self._initial_state: asyncio.Task[None] | None = None
        self._closed = False

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            return
        async with self._send_lock:
            await self.websocket.send_json(message)

    def _spawn(self, coro: Any) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def open(self) -> None:
        """Accept, announce status and start forwarding state changes."""
        await self.websocket.accept()
        client = getattr(self.websocket, "client", None)
        logger.info("Remote connected key={} host={}", self.connection_key, getattr(client, "host", None))
        for message in self.bridge.session_announcements():
            await self.send(message)
        self._unsubscribe = self.bridge.subscribe_pushes(self.send)
        self._initial_state = self._spawn(self._send_initial_state())

    async def _send_initial_state(self) -> None:
        await asyncio.sleep(self._initial_state_delay_s)
        await self.send(self.bridge.player_state_message())

    async def handle_frame(self, text: str) -> None:
        try:
            frame = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Ignoring non-JSON frame on {}", self.connection_key)
            return
        if not isinstance(frame, dict):
            return
        settings_reply = self.bridge.handle_settings_message(frame)
        if settings_reply is not None:
            await self.send(settings_reply)
            return
        if "msgId" in frame:
            self._spawn(self.bridge.handle_inbound_message(frame, self.send))

    async def run(self) -> None:
        """Receive frames until the socket closes."""
        while True:
            text = await self.websocket.receive_text()
            await self.handle_frame(text)

    async def close(self, exc: Exception | None = None) -> None:
        if exc is not None:
            logger.error("Remote WebSocket error on {}: {}", self.connection_key, exc)
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._initial_state is not None and not self._initial_state.done():
            self._initial_state.cancel()
        # In-flight dispatches finish on their own; replies are dropped once closed
        logger.info("Remote disconnected key={} pending={}", self.connection_key, len(self._tasks))
