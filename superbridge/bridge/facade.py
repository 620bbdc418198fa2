"""Bridge facade: owns the router, cache and sync engine for one remote session."""

from __future__ import annotations

import inspect
from typing import Any, Callable

import httpx
from loguru import logger

from superbridge.cache.ephemeral import EphemeralCache
from superbridge.cache.images import ImageStore
from superbridge.config.schema import Config
from superbridge.rpc.context_models import HandlerContext
from superbridge.rpc.operations import register_bridge_operations
from superbridge.rpc.protocol import (
    PLAYER_STATE_EVENT,
    build_push,
    build_settings_response,
    session_announcements,
)
from superbridge.rpc.router import ActionRouter, SendMessage
from superbridge.sync.engine import PlaybackObserver, PlaybackSyncEngine
from superbridge.sync.models import PlaybackChange
from superbridge.upstream.base import MediaApi


class Bridge:
    """
    Wires cache, sync engine and router together.

    The transport calls ``handle_inbound_message`` for every request frame
    and ``subscribe`` (or ``subscribe_pushes``) to receive state changes.
    """

    def __init__(
        self,
        api: MediaApi,
        *,
        config: Config | None = None,
        cache: EphemeralCache | None = None,
        images: ImageStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or Config()
        self.api = api
        self.cache = cache or EphemeralCache(max_entries=self.config.cache.max_entries)
        self.images = images or ImageStore(
            self.config.image_dir,
            cache=self.cache,
            http_client=http_client,
            base_url=self.config.cache.image_base_url,
        )
        self.sync = PlaybackSyncEngine(api, interval_s=self.config.poll_interval_s, cache=self.cache)
        self.context = HandlerContext(
            api=api,
            cache=self.cache,
            images=self.images,
            sync=self.sync,
            config=self.config,
        )
        self.router = register_bridge_operations(
            ActionRouter(self.context, silent_operations=self.config.rpc.silent_methods)
        )

    def start(self) -> None:
        """Begin polling upstream playback state."""
        logger.info("Bridge starting (poll every {}s)", self.config.poll_interval_s)
        self.sync.start()

    async def aclose(self) -> None:
        await self.sync.aclose()
        await self.images.aclose()
        closer = getattr(self.api, "aclose", None)
        if closer is not None:
            await closer()

    async def handle_inbound_message(self, raw: Any, send: SendMessage) -> bool:
        return await self.router.dispatch(raw, send)

    def handle_settings_message(self, raw: Any) -> dict[str, Any] | None:
        return build_settings_response(raw)

    def subscribe(self, observer: PlaybackObserver) -> Callable[[], None]:
        return self.sync.subscribe(observer)

    def subscribe_pushes(self, send: SendMessage) -> Callable[[], None]:
        """Forward every state change to ``send`` as a player_state push."""

        async def _forward(change: PlaybackChange) -> None:
            outcome = send(build_push(PLAYER_STATE_EVENT, change.formatted))
            if inspect.isawaitable(outcome):
                await outcome

        return self.sync.subscribe(_forward)

    def session_announcements(self) -> list[dict[str, Any]]:
        return session_announcements()

    def player_state_message(self) -> dict[str, Any]:
        return build_push(PLAYER_STATE_EVENT, self.sync.formatted_state)
