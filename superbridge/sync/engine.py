"""Playback state synchronization: polling, change detection and playback commands."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable

from loguru import logger

from superbridge.cache.ephemeral import EphemeralCache
from superbridge.sync.formatting import format_player_state
from superbridge.sync.models import PlaybackChange, PlaybackSnapshot
from superbridge.sync.scheduler import RefetchScheduler, SchedulerState
from superbridge.upstream.base import MediaApi
from superbridge.upstream.queries import DEVICES_KEY
from superbridge.utils.exceptions import classify_exception, sanitize_error_message

DEFAULT_POLL_INTERVAL_S = 1.5

PlaybackObserver = Callable[[PlaybackChange], Awaitable[None] | None]


class PlaybackSyncEngine:
    """
    Single authoritative view of upstream playback state.

    The view is refreshed by polling; observers hear about it only when the
    track or the playing flag changes. Playback commands go through here so
    they can resynchronize right after the upstream call.
    """

    def __init__(
        self,
        api: MediaApi,
        *,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
        cache: EphemeralCache | None = None,
    ):
        self._api = api
        self._cache = cache
        self._scheduler = RefetchScheduler(interval_s, self.refetch)
        self._current: PlaybackSnapshot | None = None
        self._observers: list[PlaybackObserver] = []
        self._command_lock = asyncio.Lock()

    @property
    def scheduler(self) -> RefetchScheduler:
        return self._scheduler

    @property
    def state(self) -> SchedulerState:
        return self._scheduler.state

    @property
    def current_state(self) -> PlaybackSnapshot | None:
        return self._current

    @property
    def formatted_state(self) -> dict[str, Any] | None:
        return format_player_state(self._current)

    @property
    def device_id(self) -> str | None:
        return self._current.device_id if self._current else None

    def start(self) -> None:
        self._scheduler.start()

    def stop(self) -> None:
        self._scheduler.stop()

    async def aclose(self) -> None:
        self.stop()
        await self._scheduler.wait_idle()

    def subscribe(self, observer: PlaybackObserver) -> Callable[[], None]:
        """Register a change observer; returns a callable that unregisters it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    async def refetch(self) -> PlaybackChange | None:
        """Poll upstream once. Failures are logged and keep the last snapshot."""
        try:
            raw = await self._api.get_playback_state()
        except Exception as exc:
            code, _, _ = classify_exception(exc)
            logger.warning("Playback state fetch failed [{}]: {}", code, sanitize_error_message(str(exc)))
            return None

        snapshot = PlaybackSnapshot.from_upstream(raw)
        if snapshot is None:
            return None

        previous = self._current
        self._current = snapshot

        if previous is not None and previous.device_id != snapshot.device_id and self._cache is not None:
            self._cache.delete(DEVICES_KEY)

        if not snapshot.differs_from(previous):
            return None

        logger.info(
            "Player state changed from uri {} to {} (playing={})",
            previous.track_uri if previous else None,
            snapshot.track_uri,
            snapshot.is_playing,
        )
        change = PlaybackChange(snapshot=snapshot, formatted=format_player_state(snapshot), previous=previous)
        await self._publish(change)
        return change

    async def _publish(self, change: PlaybackChange) -> None:
        for observer in list(self._observers):
            try:
                outcome = observer(change)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:
                logger.warning("Playback observer failed: {}", sanitize_error_message(str(exc)))

    async def set_playing(self, is_playing: bool) -> bool:
        """Resume or pause on the known device. Returns False when no device is known."""
        device_id = self.device_id
        if not device_id:
            logger.debug("set_playing({}) skipped: no known device", is_playing)
            return False
        async with self._command_lock:
            if is_playing:
                await self._api.start_resume_playback(device_id)
            else:
                await self._api.pause_playback(device_id)
        await asyncio.shield(self._scheduler.trigger_now())
        return True

    async def play_uri(self, context_uri: str, skip_to_uri: str | None = None) -> bool:
        """Start ``context_uri`` on the known device, optionally at ``skip_to_uri``."""
        device_id = self.device_id
        if not device_id:
            logger.debug("play_uri({}) skipped: no known device", context_uri)
            return False
        logger.info("Playing {} on {}", context_uri, device_id)
        async with self._command_lock:
            await self._api.start_resume_playback(device_id, context_uri, skip_to_uri or None)
        await asyncio.shield(self._scheduler.trigger_now())
        return True
