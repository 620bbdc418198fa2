"""Interface the bridge needs from a media API client."""

from __future__ import annotations

from typing import Any, Protocol


class MediaApi(Protocol):
    """Playback state queries, playback control and library lookups.

    Every call may fail with a ``BridgeError``; none is cached or deduplicated
    by the implementation.
    """

    async def get_playback_state(self) -> dict[str, Any] | None:
        """Current playback document, or None when nothing is playing."""
        ...

    async def start_resume_playback(
        self,
        device_id: str,
        context_uri: str | None = None,
        offset_uri: str | None = None,
    ) -> None: ...

    async def pause_playback(self, device_id: str) -> None: ...

    async def get_available_devices(self) -> list[dict[str, Any]]: ...

    async def get_saved_albums(self, limit: int = 25, offset: int = 0) -> dict[str, Any]: ...

    async def get_album(self, album_id: str) -> dict[str, Any] | None: ...
