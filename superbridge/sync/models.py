"""Playback snapshot value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class PlaybackSnapshot:
    """Upstream playback state at one poll instant."""

    track_uri: str
    track_name: str
    is_playing: bool
    progress_ms: int = 0
    shuffle: bool = False
    repeat: str = "off"
    device_id: str | None = None
    context_uri: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_upstream(cls, state: Any) -> PlaybackSnapshot | None:
        """Build a snapshot from a playback document; None for empty or podcast state."""
        if not isinstance(state, dict):
            return None
        item = state.get("item")
        if not isinstance(item, dict):
            return None
        if item.get("type") == "episode" or "show" in item:
            return None
        device = state.get("device") if isinstance(state.get("device"), dict) else {}
        context = state.get("context") if isinstance(state.get("context"), dict) else {}
        return cls(
            track_uri=str(item.get("uri") or ""),
            track_name=str(item.get("name") or ""),
            is_playing=bool(state.get("is_playing")),
            progress_ms=int(state.get("progress_ms") or 0),
            shuffle=bool(state.get("shuffle_state")),
            repeat=str(state.get("repeat_state") or "off"),
            device_id=device.get("id") or None,
            context_uri=context.get("uri") or None,
            raw=state,
        )

    def differs_from(self, other: PlaybackSnapshot | None) -> bool:
        """Meaningful change: only track identity and the playing flag count."""
        if other is None:
            return True
        return self.track_uri != other.track_uri or self.is_playing != other.is_playing


@dataclass(frozen=True, slots=True)
class PlaybackChange:
    """Event published when the snapshot changed meaningfully."""

    snapshot: PlaybackSnapshot
    formatted: dict[str, Any] | None
    previous: PlaybackSnapshot | None = None
