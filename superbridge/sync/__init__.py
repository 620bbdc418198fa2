"""Playback state synchronization engine."""

from superbridge.sync.engine import PlaybackObserver, PlaybackSyncEngine
from superbridge.sync.formatting import format_player_state
from superbridge.sync.models import PlaybackChange, PlaybackSnapshot
from superbridge.sync.scheduler import RefetchScheduler, SchedulerState

__all__ = [
    "PlaybackChange",
    "PlaybackObserver",
    "PlaybackSnapshot",
    "PlaybackSyncEngine",
    "RefetchScheduler",
    "SchedulerState",
    "format_player_state",
]
