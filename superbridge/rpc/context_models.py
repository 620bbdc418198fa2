"""Shared context handed to every operation handler."""

from __future__ import annotations

from dataclasses import dataclass

from superbridge.cache.ephemeral import EphemeralCache
from superbridge.cache.images import ImageStore
from superbridge.config.schema import Config
from superbridge.sync.engine import PlaybackSyncEngine
from superbridge.upstream.base import MediaApi


@dataclass(slots=True)
class HandlerContext:
    """Bridge-owned dependencies injected into operation handlers."""

    api: MediaApi
    cache: EphemeralCache
    images: ImageStore
    sync: PlaybackSyncEngine
    config: Config
