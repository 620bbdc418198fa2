"""Cached library and device lookups."""

from __future__ import annotations

from typing import Any

from superbridge.cache.ephemeral import EphemeralCache
from superbridge.upstream.base import MediaApi
from superbridge.utils.exceptions import NotFoundError
from superbridge.utils.helpers import first_or, id_from_uri

ALBUMS_LIST_KEY = "albums_list"
DEVICES_KEY = "devices"
SAVED_ALBUMS_LIMIT = 25

LIBRARY_TTL_S = 15 * 60
ALBUM_TTL_S = 15 * 60
DEVICES_TTL_S = 30


async def get_albums_list(
    api: MediaApi,
    cache: EphemeralCache,
    *,
    ttl: float | None = LIBRARY_TTL_S,
) -> dict[str, Any]:
    return await cache.get_or_fetch(
        ALBUMS_LIST_KEY,
        ttl,
        lambda: api.get_saved_albums(SAVED_ALBUMS_LIMIT),
    )


async def get_album(
    api: MediaApi,
    cache: EphemeralCache,
    uri: str,
    *,
    ttl: float | None = ALBUM_TTL_S,
) -> dict[str, Any] | None:
    """Album document for ``uri``, or None when upstream has no such album.

    A miss is never stored, so the next lookup goes upstream again.
    """

    async def _fetch() -> dict[str, Any]:
        album = await api.get_album(id_from_uri(uri))
        if album is None:
            raise NotFoundError("album", uri)
        return album

    try:
        return await cache.get_or_fetch(f"album_{uri}", ttl, _fetch)
    except NotFoundError:
        return None


async def get_devices(
    api: MediaApi,
    cache: EphemeralCache,
    *,
    ttl: float | None = DEVICES_TTL_S,
) -> list[dict[str, Any]]:
    # The sync engine deletes DEVICES_KEY when the polled device changes.
    return await cache.get_or_fetch(DEVICES_KEY, ttl, api.get_available_devices)


def active_device_id(devices: list[dict[str, Any]]) -> str | None:
    """Id of the first device flagged active in ``devices``."""
    active = first_or([d for d in devices if d.get("is_active")])
    return (active or {}).get("id") or None
