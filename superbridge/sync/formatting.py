"""Projection of a playback snapshot into the remote's player_state payload."""

from __future__ import annotations

from typing import Any

from superbridge.cache.images import select_image_id
from superbridge.sync.models import PlaybackSnapshot
from superbridge.utils.helpers import first_or

DEFAULT_CONTEXT_URI = "spotify:collection"
DEFAULT_CONTEXT_TITLE = "Your Library"
UNKNOWN_ARTIST = {"name": "Unknown Artist", "uri": "spotify:artist", "type": "artist"}


def _artist_ref(artist: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": artist.get("name") or UNKNOWN_ARTIST["name"],
        "uri": artist.get("uri") or UNKNOWN_ARTIST["uri"],
        "type": artist.get("type") or UNKNOWN_ARTIST["type"],
    }


def format_player_state(snapshot: PlaybackSnapshot | None) -> dict[str, Any] | None:
    if snapshot is None:
        return None
    state = snapshot.raw
    item = state.get("item") or {}
    album = item.get("album") or {}
    artists = [a for a in (item.get("artists") or []) if isinstance(a, dict)]
    first_artist = first_or(artists, UNKNOWN_ARTIST)

    return {
        "context_uri": snapshot.context_uri or DEFAULT_CONTEXT_URI,
        "context_title": DEFAULT_CONTEXT_TITLE,
        "is_paused": not snapshot.is_playing,
        "is_paused_bool": not snapshot.is_playing,
        "playback_options": {
            "repeat": snapshot.repeat,
            "shuffle": snapshot.shuffle,
        },
        "playback_position": snapshot.progress_ms,
        "playback_speed": 1,
        "playing_remotely": True,
        "remote_device_id": snapshot.device_id or "",
        "type": "track",
        "track": {
            "album": {
                "name": album.get("name"),
                "type": album.get("type") or album.get("album_type"),
                "uri": album.get("uri"),
            },
            "artist": _artist_ref(first_artist),
            "artists": [
                {"name": a.get("name"), "uri": a.get("uri"), "type": a.get("type")}
                for a in artists
            ],
            "duration_ms": item.get("duration_ms"),
            "image_id": select_image_id(album.get("images")),
            "is_episode": False,
            "is_podcast": False,
            "name": snapshot.track_name,
            "saved": True,
            "uri": snapshot.track_uri,
        },
    }
