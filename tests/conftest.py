"""Pytest hooks and fixtures."""

import copy

import pytest


def playback_doc(
    track_uri: str = "spotify:track:one",
    *,
    is_playing: bool = True,
    device_id: str | None = "dev1",
    name: str = "First Song",
    progress_ms: int = 1000,
) -> dict:
    """Minimal /me/player document as the upstream returns it."""
    return {
        "device": {"id": device_id, "name": "Kitchen"} if device_id else None,
        "is_playing": is_playing,
        "progress_ms": progress_ms,
        "shuffle_state": False,
        "repeat_state": "off",
        "context": {"uri": "spotify:album:alb1", "type": "album"},
        "item": {
            "type": "track",
            "uri": track_uri,
            "name": name,
            "duration_ms": 200000,
            "album": {
                "name": "An Album",
                "album_type": "album",
                "uri": "spotify:album:alb1",
                "images": [{"url": "https://i.scdn.co/image/img640"}, {"url": "https://i.scdn.co/image/img64"}],
            },
            "artists": [{"name": "Band", "uri": "spotify:artist:band", "type": "artist"}],
        },
    }


class FakeMediaApi:
    """In-memory media API recording every call."""

    def __init__(self):
        self.playback: dict | None = None
        self.playback_error: Exception | None = None
        self.albums: dict = {"items": [], "total": 0}
        self.album_docs: dict[str, dict] = {}
        self.devices: list[dict] = []
        self.calls: list[tuple] = []

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def get_playback_state(self):
        self.calls.append(("get_playback_state",))
        if self.playback_error is not None:
            raise self.playback_error
        return copy.deepcopy(self.playback)

    async def start_resume_playback(self, device_id, context_uri=None, offset_uri=None):
        self.calls.append(("play", device_id, context_uri, offset_uri))
        if self.playback is not None:
            self.playback["is_playing"] = True
            if offset_uri:
                self.playback["item"]["uri"] = offset_uri

    async def pause_playback(self, device_id):
        self.calls.append(("pause", device_id))
        if self.playback is not None:
            self.playback["is_playing"] = False

    async def get_available_devices(self):
        self.calls.append(("get_available_devices",))
        return list(self.devices)

    async def get_saved_albums(self, limit=25, offset=0):
        self.calls.append(("get_saved_albums", limit, offset))
        return self.albums

    async def get_album(self, album_id):
        self.calls.append(("get_album", album_id))
        return self.album_docs.get(album_id)


@pytest.fixture
def fake_api() -> FakeMediaApi:
    return FakeMediaApi()


@pytest.fixture
def make_playback():
    return playback_doc
