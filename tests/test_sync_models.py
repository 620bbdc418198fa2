from superbridge.sync.formatting import format_player_state
from superbridge.sync.models import PlaybackSnapshot


def test_from_upstream_reads_track_and_device(make_playback):
    snap = PlaybackSnapshot.from_upstream(make_playback("spotify:track:a", is_playing=False))
    assert snap.track_uri == "spotify:track:a"
    assert snap.is_playing is False
    assert snap.device_id == "dev1"
    assert snap.context_uri == "spotify:album:alb1"


def test_from_upstream_treats_empty_and_podcast_state_as_absent(make_playback):
    assert PlaybackSnapshot.from_upstream(None) is None
    assert PlaybackSnapshot.from_upstream({"is_playing": True, "item": None}) is None

    episode = make_playback()
    episode["item"]["type"] = "episode"
    assert PlaybackSnapshot.from_upstream(episode) is None

    show = make_playback()
    show["item"]["show"] = {"name": "A Podcast"}
    assert PlaybackSnapshot.from_upstream(show) is None


def test_progress_alone_is_not_a_change(make_playback):
    before = PlaybackSnapshot.from_upstream(make_playback(progress_ms=1000))
    after = PlaybackSnapshot.from_upstream(make_playback(progress_ms=9000))
    paused = PlaybackSnapshot.from_upstream(make_playback(is_playing=False))
    other = PlaybackSnapshot.from_upstream(make_playback("spotify:track:two"))

    assert before.differs_from(None)
    assert not after.differs_from(before)
    assert paused.differs_from(before)
    assert other.differs_from(before)


def test_format_player_state_shape(make_playback):
    payload = format_player_state(PlaybackSnapshot.from_upstream(make_playback(is_playing=False, progress_ms=4200)))

    assert payload["is_paused"] is True
    assert payload["is_paused_bool"] is True
    assert payload["playback_position"] == 4200
    assert payload["context_uri"] == "spotify:album:alb1"
    assert payload["remote_device_id"] == "dev1"
    assert payload["track"]["uri"] == "spotify:track:one"
    assert payload["track"]["image_id"] == "img640"
    assert payload["track"]["artist"]["name"] == "Band"
    assert payload["track"]["album"]["type"] == "album"


def test_format_player_state_fallbacks(make_playback):
    doc = make_playback()
    doc["context"] = None
    doc["item"]["artists"] = []
    payload = format_player_state(PlaybackSnapshot.from_upstream(doc))

    assert payload["context_uri"] == "spotify:collection"
    assert payload["context_title"] == "Your Library"
    assert payload["track"]["artist"]["name"] == "Unknown Artist"
    assert format_player_state(None) is None
