import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from superbridge.api.server import create_app
from superbridge.api.session import RemoteSession
from superbridge.bridge.facade import Bridge
from superbridge.config.schema import Config
from superbridge.rpc.protocol import GET_HOME, PLAYER_STATE_EVENT
from superbridge.utils.exceptions import UpstreamError


class _Ws:
    def __init__(self):
        self.client = type("Client", (), {"host": "127.0.0.1"})()
        self.sent = []
        self.accepted = False

    async def accept(self):
        self.accepted = True

    async def send_json(self, payload):
        self.sent.append(payload)


def _bridge(fake_api, tmp_path, *, initial_delay_ms=0):
    cfg = Config()
    cfg.cache.image_dir = str(tmp_path)
    cfg.sync.initial_state_delay_ms = initial_delay_ms
    return Bridge(fake_api, config=cfg)


@pytest.mark.asyncio
async def test_open_announces_then_pushes_initial_state(fake_api, tmp_path):
    ws = _Ws()
    session = RemoteSession(ws, _bridge(fake_api, tmp_path), initial_state_delay_s=0)

    await session.open()
    await asyncio.sleep(0.01)

    assert ws.accepted is True
    assert session.connection_key.startswith("remote_")
    assert [m["type"] for m in ws.sent] == [
        "remote_control_connection_status",
        "setup_status",
        "com.spotify.session_state",
        PLAYER_STATE_EVENT,
    ]
    assert ws.sent[3]["payload"] is None
    await session.close()


@pytest.mark.asyncio
async def test_frames_are_routed_by_kind(fake_api, tmp_path):
    ws = _Ws()
    session = RemoteSession(ws, _bridge(fake_api, tmp_path), initial_state_delay_s=60)
    await session.open()
    ws.sent.clear()

    await session.handle_frame("not json")
    await session.handle_frame("[1, 2]")
    await session.handle_frame(json.dumps({"type": "settings", "key": "onboarding_status"}))
    await session.handle_frame(json.dumps({"msgId": 5, "method": GET_HOME}))
    await asyncio.sleep(0.01)

    assert ws.sent[0] == {"type": "settings_response", "payload": {"key": "onboarding_status", "value": "finished"}}
    assert ws.sent[1]["type"] == "call_result"
    assert ws.sent[1]["msgId"] == 5
    await session.close()


@pytest.mark.asyncio
async def test_closed_session_stops_receiving_pushes(fake_api, tmp_path, make_playback):
    ws = _Ws()
    bridge = _bridge(fake_api, tmp_path)
    session = RemoteSession(ws, bridge, initial_state_delay_s=60)
    await session.open()
    await session.close()
    ws.sent.clear()

    fake_api.playback = make_playback()
    await bridge.sync.refetch()
    await session.send({"type": "late"})

    assert ws.sent == []


def test_health_and_websocket_round_trip(fake_api, tmp_path):
    fake_api.albums = {"items": [], "total": 0}
    bridge = _bridge(fake_api, tmp_path, initial_delay_ms=60000)
    app = create_app(bridge=bridge)

    with TestClient(app) as client:
        health = client.get("/health").json()
        assert health["ok"] is True
        assert GET_HOME in health["operations"]

        with client.websocket_connect("/ws") as ws:
            announced = [ws.receive_json()["type"] for _ in range(3)]
            assert announced[0] == "remote_control_connection_status"

            ws.send_text(json.dumps({"type": "settings", "key": "local-storage-data"}))
            assert ws.receive_json()["payload"] == {"key": "local-storage-data", "value": "{}"}

            ws.send_text(json.dumps({"msgId": 1, "method": GET_HOME, "args": {}}))
            reply = ws.receive_json()
            assert reply["msgId"] == 1
            assert reply["payload"]["items"][0]["children"] == []


def test_root_path_accepts_remote(fake_api, tmp_path):
    app = create_app(bridge=_bridge(fake_api, tmp_path, initial_delay_ms=60000))

    with TestClient(app) as client:
        with client.websocket_connect("/") as ws:
            assert ws.receive_json()["type"] == "remote_control_connection_status"


def test_devices_route_serves_cached_list(fake_api, tmp_path):
    fake_api.devices = [{"id": "dev1", "is_active": True}, {"id": "dev2", "is_active": False}]
    bridge = _bridge(fake_api, tmp_path, initial_delay_ms=60000)
    app = create_app(bridge=bridge)

    with TestClient(app) as client:
        body = client.get("/devices").json()
        assert body["active"] == "dev1"
        assert body["playing_on"] is None
        assert [d["id"] for d in body["devices"]] == ["dev1", "dev2"]

        client.get("/devices")
        assert fake_api.count("get_available_devices") == 1


def test_devices_route_reports_upstream_failure(fake_api, tmp_path):
    async def _failing():
        raise UpstreamError("upstream http error 503", status_code=503, is_retryable=True)

    fake_api.get_available_devices = _failing
    app = create_app(bridge=_bridge(fake_api, tmp_path, initial_delay_ms=60000))

    with TestClient(app) as client:
        resp = client.get("/devices")
        assert resp.status_code == 502
