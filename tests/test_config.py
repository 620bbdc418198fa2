import json

import pytest

from superbridge.config import access
from superbridge.config.loader import convert_keys, load_config, save_config
from superbridge.config.schema import Config


def test_get_config_uses_cache_and_force_reload(monkeypatch):
    calls = {"n": 0}

    def _fake_load_config(_path=None):
        calls["n"] += 1
        cfg = Config()
        cfg.server.port = 18000 + calls["n"]
        return cfg

    monkeypatch.setattr(access, "load_config", _fake_load_config)
    access.clear_config_cache()

    first = access.get_config()
    second = access.get_config()
    third = access.get_config(force_reload=True)

    assert first.server.port == second.server.port
    assert third.server.port != second.server.port
    assert calls["n"] == 2
    access.clear_config_cache()


def test_load_config_reads_camel_case_file(tmp_path, monkeypatch):
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"sync": {"pollIntervalMs": 500}, "cache": {"maxEntries": 10}}))

    cfg = load_config(path)

    assert cfg.sync.poll_interval_ms == 500
    assert cfg.poll_interval_s == 0.5
    assert cfg.cache.max_entries == 10
    assert cfg.server.port == 8890


def test_load_config_rejects_broken_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{broken")
    with pytest.raises(ValueError):
        load_config(path)

    path.write_text(json.dumps({"sync": {"pollIntervalMs": 0}}))
    with pytest.raises(ValueError):
        load_config(path)


def test_client_id_falls_back_to_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "from-env")
    cfg = load_config(tmp_path / "missing.json")
    assert cfg.spotify.client_id == "from-env"


def test_env_prefix_overrides_defaults(monkeypatch):
    monkeypatch.setenv("SUPERBRIDGE_SERVER__PORT", "9999")
    assert Config().server.port == 9999


def test_save_config_writes_camel_case(tmp_path):
    path = tmp_path / "nested" / "config.json"
    cfg = Config()
    cfg.sync.poll_interval_ms = 2000
    save_config(cfg, path)

    data = json.loads(path.read_text())
    assert data["sync"]["pollIntervalMs"] == 2000
    assert data["rpc"]["silentMethods"] == ["com.spotify.superbird.instrumentation.log"]
    assert convert_keys(data)["sync"]["poll_interval_ms"] == 2000


def test_update_config_persists_and_refreshes_cache(tmp_path, monkeypatch):
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    path = tmp_path / "config.json"
    access.clear_config_cache()

    def _set_client(cfg):
        cfg.spotify.client_id = "cid-123"

    updated = access.update_config(_set_client, config_path=path)

    assert access.get_config(config_path=path) is updated
    assert json.loads(path.read_text())["spotify"]["clientId"] == "cid-123"
    assert load_config(path).spotify.client_id == "cid-123"
    access.clear_config_cache(config_path=path)
