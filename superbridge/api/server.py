"""FastAPI server the remote connects to.

The bridge is built in the lifespan from the stored access token unless one
is injected (tests, embedding), in which case its lifecycle stays with the caller.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from loguru import logger

from superbridge import __version__
from superbridge.api.session import RemoteSession
from superbridge.auth.token_store import TokenStore
from superbridge.bridge.facade import Bridge
from superbridge.config.access import get_config as get_cached_config
from superbridge.config.schema import Config
from superbridge.upstream.client import SpotifyClient
from superbridge.upstream.queries import active_device_id, get_devices
from superbridge.utils.exceptions import UpstreamError, sanitize_error_message


def build_bridge(config: Config) -> Bridge:
    """Bridge backed by the Spotify client and the persisted token."""
    token_store = TokenStore(config.token_path)
    token_store.access_token()  # fail fast when no valid token is stored
    api = SpotifyClient(
        token_provider=token_store.access_token,
        api_base=config.spotify.api_base,
        market=config.spotify.market,
        timeout=config.spotify.request_timeout_s,
    )
    return Bridge(api, config=config)


def create_app(config: Config | None = None, *, bridge: Bridge | None = None) -> FastAPI:
    injected = bridge is not None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if injected:
            logger.info("superbridge API: using injected bridge")
            yield
            return
        cfg = config or get_cached_config(force_reload=True)
        owned = build_bridge(cfg)
        app.state.bridge = owned
        owned.start()
        logger.info("Starting superbridge API server")
        try:
            yield
        finally:
            await owned.aclose()
            logger.info("superbridge API server stopped")

    app = FastAPI(
        title="superbridge",
        description="Inter-app action bridge for a hardware remote",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.bridge = bridge
    app.state.config = config or (bridge.config if bridge is not None else None)

    def _initial_state_delay_s() -> float:
        cfg = app.state.config or app.state.bridge.config
        return cfg.sync.initial_state_delay_ms / 1000.0

    @app.get("/health")
    async def health() -> dict[str, Any]:
        current: Bridge | None = app.state.bridge
        if current is None:
            return {"ok": False, "sync": None}
        snapshot = current.sync.current_state
        return {
            "ok": True,
            "sync": current.sync.state.value,
            "track": snapshot.track_uri if snapshot else None,
            "operations": current.router.operations(),
        }

    @app.get("/devices")
    async def devices() -> dict[str, Any]:
        current: Bridge | None = app.state.bridge
        if current is None:
            raise HTTPException(status_code=503, detail="bridge not started")
        try:
            listed = await get_devices(current.api, current.cache, ttl=current.config.cache.devices_ttl_s)
        except UpstreamError as e:
            logger.warning("Device list fetch failed: {}", sanitize_error_message(e.message))
            raise HTTPException(status_code=502, detail="device list unavailable")
        return {
            "devices": listed,
            "active": active_device_id(listed),
            "playing_on": current.sync.device_id,
        }

    async def _serve_remote(websocket: WebSocket) -> None:
        session = RemoteSession(
            websocket,
            app.state.bridge,
            initial_state_delay_s=_initial_state_delay_s(),
        )
        await session.open()
        try:
            await session.run()
        except WebSocketDisconnect:
            await session.close()
        except Exception as e:
            await session.close(e)

    app.add_api_websocket_route("/", _serve_remote)
    app.add_api_websocket_route("/ws", _serve_remote)
    return app
