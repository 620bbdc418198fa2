"""Async HTTP client for the Spotify Web API."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

import httpx
from loguru import logger

from superbridge.utils.exceptions import (
    AuthError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
)

DEFAULT_API_BASE = "https://api.spotify.com/v1"

TokenProvider = Callable[[], Awaitable[str] | str]


class SpotifyClient:
    """Thin wrapper over the Web API endpoints the bridge uses."""

    def __init__(
        self,
        *,
        access_token: str | None = None,
        token_provider: TokenProvider | None = None,
        api_base: str = DEFAULT_API_BASE,
        market: str = "US",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 20.0,
    ):
        if access_token is None and token_provider is None:
            raise ValueError("access_token or token_provider is required")
        self.api_base = api_base.rstrip("/")
        self.market = market
        self._access_token = access_token
        self._token_provider = token_provider
        self._timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    async def _token(self) -> str:
        if self._token_provider is None:
            return self._access_token or ""
        token = self._token_provider()
        if inspect.isawaitable(token):
            token = await token
        return token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        expect_json: bool = True,
    ) -> Any:
        url = f"{self.api_base}{path}"
        headers = {"Authorization": f"Bearer {await self._token()}"}
        try:
            resp = await self._client().request(method, url, params=params, json=json_body, headers=headers)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(f"{method} {path}", self._timeout) from exc
        except httpx.RequestError as exc:
            raise UpstreamError(
                f"upstream network error: {method} {path}: {exc}",
                endpoint=path,
                is_retryable=True,
            ) from exc

        status_code = resp.status_code
        if status_code == 429:
            raise RateLimitError("spotify", _parse_retry_after(resp.headers.get("Retry-After")))
        if status_code == 401:
            raise AuthError(f"upstream rejected credentials for {method} {path}")
        if status_code >= 400:
            raise UpstreamError(
                f"upstream http error {status_code}: {_extract_error_message(resp)}",
                status_code=status_code,
                endpoint=path,
                is_retryable=status_code >= 500,
            )

        # play/pause answer with a non-JSON ack body
        if not expect_json or status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"upstream bad response: non-json body for {method} {path}",
                status_code=status_code,
                endpoint=path,
            ) from exc

    async def get_playback_state(self) -> dict[str, Any] | None:
        body = await self._request("GET", "/me/player", params={"market": self.market})
        return body if isinstance(body, dict) else None

    async def start_resume_playback(
        self,
        device_id: str,
        context_uri: str | None = None,
        offset_uri: str | None = None,
    ) -> None:
        body: dict[str, Any] = {}
        if context_uri:
            body["context_uri"] = context_uri
        if offset_uri:
            body["offset"] = {"uri": offset_uri}
        logger.debug("Start/resume playback device={} context={}", device_id, context_uri)
        await self._request(
            "PUT",
            "/me/player/play",
            params={"device_id": device_id},
            json_body=body or None,
            expect_json=False,
        )

    async def pause_playback(self, device_id: str) -> None:
        logger.debug("Pause playback device={}", device_id)
        await self._request("PUT", "/me/player/pause", params={"device_id": device_id}, expect_json=False)

    async def get_available_devices(self) -> list[dict[str, Any]]:
        body = await self._request("GET", "/me/player/devices")
        devices = body.get("devices") if isinstance(body, dict) else None
        return devices if isinstance(devices, list) else []

    async def get_saved_albums(self, limit: int = 25, offset: int = 0) -> dict[str, Any]:
        body = await self._request(
            "GET",
            "/me/albums",
            params={"limit": limit, "offset": offset, "market": self.market},
        )
        return body if isinstance(body, dict) else {"items": [], "total": 0}

    async def get_album(self, album_id: str) -> dict[str, Any] | None:
        try:
            body = await self._request("GET", f"/albums/{album_id}", params={"market": self.market})
        except UpstreamError as exc:
            if exc.status_code in (400, 404):
                return None
            raise
        return body if isinstance(body, dict) else None

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _extract_error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        for key in ("error_description", "message", "error"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    text = (resp.text or "").strip()
    return text[:200] if text else "unknown error"
