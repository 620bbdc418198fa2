"""Artwork retrieval with an on-disk byte cache keyed by image id."""

from __future__ import annotations

import base64
import re
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from superbridge.cache.ephemeral import EphemeralCache
from superbridge.utils.exceptions import UpstreamError, UpstreamTimeoutError, ValidationError
from superbridge.utils.helpers import map_first_or

DEFAULT_IMAGE_BASE_URL = "https://i.scdn.co/image/"

_IMAGE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


def extract_image_id(url: str, base_url: str = DEFAULT_IMAGE_BASE_URL) -> str:
    return (url or "").replace(base_url, "")


def image_url(image_id: str, base_url: str = DEFAULT_IMAGE_BASE_URL) -> str:
    return f"{base_url}{image_id}"


def select_image_id(images: list[dict[str, Any]] | None, base_url: str = DEFAULT_IMAGE_BASE_URL) -> str:
    """Image id of the first (largest) image in an upstream image list, or ""."""
    return extract_image_id(map_first_or(images, lambda image: image.get("url") or "", ""), base_url)


class ImageStore:
    """Fetches artwork once, keeps the bytes on disk and serves base64 payloads.

    Fetched images never go stale; the in-memory layer only coalesces
    concurrent requests and saves the disk read.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        cache: EphemeralCache,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_IMAGE_BASE_URL,
        timeout: float = 20.0,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.base_url = base_url
        self._cache = cache
        self._timeout = timeout
        self._http = http_client
        self._owns_http = http_client is None
        self.fetch_count = 0

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    def _path_for(self, image_id: str) -> Path:
        # Upstream artwork is served as JPEG
        return self.cache_dir / f"{image_id}.jpg"

    async def get_image_base64(self, image_id: str) -> str:
        if not isinstance(image_id, str) or not _IMAGE_ID_RE.match(image_id):
            raise ValidationError(f"invalid image id: {image_id!r}", field="id")
        return await self._cache.get_or_fetch(f"image_{image_id}", None, lambda: self._load_base64(image_id))

    async def _load_base64(self, image_id: str) -> str:
        data = self.read_cached(image_id)
        if data is None:
            data = await self.fetch_image(image_id)
            self.write_cached(image_id, data)
        return base64.b64encode(data).decode("ascii")

    def read_cached(self, image_id: str) -> bytes | None:
        path = self._path_for(image_id)
        if not path.exists():
            return None
        return path.read_bytes()

    def write_cached(self, image_id: str, data: bytes) -> int:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self._path_for(image_id).write_bytes(data)

    async def fetch_image(self, image_id: str) -> bytes:
        url = image_url(image_id, self.base_url)
        self.fetch_count += 1
        logger.info("Fetching image {}", image_id)
        try:
            resp = await self._client().get(url)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError("image", self._timeout) from exc
        except httpx.RequestError as exc:
            raise UpstreamError(f"image fetch failed: {exc}", endpoint=url, is_retryable=True) from exc
        if resp.status_code >= 400:
            raise UpstreamError(
                f"image fetch failed with status {resp.status_code}",
                status_code=resp.status_code,
                endpoint=url,
                is_retryable=resp.status_code >= 500,
            )
        return resp.content

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None
