"""Resumable access-token file (the bridge's only persisted state)."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from superbridge.utils.exceptions import AuthError


def _now_ms() -> int:
    return int(time.time() * 1000)


class TokenStore:
    """Reads and writes ``{"token": {...}, "time": <ms>}`` at ``path``."""

    def __init__(self, path: Path, *, now_ms: Callable[[], int] = _now_ms):
        self.path = Path(path).expanduser()
        self._now_ms = now_ms

    def load(self) -> dict[str, Any] | None:
        """Return the stored token while it is still valid, else None."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable token file {}: {}", self.path, e)
            return None
        if not isinstance(data, dict):
            return None
        token = data.get("token")
        if not isinstance(token, dict) or not token.get("access_token"):
            return None
        issued_ms = int(data.get("time") or 0)
        expires_in = int(token.get("expires_in") or 0)
        if self._now_ms() > issued_ms + expires_in * 1000:
            return None
        return token

    def save(self, token: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"token": token, "time": self._now_ms()}
        self.path.write_text(json.dumps(payload), encoding="utf-8")

    def access_token(self) -> str:
        token = self.load()
        if token is None:
            raise AuthError(f"no valid access token in {self.path}; run `superbridge auth`")
        return str(token["access_token"])
