"""Small shared helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def first_or(items: list[T] | None, fallback: Any = None) -> T | Any:
    """Return the first element of a list, or ``fallback`` when it is empty."""
    return items[0] if items else fallback


def map_first_or(items: list[T] | None, fn: Callable[[T], R], fallback: Any = None) -> R | Any:
    """Map the first element of a list, or return ``fallback`` when it is empty."""
    return fn(items[0]) if items else fallback


def id_from_uri(uri: str) -> str:
    """``spotify:album:abc`` -> ``abc``."""
    return (uri or "").split(":")[-1]


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the superbridge data directory (~/.superbridge)."""
    return ensure_dir(Path.home() / ".superbridge")
