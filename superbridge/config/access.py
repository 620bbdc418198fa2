"""Process-wide cached configuration."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable

from loguru import logger

from superbridge.config.loader import get_config_path, load_config, save_config
from superbridge.config.schema import Config

_lock = threading.RLock()
_configs: dict[Path, Config] = {}


def _resolve(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """Return the cached config for ``config_path``, loading it on first use."""
    path = _resolve(config_path)
    with _lock:
        cfg = None if force_reload else _configs.get(path)
        if cfg is None:
            cfg = load_config(path)
            _configs[path] = cfg
            logger.debug("Loaded config from {}", path)
        return cfg


def update_config(mutate: Callable[[Config], None], *, config_path: Path | None = None) -> Config:
    """Apply ``mutate`` to the current config, persist it and keep the cache in step."""
    path = _resolve(config_path)
    with _lock:
        cfg = get_config(config_path=path)
        mutate(cfg)
        save_config(cfg, path)
        _configs[path] = cfg
        return cfg


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Forget one cached config, or all of them."""
    with _lock:
        if config_path is None:
            _configs.clear()
        else:
            _configs.pop(_resolve(config_path), None)
