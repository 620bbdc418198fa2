"""Loguru sinks for CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from superbridge.utils.helpers import ensure_dir, get_data_path

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

_file_sinks: dict[str, int] = {}


def configure_console_logging(level: str = "INFO") -> None:
    """Replace loguru's default stderr sink with one at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def ensure_rotating_log_file(name: str, level: str = "INFO", *, log_dir: Path | None = None) -> Path:
    """Attach (once per command name) a rotating file sink and return its path."""
    directory = log_dir or get_data_path() / "logs"
    log_path = directory / f"{name}.log"
    if name not in _file_sinks:
        ensure_dir(directory)
        _file_sinks[name] = logger.add(
            str(log_path),
            level=level.upper(),
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
            encoding="utf-8",
            backtrace=False,
            diagnose=False,
        )
    return log_path
