"""Bind checks for the serve command."""

from __future__ import annotations

import errno
import socket


def _bind_family(host: str) -> int:
    infos = socket.getaddrinfo(host or None, None, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    return infos[0][0] if infos else socket.AF_INET


def is_port_in_use(host: str, port: int) -> bool:
    """True when another listener already holds ``host:port`` (IPv4 or IPv6)."""
    family = _bind_family(host)
    with socket.socket(family, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as exc:
            if exc.errno == errno.EADDRINUSE:
                return True
            raise
    return False


def suggest_free_port(host: str, start: int, attempts: int = 20) -> int | None:
    """First free port after ``start`` on ``host``, or None within ``attempts`` tries."""
    for candidate in range(start + 1, min(start + 1 + attempts, 65536)):
        if not is_port_in_use(host, candidate):
            return candidate
    return None
