"""Access token acquisition and persistence."""

from superbridge.auth.token_store import TokenStore

__all__ = ["TokenStore"]
