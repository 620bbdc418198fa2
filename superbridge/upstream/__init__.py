"""Upstream media API client and cached queries."""

from superbridge.upstream.base import MediaApi
from superbridge.upstream.client import SpotifyClient

__all__ = ["MediaApi", "SpotifyClient"]
