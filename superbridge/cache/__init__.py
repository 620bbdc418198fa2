"""Ephemeral content cache and artwork store."""

from superbridge.cache.ephemeral import CacheEntry, EphemeralCache
from superbridge.cache.images import ImageStore, extract_image_id, image_url, select_image_id

__all__ = ["CacheEntry", "EphemeralCache", "ImageStore", "extract_image_id", "image_url", "select_image_id"]
