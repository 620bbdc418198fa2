"""Utility functions for superbridge."""

from superbridge.utils.helpers import ensure_dir, first_or, get_data_path, id_from_uri, map_first_or
from superbridge.utils.exceptions import (
    AuthError,
    BridgeError,
    ErrorCategory,
    NotFoundError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "ensure_dir",
    "first_or",
    "get_data_path",
    "id_from_uri",
    "map_first_or",
    "AuthError",
    "BridgeError",
    "ErrorCategory",
    "NotFoundError",
    "RateLimitError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ValidationError",
    "classify_exception",
    "sanitize_error_message",
]
