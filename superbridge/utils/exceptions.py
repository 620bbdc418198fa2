"""
Exception hierarchy and error handling utilities for superbridge.

Provides:
- Custom exception classes with error codes
- Error categorization (recoverable, retryable, fatal)
- Safe error message formatting (no token leak into logs)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"


class BridgeError(Exception):
    """Base exception for all superbridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(BridgeError):
    """Input validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class NotFoundError(BridgeError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            code="NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class UpstreamError(BridgeError):
    """Media API call failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
        is_retryable: bool = False,
    ):
        category = ErrorCategory.RETRYABLE if is_retryable else ErrorCategory.RECOVERABLE
        super().__init__(
            message,
            code="UPSTREAM_ERROR",
            category=category,
            details={"status_code": status_code, "endpoint": endpoint, "is_retryable": is_retryable},
        )
        self.status_code = status_code
        self.is_retryable = is_retryable


class UpstreamTimeoutError(BridgeError):
    """Media API call timed out."""

    def __init__(self, endpoint: str, timeout_seconds: float):
        super().__init__(
            f"Upstream call '{endpoint}' timed out after {timeout_seconds}s",
            code="TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"endpoint": endpoint, "timeout_seconds": timeout_seconds},
        )


class RateLimitError(BridgeError):
    """Rate limit exceeded error."""

    def __init__(self, service: str, retry_after: float | None = None):
        message = f"Rate limit exceeded for {service}"
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(
            message,
            code="RATE_LIMIT",
            category=ErrorCategory.RATE_LIMIT,
            details={"service": service, "retry_after": retry_after},
        )
        self.retry_after = retry_after


class AuthError(BridgeError):
    """Credential could not be acquired or refreshed."""

    def __init__(self, message: str):
        super().__init__(message, code="AUTH_ERROR", category=ErrorCategory.PERMISSION)


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth|code_verifier)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9_\-]{64,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    Returns:
        Tuple of (error_code, category, should_retry)
    """
    exc_str = str(exc).lower()

    if isinstance(exc, BridgeError):
        return exc.code, exc.category, exc.category in (ErrorCategory.RETRYABLE, ErrorCategory.RATE_LIMIT)

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if isinstance(exc, PermissionError):
        return "PERMISSION_DENIED", ErrorCategory.PERMISSION, False

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION, False

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    if isinstance(exc, KeyError):
        return "MISSING_KEY", ErrorCategory.VALIDATION, False

    if isinstance(exc, TypeError):
        return "TYPE_ERROR", ErrorCategory.VALIDATION, False

    if "rate limit" in exc_str or "429" in exc_str:
        return "RATE_LIMIT", ErrorCategory.RATE_LIMIT, True

    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if "not found" in exc_str or "404" in exc_str:
        return "NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if "unauthorized" in exc_str or "401" in exc_str:
        return "UNAUTHORIZED", ErrorCategory.PERMISSION, False

    if "connection" in exc_str or "network" in exc_str:
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False
