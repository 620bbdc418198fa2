"""Log helpers for requests dropped at the dispatch boundary."""

from __future__ import annotations

from typing import Any, Callable

from superbridge.utils.exceptions import BridgeError, classify_exception, sanitize_error_message


def log_malformed_envelope(*, error_count: int, log_debug: Callable[..., None]) -> None:
    log_debug("Dropping malformed inter-app envelope ({} errors)", error_count)


def log_unknown_operation(*, method: str, msg_id: int, log_info: Callable[..., None]) -> None:
    log_info("No handler for operation {} (msgId={})", method, msg_id)


def log_invalid_arguments(*, method: str, msg_id: int, errors: list[dict[str, Any]], log_warning: Callable[..., None]) -> None:
    fields = sorted({".".join(str(p) for p in e.get("loc", ())) or "<root>" for e in errors})
    log_warning("Invalid arguments for {} (msgId={}): {}", method, msg_id, ", ".join(fields))


def log_handler_failure(
    *,
    method: str,
    msg_id: int,
    exc: Exception,
    log_warning: Callable[..., None],
    log_exception: Callable[..., None],
) -> str:
    """Log a failed handler and return its classified error code.

    Known bridge errors get a one-line warning; anything else logs a traceback.
    """
    code, category, _ = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc))
    if isinstance(exc, BridgeError):
        log_warning("Operation {} (msgId={}) failed with {} [{}]: {}", method, msg_id, code, category.value, sanitized)
    else:
        log_exception("Operation {} (msgId={}) failed with [{}]: {}", method, msg_id, code, sanitized)
    return code
