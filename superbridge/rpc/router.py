"""Inter-app action router: operation registry, validation and reply contract."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from superbridge.rpc.error_boundary import (
    log_handler_failure,
    log_invalid_arguments,
    log_malformed_envelope,
    log_unknown_operation,
)
from superbridge.rpc.protocol import InboundRequest, NoReply, as_outcome, build_reply

Handler = Callable[[Any, Any], Awaitable[Any] | Any]
SendMessage = Callable[[dict[str, Any]], Awaitable[None] | None]


@dataclass(slots=True)
class OperationDescriptor:
    """One registered operation: name, optional argument schema and handler."""

    name: str
    handler: Handler
    schema: type[BaseModel] | None = None


class ActionRouter:
    """
    Maps operation names to handlers and turns every request into at most one reply.

    Malformed envelopes, unknown operations, invalid arguments and failing
    handlers are logged and dropped; ``dispatch`` reports them by returning
    False and never raises. Concurrent dispatches are not ordered or locked.
    """

    def __init__(self, context: Any = None, *, silent_operations: Iterable[str] = ()):
        self._context = context
        self._operations: dict[str, OperationDescriptor] = {}
        self._silent = frozenset(silent_operations)

    @property
    def context(self) -> Any:
        return self._context

    def register(
        self,
        operation_name: str,
        handler: Handler,
        schema: type[BaseModel] | None = None,
    ) -> OperationDescriptor:
        """Store a descriptor; a later registration for the same name replaces it."""
        if operation_name in self._operations:
            logger.warning("Operation {} registered twice; replacing previous handler", operation_name)
        descriptor = OperationDescriptor(name=operation_name, handler=handler, schema=schema)
        self._operations[operation_name] = descriptor
        return descriptor

    def operation(self, operation_name: str, schema: type[BaseModel] | None = None) -> Callable[[Handler], Handler]:
        """Decorator form of ``register``."""

        def decorator(handler: Handler) -> Handler:
            self.register(operation_name, handler, schema)
            return handler

        return decorator

    def is_registered(self, operation_name: str) -> bool:
        return operation_name in self._operations

    def operations(self) -> list[str]:
        return sorted(self._operations)

    async def dispatch(self, raw_message: Any, send: SendMessage) -> bool:
        """Validate, run and answer one inbound request. Returns False when dropped."""
        try:
            request = InboundRequest.model_validate(raw_message)
        except SchemaError as exc:
            log_malformed_envelope(error_count=exc.error_count(), log_debug=logger.debug)
            return False

        method = request.operation_name
        msg_id = request.correlation_id
        silent = method in self._silent

        descriptor = self._operations.get(method)
        if descriptor is None:
            if not silent:
                log_unknown_operation(method=method, msg_id=msg_id, log_info=logger.info)
            return False

        if not silent:
            logger.info("Inter-app action {} msgId={} userAction={}", method, msg_id, request.is_user_initiated)

        args = request.arguments
        if descriptor.schema is not None:
            try:
                args = descriptor.schema.model_validate(args)
            except SchemaError as exc:
                log_invalid_arguments(method=method, msg_id=msg_id, errors=exc.errors(), log_warning=logger.warning)
                return False

        try:
            result = descriptor.handler(args, self._context)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            log_handler_failure(
                method=method,
                msg_id=msg_id,
                exc=exc,
                log_warning=logger.warning,
                log_exception=logger.exception,
            )
            return False

        outcome = as_outcome(result)
        if isinstance(outcome, NoReply):
            return True

        try:
            sent = send(build_reply(msg_id, outcome.payload))
            if inspect.isawaitable(sent):
                await sent
        except Exception as exc:
            logger.warning("Reply for {} (msgId={}) could not be sent: {}", method, msg_id, exc)
            return False
        return True
