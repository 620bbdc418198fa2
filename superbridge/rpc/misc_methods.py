"""Operations the bridge acknowledges without doing work."""

from __future__ import annotations

from typing import Any

from superbridge.rpc.protocol import GET_TIPS_AND_TRICKS, INSTRUMENTATION_LOG, PERMISSIONS, NoReply
from superbridge.rpc.router import ActionRouter


def permissions(_args: Any, _ctx: Any) -> NoReply:
    # Left unanswered on purpose
    return NoReply("permissions disabled")


def ignore(_args: Any, _ctx: Any) -> NoReply:
    return NoReply()


def register_misc_methods(router: ActionRouter) -> None:
    router.register(PERMISSIONS, permissions)
    router.register(INSTRUMENTATION_LOG, ignore)
    router.register(GET_TIPS_AND_TRICKS, ignore)
