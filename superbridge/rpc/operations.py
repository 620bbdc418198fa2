"""Registers the fixed set of inter-app operations on a router."""

from __future__ import annotations

from superbridge.rpc.browse_methods import register_browse_methods
from superbridge.rpc.image_methods import register_image_methods
from superbridge.rpc.misc_methods import register_misc_methods
from superbridge.rpc.playback_methods import register_playback_methods
from superbridge.rpc.router import ActionRouter


def register_bridge_operations(router: ActionRouter) -> ActionRouter:
    register_browse_methods(router)
    register_image_methods(router)
    register_playback_methods(router)
    register_misc_methods(router)
    return router
