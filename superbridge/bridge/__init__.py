"""Bridge facade."""

from superbridge.bridge.facade import Bridge

__all__ = ["Bridge"]
