"""WebSocket transport for the remote."""
