"""superbridge - inter-app action bridge between a hardware remote and the Spotify Web API."""

__version__ = "0.1.0"
__logo__ = "📻"
