"""HTTP and WebSocket surface of the bridge."""

from actionbridge.api.server import create_bridge_app

__all__ = ["create_bridge_app"]
