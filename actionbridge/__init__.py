"""actionbridge - HTTP to WebSocket worker action bridge."""

__version__ = "0.1.0"
__logo__ = "🌉"
