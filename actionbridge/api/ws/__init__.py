"""Worker WebSocket helpers."""
