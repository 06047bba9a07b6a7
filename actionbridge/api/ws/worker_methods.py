"""Worker WebSocket endpoint helpers."""

from __future__ import annotations

from typing import Any, Callable

from actionbridge.bridge.context import BridgeContext


async def run_worker_ws_loop(*, websocket: Any, context: BridgeContext) -> None:
    """Feed every inbound frame to the reply demultiplexer until the socket closes."""
    while True:
        message = await websocket.receive()
        if message.get("type") == "websocket.disconnect":
            return
        data = message.get("text")
        if data is None:
            data = message.get("bytes")
        if data is not None:
            context.demux.handle_message(data)


async def handle_worker_ws_close(
    *,
    websocket: Any,
    context: BridgeContext,
    logger_error: Callable[[str, Any], None] | None = None,
    exc: Exception | None = None,
) -> None:
    """Cleanup worker websocket on disconnect/error.

    Pending calls stay registered; they settle through their own timers.
    """
    if exc is not None:
        if logger_error is not None:
            logger_error("Worker WebSocket error: {}", exc)
        try:
            await websocket.close()
        except Exception:
            # already closed by the transport
            pass
    context.slot.detach_if(websocket)
