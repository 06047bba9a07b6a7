"""FastAPI server bridging HTTP callers to the attached worker.

One port serves both sides: plain HTTP requests become worker actions, and a
WebSocket upgrade on any path attaches the worker that answers them.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import Response
from loguru import logger

from actionbridge import __version__
from actionbridge.api.http.action_methods import handle_action_request
from actionbridge.api.ws.worker_methods import handle_worker_ws_close, run_worker_ws_loop
from actionbridge.bridge.context import BridgeContext
from actionbridge.config.schema import Config

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_bridge_app(
    *,
    context: BridgeContext | None = None,
    config: Config | None = None,
) -> FastAPI:
    """Create the bridge app around ``context`` (a fresh one when omitted)."""
    config = config or Config()
    bridge = context or BridgeContext.create(call_timeout_seconds=config.bridge.call_timeout_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "actionbridge started (call timeout {}s)",
            bridge.registry.timeout_seconds,
        )
        yield
        logger.info(
            "actionbridge stopped ({} calls still pending, stats={})",
            len(bridge.registry),
            bridge.demux.stats.to_dict(),
        )

    app = FastAPI(
        title="actionbridge",
        description="HTTP to WebSocket worker action bridge",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.bridge = bridge
    app.state.config = config

    @app.api_route("/", methods=ALL_METHODS)
    async def root() -> Response:
        return Response(status_code=200)

    @app.api_route("/favicon.ico", methods=ALL_METHODS)
    async def favicon() -> Response:
        return Response(status_code=404)

    @app.api_route("/{action:path}", methods=ALL_METHODS)
    async def action(request: Request) -> Response:
        return await handle_action_request(request, bridge.dispatcher)

    @app.websocket("/{path:path}")
    async def worker_socket(websocket: WebSocket):
        """Worker channel: the newest connection becomes the active worker."""
        await websocket.accept()
        bridge.slot.attach(websocket)
        try:
            await run_worker_ws_loop(websocket=websocket, context=bridge)
        except WebSocketDisconnect:
            await handle_worker_ws_close(websocket=websocket, context=bridge)
        except Exception as e:
            await handle_worker_ws_close(
                websocket=websocket,
                context=bridge,
                logger_error=logger.error,
                exc=e,
            )
        else:
            await handle_worker_ws_close(websocket=websocket, context=bridge)

    return app
