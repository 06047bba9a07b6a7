"""End-to-end behaviour of the bridge app over ASGI."""

from __future__ import annotations

import json
import threading
import time

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from actionbridge.api.server import create_bridge_app
from actionbridge.api.ws.worker_methods import handle_worker_ws_close
from actionbridge.bridge.context import BridgeContext


@pytest.fixture
async def client(bridge):
    app = create_bridge_app(context=bridge)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_root_is_empty_success_without_dispatch(client, bridge):
    r = await client.get("/")
    assert r.status_code == 200
    assert r.content == b""
    assert bridge.dispatcher.last_call_id == 0


@pytest.mark.asyncio
async def test_favicon_is_not_found_without_dispatch(client, bridge, attach_worker):
    worker = attach_worker()
    r = await client.get("/favicon.ico")
    assert r.status_code == 404
    assert worker.sent == []


@pytest.mark.asyncio
async def test_echo_renders_plain_text(client, attach_worker, echo_reply):
    worker = attach_worker(reply=echo_reply)

    r = await client.get("/echo", params={"msg": "hi"})

    assert r.status_code == 200
    assert r.text == "hi"
    assert r.headers["content-type"].startswith("text/plain")
    assert worker.sent[0]["action"] == "echo"


@pytest.mark.asyncio
async def test_compute_renders_json(client, attach_worker):
    worker = attach_worker(reply=lambda f: {"id": f["id"], "content": {"result": 42}, "json": True})

    r = await client.post("/compute", json={"a": 40, "b": 2})

    assert r.status_code == 200
    assert r.headers["content-type"] == "application/json"
    assert r.content == b'{"result":42}'
    assert worker.sent[0]["input"] == {"a": 40, "b": 2}


@pytest.mark.asyncio
async def test_nested_path_becomes_action_and_last_query_value_wins(client, attach_worker):
    worker = attach_worker(reply=lambda f: {"id": f["id"], "content": f["input"], "json": True})

    r = await client.get("/users/list?page=1&page=2&q=x")

    assert r.json() == {"page": "2", "q": "x"}
    assert worker.sent[0]["action"] == "users/list"


@pytest.mark.asyncio
async def test_percent_encoded_separator_is_decoded_in_action(client, attach_worker, echo_reply):
    worker = attach_worker(reply=echo_reply)

    r = await client.get("/a%2Fb")

    assert r.status_code == 200
    assert worker.sent[0]["action"] == "a/b"


@pytest.mark.asyncio
async def test_no_worker_is_unauthorized(client, bridge):
    r = await client.get("/echo?msg=hi")
    assert r.status_code == 401
    assert r.json()["error"] == "WORKER_UNAVAILABLE"
    assert bridge.dispatcher.last_call_id == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"", b"{not json", b"[1, 2]", b'"text"'])
async def test_bad_body_is_client_error_before_dispatch(client, bridge, attach_worker, body):
    worker = attach_worker()

    r = await client.post("/compute", content=body, headers={"Content-Type": "application/json"})

    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_BODY"
    assert worker.sent == []
    assert bridge.dispatcher.last_call_id == 0


@pytest.mark.asyncio
async def test_worker_failure_is_generic_server_error(client, attach_worker, log_records):
    attach_worker(reply=lambda f: {"id": f["id"], "error": True, "content": "secret detail"})

    r = await client.put("/explode", json={})

    assert r.status_code == 500
    assert r.json() == {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"}
    assert log_records == []


@pytest.mark.asyncio
async def test_timeout_is_generic_server_error_and_not_logged(client, attach_worker, log_records):
    attach_worker()

    r = await client.get("/silent")

    assert r.status_code == 500
    assert r.json() == {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"}
    assert log_records == []


@pytest.mark.asyncio
async def test_unexpected_fault_is_logged_and_generic(client, bridge, attach_worker, log_records, monkeypatch):
    attach_worker()

    async def _boom(*_args, **_kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(bridge.dispatcher, "dispatch", _boom)

    r = await client.get("/echo")

    assert r.status_code == 500
    assert r.json()["error"] == "INTERNAL_ERROR"
    assert any(rec["level"].name == "ERROR" for rec in log_records)


def test_worker_socket_roundtrip_over_real_websocket():
    context = BridgeContext.create(call_timeout_seconds=5.0)
    app = create_bridge_app(context=context)
    result: dict = {}

    with TestClient(app) as client:
        with client.websocket_connect("/worker") as ws:
            ws.send_text("garbage")
            ws.send_text(json.dumps({"id": 999, "content": "stale"}))
            deadline = time.monotonic() + 5
            while context.demux.stats.unmatched < 1 and time.monotonic() < deadline:
                time.sleep(0.01)

            caller = threading.Thread(target=lambda: result.update(r=client.get("/echo", params={"msg": "hi"})))
            caller.start()
            frame = ws.receive_json()
            ws.send_text(json.dumps({"id": frame["id"], "content": frame["input"]["msg"]}))
            caller.join(timeout=5)

    assert frame == {"id": 1, "action": "echo", "input": {"msg": "hi"}}
    assert result["r"].status_code == 200
    assert result["r"].text == "hi"
    assert context.demux.stats.to_dict() == {"settled": 1, "malformed": 1, "unmatched": 1}


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() >= deadline:
            return False
        time.sleep(0.01)
    return True


def test_deeply_nested_frame_keeps_worker_attached(log_records):
    context = BridgeContext.create(call_timeout_seconds=5.0)
    app = create_bridge_app(context=context)

    with TestClient(app) as client:
        with client.websocket_connect("/worker") as ws:
            ws.send_text("[" * 100000 + "]" * 100000)
            assert _wait_for(lambda: context.demux.stats.malformed == 1)
            assert context.slot.attached is True

            caller = threading.Thread(target=lambda: client.get("/echo", params={"msg": "still here"}))
            caller.start()
            frame = ws.receive_json()
            ws.send_text(json.dumps({"id": frame["id"], "content": "ok"}))
            caller.join(timeout=5)

    assert frame["input"] == {"msg": "still here"}
    assert log_records == []


def test_frame_handler_error_closes_and_detaches_worker(log_records, monkeypatch):
    context = BridgeContext.create(call_timeout_seconds=5.0)
    app = create_bridge_app(context=context)

    def _explode(_raw):
        raise RuntimeError("handler blew up")

    monkeypatch.setattr(context.demux, "handle_message", _explode)

    with TestClient(app) as client:
        with client.websocket_connect("/worker") as ws:
            ws.send_text("{}")
            with pytest.raises(WebSocketDisconnect):
                ws.receive_text()
        assert _wait_for(lambda: not context.slot.attached)

    assert any(
        rec["level"].name == "ERROR" and "handler blew up" in rec["message"] for rec in log_records
    )


class _ClosingSocket:
    def __init__(self):
        self.closed = False

    async def send_text(self, data: str) -> None:
        pass

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_error_on_stale_socket_leaves_newer_worker_attached(bridge):
    stale, current = _ClosingSocket(), _ClosingSocket()
    bridge.slot.attach(stale)
    bridge.slot.attach(current)
    errors: list[str] = []

    await handle_worker_ws_close(
        websocket=stale,
        context=bridge,
        logger_error=lambda msg, exc: errors.append(msg.format(exc)),
        exc=ConnectionResetError("reset"),
    )

    assert stale.closed is True
    assert bridge.slot.connection is current
    assert errors == ["Worker WebSocket error: reset"]
