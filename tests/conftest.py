"""Pytest hooks and fixtures."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import pytest
from loguru import logger

from actionbridge.bridge.context import BridgeContext


class FakeWorker:
    """Stands in for a worker socket; optionally answers each frame through the demux."""

    def __init__(
        self,
        context: BridgeContext | None = None,
        reply: Callable[[dict[str, Any]], dict[str, Any] | None] | None = None,
        fail_send: bool = False,
    ):
        self.context = context
        self.reply = reply
        self.fail_send = fail_send
        self.sent: list[dict[str, Any]] = []

    async def send_text(self, data: str) -> None:
        if self.fail_send:
            raise ConnectionResetError("socket closed")
        frame = json.loads(data)
        self.sent.append(frame)
        if self.reply is None or self.context is None:
            return
        answer = self.reply(frame)
        if answer is not None:
            asyncio.get_running_loop().call_soon(self.context.demux.handle_message, json.dumps(answer))


@pytest.fixture
def bridge() -> BridgeContext:
    return BridgeContext.create(call_timeout_seconds=0.2)


@pytest.fixture
def log_records():
    """Collect loguru records at WARNING and above."""
    records: list[Any] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="WARNING")
    yield records
    logger.remove(sink_id)


@pytest.fixture
def attach_worker(bridge: BridgeContext):
    """Attach a FakeWorker to the bridge slot."""

    def _attach(reply=None, fail_send: bool = False) -> FakeWorker:
        worker = FakeWorker(bridge, reply=reply, fail_send=fail_send)
        bridge.slot.attach(worker)
        return worker

    return _attach


@pytest.fixture
def echo_reply():
    def _reply(frame: dict[str, Any]) -> dict[str, Any]:
        return {"id": frame["id"], "content": frame["input"].get("msg"), "json": False}

    return _reply
