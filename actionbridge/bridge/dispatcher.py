"""Sends actions to the worker and waits for the correlated reply."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import replace
from typing import Any

from loguru import logger

from actionbridge.bridge.pending import PendingCallRegistry
from actionbridge.bridge.protocol import ActionRequest, CallOutcome, encode_action_request
from actionbridge.bridge.slot import PeerConnectionSlot


class ActionDispatcher:
    """Turns ``(action, input)`` into a worker roundtrip.

    Call ids come from a single monotonic counter starting at 1 and are only
    consumed once a worker is known to be attached.
    """

    def __init__(self, registry: PendingCallRegistry, slot: PeerConnectionSlot):
        self.registry = registry
        self.slot = slot
        self._ids = itertools.count(1)
        self._last_call_id = 0

    @property
    def last_call_id(self) -> int:
        return self._last_call_id

    def _next_call_id(self) -> int:
        self._last_call_id = next(self._ids)
        return self._last_call_id

    async def dispatch(
        self,
        action: str,
        input: dict[str, Any] | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> CallOutcome:
        if not self.slot.attached:
            return CallOutcome.unavailable()

        request = ActionRequest(id=self._next_call_id(), action=action, input=dict(input or {}))
        fut: asyncio.Future[CallOutcome] = asyncio.get_running_loop().create_future()

        def _on_settle(outcome: CallOutcome) -> None:
            if not fut.done():
                fut.set_result(outcome)

        # Registered before the send is awaited so a fast reply still finds its entry.
        self.registry.register(request.id, _on_settle, timeout_seconds)
        try:
            if not await self.slot.send(encode_action_request(request)):
                self.registry.discard(request.id)
                return CallOutcome.unavailable()
            logger.debug("Dispatched action={} id={}", request.action, request.id)
            outcome = await fut
        except asyncio.CancelledError:
            self.registry.discard(request.id)
            raise
        return replace(outcome, call_id=request.id)
