"""In-memory registry of in-flight worker calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable

from actionbridge.bridge.protocol import CallOutcome
from actionbridge.utils.exceptions import DuplicateCallError

SettleCallback = Callable[[CallOutcome], None]

DEFAULT_CALL_TIMEOUT_SECONDS = 10.0


@dataclass
class PendingCall:
    call_id: int
    on_settle: SettleCallback
    timeout_seconds: float
    deadline: float
    timer: asyncio.TimerHandle | None = None


class PendingCallRegistry:
    """Maps call ids to settle callbacks; each entry settles exactly once.

    Every mutation is synchronous, so on a single event loop the
    remove-then-invoke step cannot interleave with another settle/expire.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self._pending: dict[int, PendingCall] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._pending

    def pending_ids(self) -> list[int]:
        return sorted(self._pending)

    def register(
        self,
        call_id: int,
        on_settle: SettleCallback,
        timeout_seconds: float | None = None,
    ) -> PendingCall:
        """Store ``on_settle`` for ``call_id`` and arm its expiry timer."""
        if call_id in self._pending:
            raise DuplicateCallError(call_id)
        timeout = self.timeout_seconds if timeout_seconds is None else timeout_seconds
        if timeout <= 0:
            raise ValueError("timeout_seconds must be positive")
        loop = asyncio.get_running_loop()
        entry = PendingCall(
            call_id=call_id,
            on_settle=on_settle,
            timeout_seconds=timeout,
            deadline=loop.time() + timeout,
        )
        entry.timer = loop.call_later(timeout, self.expire, call_id)
        self._pending[call_id] = entry
        return entry

    def settle(self, call_id: int, outcome: CallOutcome) -> bool:
        """Deliver ``outcome`` if ``call_id`` is still pending. Late replies are no-ops."""
        entry = self._pop(call_id)
        if entry is None:
            return False
        entry.on_settle(outcome)
        return True

    def expire(self, call_id: int) -> bool:
        """Settle ``call_id`` with a timeout if no reply got there first."""
        entry = self._pop(call_id)
        if entry is None:
            return False
        entry.on_settle(CallOutcome.timeout())
        return True

    def discard(self, call_id: int) -> bool:
        """Drop ``call_id`` without invoking its callback."""
        return self._pop(call_id) is not None

    def _pop(self, call_id: int) -> PendingCall | None:
        entry = self._pending.pop(call_id, None)
        if entry is not None and entry.timer is not None:
            entry.timer.cancel()
        return entry
