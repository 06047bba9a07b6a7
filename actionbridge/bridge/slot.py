"""Single-occupant slot for the attached worker connection."""

from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

from actionbridge.utils.exceptions import sanitize_error_message


class WorkerConnection(Protocol):
    async def send_text(self, data: str) -> None: ...


class PeerConnectionSlot:
    """Holds at most one worker connection; newer attachments replace older ones."""

    def __init__(self):
        self._connection: WorkerConnection | None = None
        self._generation = 0

    @property
    def attached(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> WorkerConnection | None:
        return self._connection

    @property
    def generation(self) -> int:
        return self._generation

    def attach(self, connection: WorkerConnection) -> int:
        """Make ``connection`` the current worker. The previous one is left open."""
        replaced = self._connection is not None and self._connection is not connection
        self._connection = connection
        self._generation += 1
        if replaced:
            logger.info("Worker connection replaced (generation={})", self._generation)
        else:
            logger.info("Worker connected (generation={})", self._generation)
        return self._generation

    def detach_if(self, connection: Any) -> bool:
        """Clear the slot only if ``connection`` is still the attached one."""
        if connection is None or self._connection is not connection:
            return False
        self._connection = None
        logger.info("Worker disconnected (generation={})", self._generation)
        return True

    async def send(self, payload: str) -> bool:
        """Send ``payload`` to the attached worker. False when none is attached."""
        connection = self._connection
        if connection is None:
            return False
        try:
            await connection.send_text(payload)
        except Exception as exc:
            logger.warning("Worker send failed: {}", sanitize_error_message(str(exc)))
            self.detach_if(connection)
            return False
        return True
