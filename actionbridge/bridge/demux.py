"""Routes worker replies to the calls waiting on them."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from loguru import logger

from actionbridge.bridge.pending import PendingCallRegistry
from actionbridge.bridge.protocol import decode_action_response, outcome_from_response


@dataclass
class DemuxStats:
    settled: int = 0
    malformed: int = 0
    unmatched: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class ReplyDemultiplexer:
    """Settles pending calls from inbound worker frames.

    Malformed frames and frames for unknown or already-settled ids are dropped
    and only counted; they never reach a waiting caller.
    """

    def __init__(self, registry: PendingCallRegistry):
        self.registry = registry
        self.stats = DemuxStats()

    def handle_message(self, raw: str | bytes | bytearray) -> bool:
        response = decode_action_response(raw)
        if response is None:
            self.stats.malformed += 1
            logger.debug("Dropped malformed worker message ({} bytes)", len(raw or b""))
            return False
        if not self.registry.settle(response.id, outcome_from_response(response)):
            self.stats.unmatched += 1
            logger.debug("Dropped worker reply for unknown call id={}", response.id)
            return False
        self.stats.settled += 1
        return True
