"""Explicit owner of one bridge's shared state."""

from __future__ import annotations

from dataclasses import dataclass

from actionbridge.bridge.demux import ReplyDemultiplexer
from actionbridge.bridge.dispatcher import ActionDispatcher
from actionbridge.bridge.pending import DEFAULT_CALL_TIMEOUT_SECONDS, PendingCallRegistry
from actionbridge.bridge.slot import PeerConnectionSlot


@dataclass
class BridgeContext:
    registry: PendingCallRegistry
    slot: PeerConnectionSlot
    dispatcher: ActionDispatcher
    demux: ReplyDemultiplexer

    @classmethod
    def create(cls, *, call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS) -> BridgeContext:
        registry = PendingCallRegistry(timeout_seconds=call_timeout_seconds)
        slot = PeerConnectionSlot()
        return cls(
            registry=registry,
            slot=slot,
            dispatcher=ActionDispatcher(registry, slot),
            demux=ReplyDemultiplexer(registry),
        )
