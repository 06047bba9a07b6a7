"""Request/response correlation between HTTP callers and the worker socket."""

from actionbridge.bridge.context import BridgeContext
from actionbridge.bridge.demux import DemuxStats, ReplyDemultiplexer
from actionbridge.bridge.dispatcher import ActionDispatcher
from actionbridge.bridge.pending import PendingCall, PendingCallRegistry
from actionbridge.bridge.protocol import ActionRequest, ActionResponse, CallOutcome, OutcomeKind
from actionbridge.bridge.slot import PeerConnectionSlot

__all__ = [
    "ActionDispatcher",
    "ActionRequest",
    "ActionResponse",
    "BridgeContext",
    "CallOutcome",
    "DemuxStats",
    "OutcomeKind",
    "PeerConnectionSlot",
    "PendingCall",
    "PendingCallRegistry",
    "ReplyDemultiplexer",
]
