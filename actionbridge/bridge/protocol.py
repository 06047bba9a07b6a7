"""Wire models for the worker channel and the tagged call outcome."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(slots=True, frozen=True)
class ActionRequest:
    """Frame sent to the worker: ``{id, action, input}``."""

    id: int
    action: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class ActionResponse:
    """Frame received from the worker: ``{id, content?, error?, json?}``."""

    id: int
    content: Any = None
    error: bool = False
    is_json: bool = False


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    WORKER_FAILURE = "worker_failure"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


@dataclass(slots=True, frozen=True)
class CallOutcome:
    """How a dispatched call ended."""

    kind: OutcomeKind
    content: Any = None
    is_json: bool = False
    call_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @classmethod
    def success(cls, content: Any, is_json: bool = False) -> CallOutcome:
        return cls(OutcomeKind.SUCCESS, content=content, is_json=is_json)

    @classmethod
    def worker_failure(cls) -> CallOutcome:
        return cls(OutcomeKind.WORKER_FAILURE)

    @classmethod
    def timeout(cls) -> CallOutcome:
        return cls(OutcomeKind.TIMEOUT)

    @classmethod
    def unavailable(cls) -> CallOutcome:
        return cls(OutcomeKind.UNAVAILABLE)


def encode_action_request(request: ActionRequest) -> str:
    """Encode a request frame as compact JSON text."""
    payload = {"id": request.id, "action": request.action, "input": request.input}
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def coerce_call_id(value: Any) -> int | None:
    """Return ``value`` as a call id, or None when it cannot be one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def decode_action_response(raw: str | bytes | bytearray) -> ActionResponse | None:
    """Decode a worker frame. Returns None for anything that is not a usable reply."""
    # JSONDecodeError and UnicodeDecodeError are ValueErrors; deep nesting raises RecursionError.
    try:
        payload = json.loads(raw)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None
    call_id = coerce_call_id(payload.get("id"))
    if call_id is None:
        return None
    return ActionResponse(
        id=call_id,
        content=payload.get("content"),
        error=bool(payload.get("error")),
        is_json=bool(payload.get("json")),
    )


def outcome_from_response(response: ActionResponse) -> CallOutcome:
    if response.error:
        return CallOutcome.worker_failure()
    return CallOutcome.success(response.content, is_json=response.is_json)
