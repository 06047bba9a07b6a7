"""Helpers for action endpoints: request -> (action, input) -> worker -> response."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from loguru import logger

from actionbridge.api.http.error_helpers import error_response
from actionbridge.bridge.dispatcher import ActionDispatcher
from actionbridge.bridge.protocol import CallOutcome, OutcomeKind
from actionbridge.utils.exceptions import (
    CallTimeoutError,
    InvalidBodyError,
    WorkerFailureError,
    WorkerUnavailableError,
    classify_exception,
    sanitize_error_message,
)

READ_ONLY_METHODS = {"GET", "HEAD"}


def action_from_path(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def parse_json_body(body: bytes) -> dict[str, Any]:
    """Parse a request body into an action input mapping."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidBodyError(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidBodyError()
    return payload


async def resolve_action_input(request: Request) -> tuple[str, dict[str, Any]]:
    """Extract ``(action, input)``; bad bodies fail here, before any dispatch."""
    action = action_from_path(request.url.path)
    if request.method.upper() in READ_ONLY_METHODS:
        # Repeated keys keep their last value.
        return action, dict(request.query_params)
    return action, parse_json_body(await request.body())


def plain_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, bool):
        return "true" if content else "false"
    if isinstance(content, (dict, list)):
        return json.dumps(content, ensure_ascii=False, separators=(",", ":"))
    return str(content)


def raise_for_outcome(outcome: CallOutcome, *, action: str, timeout_seconds: float) -> None:
    if outcome.kind is OutcomeKind.UNAVAILABLE:
        raise WorkerUnavailableError(action)
    if outcome.kind is OutcomeKind.WORKER_FAILURE:
        raise WorkerFailureError(action, outcome.call_id or 0)
    if outcome.kind is OutcomeKind.TIMEOUT:
        raise CallTimeoutError(action, outcome.call_id or 0, timeout_seconds)


def render_outcome(outcome: CallOutcome) -> Response:
    """Render a successful outcome as JSON or plain text."""
    if outcome.is_json:
        return JSONResponse(content=outcome.content)
    return PlainTextResponse(plain_text(outcome.content))


async def handle_action_request(request: Request, dispatcher: ActionDispatcher) -> Response:
    """Dispatch one HTTP request to the worker and render the reply."""
    action = action_from_path(request.url.path)
    try:
        action, action_input = await resolve_action_input(request)
        outcome = await dispatcher.dispatch(action, action_input)
        raise_for_outcome(outcome, action=action, timeout_seconds=dispatcher.registry.timeout_seconds)
        return render_outcome(outcome)
    except WorkerFailureError as e:
        logger.debug("Action {} failed on worker (id={})", action, e.details.get("call_id"))
        return error_response(e)
    except (WorkerUnavailableError, InvalidBodyError, CallTimeoutError) as e:
        return error_response(e)
    except Exception as e:
        code, _ = classify_exception(e)
        logger.exception("Action {} failed with [{}]: {}", action, code, sanitize_error_message(str(e)))
        return error_response(e)
