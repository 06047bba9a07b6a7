"""HTTP helpers for CLI commands talking to a running bridge."""

from __future__ import annotations

import json
from typing import Any

import httpx

from actionbridge.config.schema import Config


def get_bridge_base_url(config: Config) -> str:
    """Build the bridge base URL from config."""
    host = config.server.host
    if host in {"0.0.0.0", "::"}:
        host = "127.0.0.1"
    return f"http://{host}:{config.server.port}"


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a query mapping."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {pair!r}")
        params[key] = value
    return params


def call_action(
    base_url: str,
    action: str,
    *,
    params: dict[str, str] | None = None,
    data: dict[str, Any] | None = None,
    timeout: float = 15.0,
) -> httpx.Response:
    """Invoke ``action`` on a running bridge: GET with params, or POST with a JSON body."""
    url = f"{base_url.rstrip('/')}/{action.lstrip('/')}"
    with httpx.Client(timeout=timeout) as client:
        if data is not None:
            return client.post(url, content=json.dumps(data), headers={"Content-Type": "application/json"})
        return client.get(url, params=params or {})


def ping(base_url: str, timeout: float = 2.0) -> bool:
    """Return True when the bridge answers its liveness path."""
    try:
        response = httpx.get(f"{base_url.rstrip('/')}/", timeout=timeout)
    except httpx.HTTPError:
        return False
    return response.status_code == 200
