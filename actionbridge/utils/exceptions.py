"""
Exception hierarchy and error handling utilities for actionbridge.

Provides:
- Custom exception classes with error codes
- Error categorization (validation, unavailable, timeout, worker, fatal)
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    VALIDATION = "validation"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    WORKER = "worker"
    FATAL = "fatal"


class BridgeError(Exception):
    """Base exception for all actionbridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class WorkerUnavailableError(BridgeError):
    """No worker connection is attached."""

    def __init__(self, action: str | None = None):
        details = {"action": action} if action is not None else {}
        super().__init__(
            "No worker connected",
            code="WORKER_UNAVAILABLE",
            category=ErrorCategory.UNAVAILABLE,
            details=details,
        )


class InvalidBodyError(BridgeError):
    """Request body could not be parsed into an action input."""

    def __init__(self, message: str = "Request body must be a JSON object"):
        super().__init__(message, code="INVALID_BODY", category=ErrorCategory.VALIDATION)


class WorkerFailureError(BridgeError):
    """Worker replied with ``error: true``."""

    def __init__(self, action: str, call_id: int):
        super().__init__(
            f"Worker reported failure for action '{action}'",
            code="WORKER_FAILURE",
            category=ErrorCategory.WORKER,
            details={"action": action, "call_id": call_id},
        )


class CallTimeoutError(BridgeError):
    """No reply arrived within the call window."""

    def __init__(self, action: str, call_id: int, timeout_seconds: float):
        super().__init__(
            f"Action '{action}' timed out after {timeout_seconds}s",
            code="TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"action": action, "call_id": call_id, "timeout_seconds": timeout_seconds},
        )


class DuplicateCallError(BridgeError):
    """A call identifier was registered twice."""

    def __init__(self, call_id: int):
        super().__init__(
            f"Call {call_id} is already pending",
            code="DUPLICATE_CALL",
            category=ErrorCategory.FATAL,
            details={"call_id": call_id},
        )


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory]:
    """
    Classify an exception and return (error_code, category).

    Returns:
        Tuple of (error_code, category)
    """
    if isinstance(exc, BridgeError):
        return exc.code, exc.category

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.UNAVAILABLE

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return "INVALID_VALUE", ErrorCategory.FATAL

    return "INTERNAL_ERROR", ErrorCategory.FATAL
