"""Utility functions for actionbridge."""

from actionbridge.utils.exceptions import (
    BridgeError,
    CallTimeoutError,
    DuplicateCallError,
    ErrorCategory,
    InvalidBodyError,
    WorkerFailureError,
    WorkerUnavailableError,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "BridgeError",
    "CallTimeoutError",
    "DuplicateCallError",
    "ErrorCategory",
    "InvalidBodyError",
    "WorkerFailureError",
    "WorkerUnavailableError",
    "classify_exception",
    "sanitize_error_message",
]
