"""Shared helpers for consistent HTTP error responses."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from actionbridge.utils.exceptions import BridgeError, ErrorCategory

_CATEGORY_TO_STATUS = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.UNAVAILABLE: 401,
}

GENERIC_SERVER_ERROR = {"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"}


def classify_http_status(exc: Exception) -> int:
    """Map exception to appropriate HTTP status code.

    Worker failures, timeouts and anything outside BridgeError land on 500.
    """
    if isinstance(exc, BridgeError):
        return _CATEGORY_TO_STATUS.get(exc.category, 500)
    return 500


def error_response(exc: Exception) -> JSONResponse:
    """Render ``exc``; every 5xx shares one generic body."""
    status_code = classify_http_status(exc)
    if status_code >= 500 or not isinstance(exc, BridgeError):
        return JSONResponse(status_code=status_code, content=dict(GENERIC_SERVER_ERROR))
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )
