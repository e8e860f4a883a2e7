"""
Error message sanitization for API responses.

Client-facing errors never echo stack traces, file paths, SQL errors or
anything that looks like an API key. Short plain validation messages pass
through on 400s; everything else becomes a generic message.
"""

from __future__ import annotations

import re

from tabsense.observability.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    r"/[^\s]+\.py",
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    r"sqlite3?\.",
    r"no such table",
    r"AIza[0-9A-Za-z_-]{10,}",  # Google API key prefix
    r"[A-Za-z0-9_-]{32,}",
    r"tabsense\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    404: "Resource not found.",
    422: "Invalid data format.",
    500: "An internal error occurred. Please try again later.",
    503: "Service temporarily unavailable.",
}

MAX_PASSTHROUGH_LENGTH = 100


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Return ``message`` if it is safe to show a client, else a generic message.

    Args:
        message: The original error message
        status_code: HTTP status code (selects the generic fallback)
    """
    generic = GENERIC_MESSAGES.get(status_code, "An error occurred.")
    if not message:
        return generic

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message, re.IGNORECASE):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return generic

    if (
        status_code == 400
        and len(message) < MAX_PASSTHROUGH_LENGTH
        and not any(c in message for c in "{}[]\n")
    ):
        return message

    return generic


def get_safe_error_detail(error: Exception, status_code: int = 500, context: str | None = None) -> str:
    """Log ``error`` in full and return a client-safe detail string."""
    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, error)
    if context and status_code >= 500:
        return context
    return sanitize_error_message(str(error), status_code)
