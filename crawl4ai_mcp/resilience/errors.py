"""Error classification for upstream Crawl4AI calls.

Every failure the bridge can meet (httpx status errors, transport errors,
timeouts, parameter validation, anything else) is folded into one
``ClassifiedError`` carrying a stable ``ErrorKind`` and a retryability verdict.
The retry policy only looks at ``retryable``; handlers only look at
``message``.

Decision order (first match wins):
    already classified      -> returned unchanged
    parameter validation    -> VALIDATION
    HTTP 400 / 422          -> VALIDATION
    HTTP 401 / 403          -> AUTH
    HTTP 429                -> RATE_LIMIT  (retryable)
    HTTP >= 500             -> SERVER      (retryable)
    other HTTP 4xx          -> CLIENT
    transport timeout       -> TIMEOUT     (retryable)
    request without reply   -> NETWORK     (retryable)
    "timeout" in message    -> TIMEOUT     (retryable)
    anything else           -> UNKNOWN
"""

from __future__ import annotations

import json
import re
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError

from crawl4ai_mcp.core.config import ExecutionMode

_TIMEOUT_PATTERN = re.compile(r"time(?:d)?[\s_-]?out", re.IGNORECASE)


class ErrorKind(str, Enum):
    """Stable failure taxonomy."""

    VALIDATION = "validation"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    CLIENT = "client"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset(
    {ErrorKind.RATE_LIMIT, ErrorKind.SERVER, ErrorKind.NETWORK, ErrorKind.TIMEOUT}
)


class ParameterValidationError(ValueError):
    """Raised by handler validators when a required parameter is missing or mistyped."""


@dataclass(eq=False)
class ClassifiedError(Exception):
    """A failure normalized into the bridge taxonomy.

    Created once per failure, as close to its origin as possible, and never
    re-classified afterwards.

    Attributes:
        kind: Failure category
        message: Human readable message, prefixed with the call context
        retryable: Whether the retry policy may try again
        http_status: Upstream HTTP status, when a response was received
        details: Diagnostic detail; terse in production, raw in development
    """

    kind: ErrorKind
    message: str
    retryable: bool = False
    http_status: int | None = None
    details: str | None = None

    def __str__(self) -> str:
        return self.message


class ErrorClassifier:
    """Classify arbitrary failures into ``ClassifiedError`` values.

    Args:
        mode: PRODUCTION keeps ``details`` to a status-only summary;
            DEVELOPMENT carries the raw response body or traceback.
    """

    def __init__(self, mode: ExecutionMode = ExecutionMode.PRODUCTION) -> None:
        self.mode = mode

    def classify(self, error: object, context: str = "") -> ClassifiedError:
        """Classify a failure.

        Args:
            error: Exception (or any raised object) to classify
            context: Short description of what was being attempted; becomes
                the message prefix

        Returns:
            ClassifiedError for the failure
        """
        if isinstance(error, ClassifiedError):
            return error

        prefix = f"{context}: " if context else ""

        if isinstance(error, ParameterValidationError):
            return self._build(ErrorKind.VALIDATION, prefix + str(error), error)
        if isinstance(error, ValidationError):
            return self._build(
                ErrorKind.VALIDATION, prefix + _summarize_validation(error), error
            )

        if isinstance(error, httpx.HTTPStatusError):
            return self._from_response(error, error.response, prefix)

        if isinstance(error, (httpx.TimeoutException, TimeoutError)):
            text = str(error)
            message = f"Request timed out: {text}" if text else "Request timed out"
            return self._build(ErrorKind.TIMEOUT, prefix + message, error)

        if isinstance(error, httpx.RequestError):
            text = str(error)
            message = (
                f"Network error: {text}" if text else "Network error: no response received"
            )
            return self._build(ErrorKind.NETWORK, prefix + message, error)

        if not isinstance(error, BaseException):
            return self._build(
                ErrorKind.UNKNOWN, f"{prefix}Unknown error: {error!r}", None
            )

        text = str(error) or type(error).__name__
        if _TIMEOUT_PATTERN.search(text):
            return self._build(ErrorKind.TIMEOUT, prefix + text, error)
        return self._build(ErrorKind.UNKNOWN, prefix + text, error)

    def _from_response(
        self, error: BaseException, response: httpx.Response, prefix: str
    ) -> ClassifiedError:
        status = response.status_code
        if status in (400, 422):
            kind = ErrorKind.VALIDATION
        elif status in (401, 403):
            kind = ErrorKind.AUTH
        elif status == 429:
            kind = ErrorKind.RATE_LIMIT
        elif status >= 500:
            kind = ErrorKind.SERVER
        else:
            kind = ErrorKind.CLIENT

        upstream_message = _upstream_message(response)
        if not upstream_message:
            upstream_message = f"Upstream request failed with status {status}"

        if self.mode is ExecutionMode.DEVELOPMENT:
            details = _response_text(response) or _format_traceback(error)
        else:
            details = f"kind={kind.value} status={status}"

        return ClassifiedError(
            kind=kind,
            message=prefix + upstream_message,
            retryable=kind in RETRYABLE_KINDS,
            http_status=status,
            details=details,
        )

    def _build(
        self, kind: ErrorKind, message: str, error: BaseException | None
    ) -> ClassifiedError:
        if self.mode is ExecutionMode.DEVELOPMENT and error is not None:
            details = _format_traceback(error)
        else:
            details = f"kind={kind.value}"
        return ClassifiedError(
            kind=kind,
            message=message,
            retryable=kind in RETRYABLE_KINDS,
            details=details,
        )


def _upstream_message(response: httpx.Response) -> str | None:
    """Pull a human message out of an upstream error body."""
    try:
        data = response.json()
    except (ValueError, UnicodeDecodeError, httpx.ResponseNotRead):
        return None
    if not isinstance(data, dict):
        return None
    for key in ("error", "message", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
        if value:
            return json.dumps(value, default=str)
    return None


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return ""


def _format_traceback(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def _summarize_validation(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return "; ".join(parts)


def error_details(error: ClassifiedError) -> dict[str, Any]:
    """Serializable view of a classified error for structured logging."""
    return {
        "kind": error.kind.value,
        "http_status": error.http_status,
        "retryable": error.retryable,
        "error_message": error.message,
    }
