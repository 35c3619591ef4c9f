"""
Structured error types for client-spine.

Every failure a caller can observe from an outbound call is a ``CallError``.
The hierarchy separates failures that never produced a response (transport,
timeout) from failures that did (HTTP status, undecodable body), and each
instance carries the metadata retry decisions and notifications need.

Manifesto:
    - **One surface type:** Callers catch ``CallError`` and nothing else
    - **Status is optional:** Absent status means no response was received
    - **Rich context:** Method, URL and attempt number travel with the error
    - **Error chaining:** The underlying transport exception is kept as cause

Architecture:
    ::

        CallError(message, status?, body?, kind?, code?, category)
          ├── TransportError        kind="network"  no response received
          │     └── RequestTimeout  kind="timeout"  per-attempt timer fired
          ├── HttpStatusError       kind="http"     non-2xx status, body decoded
          └── DecodeError           kind="decode"   2xx body failed to decode

Examples:
    >>> error = HttpStatusError("HTTP 503: Service Unavailable", status=503)
    >>> error.category
    <ErrorCategory.SERVER: 'SERVER'>
    >>> error.with_context(method="GET", url="http://localhost/api/goals").context.url
    'http://localhost/api/goals'

    >>> RequestTimeout(timeout=2.0).message
    'request timeout'

Guardrails:
    ❌ DON'T: Raise bare exceptions out of the executor
    ✅ DO: Wrap transport exceptions as TransportError(cause=exc)

    ❌ DON'T: Construct a CallError with a status outside 100-599
    ✅ DO: Leave status as None for failures without a response

Tags:
    error-handling, exception-hierarchy, http, retry-logic, client-spine
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MIN_STATUS = 100
MAX_STATUS = 599


class ErrorCategory(str, Enum):
    """Standard categories for classifying call failures.

    Attributes:
        NETWORK: Connection refused, DNS failure, reset
        TIMEOUT: The attempt exceeded its per-call timeout
        SERVER: 5xx responses
        RATE_LIMIT: 429 and 408 responses
        CLIENT: Other 4xx responses
        PARSE: A body could not be decoded
        UNKNOWN: Anything else (1xx/3xx surfaced as failures)
    """

    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    SERVER = "SERVER"
    RATE_LIMIT = "RATE_LIMIT"
    CLIENT = "CLIENT"
    PARSE = "PARSE"
    UNKNOWN = "UNKNOWN"


def categorize_status(status: int | None) -> ErrorCategory:
    """Map an HTTP status (or its absence) to an ErrorCategory."""
    if status is None:
        return ErrorCategory.NETWORK
    if status >= 500:
        return ErrorCategory.SERVER
    if status in (408, 429):
        return ErrorCategory.RATE_LIMIT
    if 400 <= status < 500:
        return ErrorCategory.CLIENT
    return ErrorCategory.UNKNOWN


@dataclass
class ErrorContext:
    """Request metadata attached to a CallError.

    Attributes:
        method: HTTP method of the failed call
        url: Fully joined URL of the failed call
        attempt: Attempt number (1-based) that produced the error
        call_id: Identifier bound to the call's log context
        metadata: Additional key-value pairs
    """

    method: str | None = None
    url: str | None = None
    attempt: int | None = None
    call_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        fields = {f.name: getattr(self, f.name) for f in dataclasses.fields(self) if f.name != "metadata"}
        return {**{k: v for k, v in fields.items() if v is not None}, **self.metadata}


class CallError(Exception):
    """
    Base exception for every failure surfaced by an outbound call.

    A CallError is either a transport-level failure (``status is None``) or
    an HTTP-level failure (``status`` present). ``body`` holds the decoded
    error payload when one was available, falling back to ``{"text": raw}``
    for bodies that were not structured data.

    Attributes:
        message: Human-readable description, used for notifications
        status: HTTP status code in 100-599, or None
        body: Decoded error body, if any
        kind: Failure kind ("network", "timeout", "http", "decode")
        code: Application error code taken from the body, if any
        category: ErrorCategory derived from status/kind
        context: ErrorContext with request metadata
        cause: Underlying exception, also chained as ``__cause__``
    """

    default_kind: str | None = None
    default_category: ErrorCategory | None = None

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
        kind: str | None = None,
        code: str | None = None,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        if status is not None and not (MIN_STATUS <= status <= MAX_STATUS):
            raise ValueError(f"status must be within {MIN_STATUS}-{MAX_STATUS}, got {status}")

        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.kind = kind or self.default_kind
        self.code = code
        self.category = category or self.default_category or categorize_status(status)
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def is_transport_failure(self) -> bool:
        """True when no response was received."""
        return self.status is None

    def with_context(self, **kwargs: Any) -> CallError:
        """Record where the failure happened; unknown keys go to ``metadata``."""
        known = {f.name for f in dataclasses.fields(ErrorContext)} - {"metadata"}
        for key, value in kwargs.items():
            if key in known:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-friendly view used by structured logs and the CLI."""
        optional = {"status": self.status, "kind": self.kind, "code": self.code}
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            **{key: value for key, value in optional.items() if value is not None},
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, status={self.status}, kind={self.kind})"


class TransportError(CallError):
    """No response was received: DNS failure, refused or reset connection."""

    default_kind = "network"
    default_category = ErrorCategory.NETWORK

    def __init__(self, message: str, **kwargs: Any):
        kwargs.pop("status", None)
        super().__init__(message, **kwargs)


class RequestTimeout(TransportError):
    """The attempt's wait exceeded the configured timeout."""

    default_kind = "timeout"
    default_category = ErrorCategory.TIMEOUT

    def __init__(
        self,
        message: str = "request timeout",
        *,
        timeout: float | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.timeout = timeout


class HttpStatusError(CallError):
    """The server answered with a non-2xx status."""

    default_kind = "http"

    def __init__(self, message: str, *, status: int, **kwargs: Any):
        super().__init__(message, status=status, **kwargs)


class DecodeError(CallError):
    """A successful response whose body failed to decode as declared."""

    default_kind = "decode"
    default_category = ErrorCategory.PARSE


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CallError",
    "TransportError",
    "RequestTimeout",
    "HttpStatusError",
    "DecodeError",
    "categorize_status",
]
