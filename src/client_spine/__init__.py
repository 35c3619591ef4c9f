"""client-spine: resilient request execution for backend API calls.

Retry with exponential backoff and jitter, per-attempt timeouts that cancel
the losing request, content-negotiated decoding, and pluggable retry
classification behind a small verb-level facade.

Example:
    >>> from client_spine import ApiClient, CallConfig
    >>> async with ApiClient("http://localhost:3000/api") as client:
    ...     goals = await client.fetch("/goals", CallConfig(timeout=5.0))
"""

from client_spine.core.errors import (
    CallError,
    DecodeError,
    ErrorCategory,
    HttpStatusError,
    RequestTimeout,
    TransportError,
)
from client_spine.execution.classifier import (
    DefaultRetryClassifier,
    NeverRetry,
    PredicateRetryClassifier,
    StatusRetryClassifier,
)
from client_spine.execution.retry import RetryPolicy
from client_spine.http.client import ApiClient, api, get_default_client, set_default_client
from client_spine.http.config import CallConfig
from client_spine.http.envelope import ApiResponse, PageMeta

__version__ = "0.1.0"

__all__ = [
    "CallError",
    "DecodeError",
    "ErrorCategory",
    "HttpStatusError",
    "RequestTimeout",
    "TransportError",
    "DefaultRetryClassifier",
    "NeverRetry",
    "PredicateRetryClassifier",
    "StatusRetryClassifier",
    "RetryPolicy",
    "ApiClient",
    "api",
    "get_default_client",
    "set_default_client",
    "CallConfig",
    "ApiResponse",
    "PageMeta",
    "__version__",
]
