"""Execution layer: retry policy, classification, backoff, timeouts, attempt loop."""

from client_spine.execution.backoff import BackoffCalculator, backoff_delay
from client_spine.execution.classifier import (
    DEFAULT_CLASSIFIER,
    DefaultRetryClassifier,
    NeverRetry,
    PredicateRetryClassifier,
    RetryClassifier,
    StatusRetryClassifier,
)
from client_spine.execution.executor import (
    AttemptOutcome,
    AttemptState,
    RequestExecutor,
    notification_title,
)
from client_spine.execution.retry import NO_RETRY, RetryPolicy
from client_spine.execution.timeout import TimeoutExpired, run_with_timeout_async

__all__ = [
    "BackoffCalculator",
    "backoff_delay",
    "DEFAULT_CLASSIFIER",
    "DefaultRetryClassifier",
    "NeverRetry",
    "PredicateRetryClassifier",
    "RetryClassifier",
    "StatusRetryClassifier",
    "AttemptOutcome",
    "AttemptState",
    "RequestExecutor",
    "notification_title",
    "NO_RETRY",
    "RetryPolicy",
    "TimeoutExpired",
    "run_with_timeout_async",
]
