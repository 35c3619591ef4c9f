"""Retry classification strategies.

A classifier answers one question about a failed attempt: is it worth trying
again? Classifiers are named strategy objects rather than bare closures so a
policy can be logged, compared and tested in isolation.

Example:
    >>> from client_spine.core.errors import HttpStatusError, TransportError
    >>> DefaultRetryClassifier().is_retryable(HttpStatusError("busy", status=503))
    True
    >>> DefaultRetryClassifier().is_retryable(HttpStatusError("bad", status=400))
    False
    >>> StatusRetryClassifier({409}).is_retryable(HttpStatusError("conflict", status=409))
    True
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from client_spine.core.errors import CallError, DecodeError

RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


class RetryClassifier(ABC):
    """Abstract base for retry predicates."""

    name: str = "custom"

    @abstractmethod
    def is_retryable(self, error: CallError) -> bool:
        """Return True if the failed attempt may be retried.

        Args:
            error: The failure produced by the attempt

        Returns:
            True if another attempt is worthwhile
        """
        ...

    def __call__(self, error: CallError) -> bool:
        return self.is_retryable(error)


@dataclass(frozen=True)
class DefaultRetryClassifier(RetryClassifier):
    """Retry transport failures, 5xx, 408 and 429.

    Every other status is terminal: it points at a caller-side defect
    (bad input, auth, not-found) that another attempt cannot fix.
    """

    name: str = field(default="default", init=False)

    def is_retryable(self, error: CallError) -> bool:
        if isinstance(error, DecodeError):
            return False
        if error.status is None:
            return True
        return error.status >= 500 or error.status in RETRYABLE_CLIENT_STATUSES


@dataclass(frozen=True)
class NeverRetry(RetryClassifier):
    """Fail on the first error."""

    name: str = field(default="never", init=False)

    def is_retryable(self, error: CallError) -> bool:
        return False


@dataclass(frozen=True, init=False)
class StatusRetryClassifier(RetryClassifier):
    """Retry an explicit set of statuses.

    Attributes:
        statuses: Status codes that are retryable
        retry_transport: Also retry failures that carry no status
        retry_server: Also retry any 5xx status
    """

    statuses: frozenset[int] = frozenset()
    retry_transport: bool = True
    retry_server: bool = False
    name: str = field(default="status", init=False)

    def __init__(
        self,
        statuses: Iterable[int] = (),
        *,
        retry_transport: bool = True,
        retry_server: bool = False,
    ):
        object.__setattr__(self, "statuses", frozenset(statuses))
        object.__setattr__(self, "retry_transport", retry_transport)
        object.__setattr__(self, "retry_server", retry_server)

    def is_retryable(self, error: CallError) -> bool:
        if isinstance(error, DecodeError):
            return False
        if error.status is None:
            return self.retry_transport
        if self.retry_server and error.status >= 500:
            return True
        return error.status in self.statuses


@dataclass(frozen=True)
class PredicateRetryClassifier(RetryClassifier):
    """Wrap a named callable as a classifier."""

    predicate: Callable[[CallError], bool]
    name: str = "predicate"

    def is_retryable(self, error: CallError) -> bool:
        return bool(self.predicate(error))


DEFAULT_CLASSIFIER = DefaultRetryClassifier()


__all__ = [
    "RetryClassifier",
    "DefaultRetryClassifier",
    "NeverRetry",
    "StatusRetryClassifier",
    "PredicateRetryClassifier",
    "DEFAULT_CLASSIFIER",
    "RETRYABLE_CLIENT_STATUSES",
]
