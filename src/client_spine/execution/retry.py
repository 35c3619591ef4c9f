"""Retry policy for outbound calls.

A ``RetryPolicy`` bounds one call's attempt loop: how many retries follow the
first attempt, the backoff range, and which failures qualify. Policies are
immutable; per-call overrides produce a new policy.

Example:
    >>> from client_spine.execution.retry import RetryPolicy
    >>> from client_spine.execution.classifier import NeverRetry
    >>>
    >>> policy = RetryPolicy(max_retries=3, base_delay=1.0, max_delay=30.0)
    >>> policy.with_overrides({"max_retries": 0}).max_retries
    0
    >>> policy.with_overrides({"classifier": NeverRetry()}).classifier.name
    'never'
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from client_spine.core.errors import CallError
from client_spine.execution.classifier import DEFAULT_CLASSIFIER, RetryClassifier

RetryOverrides = Mapping[str, Any]

_POLICY_FIELDS = ("max_retries", "base_delay", "max_delay", "classifier")


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration for one attempt loop.

    Attributes:
        max_retries: Retries after the first attempt (0 = exactly one attempt)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound on any single delay, in seconds
        classifier: Strategy deciding whether a failure is retryable
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    classifier: RetryClassifier = field(default=DEFAULT_CLASSIFIER)

    def __post_init__(self) -> None:
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ValueError(f"max_retries must be an integer, got {self.max_retries!r}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be positive, got {self.base_delay}")
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})"
            )
        if not isinstance(self.classifier, RetryClassifier):
            raise ValueError(
                f"classifier must be a RetryClassifier, got {type(self.classifier).__name__}"
            )

    @property
    def max_attempts(self) -> int:
        """Total attempts the loop may make."""
        return self.max_retries + 1

    def is_retryable(self, error: CallError) -> bool:
        """Delegate to the classifier."""
        return self.classifier.is_retryable(error)

    def with_overrides(self, overrides: RetryPolicy | RetryOverrides | None) -> RetryPolicy:
        """Return a new policy with ``overrides`` applied.

        Args:
            overrides: A full policy (replaces this one), a partial mapping of
                field names to values, or None (returns self)

        Raises:
            ValueError: On unknown fields or invalid resulting values
        """
        if overrides is None:
            return self
        if isinstance(overrides, RetryPolicy):
            return overrides

        unknown = set(overrides) - set(_POLICY_FIELDS)
        if unknown:
            raise ValueError(f"Unknown retry policy fields: {sorted(unknown)}")

        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return dataclasses.replace(self, **changes)

    def describe(self) -> dict[str, Any]:
        """Plain-dict form for logging."""
        return {
            "max_retries": self.max_retries,
            "base_delay": self.base_delay,
            "max_delay": self.max_delay,
            "classifier": self.classifier.name,
        }


NO_RETRY = RetryPolicy(max_retries=0)


__all__ = ["RetryPolicy", "RetryOverrides", "NO_RETRY"]
