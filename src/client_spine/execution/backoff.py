"""Exponential backoff with bounded jitter.

    exponential = base_delay * 2 ** (attempt - 1)
    jitter      = uniform(0, jitter_ratio * exponential)
    delay       = min(exponential + jitter, max_delay)

For ``attempt >= 1`` the result always lies in ``[base_delay, max_delay]``.
The jitter is additive only, so the delay never drops below the exponential
term; spreading retries from many callers relies on the upward spread alone.

Example:
    >>> import random
    >>> from client_spine.execution.retry import RetryPolicy
    >>> calc = BackoffCalculator(rng=random.Random(7))
    >>> policy = RetryPolicy(base_delay=1.0, max_delay=30.0)
    >>> 4.0 <= calc.delay(3, policy) <= 4.4
    True
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from client_spine.execution.retry import RetryPolicy

DEFAULT_JITTER_RATIO = 0.1


@dataclass
class BackoffCalculator:
    """Compute the delay before the next attempt.

    Attributes:
        jitter_ratio: Upper bound of the jitter as a fraction of the exponential term
        rng: Random source; inject a seeded ``random.Random`` for determinism
    """

    jitter_ratio: float = DEFAULT_JITTER_RATIO
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        if self.jitter_ratio < 0:
            raise ValueError(f"jitter_ratio must be non-negative, got {self.jitter_ratio}")

    def delay(self, attempt: int, policy: RetryPolicy) -> float:
        """Delay in seconds after failed attempt number ``attempt`` (1-based)."""
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")

        # Past 2**62 the cap always wins; bounding the exponent avoids float overflow.
        exponential = policy.base_delay * (2 ** min(attempt - 1, 62))
        jitter = self.rng.uniform(0, self.jitter_ratio * exponential)
        return min(exponential + jitter, policy.max_delay)


_default_calculator = BackoffCalculator()


def backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """Module-level shortcut using a shared calculator."""
    return _default_calculator.delay(attempt, policy)


__all__ = ["BackoffCalculator", "backoff_delay", "DEFAULT_JITTER_RATIO"]
