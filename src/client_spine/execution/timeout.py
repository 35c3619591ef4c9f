"""Per-attempt timeout enforcement.

Races an awaitable against a timer. When the timer wins, the losing
operation is cancelled rather than left running in the background, so an
abandoned request is torn down at the transport level instead of possibly
completing (and repeating a side effect) after the caller has moved on.

Architecture:
    ::

        run_with_timeout_async(transport.send(request), 2.0)
                 │
                 ▼
        asyncio.wait_for ── completes first ──► result
                 │
                 └─ timer fires first ──► cancel send() ──► TimeoutExpired

Examples:
    >>> result = await run_with_timeout_async(fetch(), 10.0, operation="GET /goals")

    A timeout of None or 0 disables the timer:

    >>> result = await run_with_timeout_async(fetch(), None)

Guardrails:
    - The caller's own cancellation always propagates unchanged
    - Timeouts are per attempt; backoff sleeps are not counted

Tags:
    timeout, deadline, cancellation, resilience, client-spine
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class TimeoutExpired(TimeoutError):
    """The timer beat the awaited attempt; the attempt has been cancelled."""

    def __init__(self, timeout: float, elapsed: float | None = None, operation: str | None = None):
        self.timeout = timeout
        self.elapsed = elapsed
        self.operation = operation or "operation"
        detail = "" if elapsed is None else f", cancelled after {elapsed:.3f}s"
        super().__init__(f"{self.operation} exceeded its {timeout}s timeout{detail}")


async def run_with_timeout_async(
    awaitable: Awaitable[T],
    timeout_seconds: float | None,
    operation: str | None = None,
) -> T:
    """Await ``awaitable``, cancelling it if it outlives ``timeout_seconds``.

    Args:
        awaitable: Coroutine or future to run
        timeout_seconds: Maximum wait in seconds; None or 0 waits indefinitely
        operation: Name for error messages

    Returns:
        Result of the awaitable

    Raises:
        TimeoutExpired: If the timer fired first (the awaitable is cancelled)
        ValueError: If timeout_seconds is negative
        Exception: Any exception raised by the awaitable
    """
    if timeout_seconds is not None and timeout_seconds < 0:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise ValueError(f"Timeout must be non-negative, got {timeout_seconds}")
    if not timeout_seconds:
        return await awaitable

    start = time.monotonic()
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except TimeoutError:
        raise TimeoutExpired(
            timeout=timeout_seconds,
            elapsed=time.monotonic() - start,
            operation=operation,
        ) from None


__all__ = ["TimeoutExpired", "run_with_timeout_async"]
