"""Attempt loop for one outbound call.

``RequestExecutor.execute`` drives a small state machine per attempt:

    ::

        PENDING ──2xx + decoded──────────────► SUCCESS (return value)
           │
           └─failure─► classify ─retryable & budget left─► RETRYABLE_FAILURE
                          │                                   │ backoff sleep
                          │                                   ▼
                          │                               next PENDING
                          └─otherwise─► TERMINAL_FAILURE (notify?, raise)

Attempts are strictly sequential: attempt N+1 starts only after attempt N has
settled and its backoff has elapsed. Retryable failures are absorbed; the
caller only ever sees the decoded value or the last CallError.

The loop suspends in two places (the timeout race and the backoff sleep) and
never blocks the event loop, so independent calls proceed concurrently.

Example:
    >>> executor = RequestExecutor(HttpxTransport(), notifier=LoggingNotifier())
    >>> call = ClientDefaults().resolve("GET", "/goals")
    >>> goals = await executor.execute(PreparedRequest("GET", call.url, call.headers), call)
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from client_spine.core.errors import CallError, DecodeError, RequestTimeout, TransportError
from client_spine.core.logging import LogContext, get_logger
from client_spine.core.notifications import LoggingNotifier, NotificationSink
from client_spine.execution.backoff import BackoffCalculator
from client_spine.execution.timeout import TimeoutExpired, run_with_timeout_async

if TYPE_CHECKING:
    from client_spine.http.config import ResolvedCall
    from client_spine.http.decoder import ResponseDecoder
    from client_spine.http.transport import PreparedRequest, Transport, TransportResponse

logger = get_logger(__name__)

REQUEST_FAILED_TITLE = "Request failed"
NETWORK_ERROR_TITLE = "Network error"


class AttemptOutcome(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"


@dataclass
class AttemptState:
    """Ephemeral record of one attempt.

    Attributes:
        attempt_number: 1-based attempt number
        started_at: Monotonic start time
        finished_at: Monotonic settle time (None while pending)
        outcome: Current state of the attempt
        error: Failure of this attempt, if any
        delay: Backoff scheduled after this attempt, if retrying
    """

    attempt_number: int
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    outcome: AttemptOutcome = AttemptOutcome.PENDING
    error: CallError | None = None
    delay: float | None = None

    def settle(
        self,
        outcome: AttemptOutcome,
        error: CallError | None = None,
        delay: float | None = None,
    ) -> None:
        self.outcome = outcome
        self.error = error
        self.delay = delay
        self.finished_at = time.monotonic()

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at


def notification_title(error: CallError) -> str:
    """Short title for the user-visible notice of a terminal failure."""
    if isinstance(error, TransportError):
        return NETWORK_ERROR_TITLE
    return REQUEST_FAILED_TITLE


class RequestExecutor:
    """Run one call's attempt loop against a transport.

    Args:
        transport: Issues each attempt
        decoder: Decodes successful and error responses
        notifier: Receives one notice per terminal failure when requested
        backoff: Computes the delay between attempts
        sleep: Awaitable sleep used for backoff (inject a fake in tests)
        on_attempt: Called with every settled AttemptState
    """

    def __init__(
        self,
        transport: Transport,
        *,
        decoder: ResponseDecoder | None = None,
        notifier: NotificationSink | None = None,
        backoff: BackoffCalculator | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        on_attempt: Callable[[AttemptState], None] | None = None,
    ):
        if decoder is None:
            from client_spine.http.decoder import ResponseDecoder

            decoder = ResponseDecoder()

        self.transport = transport
        self.decoder = decoder
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self.backoff = backoff or BackoffCalculator()
        self.sleep = sleep or asyncio.sleep
        self.on_attempt = on_attempt

    async def execute(
        self,
        request: PreparedRequest,
        call: ResolvedCall,
        response_model: Any = None,
    ) -> Any:
        """Issue ``request`` until it succeeds or fails terminally.

        Args:
            request: The prepared request, re-sent unchanged on every attempt
            call: Merged configuration (timeout, retry policy, notification flag)
            response_model: Optional type the decoded value is validated against

        Returns:
            The decoded response value

        Raises:
            CallError: The last failure once it is terminal
        """
        policy = call.retry
        call_id = uuid.uuid4().hex[:12]
        started = time.monotonic()

        async with LogContext(call_id=call_id, method=request.method, url=request.url):
            for attempt in range(1, policy.max_attempts + 1):
                state = AttemptState(attempt_number=attempt)
                try:
                    response = await self._send(request, call.timeout)
                    if not response.ok:
                        raise self.decoder.decode_error(response)
                    value = self.decoder.decode(response, response_model)
                except CallError as error:
                    error.with_context(
                        method=request.method,
                        url=request.url,
                        attempt=attempt,
                        call_id=call_id,
                    )
                    retryable = not isinstance(error, DecodeError) and policy.is_retryable(error)
                    logger.info(
                        "attempt_failed",
                        attempt=attempt,
                        status=error.status,
                        kind=error.kind,
                        retryable=retryable,
                        elapsed_s=round(state.elapsed, 3),
                    )

                    if retryable and attempt <= policy.max_retries:
                        delay = self.backoff.delay(attempt, policy)
                        state.settle(AttemptOutcome.RETRYABLE_FAILURE, error, delay)
                        self._observe(state)
                        logger.warning(
                            "retry_scheduled",
                            attempt=attempt,
                            max_attempts=policy.max_attempts,
                            status=error.status,
                            kind=error.kind,
                            delay_s=round(delay, 3),
                        )
                        await self.sleep(delay)
                        continue

                    state.settle(AttemptOutcome.TERMINAL_FAILURE, error)
                    self._observe(state)
                    logger.error(
                        "request_failed",
                        attempts=attempt,
                        retryable=retryable,
                        duration_ms=round((time.monotonic() - started) * 1000, 1),
                        **error.to_dict(),
                    )
                    if call.show_notification:
                        self._notify(error)
                    raise

                state.settle(AttemptOutcome.SUCCESS)
                self._observe(state)
                logger.info(
                    "request_succeeded",
                    status=response.status,
                    attempts=attempt,
                    duration_ms=round((time.monotonic() - started) * 1000, 1),
                )
                return value

        raise AssertionError("attempt loop exited without a result")

    async def _send(self, request: PreparedRequest, timeout: float | None) -> TransportResponse:
        try:
            return await run_with_timeout_async(
                self.transport.send(request),
                timeout,
                operation=f"{request.method} {request.url}",
            )
        except TimeoutExpired as exc:
            raise RequestTimeout(timeout=timeout, cause=exc) from exc
        except CallError:
            raise
        except Exception as exc:
            raise TransportError(str(exc) or type(exc).__name__, cause=exc) from exc

    def _observe(self, state: AttemptState) -> None:
        if self.on_attempt is not None:
            self.on_attempt(state)

    def _notify(self, error: CallError) -> None:
        try:
            self.notifier.error(notification_title(error), description=error.message)
        except Exception:
            logger.exception("notification_failed", message=error.message)


__all__ = [
    "RequestExecutor",
    "AttemptState",
    "AttemptOutcome",
    "notification_title",
    "REQUEST_FAILED_TITLE",
    "NETWORK_ERROR_TITLE",
]
