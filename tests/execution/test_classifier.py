"""Tests for retry classification strategies."""

import pytest

from client_spine.core.errors import (
    DecodeError,
    HttpStatusError,
    RequestTimeout,
    TransportError,
)
from client_spine.execution.classifier import (
    DEFAULT_CLASSIFIER,
    DefaultRetryClassifier,
    NeverRetry,
    PredicateRetryClassifier,
    StatusRetryClassifier,
)


def status_error(status: int) -> HttpStatusError:
    return HttpStatusError(f"HTTP {status}", status=status)


class TestDefaultRetryClassifier:
    """Transport, 5xx, 408 and 429 retry; everything else is terminal."""

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 599, 408, 429])
    def test_retryable_statuses(self, status):
        assert DefaultRetryClassifier().is_retryable(status_error(status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422, 301, 100])
    def test_terminal_statuses(self, status):
        assert not DefaultRetryClassifier().is_retryable(status_error(status))

    def test_transport_failures_retry(self):
        assert DEFAULT_CLASSIFIER.is_retryable(TransportError("refused"))
        assert DEFAULT_CLASSIFIER.is_retryable(RequestTimeout(timeout=1.0))

    def test_decode_error_terminal(self):
        assert not DEFAULT_CLASSIFIER.is_retryable(DecodeError("bad json", status=200))

    def test_callable(self):
        assert DEFAULT_CLASSIFIER(status_error(503)) is True
        assert DEFAULT_CLASSIFIER.name == "default"


class TestNeverRetry:
    def test_never(self):
        classifier = NeverRetry()
        assert classifier.name == "never"
        assert not classifier.is_retryable(TransportError("x"))
        assert not classifier.is_retryable(status_error(503))


class TestStatusRetryClassifier:
    def test_custom_status_set(self):
        """An idempotent endpoint can retry 409."""
        classifier = StatusRetryClassifier({409})
        assert classifier.is_retryable(status_error(409))
        assert not classifier.is_retryable(status_error(503))
        assert classifier.is_retryable(TransportError("x"))
        assert classifier.name == "status"

    def test_retry_server_flag(self):
        classifier = StatusRetryClassifier([409], retry_server=True)
        assert classifier.is_retryable(status_error(502))

    def test_transport_can_be_excluded(self):
        classifier = StatusRetryClassifier([503], retry_transport=False)
        assert not classifier.is_retryable(TransportError("x"))

    def test_statuses_frozen(self):
        classifier = StatusRetryClassifier([429, 429, 503])
        assert classifier.statuses == frozenset({429, 503})

    def test_decode_error_terminal(self):
        assert not StatusRetryClassifier([200]).is_retryable(DecodeError("x", status=200))


class TestPredicateRetryClassifier:
    def test_wraps_callable(self):
        classifier = PredicateRetryClassifier(lambda e: e.code == "LOCKED", name="locked")
        assert classifier.name == "locked"
        assert classifier.is_retryable(HttpStatusError("locked", status=423, code="LOCKED"))
        assert not classifier.is_retryable(HttpStatusError("gone", status=410))
