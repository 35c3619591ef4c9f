"""Tests for RetryPolicy."""

import dataclasses

import pytest

from client_spine.core.errors import HttpStatusError
from client_spine.execution.classifier import DEFAULT_CLASSIFIER, NeverRetry
from client_spine.execution.retry import NO_RETRY, RetryPolicy


class TestRetryPolicy:
    """Tests for construction and validation."""

    def test_default_configuration(self):
        policy = RetryPolicy()
        assert policy.max_retries == 3
        assert policy.base_delay == 1.0
        assert policy.max_delay == 30.0
        assert policy.classifier is DEFAULT_CLASSIFIER
        assert policy.max_attempts == 4

    def test_no_retry(self):
        assert NO_RETRY.max_retries == 0
        assert NO_RETRY.max_attempts == 1

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            RetryPolicy().max_retries = 5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_retries": -1},
            {"max_retries": 1.5},
            {"max_retries": True},
            {"base_delay": 0},
            {"base_delay": -1.0},
            {"base_delay": 5.0, "max_delay": 1.0},
            {"classifier": lambda e: True},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_is_retryable_delegates(self):
        policy = RetryPolicy(classifier=NeverRetry())
        assert not policy.is_retryable(HttpStatusError("busy", status=503))
        assert RetryPolicy().is_retryable(HttpStatusError("busy", status=503))

    def test_describe(self):
        assert RetryPolicy(max_retries=2).describe() == {
            "max_retries": 2,
            "base_delay": 1.0,
            "max_delay": 30.0,
            "classifier": "default",
        }


class TestWithOverrides:
    """Per-call overrides produce new policies."""

    def test_none_returns_self(self):
        policy = RetryPolicy()
        assert policy.with_overrides(None) is policy

    def test_full_policy_replaces(self):
        replacement = RetryPolicy(max_retries=9)
        assert RetryPolicy().with_overrides(replacement) is replacement

    def test_partial_mapping(self):
        policy = RetryPolicy(max_retries=3, base_delay=2.0, max_delay=20.0)
        merged = policy.with_overrides({"max_retries": 0})
        assert merged.max_retries == 0
        assert merged.base_delay == 2.0
        assert merged.max_delay == 20.0
        assert policy.max_retries == 3

    def test_none_values_ignored(self):
        policy = RetryPolicy(max_retries=3)
        assert policy.with_overrides({"max_retries": None}).max_retries == 3

    def test_classifier_replaced_entirely(self):
        merged = RetryPolicy().with_overrides({"classifier": NeverRetry()})
        assert merged.classifier.name == "never"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            RetryPolicy().with_overrides({"retries": 2})

    def test_invalid_override_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(base_delay=1.0).with_overrides({"max_delay": 0.5})
