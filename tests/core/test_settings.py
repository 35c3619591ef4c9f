"""Tests for ClientSpineSettings and the settings cache."""

import pytest
from pydantic import ValidationError

from client_spine.core.settings import ClientSpineSettings, clear_settings_cache, get_settings
from client_spine.execution.retry import RetryPolicy


class TestDefaults:
    """Defaults mirror the ApiClient constructor defaults."""

    def test_default_values(self):
        settings = ClientSpineSettings(_env_file=None)
        assert settings.base_url == "http://localhost:3000/api"
        assert settings.timeout == 30.0
        assert settings.show_notification is True
        assert settings.max_retries == 3
        assert settings.base_delay == 1.0
        assert settings.max_delay == 30.0
        assert settings.auth_token is None
        assert settings.follow_redirects is True
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"


class TestEnvironment:
    """Values come from CLIENT_SPINE_* variables."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CLIENT_SPINE_BASE_URL", "https://api.example.com")
        monkeypatch.setenv("CLIENT_SPINE_MAX_RETRIES", "5")
        monkeypatch.setenv("CLIENT_SPINE_TIMEOUT", "2.5")
        monkeypatch.setenv("CLIENT_SPINE_SHOW_NOTIFICATION", "false")
        settings = ClientSpineSettings(_env_file=None)
        assert settings.base_url == "https://api.example.com"
        assert settings.max_retries == 5
        assert settings.timeout == 2.5
        assert settings.show_notification is False

    def test_auth_token_is_secret(self, monkeypatch):
        monkeypatch.setenv("CLIENT_SPINE_AUTH_TOKEN", "s3cret")
        settings = ClientSpineSettings(_env_file=None)
        assert settings.auth_token.get_secret_value() == "s3cret"
        assert "s3cret" not in settings.model_dump_json()

    def test_negative_retries_rejected(self, monkeypatch):
        monkeypatch.setenv("CLIENT_SPINE_MAX_RETRIES", "-1")
        with pytest.raises(ValidationError):
            ClientSpineSettings(_env_file=None)

    def test_max_delay_below_base_rejected(self):
        with pytest.raises(ValidationError, match="max_delay"):
            ClientSpineSettings(_env_file=None, base_delay=5.0, max_delay=1.0)


class TestRetryPolicy:
    def test_retry_policy_from_settings(self):
        settings = ClientSpineSettings(_env_file=None, max_retries=1, base_delay=0.5, max_delay=4.0)
        policy = settings.retry_policy()
        assert isinstance(policy, RetryPolicy)
        assert policy.max_retries == 1
        assert policy.base_delay == 0.5
        assert policy.max_delay == 4.0


class TestCache:
    """get_settings caches until reloaded or cleared."""

    def test_cached_instance(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("CLIENT_SPINE_MAX_RETRIES", "7")
        assert get_settings().max_retries == first.max_retries
        assert get_settings(_force_reload=True).max_retries == 7

    def test_clear_cache(self, monkeypatch):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
