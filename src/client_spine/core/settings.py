"""Environment-driven defaults for client-spine.

``ClientSpineSettings`` holds every long-lived client default (base address,
timeout, retry budget, notification flag, optional bearer token) so that an
``ApiClient`` can be built from the environment without re-passing config at
each call site.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not on first call
    - **Environment-driven:** ``CLIENT_SPINE_*`` env vars and ``.env`` files
    - **Sensible defaults:** Mirrors the defaults of ``ApiClient`` itself

Examples:
    >>> import os
    >>> os.environ["CLIENT_SPINE_MAX_RETRIES"] = "5"
    >>> get_settings(_force_reload=True).max_retries
    5

Tags:
    settings, configuration, pydantic, environment, client-spine
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from client_spine.execution.retry import RetryPolicy


class ClientSpineSettings(BaseSettings):
    """Client defaults loaded from ``CLIENT_SPINE_*`` environment variables.

    Fields
    ──────
    base_url          : Base address every call path is joined onto
    timeout           : Per-attempt timeout in seconds (0 disables)
    show_notification : Notify the sink on terminal failures
    max_retries       : Retries after the first attempt
    base_delay        : First backoff delay in seconds
    max_delay         : Backoff cap in seconds
    auth_token        : Optional bearer token sent as ``Authorization``
    follow_redirects  : Let the httpx transport resolve 3xx responses
    log_level         : Structlog log level
    log_format        : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_SPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Endpoint ─────────────────────────────────────────────────
    base_url: str = Field(default="http://localhost:3000/api")
    auth_token: SecretStr | None = Field(default=None)
    follow_redirects: bool = Field(default=True)

    # ── Call defaults ────────────────────────────────────────────
    timeout: float = Field(default=30.0, ge=0)
    show_notification: bool = Field(default=True)

    # ── Retry ────────────────────────────────────────────────────
    max_retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=1.0, gt=0)
    max_delay: float = Field(default=30.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @model_validator(mode="after")
    def _check_delays(self) -> ClientSpineSettings:
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})"
            )
        return self

    def retry_policy(self) -> RetryPolicy:
        """Build the default RetryPolicy from these settings."""
        from client_spine.execution.retry import RetryPolicy

        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
        )


_settings_cache: ClientSpineSettings | None = None


def get_settings(*, _force_reload: bool = False) -> ClientSpineSettings:
    """Load, validate, and cache a :class:`ClientSpineSettings` instance."""
    global _settings_cache
    if _force_reload or _settings_cache is None:
        _settings_cache = ClientSpineSettings()
    return _settings_cache


def clear_settings_cache() -> None:
    """Drop the cached settings (useful in tests)."""
    global _settings_cache
    _settings_cache = None


__all__ = ["ClientSpineSettings", "get_settings", "clear_settings_cache"]
