"""Per-call configuration and the client's default snapshot.

``ClientDefaults`` is immutable. Facade mutators (``set_header``,
``set_auth_token``...) build a new snapshot and swap the reference, so a call
that has already resolved its configuration never observes a half-applied
change. ``resolve`` merges a ``CallConfig`` over the snapshot into a
``ResolvedCall`` that stays fixed for the lifetime of that call.

Merge rules:
    - Scalar fields: per-call value wins when not None
    - Headers: per-call headers are added on top of the defaults; a per-call
      header replaces a default of the same name (compared case-insensitively)
    - Retry: a full RetryPolicy replaces the default, a partial mapping
      overrides individual fields
    - Timeout: None inherits, 0 disables the per-attempt timer
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from client_spine.execution.retry import RetryOverrides, RetryPolicy

DEFAULT_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT = 30.0
CONTENT_TYPE = "Content-Type"
AUTHORIZATION = "Authorization"
JSON_CONTENT_TYPE = "application/json"


def merge_headers(base: Mapping[str, str], extra: Mapping[str, str] | None) -> dict[str, str]:
    """Overlay ``extra`` on ``base``; names compare case-insensitively."""
    merged = dict(base)
    for key, value in (extra or {}).items():
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value
    return merged


def strip_headers(headers: Mapping[str, str], names: Iterable[str]) -> dict[str, str]:
    """Drop every header whose name matches one of ``names`` (any casing)."""
    lowered = {name.lower() for name in names}
    return {key: value for key, value in headers.items() if key.lower() not in lowered}


def join_url(base_url: str, path: str) -> str:
    """Join a call path onto the base address.

    Paths may be given with or without a leading slash.
    """
    clean_path = path if path.startswith("/") else f"/{path}"
    return f"{base_url.rstrip('/')}{clean_path}"


@dataclass(frozen=True)
class CallConfig:
    """Per-call options. None means "use the client default".

    Attributes:
        headers: Extra headers for this call only
        timeout: Per-attempt timeout in seconds (0 disables)
        retry: Full RetryPolicy or a partial mapping of policy fields
        show_notification: Notify the sink if this call fails terminally
        params: Query string parameters
    """

    headers: Mapping[str, str] | None = None
    timeout: float | None = None
    retry: RetryPolicy | RetryOverrides | None = None
    show_notification: bool | None = None
    params: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ResolvedCall:
    """Merged configuration of one call; fixed for the call's lifetime."""

    method: str
    url: str
    headers: Mapping[str, str]
    timeout: float | None
    retry: RetryPolicy
    show_notification: bool
    params: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ClientDefaults:
    """Immutable snapshot of the facade's long-lived defaults."""

    base_url: str = DEFAULT_BASE_URL
    headers: Mapping[str, str] = field(
        default_factory=lambda: {CONTENT_TYPE: JSON_CONTENT_TYPE}
    )
    timeout: float | None = DEFAULT_TIMEOUT
    show_notification: bool = True
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {self.timeout}")

    def with_header(self, key: str, value: str) -> ClientDefaults:
        return replace(self, headers=merge_headers(self.headers, {key: value}))

    def without_header(self, key: str) -> ClientDefaults:
        return replace(self, headers=strip_headers(self.headers, [key]))

    def with_base_url(self, base_url: str) -> ClientDefaults:
        return replace(self, base_url=base_url)

    def resolve(
        self,
        method: str,
        path: str,
        config: CallConfig | None = None,
        *,
        omit_headers: Iterable[str] = (),
    ) -> ResolvedCall:
        """Merge ``config`` over these defaults for one call.

        Args:
            method: HTTP method
            path: Call path, joined onto ``base_url``
            config: Per-call overrides
            omit_headers: Header names removed after merging (any casing),
                whether they came from the defaults or from ``config``
        """
        config = config or CallConfig()

        headers = merge_headers(self.headers, config.headers)
        if omit_headers:
            headers = strip_headers(headers, omit_headers)

        timeout = self.timeout if config.timeout is None else config.timeout
        if timeout is not None and timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {timeout}")

        show_notification = (
            self.show_notification
            if config.show_notification is None
            else config.show_notification
        )

        return ResolvedCall(
            method=method.upper(),
            url=join_url(self.base_url, path),
            headers=MappingProxyType(headers),
            timeout=timeout or None,
            retry=self.retry.with_overrides(config.retry),
            show_notification=show_notification,
            params=config.params,
        )


__all__ = [
    "CallConfig",
    "ClientDefaults",
    "ResolvedCall",
    "merge_headers",
    "strip_headers",
    "join_url",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "CONTENT_TYPE",
    "AUTHORIZATION",
    "JSON_CONTENT_TYPE",
]
