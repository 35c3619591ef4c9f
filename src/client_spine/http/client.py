"""
ApiClient - verb-level facade over the request executor.

The facade owns the long-lived defaults (base address, default headers,
bearer token, timeout, retry policy) and exposes one coroutine per verb plus
a multipart upload. Each call resolves its configuration against the current
defaults snapshot, encodes the body, and hands off to ``RequestExecutor``.

Manifesto:
    Call sites should read like the intent, not like HTTP plumbing:

    - ``await client.fetch("/goals")``
    - ``await client.create("/goals", {"title": "Ship v1"})``
    - ``await client.upload("/avatars", files={"file": ("me.png", data)})``

    Retry, timeout, decoding and notification all come from the defaults and
    can be overridden per call with ``CallConfig``.

Architecture:
    ::

        ApiClient.create(path, body, config)
            │  defaults snapshot (immutable, swapped by mutators)
            ▼
        ClientDefaults.resolve(method, path, config) ──► ResolvedCall
            │  encode_body(body)
            ▼
        RequestExecutor.execute(PreparedRequest, ResolvedCall)
            │
            ▼
        decoded value  |  CallError

Concurrency:
    Mutators replace the defaults snapshot with a single reference swap.
    A call reads the snapshot once, at call start, and keeps that view for
    all its attempts. There is no ordering between independent calls; callers
    that rotate tokens from several tasks at once must coordinate themselves.

Examples:
    >>> async with ApiClient("http://localhost:3000/api") as client:
    ...     client.set_auth_token("tok")
    ...     goals = await client.fetch("goals", CallConfig(timeout=5.0))
    ...     await client.patch(f"/goals/{goals[0]['id']}", {"done": True},
    ...                        CallConfig(retry={"max_retries": 0}))

Tags:
    http-client, facade, retry, timeout, client-spine
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from client_spine.core.logging import get_logger
from client_spine.core.notifications import NotificationSink
from client_spine.execution.backoff import BackoffCalculator
from client_spine.execution.executor import AttemptState, RequestExecutor
from client_spine.execution.retry import RetryPolicy
from client_spine.http.config import (
    AUTHORIZATION,
    CONTENT_TYPE,
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    JSON_CONTENT_TYPE,
    CallConfig,
    ClientDefaults,
    merge_headers,
)
from client_spine.http.decoder import ResponseDecoder
from client_spine.http.transport import HttpxTransport, PreparedRequest, Transport

if TYPE_CHECKING:
    from client_spine.core.settings import ClientSpineSettings

logger = get_logger(__name__)

RAW_BODY_TYPES = (bytes, bytearray, memoryview)


def encode_body(body: Any) -> bytes | None:
    """JSON-encode a request body.

    None means "no body". Bytes-like values are already raw payloads and are
    sent unchanged. Pydantic models are dumped in JSON mode first.
    """
    if body is None:
        return None
    if isinstance(body, RAW_BODY_TYPES):
        return bytes(body)
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", by_alias=True)
    return json.dumps(body, default=str).encode("utf-8")


class ApiClient:
    """Resilient client for the application's own backend endpoints.

    Args:
        base_url: Address every call path is joined onto
        headers: Extra default headers (merged over ``Content-Type: application/json``)
        timeout: Default per-attempt timeout in seconds (None or 0 disables)
        show_notification: Notify on terminal failures by default
        retry: Default retry policy
        transport: Transport to use; an ``HttpxTransport`` is created when omitted
        notifier: Sink for terminal-failure notices
        decoder: Response decoder
        backoff: Backoff calculator
        sleep: Awaitable sleep used between attempts
        on_attempt: Observer for every settled attempt
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        headers: Mapping[str, str] | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        show_notification: bool = True,
        retry: RetryPolicy | None = None,
        transport: Transport | None = None,
        notifier: NotificationSink | None = None,
        decoder: ResponseDecoder | None = None,
        backoff: BackoffCalculator | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        on_attempt: Callable[[AttemptState], None] | None = None,
    ):
        self._defaults = ClientDefaults(
            base_url=base_url,
            headers=merge_headers({CONTENT_TYPE: JSON_CONTENT_TYPE}, headers),
            timeout=timeout,
            show_notification=show_notification,
            retry=retry or RetryPolicy(),
        )
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport()
        self._executor = RequestExecutor(
            self._transport,
            decoder=decoder or ResponseDecoder(),
            notifier=notifier,
            backoff=backoff,
            sleep=sleep,
            on_attempt=on_attempt,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSpineSettings | None = None,
        **kwargs: Any,
    ) -> ApiClient:
        """Build a client from ``CLIENT_SPINE_*`` settings.

        Keyword arguments are passed through to the constructor and win over
        the settings.
        """
        from client_spine.core.settings import get_settings

        settings = settings or get_settings()

        transport = kwargs.pop("transport", None)
        client = cls(
            kwargs.pop("base_url", settings.base_url),
            timeout=kwargs.pop("timeout", settings.timeout),
            show_notification=kwargs.pop("show_notification", settings.show_notification),
            retry=kwargs.pop("retry", settings.retry_policy()),
            transport=transport or HttpxTransport(follow_redirects=settings.follow_redirects),
            **kwargs,
        )
        client._owns_transport = transport is None

        if settings.auth_token is not None:
            client.set_auth_token(settings.auth_token.get_secret_value())
        return client

    # ── Defaults ─────────────────────────────────────────────────

    @property
    def defaults(self) -> ClientDefaults:
        """Current immutable defaults snapshot."""
        return self._defaults

    @property
    def base_url(self) -> str:
        return self._defaults.base_url

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def set_auth_token(self, token: str) -> None:
        self._defaults = self._defaults.with_header(AUTHORIZATION, f"Bearer {token}")

    def remove_auth_token(self) -> None:
        self._defaults = self._defaults.without_header(AUTHORIZATION)

    def set_base_url(self, base_url: str) -> None:
        self._defaults = self._defaults.with_base_url(base_url)

    def set_header(self, key: str, value: str) -> None:
        self._defaults = self._defaults.with_header(key, value)

    def remove_header(self, key: str) -> None:
        self._defaults = self._defaults.without_header(key)

    # ── Verbs ────────────────────────────────────────────────────

    async def fetch(
        self, path: str, config: CallConfig | None = None, *, response_model: Any = None
    ) -> Any:
        """GET ``path``."""
        return await self._request("GET", path, None, config, response_model)

    async def create(
        self,
        path: str,
        body: Any = None,
        config: CallConfig | None = None,
        *,
        response_model: Any = None,
    ) -> Any:
        """POST ``body`` to ``path``."""
        return await self._request("POST", path, body, config, response_model)

    async def replace(
        self,
        path: str,
        body: Any = None,
        config: CallConfig | None = None,
        *,
        response_model: Any = None,
    ) -> Any:
        """PUT ``body`` to ``path``."""
        return await self._request("PUT", path, body, config, response_model)

    async def patch(
        self,
        path: str,
        body: Any = None,
        config: CallConfig | None = None,
        *,
        response_model: Any = None,
    ) -> Any:
        """PATCH ``path`` with ``body``."""
        return await self._request("PATCH", path, body, config, response_model)

    async def remove(
        self, path: str, config: CallConfig | None = None, *, response_model: Any = None
    ) -> Any:
        """DELETE ``path``."""
        return await self._request("DELETE", path, None, config, response_model)

    async def upload(
        self,
        path: str,
        files: Any,
        data: Mapping[str, Any] | None = None,
        config: CallConfig | None = None,
        *,
        response_model: Any = None,
    ) -> Any:
        """POST a multipart payload to ``path``.

        No content-type header is sent from the defaults or from ``config``:
        the transport sets ``multipart/form-data`` with its own boundary.

        Args:
            files: httpx-style file parts, e.g. ``{"file": ("a.png", b"...", "image/png")}``
            data: Plain form fields sent alongside the files
        """
        call = self._defaults.resolve("POST", path, config, omit_headers=[CONTENT_TYPE])
        request = PreparedRequest(
            method=call.method,
            url=call.url,
            headers=call.headers,
            params=call.params,
            files=files,
            data=data,
        )
        return await self._executor.execute(request, call, response_model)

    async def _request(
        self,
        method: str,
        path: str,
        body: Any,
        config: CallConfig | None,
        response_model: Any,
    ) -> Any:
        call = self._defaults.resolve(method, path, config)
        request = PreparedRequest(
            method=call.method,
            url=call.url,
            headers=call.headers,
            content=encode_body(body),
            params=call.params,
        )
        return await self._executor.execute(request, call, response_model)

    # ── Lifecycle ────────────────────────────────────────────────

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"ApiClient(base_url={self._defaults.base_url!r})"


# ── Module-level default client ──────────────────────────────────────────

_default_client: ApiClient | None = None


def get_default_client() -> ApiClient:
    """Return the process-wide client, building it from settings on first use."""
    global _default_client
    if _default_client is None:
        _default_client = ApiClient.from_settings()
    return _default_client


def set_default_client(client: ApiClient | None) -> None:
    """Replace (or with None, reset) the process-wide client."""
    global _default_client
    _default_client = client


class _DefaultClientApi:
    """Shortcuts bound to the process-wide client: ``await api.fetch("/goals")``."""

    async def fetch(self, path: str, config: CallConfig | None = None, **kwargs: Any) -> Any:
        return await get_default_client().fetch(path, config, **kwargs)

    async def create(self, path: str, body: Any = None, config: CallConfig | None = None, **kwargs: Any) -> Any:
        return await get_default_client().create(path, body, config, **kwargs)

    async def replace(self, path: str, body: Any = None, config: CallConfig | None = None, **kwargs: Any) -> Any:
        return await get_default_client().replace(path, body, config, **kwargs)

    async def patch(self, path: str, body: Any = None, config: CallConfig | None = None, **kwargs: Any) -> Any:
        return await get_default_client().patch(path, body, config, **kwargs)

    async def remove(self, path: str, config: CallConfig | None = None, **kwargs: Any) -> Any:
        return await get_default_client().remove(path, config, **kwargs)

    async def upload(
        self,
        path: str,
        files: Any,
        data: Mapping[str, Any] | None = None,
        config: CallConfig | None = None,
        **kwargs: Any,
    ) -> Any:
        return await get_default_client().upload(path, files, data, config, **kwargs)


api = _DefaultClientApi()


__all__ = [
    "ApiClient",
    "api",
    "encode_body",
    "get_default_client",
    "set_default_client",
]
