"""Transport seam between the executor and the network.

The executor only needs something that turns a ``PreparedRequest`` into a
``TransportResponse`` or fails with a ``TransportError``. ``HttpxTransport``
is the production implementation on top of ``httpx.AsyncClient``; tests swap
in ``httpx.MockTransport`` or a hand-written fake.

The httpx client is created without a timeout of its own: per-attempt time
limits are enforced by the executor, which cancels ``send`` when its timer
fires.
"""

from __future__ import annotations

import codecs
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from client_spine.core.errors import RequestTimeout, TransportError
from client_spine.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class PreparedRequest:
    """Everything a transport needs to issue one attempt.

    Attributes:
        method: HTTP method
        url: Absolute URL
        headers: Final header set (defaults merged with per-call headers)
        content: Raw body bytes, already encoded
        params: Query string parameters
        files: Multipart file parts (upload only)
        data: Multipart form fields (upload only)
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes | None = None
    params: Mapping[str, Any] | None = None
    files: Any = None
    data: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and fully-read body of one response."""

    status: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    reason: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, httpx.Headers):
            object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status <= 299

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def encoding(self) -> str:
        """Declared charset, or utf-8 when it is missing or not a known codec."""
        charset = self._charset()
        if charset is None:
            return DEFAULT_ENCODING
        try:
            return codecs.lookup(charset).name
        except LookupError:
            return DEFAULT_ENCODING

    @property
    def text(self) -> str:
        """Body as text; undecodable bytes are replaced, never raised."""
        if not self.content:
            return ""
        return self.content.decode(self.encoding, errors="replace")

    def _charset(self) -> str | None:
        content_type = self.content_type or ""
        for part in content_type.split(";")[1:]:
            key, _, value = part.strip().partition("=")
            if key.strip().lower() == "charset" and value:
                return value.strip().strip("\"'")
        return None

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> TransportResponse:
        return cls(
            status=response.status_code,
            headers=response.headers,
            content=response.content,
            reason=response.reason_phrase,
        )


@runtime_checkable
class Transport(Protocol):
    """Issues one HTTP-shaped request per call to ``send``."""

    async def send(self, request: PreparedRequest) -> TransportResponse: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Args:
        client: Existing client to use (not closed by ``aclose``)
        follow_redirects: Resolve 3xx responses inside the transport
        transport: Low-level httpx transport (e.g. ``httpx.MockTransport``)
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=follow_redirects,
            timeout=None,
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(self, request: PreparedRequest) -> TransportResponse:
        try:
            http_request = self._client.build_request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.content,
                params=request.params,
                files=request.files,
                data=request.data,
            )
            response = await self._client.send(http_request)
        except httpx.TimeoutException as exc:
            raise RequestTimeout(cause=exc) from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise TransportError(str(exc) or type(exc).__name__, cause=exc) from exc

        logger.debug(
            "transport_response",
            status=response.status_code,
            bytes=len(response.content),
        )
        return TransportResponse.from_httpx(response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["PreparedRequest", "TransportResponse", "Transport", "HttpxTransport"]
