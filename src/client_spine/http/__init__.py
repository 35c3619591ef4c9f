"""HTTP layer: transport, decoding, per-call config and the ApiClient facade."""

from client_spine.http.config import (
    CallConfig,
    ClientDefaults,
    ResolvedCall,
    join_url,
    merge_headers,
    strip_headers,
)
from client_spine.http.decoder import ResponseDecoder, is_structured
from client_spine.http.envelope import ApiResponse, PageMeta
from client_spine.http.transport import HttpxTransport, PreparedRequest, Transport, TransportResponse
from client_spine.http.client import ApiClient, api, encode_body, get_default_client, set_default_client

__all__ = [
    "CallConfig",
    "ClientDefaults",
    "ResolvedCall",
    "join_url",
    "merge_headers",
    "strip_headers",
    "ResponseDecoder",
    "is_structured",
    "ApiResponse",
    "PageMeta",
    "HttpxTransport",
    "PreparedRequest",
    "Transport",
    "TransportResponse",
    "ApiClient",
    "api",
    "encode_body",
    "get_default_client",
    "set_default_client",
]
