"""Content-negotiated response decoding.

Successful responses are decoded according to their declared content type:
structured data (``application/json`` and ``+json`` suffixes) is parsed,
everything else is returned as raw text. A body that claims to be JSON but
does not parse raises ``DecodeError`` instead of producing a partial or
default value.

Error responses are decoded leniently: JSON first, then raw text, so the
resulting ``HttpStatusError`` always carries the best message available.

Examples:
    >>> decoder = ResponseDecoder()
    >>> decoder.decode(TransportResponse(200, {"content-type": "application/json"}, b'{"id": 1}'))
    {'id': 1}
    >>> decoder.decode(TransportResponse(200, {"content-type": "text/plain"}, b"pong"))
    'pong'
"""

from __future__ import annotations

import functools
import json
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from client_spine.core.errors import DecodeError, HttpStatusError
from client_spine.http.transport import TransportResponse

JSON_MEDIA_TYPE = "application/json"


def media_type(content_type: str | None) -> str:
    """Strip parameters from a content-type header value."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_structured(content_type: str | None) -> bool:
    """True when the declared kind is JSON (including ``+json`` suffixes)."""
    kind = media_type(content_type)
    return kind == JSON_MEDIA_TYPE or kind.endswith("+json")


@functools.lru_cache(maxsize=256)
def _cached_adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def _adapter(model: Any) -> TypeAdapter[Any]:
    # Annotated metadata such as dicts makes some annotations unhashable.
    try:
        hash(model)
    except TypeError:
        return TypeAdapter(model)
    return _cached_adapter(model)


class ResponseDecoder:
    """Turn transport responses into values or CallErrors."""

    def decode(self, response: TransportResponse, response_model: Any = None) -> Any:
        """Decode a successful response.

        Args:
            response: A 2xx response
            response_model: Optional type the value is validated against

        Returns:
            Parsed JSON for structured kinds (None for an empty body),
            otherwise the raw text

        Raises:
            DecodeError: If a structured body fails to parse or validate
        """
        if is_structured(response.content_type):
            value = self._parse_json(response)
        else:
            value = response.text

        if response_model is None:
            return value
        return self._validate(value, response_model, response)

    def decode_error(self, response: TransportResponse) -> HttpStatusError:
        """Build the HttpStatusError for a non-2xx response."""
        fallback = f"HTTP {response.status}: {response.reason}".rstrip(": ")
        text = response.text

        try:
            body: Any = json.loads(text) if text.strip() else None
        except ValueError:
            body = None

        code = None
        if body is None:
            message = text or fallback
            body = {"text": text}
        elif isinstance(body, dict):
            message = body.get("message") or body.get("error") or fallback
            code = body.get("code")
        else:
            message = fallback

        return HttpStatusError(
            str(message),
            status=response.status,
            body=body,
            code=str(code) if code is not None else None,
        )

    def _parse_json(self, response: TransportResponse) -> Any:
        if not response.content.strip():
            return None
        encoding = response.encoding
        try:
            text = response.content.decode(encoding)
        except UnicodeDecodeError as exc:
            raise DecodeError(
                f"Response body is not valid {encoding}: {exc.reason} at byte {exc.start}",
                status=response.status,
                body=response.text,
                cause=exc,
            ) from exc
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise DecodeError(
                f"Invalid JSON response: {exc}",
                status=response.status,
                body=text,
                cause=exc,
            ) from exc

    def _validate(self, value: Any, response_model: Any, response: TransportResponse) -> Any:
        try:
            return _adapter(response_model).validate_python(value)
        except PydanticValidationError as exc:
            raise DecodeError(
                f"Response did not match {getattr(response_model, '__name__', response_model)}: "
                f"{exc.error_count()} validation error(s)",
                status=response.status,
                body=value,
                cause=exc,
            ) from exc


__all__ = ["ResponseDecoder", "is_structured", "media_type", "JSON_MEDIA_TYPE"]
