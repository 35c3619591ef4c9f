"""
Structured logging for client-spine.

Every module logs through structlog with snake_case event names and key/value
fields (``retry_scheduled``, ``request_failed``...). Applications call
``configure_logging`` once at startup; library code only calls ``get_logger``
and never configures anything itself.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None)
            │
            ▼
        processor chain
          TimeStamper(iso)             optional
          merge_contextvars            call_id / method / url of the current call
          add_log_level, add_logger_name
          _redact_credentials          Authorization, auth_token, *token fields
          _add_service
          JSONRenderer  (ECS field names)  |  ConsoleRenderer

Examples:
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> with LogContext(call_id="c-1", method="GET"):
    ...     logger.info("request_succeeded", status=200, attempts=1)

Tags:
    logging, structlog, observability, client-spine
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from contextvars import Token
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

REDACTED = "***"
SENSITIVE_KEYS = frozenset({"authorization", "auth_token", "token", "password", "cookie"})

_service_name = "client-spine"


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return lowered in SENSITIVE_KEYS or lowered.endswith("_token")


def _redact_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credentials in top-level fields and in ``headers`` mappings."""
    for key in list(event_dict):
        if _is_sensitive(key):
            event_dict[key] = REDACTED
    headers = event_dict.get("headers")
    if isinstance(headers, Mapping):
        event_dict["headers"] = {
            name: REDACTED if _is_sensitive(name) else value for name, value in headers.items()
        }
    return event_dict


def _add_service(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service.name", _service_name)
    return event_dict


def _ecs_field_names(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Rename timestamp/level for Elasticsearch-style consumers."""
    for source, target in (("timestamp", "@timestamp"), ("level", "log.level")):
        if source in event_dict:
            event_dict[target] = event_dict.pop(source)
    return event_dict


def build_processors(json_format: bool, add_timestamp: bool = True) -> list[Processor]:
    """Processor chain used by ``configure_logging`` (renderer included)."""
    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.dev.set_exc_info,
        _redact_credentials,
        _add_service,
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            _ecs_field_names,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "client-spine",
    add_timestamp: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog (and the stdlib root logger it writes through).

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_format: True for JSON lines, False for console, None picks JSON
            when stdout is not a terminal
        service: Value of the ``service.name`` field
        add_timestamp: Prefix each event with an ISO timestamp
        stream: Where the stdlib handler writes (stdout when omitted)
    """
    global _service_name
    _service_name = service

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    if json_format is None:
        json_format = not sys.stdout.isatty()

    structlog.configure(
        processors=build_processors(json_format, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=stream or sys.stdout, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind fields to every event logged from the current task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind fields for the duration of a block, then restore what was there.

    Context variables are task-local, so concurrent calls sharing one client
    each log their own ``call_id``. Nested contexts restore the outer values
    on exit instead of dropping them.

    Example:
        async with LogContext(call_id="abc123", method="GET", url=url):
            logger.info("attempt_failed", attempt=1)
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._tokens: Mapping[str, Token[Any]] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self.fields)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = {}

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


__all__ = [
    "configure_logging",
    "build_processors",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "REDACTED",
]
