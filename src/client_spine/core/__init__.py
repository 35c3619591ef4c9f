"""Core primitives: errors, logging, settings, notifications."""

from client_spine.core.errors import (
    CallError,
    DecodeError,
    ErrorCategory,
    ErrorContext,
    HttpStatusError,
    RequestTimeout,
    TransportError,
    categorize_status,
)
from client_spine.core.logging import LogContext, configure_logging, get_logger
from client_spine.core.notifications import (
    LoggingNotifier,
    Notice,
    NotificationSink,
    NullNotifier,
    RecordingNotifier,
)
from client_spine.core.settings import ClientSpineSettings, clear_settings_cache, get_settings

__all__ = [
    "CallError",
    "DecodeError",
    "ErrorCategory",
    "ErrorContext",
    "HttpStatusError",
    "RequestTimeout",
    "TransportError",
    "categorize_status",
    "LogContext",
    "configure_logging",
    "get_logger",
    "LoggingNotifier",
    "Notice",
    "NotificationSink",
    "NullNotifier",
    "RecordingNotifier",
    "ClientSpineSettings",
    "clear_settings_cache",
    "get_settings",
]
