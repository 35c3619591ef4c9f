"""Notification sinks for terminal call failures.

The executor invokes ``sink.error(title, description=...)`` exactly once per
terminal failure when the call's ``show_notification`` flag is set. Rendering
(toasts, banners) belongs to the application; this module only defines the
protocol and a few sinks useful outside a UI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from client_spine.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that can show an error notice to the user."""

    def error(self, title: str, *, description: str) -> None: ...


class LoggingNotifier:
    """Emit notices as structured warnings."""

    def error(self, title: str, *, description: str) -> None:
        logger.warning("user_notification", title=title, description=description)


class NullNotifier:
    """Discard every notice."""

    def error(self, title: str, *, description: str) -> None:
        return None


@dataclass(frozen=True)
class Notice:
    title: str
    description: str


@dataclass
class RecordingNotifier:
    """Collect notices in memory, in the order they were raised."""

    notices: list[Notice] = field(default_factory=list)

    def error(self, title: str, *, description: str) -> None:
        self.notices.append(Notice(title=title, description=description))

    def clear(self) -> None:
        self.notices.clear()


__all__ = [
    "NotificationSink",
    "LoggingNotifier",
    "NullNotifier",
    "RecordingNotifier",
    "Notice",
]
