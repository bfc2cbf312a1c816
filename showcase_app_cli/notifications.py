"""User-facing notifications."""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from pydantic import BaseModel
from pydantic import Field
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """Notification shown to the user."""

    message: str = Field(description="Notification text")
    severity: Severity = Field(default=Severity.INFO, description="How prominently to show it")


class NotificationSink(Protocol):
    """User-facing error surface."""

    def raise_notification(self, message: str, severity: Severity = Severity.INFO) -> None: ...


class NotificationBus:
    """Notification sink that fans out to subscribers.

    Subscribers are called synchronously. Errors in handlers are isolated
    and logged to prevent one failing handler from breaking others.
    """

    def __init__(self) -> None:
        self._subscribers: list[Callable[[Notification], None]] = []

    def subscribe(self, handler: Callable[[Notification], None]) -> None:
        """Subscribe a handler to receive all notifications.

        Args:
            handler: Callable that takes a Notification
        """
        self._subscribers.append(handler)

    def raise_notification(self, message: str, severity: Severity = Severity.INFO) -> None:
        """Publish a notification to all subscribers.

        Args:
            message: Notification text
            severity: Notification severity
        """
        notification = Notification(message=message, severity=severity)
        for handler in self._subscribers:
            try:
                handler(notification)
            except Exception:
                logger.exception(f"Error in notification handler {getattr(handler, '__name__', handler)!r}")


class ConsoleNotifier:
    """Renders notifications on a rich console."""

    _STYLES = {
        Severity.INFO: "cyan",
        Severity.WARNING: "yellow",
        Severity.ERROR: "red",
    }

    def __init__(self, console: Console):
        self.console = console

    def __call__(self, notification: Notification) -> None:
        style = self._STYLES[notification.severity]
        if notification.severity == Severity.ERROR:
            self.console.print(
                Panel(Text(notification.message), title="Error", title_align="left", border_style=style)
            )
        else:
            self.console.print(Text(notification.message, style=style))
