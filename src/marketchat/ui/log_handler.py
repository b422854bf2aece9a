"""Routes the package's log records into the sidebar log view.

While the TUI owns the terminal nothing may write to stderr, so the
package logger is pointed at a LogPanelHandler for the lifetime of the app
and restored afterwards.
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from ..stream import LogBuffer, sanitize_line
from .config import LogLevel
from .formatting import format_log_line

if TYPE_CHECKING:
    from textual.app import App

PACKAGE_LOGGER = "marketchat"


def component_of(record: logging.LogRecord) -> str:
    """Short component tag: 'marketchat.agent.service' becomes 'agent'."""
    parts = record.name.split(".")
    if parts[0] == PACKAGE_LOGGER and len(parts) > 1:
        return parts[1]
    return record.name


class LogPanelHandler(logging.Handler):
    """logging.Handler that appends formatted lines to a LogBuffer.

    Records from other threads are handed to the app's thread before the
    buffer is touched.
    """

    def __init__(
        self,
        buffer: LogBuffer,
        level: int = LogLevel.INFO,
        on_change: Callable[[], None] | None = None,
        app: "App | None" = None,
    ) -> None:
        super().__init__(level)
        self.buffer = buffer
        self.on_change = on_change
        self.app = app
        self._saved: tuple[int, bool] | None = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]!r}"
            line = format_log_line(
                record.levelno,
                component_of(record),
                sanitize_line(message),
                datetime.fromtimestamp(record.created),
            )
        except Exception:
            self.handleError(record)
            return

        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(self._append, line)
        else:
            self._append(line)

    def _append(self, line: str) -> None:
        self.buffer.append(line)
        if self.on_change is not None:
            self.on_change()

    def attach(self, name: str = PACKAGE_LOGGER) -> None:
        """Make this the only destination of the package logger."""
        target = logging.getLogger(name)
        self._saved = (target.level, target.propagate)
        target.addHandler(self)
        target.setLevel(self.level)
        target.propagate = False

    def detach(self, name: str = PACKAGE_LOGGER) -> None:
        target = logging.getLogger(name)
        target.removeHandler(self)
        if self._saved is not None:
            target.setLevel(self._saved[0])
            target.propagate = self._saved[1]
            self._saved = None
