"""Modal screens for the TUI.

This module hides the design decisions about:
- How an unrecoverable error is presented
- Keyboard shortcuts for leaving the error screen
"""

from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Static

from ..errors import error_hints
from ..events import FatalError

MAX_ERROR_LINES = 12


class FatalErrorScreen(ModalScreen[None]):
    """Full-screen report of a fatal error.

    Shows the message, any hints for fixing it and where the full report
    was written. Enter, Escape or Ctrl+C dismisses it; the app exits with
    a non-zero status afterwards.
    """

    CSS = """
    FatalErrorScreen {
        align: center middle;
        background: $background 85%;
    }

    #fatal-dialog {
        width: 80%;
        max-width: 100;
        height: auto;
        max-height: 90%;
        border: tall $error;
        background: $surface;
        padding: 1 2;
    }

    #fatal-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $error;
        padding: 0 0 1 0;
        border-bottom: solid $error;
        margin-bottom: 1;
    }

    #fatal-message {
        width: 100%;
        height: auto;
        color: $foreground;
        margin-bottom: 1;
    }

    #fatal-hints {
        width: 100%;
        height: auto;
        color: $warning;
        margin-bottom: 1;
    }

    #fatal-footer {
        width: 100%;
        height: auto;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("enter", "close", "Exit", show=False),
        Binding("escape", "close", "Exit", show=False),
        Binding("ctrl+c", "close", "Exit", show=False),
    ]

    def __init__(self, fatal: FatalError, log_path: Path | None = None) -> None:
        super().__init__()
        self._fatal = fatal
        self._log_path = log_path

    def compose(self) -> ComposeResult:
        lines = self._fatal.message.split("\n")
        shown = lines[:MAX_ERROR_LINES]
        if len(lines) > MAX_ERROR_LINES:
            shown.append(f"... {len(lines) - MAX_ERROR_LINES} more lines")
        hints = error_hints(self._fatal.message)

        footer = []
        if self._log_path is not None:
            footer.append(f"Full log: {self._log_path}")
        footer.append("Press Enter or Escape to exit")

        with Vertical(id="fatal-dialog"):
            yield Static("FATAL ERROR", id="fatal-title")
            yield Static("\n".join(shown), id="fatal-message", markup=False)
            if hints:
                yield Static("\n".join(hints), id="fatal-hints", markup=False)
            yield Static("\n".join(footer), id="fatal-footer", markup=False)

    def action_close(self) -> None:
        self.dismiss(None)
