"""Text formatting utilities for the TUI.

Hides how log lines, the status bar, sidebar headers and typed input are
turned into display strings.
"""

import re
from collections.abc import Iterable
from datetime import datetime

from ..stream import has_mouse_sequence, scrub, truncate_text
from ..stream.render import is_border_line, is_divider_line
from .config import LOG_TIMESTAMP_FORMAT, RECENT_ERRORS_LIMIT, LogLevel

LEVEL_COLORS = {
    LogLevel.DEBUG: "dim white",
    LogLevel.INFO: "cyan",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "red",
}

_LOG_LEVEL_FIELD = re.compile(r"^\d\d:\d\d:\d\d (DEBUG|INFO|WARNING|ERROR)\b")
_URL = re.compile(r"https?://")
_LINE_BREAKS = re.compile(r"\s*\n\s*")


def format_log_line(level: int, component: str, message: str, timestamp: datetime | None = None) -> str:
    """Plain log line: time, level, component tag, message."""
    stamp = (timestamp or datetime.now()).strftime(LOG_TIMESTAMP_FORMAT)
    return f"{stamp} {LogLevel.name(level):<7} [{component}] {message}"


def log_line_color(line: str) -> str | None:
    """Color for a line written by format_log_line; None for other lines."""
    match = _LOG_LEVEL_FIELD.match(line)
    if match is None:
        return None
    return LEVEL_COLORS[LogLevel.from_string(match.group(1))]


def recent_errors(lines: Iterable[str], limit: int = RECENT_ERRORS_LIMIT) -> list[str]:
    """Last log lines that mention an error."""
    errors = [line for line in lines if "error" in line.lower()]
    return errors[-limit:]


def clean_input_value(value: str, previous: str) -> str:
    """Value to keep in the prompt after an edit.

    An edit that smuggled a mouse report into the field is rejected and the
    previous value kept. Anything else is scrubbed of control sequences and
    folded onto one line.
    """
    if has_mouse_sequence(value):
        return scrub(previous)
    return _LINE_BREAKS.sub(" ", scrub(value))


def status_text(agent_name: str, model: str, processing: bool, width: int) -> str:
    state = "..." if processing else "Idle"
    text = f"{agent_name} | {model} | {state} | Tab: Focus | Enter: View | Shift+Tab: Hide"
    return truncate_text(text, max(0, width - 2))


def sidebar_header(title: str, offset: int, updated_at: str = "") -> str:
    """Sidebar title with update time and an up-arrow scroll indicator."""
    indicator = f" ↑{offset}" if offset > 0 else ""
    if updated_at:
        return f"{title} ({updated_at}){indicator}"
    return f"{title}{indicator}"


def card_line_colors(lines: Iterable[str]) -> list[tuple[str, str, bool]]:
    """Color each line of one or more cards.

    Returns (text, color, rule) tuples: rules are gray, card titles yellow,
    URLs blue and everything else white.
    """
    colored: list[tuple[str, str, bool]] = []
    in_card = False
    in_title = False
    for line in lines:
        trimmed = line.rstrip()
        border = is_border_line(trimmed)
        divider = is_divider_line(trimmed)
        if border:
            in_card = not in_card
            in_title = in_card
        elif divider:
            in_title = False

        if border or divider:
            color = "gray"
        elif in_title and trimmed:
            color = "yellow"
        elif _URL.search(trimmed):
            color = "blue"
        else:
            color = "white"
        colored.append((line, color, border or divider))
    return colored
