"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

import logging


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    The values match the logging module's, so records compare directly.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "warn": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns INFO if invalid."""
        return cls._from_string.get(level_str.lower(), cls.INFO)

    @classmethod
    def choices(cls) -> list[str]:
        return [name.lower() for name in cls._names.values()]


# Layout
WIDE_LAYOUT_MIN_COLUMNS = 110  # Below this only one panel is shown at a time
SIDEBAR_MIN_WIDTH = 28
SIDEBAR_MAX_WIDTH = 42
SIDEBAR_WIDTH_RATIO = 0.35
MIN_CHAT_WIDTH = 20
MIN_CONTENT_WIDTH = 10

# Scrolling
SCROLL_PAGE_SIZE = 10  # Lines per PageUp/PageDown
SCROLL_LINE_STEP = 1  # Lines per arrow key or wheel notch

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
RECENT_ERRORS_LIMIT = 10  # Lines shown by /error

# Chat placeholders
PROCESSING_PLACEHOLDER = "(processing...)"
NO_RESPONSE_PLACEHOLDER = "(no response)"
