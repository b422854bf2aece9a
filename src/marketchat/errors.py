"""Exceptions and fatal error reporting.

Hides where fatal errors are written and what advice accompanies them.
"""

import traceback
from datetime import datetime
from pathlib import Path

from .events import FatalError

ERROR_LOG_FILENAME = "marketchat-error.log"


class MarketChatError(Exception):
    """Base class for errors raised by this package."""


class ConfigError(MarketChatError):
    """Required settings are missing or invalid."""


class SetupCancelled(MarketChatError):
    """The user aborted an interactive setup prompt."""


def error_hints(message: str) -> list[str]:
    """Suggest next steps for common failure messages."""
    lowered = message.lower()
    hints: list[str] = []
    if "api key" in lowered or "api_key" in lowered or "unauthorized" in lowered or "401" in lowered:
        hints.append("Check that the API key for your LLM provider is set and valid.")
        hints.append("Run 'marketchat settings' to update it.")
    if any(word in lowered for word in ("network", "connect", "timeout", "timed out", "dns")):
        hints.append("Check your network connection and try again.")
    if "private key" in lowered:
        hints.append("EVM_PRIVATE_KEY must be 64 hex characters, optionally prefixed with 0x.")
    return hints


def format_error_report(fatal: FatalError) -> str:
    """Render a fatal error as a log file entry."""
    lines = [f"[{fatal.timestamp.isoformat()}] {fatal.context or 'fatal'}: {fatal.message}"]
    trace = "".join(traceback.format_exception(fatal.error)).rstrip()
    if trace:
        lines.append(trace)
    return "\n".join(lines) + "\n\n"


def append_error_log(fatal: FatalError, directory: Path | None = None) -> Path:
    """Append a fatal error to the error log.

    Args:
        fatal: The error to record
        directory: Directory for the log file (default: current directory)

    Returns:
        Path of the log file written
    """
    path = (directory or Path.cwd()) / ERROR_LOG_FILENAME
    with path.open("a", encoding="utf-8") as handle:
        handle.write(format_error_report(fatal))
    return path


def fatal_from_exception(error: BaseException, context: str = "") -> FatalError:
    return FatalError(error=error, context=context, timestamp=datetime.now())


def is_programming_error(error: BaseException) -> bool:
    """Errors that point at a bug rather than a bad reply or a flaky network.

    The chat cannot meaningfully continue after these, so they are treated
    as fatal.
    """
    return isinstance(error, (AttributeError, NameError, TypeError, AssertionError))
