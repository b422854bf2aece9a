"""Mouse wheel decoding for SGR mouse reporting.

Hides the wire format of wheel events and the buffering needed when a
report is split across several terminal reads.
"""

import re
from dataclasses import dataclass

from .escapes import MAX_PENDING_LENGTH

WHEEL_UP_BUTTONS = frozenset({"64", "96"})
WHEEL_DOWN_BUTTONS = frozenset({"65", "97"})

_SGR_WHEEL = re.compile(r"\x1b\[<(64|65|96|97);(\d+);(\d+)[mM]")

# A report that has started but not finished: ESC, ESC [, ESC [ <, and up
# to three partially typed numeric parameters.
_PARTIAL_REPORT = re.compile(r"\x1b(?:\[(?:<(?:\d+(?:;\d*){0,2})?)?)?\Z")

# Mouse tracking on: button events, SGR encoding, urxvt encoding, alternate scroll off
ENABLE_MOUSE_TRACKING = "\x1b[?1000h\x1b[?1006h\x1b[?1015h\x1b[?1007l"
DISABLE_MOUSE_TRACKING = "\x1b[?1000l\x1b[?1006l\x1b[?1015l\x1b[?1007l"


@dataclass(frozen=True)
class ScrollDecode:
    """Outcome of decoding one buffer."""

    remaining: str
    delta: int


def decode_scroll(buffer: str) -> ScrollDecode:
    """Extract wheel events from a buffer.

    Each complete wheel-up report adds +1 and each wheel-down report adds -1.
    Everything up to the last complete report is consumed. Of what follows,
    only an unfinished report introducer is kept, so the caller can append
    the next read to it.

    Args:
        buffer: Pending bytes from earlier reads followed by the new read

    Returns:
        ScrollDecode with the summed delta and the suffix to carry forward
    """
    delta = 0
    consumed = 0
    for match in _SGR_WHEEL.finditer(buffer):
        delta += 1 if match.group(1) in WHEEL_UP_BUTTONS else -1
        consumed = match.end()

    remaining = ""
    partial = _PARTIAL_REPORT.search(buffer, consumed)
    if partial is not None and len(partial.group()) <= MAX_PENDING_LENGTH:
        remaining = partial.group()
    return ScrollDecode(remaining=remaining, delta=delta)


class MouseScrollDecoder:
    """Stateful wheel decoder owning a single pending buffer.

    Usage:
        decoder = MouseScrollDecoder()
        for chunk in reads:
            offset += decoder.feed(chunk)
    """

    def __init__(self) -> None:
        self._pending = ""

    @property
    def pending(self) -> str:
        """Bytes held back from the previous read."""
        return self._pending

    def feed(self, chunk: str) -> int:
        """Consume one read and return the wheel delta it completed."""
        result = decode_scroll(self._pending + chunk)
        self._pending = result.remaining
        return result.delta

    def reset(self) -> None:
        """Drop any partially received report."""
        self._pending = ""
