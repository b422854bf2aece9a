"""Terminal input boundary.

Hides the split between wheel decoding, key decoding and text scrubbing.
Callers hand over raw reads and get back cleaned text, a scroll delta and
key events, with no half-received sequence ever leaking into the text.
"""

from dataclasses import dataclass, field

from .escapes import scrub, split_incomplete_escape
from .keys import KeyEvent, decode_keys
from .mouse import MouseScrollDecoder


@dataclass(frozen=True)
class InputResult:
    """What one terminal read decoded to."""

    text: str
    scroll_delta: int
    keys: tuple[KeyEvent, ...] = field(default_factory=tuple)


class TerminalInput:
    """Decoder for one terminal input stream.

    The wheel decoder and the scrubber run independently over the same
    bytes, each with its own pending tail. Both finish before a result is
    returned, so a caller never sees a half-scrubbed value.
    """

    def __init__(self, columns: int = 0, rows: int = 0) -> None:
        self._mouse = MouseScrollDecoder()
        self._pending_text = ""
        self._columns = columns
        self._rows = rows

    @property
    def size(self) -> tuple[int, int]:
        """Last known (columns, rows)."""
        return self._columns, self._rows

    def on_data(self, chunk: str) -> InputResult:
        """Decode one read from the terminal."""
        delta = self._mouse.feed(chunk)

        complete, self._pending_text = split_incomplete_escape(self._pending_text + chunk)
        keys = tuple(decode_keys(complete))
        return InputResult(text=scrub(complete), scroll_delta=delta, keys=keys)

    def on_resize(self, columns: int, rows: int) -> tuple[int, int]:
        """Record a new terminal size, clamping negative values to zero."""
        self._columns = max(0, columns)
        self._rows = max(0, rows)
        return self.size

    def reset(self) -> None:
        self._mouse.reset()
        self._pending_text = ""
