"""Raw-mode input probe behind ``marketchat input-test``.

Hides terminal mode switching and the probe's screen layout. The state and
the rendering are plain objects so they can be exercised without a real
terminal; only run_input_probe touches the tty.
"""

import codecs
import os
import select
import shutil
import sys
import termios
import tty
from dataclasses import dataclass, field
from datetime import datetime

from rich.columns import Columns
from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from ..stream import InputResult, KeyEvent, TerminalInput, scroll_window
from ..stream.mouse import DISABLE_MOUSE_TRACKING, ENABLE_MOUSE_TRACKING
from ..stream.wrapping import clip

PROBE_LINE_COUNT = 200
HEADER_HEIGHT = 9
FOOTER_HEIGHT = 1
MIN_VIEW_HEIGHT = 5
DISPLAY_CLIP = 120
READ_SIZE = 1024
POLL_SECONDS = 0.1

_VISIBLE_CONTROLS = (("\x1b", "<ESC>"), ("\t", "<TAB>"), ("\r", "<CR>"), ("\n", "<LF>"))

_KEY_ROWS = (
    ("ctrl", "shift", "alt"),
    ("tab", "escape", "enter"),
    ("pageup", "pagedown", "backspace"),
    ("up", "down", "left", "right"),
)


def format_raw_input(value: str) -> str:
    """Make control characters in a raw read visible."""
    for char, label in _VISIBLE_CONTROLS:
        value = value.replace(char, label)
    return clip(value, DISPLAY_CLIP)


def format_char_codes(value: str) -> str:
    """Two-digit hex code of every character, space separated."""
    return clip(" ".join(f"{ord(char):02x}" for char in value), DISPLAY_CLIP)


def new_utf8_decoder() -> codecs.IncrementalDecoder:
    """Decoder that keeps a multibyte character split across reads whole."""
    return codecs.getincrementaldecoder("utf-8")(errors="replace")


def view_height(rows: int) -> int:
    return max(MIN_VIEW_HEIGHT, rows - HEADER_HEIGHT - FOOTER_HEIGHT)


@dataclass
class ProbeState:
    """Everything the probe screen shows."""

    rows: int = 28
    offset: int = 0
    last_raw: str = ""
    last_delta: int = 0
    last_delta_at: datetime = field(default_factory=datetime.now)
    last_key: KeyEvent | None = None
    quit: bool = False
    lines: list[str] = field(
        default_factory=lambda: [f"Line {index:03d}" for index in range(1, PROBE_LINE_COUNT + 1)]
    )

    @property
    def max_scroll(self) -> int:
        return scroll_window(len(self.lines), view_height(self.rows), 0).max_scroll

    def scroll(self, delta: int) -> None:
        """Positive delta moves toward the first line."""
        self.offset = scroll_window(len(self.lines), view_height(self.rows), self.offset + delta).offset

    def apply(self, raw: str, result: InputResult) -> None:
        """Record one decoded read."""
        self.last_raw = raw
        if result.scroll_delta:
            self.last_delta = result.scroll_delta
            self.last_delta_at = datetime.now()
            self.scroll(result.scroll_delta)

        for key in result.keys:
            if key.ctrl and key.name == "c":
                self.quit = True
                return
            self.last_key = key
            if key.name in ("up", "pageup"):
                self.scroll(1)
            elif key.name in ("down", "pagedown"):
                self.scroll(-1)

    def visible_lines(self) -> list[str]:
        return scroll_window(len(self.lines), view_height(self.rows), self.offset).slice(self.lines)


def _flag(label: str, active: bool) -> Text:
    text = Text(f"{label:<10}: ")
    text.append("ON" if active else "off", style="green" if active else "bright_black")
    return text


def _key_flags(key: KeyEvent | None) -> dict[str, bool]:
    flags = {name: False for row in _KEY_ROWS for name in row}
    if key is not None:
        flags["ctrl"] = key.ctrl
        flags["shift"] = key.shift
        flags["alt"] = key.alt
        if key.name in flags:
            flags[key.name] = True
    return flags


def render_probe(state: ProbeState) -> Group:
    """Build the probe screen for the current state."""
    key = state.last_key
    raw = state.last_raw
    flags = _key_flags(key)

    header = [
        Text("Input Test", style="bold"),
        Text(
            f"Scroll offset: {state.offset} / {state.max_scroll} | "
            f"Last input: {(key.char if key else '') or '(none)'} | Key: {key or '(none)'}",
            style="dim",
        ),
        Text(
            f"Raw input: {format_raw_input(raw) or '(none)'} | Codes: {format_char_codes(raw) or '(none)'}",
            style="dim",
        ),
        Text(
            f"ESC prefix: {'yes' if raw.startswith(chr(0x1b)) else 'no'} | "
            f"alt flag: {'on' if key and key.alt else 'off'} | "
            f"shift flag: {'on' if key and key.shift else 'off'}",
            style="dim",
        ),
        Text(
            f"Last wheel delta: {state.last_delta} @ {state.last_delta_at.strftime('%H:%M:%S')}",
            style="dim",
        ),
        Columns(
            [Group(*(_flag(name, flags[name]) for name in row)) for row in _KEY_ROWS],
            padding=(0, 3),
        ),
    ]
    body = [Text(line) for line in state.visible_lines()]
    footer = Text("Ctrl+C to exit.", style="dim")
    return Group(*header, *body, footer)


def run_input_probe(console: Console) -> None:
    """Show decoded terminal input until Ctrl+C.

    Raises:
        RuntimeError: If stdin is not a terminal
    """
    if not sys.stdin.isatty():
        raise RuntimeError("input-test needs an interactive terminal")

    fd = sys.stdin.fileno()
    columns, rows = shutil.get_terminal_size()
    decoder = TerminalInput(columns, rows)
    state = ProbeState(rows=rows)
    utf8 = new_utf8_decoder()
    old_settings = termios.tcgetattr(fd)

    sys.stdout.write(ENABLE_MOUSE_TRACKING)
    sys.stdout.flush()
    try:
        tty.setraw(fd)
        with Live(render_probe(state), console=console, screen=True, auto_refresh=False) as live:
            while not state.quit:
                columns, rows = shutil.get_terminal_size()
                if (columns, rows) != decoder.size:
                    state.rows = decoder.on_resize(columns, rows)[1]
                    state.scroll(0)
                    live.update(render_probe(state), refresh=True)

                ready, _, _ = select.select([fd], [], [], POLL_SECONDS)
                if not ready:
                    continue
                data = os.read(fd, READ_SIZE)
                if not data:
                    break
                raw = utf8.decode(data)
                if not raw:
                    continue
                state.apply(raw, decoder.on_data(raw))
                live.update(render_probe(state), refresh=True)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
        sys.stdout.write(DISABLE_MOUSE_TRACKING)
        sys.stdout.flush()
