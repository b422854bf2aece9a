"""Unit tests for key decoding and the terminal input boundary."""
import pytest

from marketchat.stream import KeyEvent, Modifier, TerminalInput, decode_keys, parse_key


class TestParseKey:
    """Tests for parse_key (Textual key names)."""

    @pytest.mark.parametrize(
        "key,name,modifiers",
        [
            ("ctrl+c", "c", Modifier.CTRL),
            ("shift+tab", "tab", Modifier.SHIFT),
            ("backtab", "tab", Modifier.SHIFT),
            ("ctrl+shift+up", "up", Modifier.CTRL | Modifier.SHIFT),
            ("page_up", "pageup", Modifier.NONE),
            ("+", "+", Modifier.NONE),
        ],
    )
    def test_names_and_modifiers(self, key: str, name: str, modifiers: Modifier):
        """Test that modifiers are split off the key name."""
        event = parse_key(key)
        assert event.name == name
        assert event.modifiers == modifiers

    def test_printable_character(self):
        """Test is_printable for typed characters and chords."""
        assert parse_key("a", "a").is_printable
        assert not parse_key("ctrl+a", "\x01").is_printable

    def test_str_round_trips_modifiers(self):
        """Test the readable form of a key event."""
        assert str(KeyEvent("c", Modifier.CTRL)) == "ctrl+c"
        assert str(KeyEvent("tab", Modifier.SHIFT)) == "shift+tab"


class TestDecodeKeys:
    """Tests for decode_keys (raw terminal bytes)."""

    def test_arrows_and_paging(self):
        """Test cursor and paging sequences."""
        names = [event.name for event in decode_keys("\x1b[A\x1b[B\x1b[5~\x1b[6~\x1bOC")]
        assert names == ["up", "down", "pageup", "pagedown", "right"]

    def test_xterm_modifiers(self):
        """Test modifier parameters on cursor keys."""
        (event,) = decode_keys("\x1b[1;5A")
        assert event.name == "up"
        assert event.ctrl and not event.shift

    def test_shift_tab(self):
        """Test the back-tab sequence."""
        (event,) = decode_keys("\x1b[Z")
        assert event.name == "tab" and event.shift

    def test_control_characters(self):
        """Test Ctrl+C, Enter, Tab and Backspace."""
        events = decode_keys("\x03\r\t\x7f")
        assert [(e.name, e.ctrl) for e in events] == [
            ("c", True), ("enter", False), ("tab", False), ("backspace", False)
        ]

    def test_alt_and_escape(self):
        """Test ESC-prefixed characters and a lone ESC."""
        alt, escape = decode_keys("\x1bx\x1b")
        assert alt.name == "x" and alt.alt
        assert escape.name == "escape"

    def test_mouse_reports_skipped(self):
        """Test that wheel reports produce no key events."""
        assert [e.name for e in decode_keys("a\x1b[<64;1;1Mb")] == ["a", "b"]

    def test_plain_text(self):
        """Test characters and space."""
        events = decode_keys("hi there")
        assert [e.char for e in events] == list("hi there")
        assert events[2].name == "space"


class TestTerminalInput:
    """Tests for TerminalInput."""

    def test_text_scroll_and_keys(self):
        """Test that one read yields clean text, a delta and keys."""
        terminal = TerminalInput()
        result = terminal.on_data("hi\x1b[<64;1;1M")
        assert result.text == "hi"
        assert result.scroll_delta == 1
        assert [key.name for key in result.keys] == ["h", "i"]

    def test_split_report_never_leaks(self):
        """Test that a report split across reads leaves no residue."""
        terminal = TerminalInput()
        first = terminal.on_data("a\x1b[<6")
        second = terminal.on_data("5;2;3Mb")
        assert first.text == "a"
        assert first.scroll_delta == 0
        assert second.text == "b"
        assert second.scroll_delta == -1

    def test_resize_clamps(self):
        """Test that negative sizes become zero."""
        terminal = TerminalInput(80, 24)
        assert terminal.size == (80, 24)
        assert terminal.on_resize(-5, 30) == (0, 30)

    def test_reset(self):
        """Test that reset drops partial input."""
        terminal = TerminalInput()
        terminal.on_data("\x1b[<64;1")
        terminal.reset()
        result = terminal.on_data(";1Mx")
        assert result.scroll_delta == 0
        assert result.text == ";1Mx"
