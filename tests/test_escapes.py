"""Unit tests for escape sequence scrubbing."""
from hypothesis import given
from hypothesis import strategies as st

from marketchat.stream import MAX_PENDING_LENGTH, has_mouse_sequence, sanitize_line, scrub, split_incomplete_escape

# Characters that make up control sequences, mixed with ordinary text
_noisy_text = st.text(alphabet=st.sampled_from(list("ab <>[];0123456789Mm~\x1b\x07\r\n\t\x00\x7f")), max_size=60)


class TestScrub:
    """Tests for scrub."""

    def test_plain_text_unchanged(self):
        """Test that text without control sequences passes through."""
        assert scrub("buy 10 shares\tnow\n") == "buy 10 shares\tnow\n"

    def test_removes_sgr_mouse_report(self):
        """Test that a complete SGR mouse report is removed."""
        assert scrub("hello\x1b[<64;10;5Mworld") == "helloworld"

    def test_removes_mouse_report_without_escape(self):
        """Test that a report whose ESC was already consumed is removed."""
        assert scrub("ab[<65;3;4mcd") == "abcd"
        assert scrub("ab[M !!cd") == "abcd"

    def test_removes_x10_mouse_report(self):
        """Test that a legacy X10 report is removed."""
        assert scrub("a\x1b[M !!b") == "ab"

    def test_removes_csi_and_osc(self):
        """Test that cursor moves and titles are removed."""
        assert scrub("x\x1b[2Ky\x1b]0;title\x07z") == "xyz"

    def test_normalizes_line_endings(self):
        """Test that CRLF and lone CR become LF."""
        assert scrub("a\r\nb\rc") == "a\nb\nc"

    def test_removes_stray_escape_and_controls(self):
        """Test that lone ESC and C0 control bytes are removed."""
        assert scrub("a\x1b\x00b\x7fc") == "abc"

    def test_nested_residue_is_removed(self):
        """Test that a sequence formed by removing another is removed too."""
        assert scrub("[<6\x1b[A4;1;1M") == ""

    @given(_noisy_text)
    def test_scrub_is_idempotent(self, text: str):
        """Property test: scrubbing twice changes nothing."""
        once = scrub(text)
        assert scrub(once) == once

    @given(_noisy_text)
    def test_output_has_no_control_characters(self, text: str):
        """Property test: only tab and newline survive among controls."""
        cleaned = scrub(text)
        assert all(char in "\t\n" or (ord(char) >= 0x20 and char != "\x7f") for char in cleaned)


class TestHasMouseSequence:
    """Tests for has_mouse_sequence."""

    def test_detects_reports(self):
        """Test complete and ESC-stripped reports."""
        assert has_mouse_sequence("\x1b[<64;1;1M")
        assert has_mouse_sequence("\x1b[32;5;6M")
        assert has_mouse_sequence("[<0;1;1m")

    def test_ignores_plain_text(self):
        """Test that ordinary input is not flagged."""
        assert not has_mouse_sequence("price 0.54 [yes]")


class TestSanitizeLine:
    """Tests for sanitize_line."""

    def test_flattens_newlines_and_colors(self):
        """Test that a multi-line colored string becomes one row."""
        assert sanitize_line("first\nsecond\x1b[31m  ") == "first second"


class TestSplitIncompleteEscape:
    """Tests for split_incomplete_escape."""

    def test_no_escape(self):
        """Test text without ESC."""
        assert split_incomplete_escape("hello") == ("hello", "")

    def test_partial_mouse_report(self):
        """Test that an unfinished report is held back."""
        assert split_incomplete_escape("abc\x1b[<6") == ("abc", "\x1b[<6")

    def test_trailing_escape(self):
        """Test that a lone trailing ESC is held back."""
        assert split_incomplete_escape("abc\x1b") == ("abc", "\x1b")

    def test_complete_sequence_not_held(self):
        """Test that a finished sequence stays in the text."""
        assert split_incomplete_escape("abc\x1b[A") == ("abc\x1b[A", "")

    def test_overlong_tail_released(self):
        """Test that a tail longer than the pending limit is not held."""
        text = "\x1b[" + "1" * MAX_PENDING_LENGTH
        assert split_incomplete_escape(text) == (text, "")

    @given(_noisy_text)
    def test_parts_recombine(self, text: str):
        """Property test: the two parts concatenate to the input."""
        complete, pending = split_incomplete_escape(text)
        assert complete + pending == text
        assert len(pending) <= MAX_PENDING_LENGTH
