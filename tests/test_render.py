"""Unit tests for wrapping, message storage, display lines and scrolling."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from marketchat.stream import (
    ChatLog,
    ChatRole,
    LogBuffer,
    ScrollState,
    build_card,
    build_render_lines,
    card_inner_width,
    is_rule_line,
    scroll_window,
    truncate_text,
    wrap_text,
)
from marketchat.stream.render import format_time


class TestWrapText:
    """Tests for wrap_text."""

    def test_word_wrapping(self):
        """Test greedy packing on spaces."""
        assert wrap_text("buy yes shares now", 9) == ["buy yes", "shares", "now"]

    def test_long_word_is_cut(self):
        """Test that a word wider than the line is split."""
        assert wrap_text("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_paragraphs_wrap_separately(self):
        """Test that newlines start new lines, blank ones included."""
        assert wrap_text("a\n\nb", 10) == ["a", "", "b"]

    def test_empty_and_disabled(self):
        """Test empty text and non-positive widths."""
        assert wrap_text("", 10) == [""]
        assert wrap_text("no wrap here", 0) == ["no wrap here"]

    @given(st.text(alphabet=st.sampled_from(list("ab \n")), max_size=80), st.integers(min_value=1, max_value=20))
    def test_lines_fit_width(self, text: str, width: int):
        """Property test: no line is wider than the width."""
        assert all(len(line) <= width for line in wrap_text(text, width))

    @given(st.text(alphabet=st.sampled_from(list("abc")), min_size=1, max_size=80), st.integers(min_value=1, max_value=20))
    def test_single_word_keeps_every_character(self, text: str, width: int):
        """Property test: cutting a word loses nothing."""
        assert "".join(wrap_text(text, width)) == text


class TestTruncateText:
    """Tests for truncate_text."""

    @pytest.mark.parametrize(
        "text,width,expected",
        [("hello world", 8, "hello..."), ("hello", 3, "hel"), ("hi", 5, "hi"), ("hi", 0, "")],
    )
    def test_truncate(self, text: str, width: int, expected: str):
        """Test clipping with and without the marker."""
        assert truncate_text(text, width) == expected


class TestChatLog:
    """Tests for ChatLog."""

    def test_append_update_clear(self):
        """Test the three mutations and the version counter."""
        log = ChatLog()
        first = log.append(ChatRole.USER, "hi")
        second = log.append("assistant", "(processing...)")
        assert first.id != second.id
        assert len(log) == 2

        version = log.version
        assert log.update(second.id, "Hello!")
        assert log.get(second.id).content == "Hello!"
        assert log.version == version + 1
        assert [m.id for m in log] == [first.id, second.id]

        assert not log.update("missing", "x")
        log.clear()
        assert len(log) == 0
        assert log.get(first.id) is None

    def test_last_by_role(self):
        """Test finding the newest message of a role."""
        log = ChatLog()
        log.append(ChatRole.USER, "one")
        log.append(ChatRole.SYSTEM, "note")
        assert log.last(ChatRole.USER).content == "one"
        assert log.last().content == "note"


class TestLogBuffer:
    """Tests for LogBuffer."""

    def test_drops_oldest_and_clips(self):
        """Test the entry and length bounds."""
        buffer = LogBuffer(max_entries=2, max_length=5)
        for line in ["one", "two", "three-long"]:
            buffer.append(line)
        assert buffer.lines == ["two", "three…"]


class TestBuildRenderLines:
    """Tests for build_render_lines."""

    def test_user_and_assistant_messages(self):
        """Test headers, indentation and colors."""
        log = ChatLog()
        user = log.append(ChatRole.USER, "show my wallet")
        reply = log.append(ChatRole.ASSISTANT, "Sure")
        lines = build_render_lines(log, 40, agent_name="Eliza")

        assert lines[0].key == f"{user.id}:header"
        assert lines[0].text == f"You: {format_time(user.timestamp)}"
        assert lines[0].bold and lines[0].color == "cyan"
        assert lines[1].text == "  show my wallet"
        assert lines[2].text.startswith("Eliza: ")
        assert lines[2].color == "green"
        assert lines[3].key == f"{reply.id}:body:0"

    def test_system_message(self):
        """Test that system lines are dim, italic and unindented."""
        log = ChatLog()
        note = log.append(ChatRole.SYSTEM, "Error: boom")
        (line,) = build_render_lines(log, 40)
        assert line.key == f"{note.id}:system:0"
        assert line.text == "Error: boom"
        assert line.dim and line.italic

    def test_body_wraps_within_indent(self):
        """Test that body lines fit the width including the indent."""
        log = ChatLog()
        log.append(ChatRole.ASSISTANT, "word " * 20)
        lines = build_render_lines(log, 20)
        assert all(len(line.text) <= 20 for line in lines[1:])

    def test_rule_lines_are_not_wrapped(self):
        """Test that card borders keep their width."""
        log = ChatLog()
        message = log.append(ChatRole.ASSISTANT, "-" * 30 + "\nbody")
        lines = build_render_lines(log, 20)
        assert lines[1].key == f"{message.id}:card:0"
        assert lines[1].text == "-" * 30
        assert lines[2].text == "  body"

    def test_keys_stable_across_updates(self):
        """Test that editing content keeps line keys."""
        log = ChatLog()
        message = log.append(ChatRole.ASSISTANT, "(processing...)")
        before = [line.key for line in build_render_lines(log, 40)]
        log.update(message.id, "Done")
        after = [line.key for line in build_render_lines(log, 40)]
        assert before == after


class TestCards:
    """Tests for build_card and rule detection."""

    def test_card_layout(self):
        """Test borders, divider and padding."""
        card = build_card("Wallet", ["key: 0xab...cd"], 30).split("\n")
        width = len(card[0])
        assert card[0] == "-" * width
        assert card[1] == "Wallet".ljust(width)
        assert card[2] == "=" * width
        assert card[3] == "key: 0xab...cd".ljust(width)
        assert card[-1] == "-" * width
        assert all(len(row) == width for row in card)

    def test_card_inner_width(self):
        """Test the minimum and the panel margins."""
        assert card_inner_width(40) == 34
        assert card_inner_width(5) == 12

    def test_is_rule_line(self):
        """Test rule detection."""
        assert is_rule_line("-----")
        assert is_rule_line("====  ")
        assert not is_rule_line("-=-=")
        assert not is_rule_line("")


class TestScrollWindow:
    """Tests for scroll_window and ScrollState."""

    def test_bottom_anchored(self):
        """Test the newest lines at offset zero."""
        window = scroll_window(50, 10, 0)
        assert (window.start, window.end, window.max_scroll) == (40, 50, 40)
        assert window.at_bottom

    def test_offset_clamped_at_top(self):
        """Test that scrolling past the top stops at the first line."""
        window = scroll_window(50, 10, 100)
        assert (window.offset, window.start, window.end) == (40, 0, 10)

    def test_short_content_and_negatives(self):
        """Test fewer lines than rows and negative inputs."""
        assert scroll_window(5, 10, 3).offset == 0
        assert scroll_window(5, 10, 3).slice(list(range(5))) == [0, 1, 2, 3, 4]
        window = scroll_window(-1, -1, -1)
        assert (window.offset, window.start, window.end) == (0, 0, 0)

    @given(st.integers(-5, 300), st.integers(-5, 50), st.integers(-50, 400))
    def test_window_invariants(self, total: int, height: int, offset: int):
        """Property test: the slice is in bounds and never taller than the view."""
        window = scroll_window(total, height, offset)
        assert 0 <= window.offset <= window.max_scroll
        assert 0 <= window.start <= window.end <= max(0, total)
        assert window.end - window.start <= max(0, height)

    def test_scroll_state(self):
        """Test paging and re-clamping as content changes."""
        state = ScrollState(page_size=10)
        assert state.page_up(25) == 10
        assert state.page_up(25) == 20
        assert state.page_up(25) == 25
        assert state.page_down(25) == 15
        assert state.window(12, 10).offset == 2
        state.stick_to_bottom()
        assert state.offset == 0
