"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Line-windowed rendering of chat and sidebar content
- Scroll offsets and their keyboard and wheel bindings
- Input history and cleanup of typed or pasted text
"""

from rich.text import Text
from textual import events
from textual.binding import Binding
from textual.reactive import reactive
from textual.widget import Widget
from textual.widgets import Input, Static

from ..stream import (
    ChatLog,
    ChatMessage,
    ChatRole,
    LogBuffer,
    RenderLine,
    ScrollState,
    build_card,
    build_render_lines,
    card_inner_width,
    parse_key,
    wrap_text,
)
from ..stream.render import DEFAULT_AGENT_NAME
from .config import INPUT_HISTORY_MAX_SIZE, MIN_CONTENT_WIDTH, SCROLL_LINE_STEP, SCROLL_PAGE_SIZE
from .formatting import card_line_colors, clean_input_value, log_line_color, sidebar_header, status_text
from .layout import SidebarView


class LineView(Widget):
    """Shows the bottom-anchored window of a list of display lines.

    Subclasses produce the lines for a given width; this class owns the
    scroll offset, measured in lines back from the newest line.
    """

    active: reactive[bool] = reactive(True)

    BINDINGS = [
        Binding("up", "older", "Up", show=False),
        Binding("down", "newer", "Down", show=False),
        Binding("pageup", "page_older", "Page Up", show=False),
        Binding("pagedown", "page_newer", "Page Down", show=False),
    ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._scroll = ScrollState(SCROLL_PAGE_SIZE)
        self._max_scroll = 0

    @property
    def scroll_offset_lines(self) -> int:
        return self._scroll.offset

    @property
    def max_scroll_lines(self) -> int:
        """Largest offset seen at the last render."""
        return self._max_scroll

    def build_lines(self, width: int) -> list[RenderLine]:
        raise NotImplementedError

    def header_text(self, offset: int) -> str | None:
        """First row above the lines, or None for no header."""
        return None

    def render(self) -> Text:
        width = max(MIN_CONTENT_WIDTH, self.size.width)
        height = self.size.height
        lines = self.build_lines(width)

        header_probe = self.header_text(0)
        body_height = max(0, height - 1) if header_probe is not None else height
        window = self._scroll.window(len(lines), body_height)
        self._max_scroll = window.max_scroll

        rows: list[Text] = []
        header = self.header_text(window.offset)
        if header is not None:
            rows.append(Text(header, style="bold" if self.active else "bold dim"))
        for line in window.slice(lines)[:body_height]:
            style = line.style
            if not self.active and not line.dim:
                style = f"{style} dim".strip()
            rows.append(Text(line.text, style=style))
        return Text("\n", no_wrap=True, overflow="crop").join(rows)

    def scroll_older(self, lines: int) -> None:
        self._scroll.scroll_by(lines, self._max_scroll)
        self.refresh()

    def scroll_newer(self, lines: int) -> None:
        self._scroll.scroll_by(-lines, self._max_scroll)
        self.refresh()

    def stick_to_bottom(self) -> None:
        self._scroll.stick_to_bottom()
        self.refresh()

    def action_older(self) -> None:
        self.scroll_older(SCROLL_LINE_STEP)

    def action_newer(self) -> None:
        self.scroll_newer(SCROLL_LINE_STEP)

    def action_page_older(self) -> None:
        self.scroll_older(SCROLL_PAGE_SIZE)

    def action_page_newer(self) -> None:
        self.scroll_newer(SCROLL_PAGE_SIZE)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.scroll_older(SCROLL_LINE_STEP)

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.scroll_newer(SCROLL_LINE_STEP)


class ChatPanel(LineView):
    """Conversation view backed by a ChatLog.

    New messages snap the view back to the bottom; in-place updates keep
    the reader's position.
    """

    def __init__(self, *args, agent_name: str = DEFAULT_AGENT_NAME, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.agent_name = agent_name
        self.messages = ChatLog()
        self._cache: tuple[int, int, list[RenderLine]] | None = None

    def append_message(self, role: ChatRole | str, content: str) -> ChatMessage:
        message = self.messages.append(role, content)
        self.stick_to_bottom()
        return message

    def update_message(self, message_id: str, content: str) -> bool:
        updated = self.messages.update(message_id, content)
        if updated:
            self.refresh()
        return updated

    def clear_messages(self) -> None:
        self.messages.clear()
        self.stick_to_bottom()

    def build_lines(self, width: int) -> list[RenderLine]:
        # Re-wrapping is skipped while neither the messages nor the width changed
        version = self.messages.version
        if self._cache is None or self._cache[:2] != (version, width):
            lines = build_render_lines(self.messages, width, self.agent_name)
            self._cache = (version, width, lines)
        return self._cache[2]


class SidebarPanel(LineView, can_focus=True):
    """Side panel cycling through session info, actions and logs."""

    BINDINGS = [
        Binding("enter", "next_view", "Next View", show=False),
    ]

    view: reactive[SidebarView] = reactive(SidebarView.SESSION)

    def __init__(self, *args, logs: LogBuffer | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.logs = logs if logs is not None else LogBuffer()
        self._cards: dict[SidebarView, list[tuple[str, list[str]]]] = {}
        self._updated_at: dict[SidebarView, str] = {}

    def set_cards(self, view: SidebarView, cards: list[tuple[str, list[str]]], updated_at: str = "") -> None:
        """Replace the cards shown by a card view."""
        self._cards[view] = cards
        self._updated_at[view] = updated_at
        if view is self.view:
            self.refresh()

    def log_changed(self) -> None:
        if self.view is SidebarView.LOGS:
            self.refresh()

    def action_next_view(self) -> None:
        self.view = self.view.next()

    def watch_view(self, view: SidebarView) -> None:
        self.stick_to_bottom()

    def header_text(self, offset: int) -> str:
        return sidebar_header(self.view.title, offset, self._updated_at.get(self.view, ""))

    def build_lines(self, width: int) -> list[RenderLine]:
        if self.view is SidebarView.LOGS:
            return self._log_lines(width)
        return self._card_lines(width)

    def _log_lines(self, width: int) -> list[RenderLine]:
        entries = self.logs.lines or ["No logs yet."]
        lines: list[RenderLine] = []
        for index, entry in enumerate(entries):
            color = log_line_color(entry)
            for row, text in enumerate(wrap_text(entry, width)):
                lines.append(RenderLine(key=f"log:{index}:{row}", text=text, color=color))
        return lines

    def _card_lines(self, width: int) -> list[RenderLine]:
        cards = self._cards.get(self.view)
        if not cards:
            return [RenderLine(key=f"body:{i}", text=t) for i, t in enumerate(wrap_text("No data.", width))]

        inner = card_inner_width(self.outer_size.width)
        text = "\n\n".join(build_card(title, body, inner) for title, body in cards)
        return [
            RenderLine(key=f"body:{index}", text=line, color=color, dim=rule)
            for index, (line, color, rule) in enumerate(card_line_colors(text.split("\n")))
        ]


class PromptInput(Input):
    """Single-line prompt with command history.

    Use Up/Down arrow keys to navigate through history.
    Multi-line pastes are folded onto one line, and edits that carry mouse
    reports or other control sequences are cleaned before they stick.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._current_input: str = ""
        self._clean_value: str = ""

    def _on_paste(self, event: events.Paste) -> None:
        if event.text:
            self.insert_text_at_cursor(clean_input_value(event.text, ""))
        event.prevent_default()
        event.stop()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input is not self:
            return
        cleaned = clean_input_value(event.value, self._clean_value)
        self._clean_value = cleaned
        if cleaned != event.value:
            event.stop()
            self.value = cleaned
            self.cursor_position = len(cleaned)

    def _on_key(self, event: events.Key) -> None:
        key = parse_key(event.key, event.character)
        if key.modifiers:
            return
        if key.name == "up":
            if self._history:
                if self._history_index == -1:
                    self._current_input = self.value
                    self._history_index = len(self._history) - 1
                elif self._history_index > 0:
                    self._history_index -= 1
                self.value = self._history[self._history_index]
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif key.name == "down":
            if self._history_index != -1:
                if self._history_index < len(self._history) - 1:
                    self._history_index += 1
                    self.value = self._history[self._history_index]
                else:
                    self._history_index = -1
                    self.value = self._current_input
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()

    def add_to_history(self, command: str) -> None:
        """Add a command to history."""
        if command and (not self._history or self._history[-1] != command):
            self._history.append(command)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        self._current_input = ""


class StatusBar(Static):
    """One-row status line: agent, model, busy state and key hints."""

    processing: reactive[bool] = reactive(False)

    def __init__(self, *args, agent_name: str = DEFAULT_AGENT_NAME, model: str = "", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.agent_name = agent_name
        self.model = model

    def render(self) -> Text:
        return Text(status_text(self.agent_name, self.model, self.processing, self.size.width + 2))
