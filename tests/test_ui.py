"""Tests for the TUI: layout rules, formatting, the log panel and the app."""
import logging
import re
from datetime import datetime

import pytest

from marketchat.agent import AgentContent, MessageService
from marketchat.events import ActionEvent
from marketchat.stream import ChatLog, ChatMessage, ChatRole, LogBuffer
from marketchat.ui import (
    ChatPanel,
    FocusPanel,
    LayoutMode,
    LayoutState,
    LogLevel,
    LogPanelHandler,
    MarketChatApp,
    PromptInput,
    SidebarView,
    TUICallback,
)
from marketchat.ui.app import HELP_TEXT
from marketchat.ui.config import NO_RESPONSE_PLACEHOLDER, PROCESSING_PLACEHOLDER
from marketchat.ui.formatting import (
    card_line_colors,
    clean_input_value,
    format_log_line,
    log_line_color,
    recent_errors,
    sidebar_header,
    status_text,
)

from conftest import FakeLLMProvider


class FakeChat:
    """The part of ChatPanel a TUICallback talks to."""

    def __init__(self) -> None:
        self.messages = ChatLog()

    def append_message(self, role: ChatRole | str, content: str) -> ChatMessage:
        return self.messages.append(role, content)

    def update_message(self, message_id: str, content: str) -> bool:
        return self.messages.update(message_id, content)

    def contents(self) -> list[tuple[str, str]]:
        return [(m.role.value, m.content) for m in self.messages]


class TestLogLevel:
    """Tests for LogLevel."""

    def test_from_string(self):
        """Test names, the warn alias and the fallback."""
        assert LogLevel.from_string("DEBUG") == logging.DEBUG
        assert LogLevel.from_string("warn") == LogLevel.WARNING
        assert LogLevel.from_string("verbose") == LogLevel.INFO

    def test_names_and_choices(self):
        """Test level names."""
        assert LogLevel.name(LogLevel.ERROR) == "ERROR"
        assert LogLevel.name(5) == "UNKNOWN"
        assert LogLevel.choices() == ["debug", "info", "warning", "error"]


class TestLayoutState:
    """Tests for LayoutState."""

    def test_wide_split_geometry(self):
        """Test both panels side by side on a wide terminal."""
        geometry = LayoutState().geometry(130)
        assert geometry.show_chat and geometry.show_sidebar
        assert geometry.sidebar_width == 42
        assert geometry.gap == 1
        assert geometry.chat_width == 87

    def test_narrow_collapses_to_focused_panel(self):
        """Test that a split on a narrow terminal shows one panel."""
        layout = LayoutState()
        layout.normalize(80)
        assert layout.mode is LayoutMode.CHAT
        geometry = layout.geometry(80)
        assert geometry.show_chat and not geometry.show_sidebar
        assert geometry.chat_width == 80

    def test_tab_on_narrow_terminal_swaps_panels(self):
        """Test that Tab switches between full-width panels."""
        layout = LayoutState(LayoutMode.CHAT)
        layout.toggle_focus(80)
        assert (layout.mode, layout.focus) == (LayoutMode.SIDEBAR, FocusPanel.SIDEBAR)
        geometry = layout.geometry(80)
        assert not geometry.show_chat and geometry.sidebar_width == 80

        layout.toggle_focus(80)
        assert (layout.mode, layout.focus) == (LayoutMode.CHAT, FocusPanel.CHAT)

    def test_tab_in_split_moves_focus(self):
        """Test that Tab keeps both panels on a wide terminal."""
        layout = LayoutState()
        layout.toggle_focus(120)
        assert (layout.mode, layout.focus) == (LayoutMode.SPLIT, FocusPanel.SIDEBAR)

    def test_shift_tab_toggles_sidebar(self):
        """Test hiding and restoring the sidebar."""
        layout = LayoutState(focus=FocusPanel.SIDEBAR)
        layout.toggle_sidebar(120)
        assert (layout.mode, layout.focus) == (LayoutMode.CHAT, FocusPanel.CHAT)
        assert not layout.geometry(120).show_sidebar
        layout.toggle_sidebar(120)
        assert layout.mode is LayoutMode.SPLIT

    def test_show_sidebar(self):
        """Test opening the sidebar from a slash command."""
        layout = LayoutState(LayoutMode.CHAT)
        layout.show_sidebar(80)
        assert (layout.mode, layout.focus) == (LayoutMode.SIDEBAR, FocusPanel.SIDEBAR)
        layout.show_sidebar(120)
        assert layout.mode is LayoutMode.SPLIT

    def test_sidebar_views_cycle(self):
        """Test the Enter cycle and titles."""
        assert SidebarView.SESSION.next() is SidebarView.ACTIONS
        assert SidebarView.LOGS.next() is SidebarView.SESSION
        assert SidebarView.LOGS.title == "Agent Logs"


class TestFormatting:
    """Tests for display string helpers."""

    def test_log_line_and_color(self):
        """Test the log line format and its level color."""
        line = format_log_line(LogLevel.WARNING, "agent", "slow reply", datetime(2026, 1, 2, 3, 4, 5))
        assert line == "03:04:05 WARNING [agent] slow reply"
        assert log_line_color(line) == "yellow"
        info = format_log_line(LogLevel.INFO, "ui", "ready", datetime(2026, 1, 2, 3, 4, 5))
        assert info == "03:04:05 INFO    [ui] ready"
        assert log_line_color(info) == "cyan"
        assert log_line_color("No logs yet.") is None

    def test_recent_errors(self):
        """Test filtering and the limit."""
        lines = ["ok", "Error: first", "fine", "request error again"]
        assert recent_errors(lines) == ["Error: first", "request error again"]
        assert recent_errors(lines, limit=1) == ["request error again"]

    def test_clean_input_value(self):
        """Test line folding, escape removal and mouse rejection."""
        assert clean_input_value("buy\n  yes", "") == "buy yes"
        assert clean_input_value("a\x1b[31mb", "") == "ab"
        assert clean_input_value("abc\x1b[<64;10;5M", "abc") == "abc"
        assert clean_input_value("abc[<65;10;5M", "abc") == "abc"

    def test_status_text(self):
        """Test the idle and busy status lines."""
        assert status_text("Eliza", "openai/gpt-5", False, 200).startswith("Eliza | openai/gpt-5 | Idle | Tab")
        assert "| ... |" in status_text("Eliza", "m", True, 200)
        assert len(status_text("Eliza", "openai/gpt-5", False, 20)) <= 18

    def test_sidebar_header(self):
        """Test the update time and scroll indicator."""
        assert sidebar_header("Session", 0) == "Session"
        assert sidebar_header("Session", 3, "12:00:01") == "Session (12:00:01) ↑3"

    def test_card_line_colors(self):
        """Test rule, title, URL and body colors."""
        lines = ["-----", "Wallet", "=====", "https://clob.example.com", "key: 0xab", "-----"]
        colors = [(color, rule) for _, color, rule in card_line_colors(lines)]
        assert colors == [
            ("gray", True),
            ("yellow", False),
            ("gray", True),
            ("blue", False),
            ("white", False),
            ("gray", True),
        ]


class TestLogPanelHandler:
    """Tests for LogPanelHandler."""

    def test_records_reach_buffer(self):
        """Test formatting, level filtering and change notification."""
        buffer = LogBuffer()
        changes: list[int] = []
        handler = LogPanelHandler(buffer, level=LogLevel.INFO, on_change=lambda: changes.append(1))
        name = "marketchat.panel_test"
        handler.attach(name)
        try:
            log = logging.getLogger(name)
            log.info("hello %s", "there")
            log.debug("hidden")
        finally:
            handler.detach(name)

        assert len(buffer) == 1
        assert re.match(r"^\d\d:\d\d:\d\d INFO    \[panel_test\] hello there$", buffer.lines[0])
        assert changes == [1]

    def test_detach_restores_logger(self):
        """Test that detaching hands the logger back unchanged."""
        name = "marketchat.panel_restore"
        log = logging.getLogger(name)
        log.setLevel(logging.WARNING)
        handler = LogPanelHandler(LogBuffer(), level=LogLevel.DEBUG)

        handler.attach(name)
        assert log.level == logging.DEBUG
        assert not log.propagate

        handler.detach(name)
        assert log.level == logging.WARNING
        assert log.propagate
        assert handler not in log.handlers

    def test_exception_and_newlines_flattened(self):
        """Test that a record becomes one display row."""
        buffer = LogBuffer()
        handler = LogPanelHandler(buffer)
        record = logging.LogRecord("marketchat.agent.service", logging.ERROR, __file__, 1,
                                   "first\nsecond", None, (ValueError, ValueError("bad"), None))
        handler.emit(record)
        assert "[agent] first second: ValueError('bad')" in buffer.lines[0]


class TestTUICallback:
    """Tests for TUICallback against a stand-in chat panel."""

    def test_streamed_reply(self):
        """Test the placeholder, thought, actions and reply text."""
        chat = FakeChat()
        callback = TUICallback(chat, pass_through=["REPLY"])
        callback.start()
        assert chat.contents() == [("assistant", PROCESSING_PLACEHOLDER)]

        callback.handle_stream_chunk("<thought>check odds</thought><actions>REPLY</actions>")
        callback.handle_stream_chunk("<text>Yes is at 42c.</text>")
        assert callback.finish() == "Yes is at 42c."

        assert chat.contents() == [
            ("assistant", "Yes is at 42c."),
            ("system", "Thinking: check odds"),
            ("system", "Actions: REPLY"),
        ]

    def test_non_pass_through_reply_uses_parsed_text(self):
        """Test that an action reply is shown from the parsed content."""
        chat = FakeChat()
        callback = TUICallback(chat, pass_through=["REPLY"])
        callback.start()
        callback.handle_stream_chunk("<actions>REPLY, WALLET_STATUS</actions><text>Checking.</text>")
        assert chat.messages.get(callback.reply_id).content == PROCESSING_PLACEHOLDER

        callback.handle_content(AgentContent(text=" Checking. ", actions=["REPLY", "WALLET_STATUS"]))
        assert callback.finish() == "Checking."
        assert chat.messages.get(callback.reply_id).content == "Checking."

    def test_action_events_and_results(self):
        """Test the calling line, its final status and the action result."""
        chat = FakeChat()
        callback = TUICallback(chat)
        callback.handle_action_event(ActionEvent("WALLET_STATUS", "WALLET_STATUS:1", "started"))
        assert chat.contents() == [("system", "calling WALLET_STATUS...")]

        callback.handle_action_event(ActionEvent("WALLET_STATUS", "WALLET_STATUS:1", "completed", "completed"))
        callback.handle_content(AgentContent(text="Wallet key: 0xabab...abab", source="WALLET_STATUS"))
        assert chat.contents() == [
            ("system", "action WALLET_STATUS completed"),
            ("assistant", "Wallet key: 0xabab...abab"),
        ]

    def test_empty_reply(self):
        """Test the placeholder for a reply with no text."""
        chat = FakeChat()
        callback = TUICallback(chat)
        callback.start()
        assert callback.finish() == ""
        assert chat.contents() == [("assistant", NO_RESPONSE_PLACEHOLDER)]

    def test_fail(self):
        """Test that an error closes the placeholder and is reported."""
        chat = FakeChat()
        callback = TUICallback(chat)
        callback.start()
        callback.fail(ConnectionError("network down"))
        assert chat.contents() == [
            ("assistant", NO_RESPONSE_PLACEHOLDER),
            ("system", "Error: network down"),
        ]


class TestMarketChatApp:
    """Tests for the running app."""

    @pytest.mark.asyncio
    async def test_greeting_and_reply(self):
        """Test the greeting and one streamed exchange."""
        app = MarketChatApp(service=MessageService(FakeLLMProvider()))
        async with app.run_test(size=(120, 40)) as pilot:
            chat = app.query_one("#chat-panel", ChatPanel)
            assert chat.messages.last(ChatRole.ASSISTANT).content == app._service.character.greeting

            app.query_one("#prompt-input", PromptInput).value = "hello"
            await pilot.press("enter")
            await app.workers.wait_for_complete()
            await pilot.pause()

            assert chat.messages.last(ChatRole.USER).content == "hello"
            assert chat.messages.last(ChatRole.ASSISTANT).content == "Hello!"
            assert not app.processing

    @pytest.mark.asyncio
    async def test_help_command_and_interrupt(self):
        """Test /help and that Ctrl+C clears the chat when idle."""
        app = MarketChatApp(service=MessageService(FakeLLMProvider()))
        async with app.run_test(size=(120, 40)) as pilot:
            chat = app.query_one("#chat-panel", ChatPanel)
            app.query_one("#prompt-input", PromptInput).value = "/help"
            await pilot.press("enter")
            await pilot.pause()
            assert chat.messages.last().content == HELP_TEXT

            await pilot.press("ctrl+c")
            await pilot.pause()
            assert len(chat.messages) == 0

    @pytest.mark.asyncio
    async def test_prompt_history_keys(self):
        """Test that Up recalls a sent line, Down restores the draft and Ctrl+Up is ignored."""
        app = MarketChatApp(service=MessageService(FakeLLMProvider()))
        async with app.run_test(size=(120, 40)) as pilot:
            prompt = app.query_one("#prompt-input", PromptInput)
            prompt.value = "/help"
            await pilot.press("enter")
            await pilot.pause()
            assert prompt.value == ""

            await pilot.press("ctrl+up")
            await pilot.pause()
            assert prompt.value == ""

            await pilot.press("up")
            await pilot.pause()
            assert prompt.value == "/help"

            await pilot.press("down")
            await pilot.pause()
            assert prompt.value == ""

    @pytest.mark.asyncio
    async def test_interrupt_clears_conversation_history(self):
        """Test that Ctrl+C after a reply also drops the agent's history."""
        app = MarketChatApp(service=MessageService(FakeLLMProvider()))
        async with app.run_test(size=(120, 40)) as pilot:
            chat = app.query_one("#chat-panel", ChatPanel)
            app.query_one("#prompt-input", PromptInput).value = "hello"
            await pilot.press("enter")
            await app.workers.wait_for_complete()
            await pilot.pause()
            assert app._service.history

            await pilot.press("ctrl+c")
            await pilot.pause()
            assert len(chat.messages) == 0
            assert app._service.history == []
