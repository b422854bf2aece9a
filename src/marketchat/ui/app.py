"""Main Textual TUI application.

Orchestrates the UI components and handles user interaction with the
MessageService.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Input, Static
from textual.worker import Worker

from ..agent import MessageService
from ..config import WalletConfig
from ..errors import append_error_log, fatal_from_exception, is_programming_error
from ..events import ActionEvent, EventChannel, FatalError
from ..stream import ChatRole, LogBuffer
from ..stream.render import format_timestamp
from .callbacks import TUICallback
from .config import NO_RESPONSE_PLACEHOLDER, LogLevel
from .formatting import recent_errors
from .layout import FocusPanel, LayoutState, SidebarView
from .log_handler import LogPanelHandler
from .screens import FatalErrorScreen
from .styles import APP_CSS
from .themes import MARKETCHAT_NIGHT
from .widgets import ChatPanel, PromptInput, SidebarPanel, StatusBar

logger = logging.getLogger(__name__)

HELP_TEXT = "Commands: /clear, /session, /actions, /logs, /error, /help, /exit"

SIDEBAR_COMMANDS = {
    "/session": SidebarView.SESSION,
    "/account": SidebarView.SESSION,
    "/actions": SidebarView.ACTIONS,
    "/logs": SidebarView.LOGS,
}


class MarketChatApp(App):
    """Textual TUI for chatting with the market agent."""

    CSS = APP_CSS
    TITLE = "marketchat"

    BINDINGS = [
        Binding("ctrl+c", "interrupt", "Quit", priority=True),
        Binding("tab", "toggle_focus", "Focus", priority=True),
        Binding("shift+tab", "toggle_sidebar", "Hide", priority=True),
        Binding("escape", "clear_input", "Clear Input", show=False),
        Binding("pageup", "chat_page_older", "Page Up", show=False),
        Binding("pagedown", "chat_page_newer", "Page Down", show=False),
        Binding("ctrl+l", "clear_chat", "Clear Chat"),
    ]

    def __init__(
        self,
        service: MessageService,
        action_events: EventChannel[ActionEvent] | None = None,
        fatal_errors: EventChannel[FatalError] | None = None,
        log_level: str = "info",
        wallet: WalletConfig | None = None,
        execute: bool = False,
        error_log_dir: Path | None = None,
    ) -> None:
        super().__init__()
        self._service = service
        self._action_events = action_events or EventChannel("actions")
        self._fatal_errors = fatal_errors or EventChannel("fatal")
        self._log_level = LogLevel.from_string(log_level)
        self._wallet = wallet
        self._execute = execute
        self._error_log_dir = error_log_dir

        self._layout = LayoutState()
        self._logs = LogBuffer()
        self._log_handler: LogPanelHandler | None = None
        self._unsubscribers: list = []
        self._callback: TUICallback | None = None
        self._current_worker: Worker | None = None
        self._processing = False
        self._total_tokens = 0
        self.fatal_error: FatalError | None = None

    @property
    def agent_name(self) -> str:
        return self._service.character.name

    @property
    def processing(self) -> bool:
        return self._processing

    def compose(self) -> ComposeResult:
        yield StatusBar(id="status-bar", agent_name=self.agent_name, model=self._model_label())
        with Horizontal(id="body"):
            with Vertical(id="chat-column"):
                yield ChatPanel(id="chat-panel", agent_name=self.agent_name)
                with Horizontal(id="prompt-bar"):
                    yield Static("> ", id="prompt-marker")
                    yield PromptInput(id="prompt-input", placeholder="Type a message or /help")
            yield SidebarPanel(id="sidebar", logs=self._logs)

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(MARKETCHAT_NIGHT)
        self.theme = MARKETCHAT_NIGHT.name

        sidebar = self.query_one("#sidebar", SidebarPanel)
        self._log_handler = LogPanelHandler(
            self._logs, level=self._log_level, on_change=sidebar.log_changed, app=self
        )
        self._log_handler.attach()

        self._unsubscribers = [
            self._action_events.subscribe(self._on_action_event),
            self._fatal_errors.subscribe(self._on_fatal_error),
        ]

        self._refresh_session()
        sidebar.set_cards(
            SidebarView.ACTIONS,
            [(name, [self._service.actions.get(name).description]) for name in self._service.actions.names],
        )

        logger.info("Log panel level: %s", LogLevel.name(self._log_level))
        self.query_one("#chat-panel", ChatPanel).append_message(
            ChatRole.ASSISTANT, self._service.character.greeting
        )
        self._apply_layout()

    def on_unmount(self) -> None:
        """Detach from channels and hand logging back."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self._log_handler is not None:
            self._log_handler.detach()
            self._log_handler = None

    def on_resize(self) -> None:
        self._apply_layout()

    def _model_label(self) -> str:
        llm = self._service.llm
        return f"{llm.name}/{llm.model}"

    def _apply_layout(self) -> None:
        columns = self.size.width
        self._layout.normalize(columns)
        geometry = self._layout.geometry(columns)

        chat_column = self.query_one("#chat-column", Vertical)
        sidebar = self.query_one("#sidebar", SidebarPanel)
        chat_panel = self.query_one("#chat-panel", ChatPanel)
        prompt = self.query_one("#prompt-input", PromptInput)

        chat_column.display = geometry.show_chat
        sidebar.display = geometry.show_sidebar
        sidebar.styles.width = geometry.sidebar_width if geometry.show_chat else "1fr"
        sidebar.styles.margin = (0, 0, 0, geometry.gap)

        chat_active = self._layout.focus is FocusPanel.CHAT
        chat_panel.active = chat_active
        sidebar.active = not chat_active
        self.query_one("#prompt-bar").set_class(not chat_active, "-inactive")
        if chat_active:
            prompt.focus()
        else:
            sidebar.focus()

    def _refresh_session(self) -> None:
        llm = self._service.llm
        agent = [
            f"Name: {self.agent_name}",
            f"Provider: {llm.name}",
            f"Model: {llm.model}",
            f"Messages: {len(self.query_one('#chat-panel', ChatPanel).messages)}",
            f"Tokens used: {self._total_tokens:,}",
        ]
        if self._wallet is None:
            wallet = ["Not configured"]
        else:
            wallet = [
                f"Wallet key: {self._wallet.masked_key}",
                f"CLOB API: {self._wallet.clob_api_url}",
                f"API credentials: {'set' if self._wallet.creds else 'not set'}",
            ]
        wallet.append(f"Order execution: {'enabled' if self._execute else 'disabled'}")
        self.query_one("#sidebar", SidebarPanel).set_cards(
            SidebarView.SESSION,
            [("Agent", agent), ("Wallet", wallet)],
            updated_at=format_timestamp(datetime.now()),
        )

    def _system_message(self, text: str) -> None:
        self.query_one("#chat-panel", ChatPanel).append_message(ChatRole.SYSTEM, text)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle user input submission."""
        prompt = self.query_one("#prompt-input", PromptInput)
        value = event.value.strip()
        prompt.value = ""
        if not value:
            return
        prompt.add_to_history(value)

        if value.startswith("/") and self._run_command(value):
            return

        if self._processing:
            self.notify("Still working on the last message", severity="warning", timeout=3)
            return

        self.query_one("#chat-panel", ChatPanel).append_message(ChatRole.USER, value)
        logger.info("User: %s", value)
        self._current_worker = self._run_agent(value)

    def _run_command(self, command: str) -> bool:
        """Run a slash command; False when the text is not a known command."""
        if command in ("/exit", "/quit"):
            self.exit()
        elif command == "/help":
            self._system_message(HELP_TEXT)
        elif command == "/clear":
            self.action_clear_chat()
        elif command == "/error":
            errors = recent_errors(self._logs)
            if errors:
                self._system_message(f"Recent errors ({len(errors)}):\n" + "\n".join(errors))
            else:
                self._system_message("No recent errors found. Fatal errors are written to the error log.")
        elif command in SIDEBAR_COMMANDS:
            self.query_one("#sidebar", SidebarPanel).view = SIDEBAR_COMMANDS[command]
            self._layout.show_sidebar(self.size.width)
            self._apply_layout()
        else:
            return False
        return True

    @work(exclusive=True)
    async def _run_agent(self, text: str) -> None:
        """Run the MessageService as a background async worker."""
        chat = self.query_one("#chat-panel", ChatPanel)
        status = self.query_one("#status-bar", StatusBar)

        callback = TUICallback(chat, app=self, pass_through=self._service.actions.pass_through)
        self._callback = callback
        self._processing = True
        status.processing = True
        callback.start()

        try:
            result = await self._service.handle_message(
                text,
                on_stream_chunk=callback.handle_stream_chunk,
                on_content=callback.handle_content,
            )
            final = callback.finish()
            logger.info("%s: %s", self.agent_name, final or NO_RESPONSE_PLACEHOLDER)
            if result.usage:
                self._total_tokens += result.usage.get("total_tokens", 0)

        except asyncio.CancelledError:
            callback.fail("cancelled")
            logger.warning("Reply cancelled")
            raise
        except Exception as e:
            logger.error("Agent failed: %s", e, exc_info=e)
            callback.fail(e)
            if is_programming_error(e):
                self._fatal_errors.publish(fatal_from_exception(e, context="agent"))
            else:
                self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)
        finally:
            self._processing = False
            status.processing = False
            self._callback = None
            self._refresh_session()

    def _on_action_event(self, event: ActionEvent) -> None:
        if self._callback is not None:
            self._callback.handle_action_event(event)
        else:
            logger.info("action %s %s", event.action, event.status or event.phase)

    def _on_fatal_error(self, fatal: FatalError) -> None:
        self.fatal_error = fatal
        path = append_error_log(fatal, self._error_log_dir)
        logger.error("Fatal error written to %s", path)
        self.push_screen(FatalErrorScreen(fatal, path), lambda _: self.exit(return_code=1))

    def action_toggle_focus(self) -> None:
        self._layout.toggle_focus(self.size.width)
        self._apply_layout()

    def action_toggle_sidebar(self) -> None:
        self._layout.toggle_sidebar(self.size.width)
        self._apply_layout()

    def action_clear_input(self) -> None:
        self.query_one("#prompt-input", PromptInput).value = ""

    def action_chat_page_older(self) -> None:
        self.query_one("#chat-panel", ChatPanel).action_page_older()

    def action_chat_page_newer(self) -> None:
        self.query_one("#chat-panel", ChatPanel).action_page_newer()

    def action_clear_chat(self) -> None:
        """Empty the chat panel and the conversation the model sees."""
        self.query_one("#chat-panel", ChatPanel).clear_messages()
        self._service.clear_history()
        self._refresh_session()

    def action_interrupt(self) -> None:
        """Ctrl+C: stop a running reply, else clear the chat, else quit."""
        if self.fatal_error is not None:
            self.exit(return_code=1)
            return
        if self._current_worker is not None and self._current_worker.is_running:
            self._current_worker.cancel()
            self.notify("Cancelled", severity="warning", timeout=2)
            return
        chat = self.query_one("#chat-panel", ChatPanel)
        if len(chat.messages) > 0:
            self.query_one("#prompt-input", PromptInput).value = ""
            self.action_clear_chat()
            return
        self.exit()


async def run_tui(
    service: MessageService,
    action_events: EventChannel[ActionEvent] | None = None,
    fatal_errors: EventChannel[FatalError] | None = None,
    log_level: str = "info",
    wallet: WalletConfig | None = None,
    execute: bool = False,
) -> int:
    """Run the Textual TUI.

    Args:
        service: Message service driving the agent
        action_events: Channel the service publishes action progress on
        fatal_errors: Channel for unrecoverable errors
        log_level: Minimum level shown in the log view (debug/info/warning/error)
        wallet: Validated wallet settings, shown in the session view
        execute: Whether order execution was enabled

    Returns:
        Process exit code
    """
    app = MarketChatApp(
        service=service,
        action_events=action_events,
        fatal_errors=fatal_errors,
        log_level=log_level,
        wallet=wallet,
        execute=execute,
    )
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        return 130
    return app.return_code or 0
