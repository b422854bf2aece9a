"""Callback interface for MessageService integration.

Hides the details of how the TUI receives updates from the agent: which
chat messages a reply creates and how they change as chunks, parsed
content and action events arrive.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any

from ..agent import AgentContent
from ..events import ActionEvent
from ..stream import ChatRole, ResponseStream, StreamUpdate
from .config import NO_RESPONSE_PLACEHOLDER, PROCESSING_PLACEHOLDER

if TYPE_CHECKING:
    from textual.app import App

    from .widgets import ChatPanel

logger = logging.getLogger(__name__)


class TUICallback:
    """Callback handler for one agent reply.

    Usage:
        callback = TUICallback(chat, app=self)
        callback.start()
        await service.handle_message(text, callback.handle_stream_chunk, callback.handle_content)
        final = callback.finish()
    """

    def __init__(
        self,
        chat: "ChatPanel",
        app: "App | None" = None,
        pass_through: list[str] | None = None,
    ) -> None:
        self.chat = chat
        self.app = app
        self._stream = ResponseStream(pass_through or ["REPLY"])
        self._reply_id: str | None = None
        self._thought_id: str | None = None
        self._actions_id: str | None = None
        self._action_messages: dict[str, str] = {}
        self._callback_text = ""

    @property
    def reply_id(self) -> str | None:
        return self._reply_id

    def _call_thread_safe(self, func: Any, *args: Any, **kwargs: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args, **kwargs)
        else:
            func(*args, **kwargs)

    def _show(self, message_id: str | None, role: ChatRole, content: str) -> str:
        """Update a message, or append it on first use; returns its id."""
        if message_id is not None and self.chat.update_message(message_id, content):
            return message_id
        return self.chat.append_message(role, content).id

    def start(self) -> None:
        """Add the placeholder the reply will stream into."""
        self._stream.reset()
        self._reply_id = self.chat.append_message(ChatRole.ASSISTANT, PROCESSING_PLACEHOLDER).id

    def handle_stream_chunk(self, chunk: str) -> None:
        """Feed one raw chunk of the model's reply."""
        self._call_thread_safe(self._apply, self._stream.on_chunk(chunk))

    def handle_content(self, content: AgentContent) -> None:
        """Show parsed reply content or an action's result."""
        self._call_thread_safe(self._apply_content, content)

    def handle_action_event(self, event: ActionEvent) -> None:
        """Show 'calling X...' and turn it into 'action X <status>' when done."""
        self._call_thread_safe(self._apply_action_event, event)

    def finish(self) -> str:
        """Settle the reply message once the service returns.

        Returns:
            The final reply text; empty when the model said nothing
        """
        self._apply(self._stream.end_of_stream())
        final = self._stream.finalize(self._callback_text)
        if self._reply_id is not None:
            self.chat.update_message(self._reply_id, final or NO_RESPONSE_PLACEHOLDER)
        return final

    def fail(self, error: BaseException | str) -> None:
        """Report an error in the chat and close the reply placeholder."""
        if self._reply_id is not None:
            shown = self._stream.reply_text.strip() or NO_RESPONSE_PLACEHOLDER
            self.chat.update_message(self._reply_id, shown)
        self.chat.append_message(ChatRole.SYSTEM, f"Error: {error}")

    def _apply(self, update: StreamUpdate) -> None:
        if update.thought.strip():
            self._thought_id = self._show(self._thought_id, ChatRole.SYSTEM, f"Thinking: {update.thought.strip()}")
        if update.actions:
            self._show_actions(update.actions)
        if update.has_reply and self._reply_id is not None:
            self.chat.update_message(self._reply_id, update.reply_text)

    def _show_actions(self, actions: list[str]) -> None:
        self._actions_id = self._show(self._actions_id, ChatRole.SYSTEM, f"Actions: {', '.join(actions)}")

    def _apply_content(self, content: AgentContent) -> None:
        if content.source != "model":
            if content.has_text:
                self.chat.append_message(ChatRole.ASSISTANT, content.text.strip())
                logger.info("Action result from %s: %s", content.source, content.text.strip()[:100])
            return
        if content.has_text:
            self._callback_text = content.text.strip()
        if content.actions:
            self._show_actions(content.actions)

    def _apply_action_event(self, event: ActionEvent) -> None:
        if event.started:
            self._action_messages[event.action_id] = self.chat.append_message(
                ChatRole.SYSTEM, f"calling {event.action}..."
            ).id
            logger.info("calling %s...", event.action)
            return

        status = event.status or "completed"
        text = f"action {event.action} {status}"
        self._show(self._action_messages.pop(event.action_id, None), ChatRole.SYSTEM, text)
        logger.info(text)
