"""Message service: one user message in, one agent reply out.

Hides the conversation loop: prompt assembly, history, streaming, reply
parsing and action dispatch. Streamed chunks are passed on raw; turning
them into display text is the caller's concern.
"""

import logging
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from ..events import ActionEvent, EventChannel
from ..llm import LLMProvider, PromptMessage
from ..prompts import get_system_prompt
from .actions import ActionContext, ActionOutcome, ActionRegistry
from .character import ELIZA, Character
from .content import AgentContent, parse_response

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 20


@dataclass
class MessageResult:
    """Everything produced while handling one message."""

    content: AgentContent
    raw: str
    usage: dict[str, int] | None = None
    outcomes: list[ActionOutcome] = field(default_factory=list)

    @property
    def action_contents(self) -> list[AgentContent]:
        return [outcome.content for outcome in self.outcomes if outcome.content is not None]


def build_system_prompt(character: Character, actions: ActionRegistry) -> str:
    return get_system_prompt(
        name=character.name,
        bio="\n".join(character.bio),
        adjectives=", ".join(character.adjectives),
        style="\n".join(f"- {rule}" for rule in (*character.style_all, *character.style_chat)),
        actions=actions.describe(),
    )


class MessageService:
    """Runs the agent for chat messages.

    Hidden design decisions:
    - System prompt layout and the tagged reply format
    - How much history is replayed to the model
    - Which actions publish progress events

    Usage:
        service = MessageService(llm, action_events=channel)
        result = await service.handle_message("hi", on_stream_chunk=print)
    """

    def __init__(
        self,
        llm: LLMProvider,
        character: Character = ELIZA,
        actions: ActionRegistry | None = None,
        action_events: EventChannel[ActionEvent] | None = None,
        max_history: int = DEFAULT_MAX_HISTORY,
        temperature: float | None = None,
    ) -> None:
        self._llm = llm
        self._character = character
        self._actions = actions or ActionRegistry()
        self._action_events = action_events
        self._temperature = temperature
        self._history: deque[PromptMessage] = deque(maxlen=max_history)
        self._system_prompt = build_system_prompt(character, self._actions)

    @property
    def llm(self) -> LLMProvider:
        return self._llm

    @property
    def character(self) -> Character:
        return self._character

    @property
    def actions(self) -> ActionRegistry:
        return self._actions

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def history(self) -> list[PromptMessage]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    async def handle_message(
        self,
        text: str,
        on_stream_chunk: Callable[[str], None] | None = None,
        on_content: Callable[[AgentContent], None] | None = None,
    ) -> MessageResult:
        """Send a user message to the model and act on its reply.

        Args:
            text: The user's message
            on_stream_chunk: Called with each raw chunk as it arrives
            on_content: Called with the parsed reply, then with each
                action's own content

        Returns:
            MessageResult with the parsed reply and action outcomes
        """
        logger.info("Handling message (%d chars)", len(text))
        messages = [
            PromptMessage(role="system", content=self._system_prompt),
            *self._history,
            PromptMessage(role="user", content=text),
        ]

        stream = await self._llm.chat_completion_stream(messages, temperature=self._temperature)
        async for chunk in stream:
            if on_stream_chunk is not None:
                on_stream_chunk(chunk)

        raw = stream.text
        content = parse_response(raw)
        logger.debug("Reply parsed: actions=%s, %d chars of text", content.actions, len(content.text))

        self._history.append(PromptMessage(role="user", content=text))
        self._history.append(PromptMessage(role="assistant", content=content.text or raw))

        if on_content is not None:
            on_content(content)

        outcomes = await self._dispatch(text, content, on_content)
        return MessageResult(content=content, raw=raw, usage=stream.usage, outcomes=outcomes)

    async def _dispatch(
        self,
        text: str,
        content: AgentContent,
        on_content: Callable[[AgentContent], None] | None,
    ) -> list[ActionOutcome]:
        outcomes: list[ActionOutcome] = []
        context = ActionContext(message=text, content=content)

        for name in content.actions:
            action = self._actions.get(name)
            if action is not None and action.pass_through:
                continue

            action_id = f"{name}:{uuid.uuid4().hex[:8]}"
            self._publish(ActionEvent(action=name, action_id=action_id, phase="started"))
            outcome = await self._actions.run(name, context)
            self._publish(ActionEvent(
                action=name, action_id=action_id, phase="completed", status=outcome.status
            ))
            logger.info("Action %s %s", name, outcome.status)

            outcomes.append(outcome)
            if outcome.content is not None and on_content is not None:
                on_content(outcome.content)

        return outcomes

    def _publish(self, event: ActionEvent) -> None:
        if self._action_events is not None:
            self._action_events.publish(event)
