"""Unit tests for the agent: reply parsing, actions and the message service."""
import pytest

from marketchat.agent import (
    ELIZA,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_UNSUPPORTED,
    Action,
    ActionContext,
    ActionRegistry,
    AgentContent,
    MessageService,
    parse_response,
    wallet_status_action,
)
from marketchat.config import getter_for, load_wallet_config
from marketchat.events import ActionEvent, EventChannel

from conftest import FakeLLMProvider


def _context(text: str = "hi") -> ActionContext:
    return ActionContext(message=text, content=AgentContent(text=text))


class TestParseResponse:
    """Tests for parse_response."""

    def test_full_reply(self):
        """Test thought, actions and text."""
        content = parse_response(
            "<response><thought> thinking hard </thought><actions>reply, wallet_status</actions>"
            "<text> Here you go </text></response>"
        )
        assert content.thought == "thinking hard"
        assert content.actions == ["REPLY", "WALLET_STATUS"]
        assert content.text == "Here you go"
        assert content.source == "model"

    def test_untagged_reply_is_plain_text(self):
        """Test that a reply with no tags becomes a REPLY."""
        content = parse_response("  Just text.  ")
        assert content.text == "Just text."
        assert content.actions == ["REPLY"]

    def test_missing_actions_default_to_reply(self):
        """Test the default action."""
        content = parse_response("<thinking>hmm</thinking><text>ok</text>")
        assert content.actions == ["REPLY"]
        assert content.thought == "hmm"

    def test_unterminated_text(self):
        """Test a reply cut off inside the text tag."""
        assert parse_response("<actions>REPLY</actions><text>cut").text == "cut"


class TestActionRegistry:
    """Tests for ActionRegistry."""

    def test_builtins_are_pass_through(self):
        """Test the built-in actions."""
        registry = ActionRegistry()
        assert registry.pass_through == ["REPLY", "NONE", "IGNORE"]
        assert "reply" in registry
        assert "- REPLY: " in registry.describe()

    def test_duplicate_rejected(self):
        """Test that names are unique regardless of case."""
        registry = ActionRegistry()
        with pytest.raises(ValueError, match="already registered"):
            registry.register(Action("reply", "again"))

    @pytest.mark.asyncio
    async def test_run_unknown_and_pass_through(self):
        """Test statuses that need no handler."""
        registry = ActionRegistry()
        assert (await registry.run("TRADE", _context())).status == STATUS_UNSUPPORTED
        outcome = await registry.run("reply", _context())
        assert outcome.status == STATUS_COMPLETED
        assert outcome.content is None

    @pytest.mark.asyncio
    async def test_handler_result_is_attributed(self):
        """Test that handler content carries the action name."""
        async def echo(context: ActionContext) -> AgentContent:
            return AgentContent(text=f"echo {context.message}")

        registry = ActionRegistry([Action("ECHO", "Echo the message.", echo)])
        outcome = await registry.run("echo", _context("ping"))
        assert outcome.status == STATUS_COMPLETED
        assert outcome.content.text == "echo ping"
        assert outcome.content.source == "ECHO"

    @pytest.mark.asyncio
    async def test_handler_failure(self):
        """Test that a raising handler reports failure."""
        async def broken(context: ActionContext) -> AgentContent:
            raise RuntimeError("venue down")

        registry = ActionRegistry([Action("BROKEN", "Always fails.", broken)])
        outcome = await registry.run("BROKEN", _context())
        assert outcome.status == STATUS_FAILED
        assert outcome.content.text == "Action BROKEN failed: venue down"


class TestWalletStatusAction:
    """Tests for the wallet status action."""

    @pytest.mark.asyncio
    async def test_reports_wallet(self, wallet_values):
        """Test the report for a configured wallet."""
        wallet = load_wallet_config(getter_for(wallet_values))
        action = wallet_status_action(wallet, execute=True)
        content = await action.handler(_context())
        assert wallet.masked_key in content.text
        assert "API credentials: set" in content.text
        assert "Order execution: enabled" in content.text
        assert wallet.private_key not in content.text

    @pytest.mark.asyncio
    async def test_no_wallet(self):
        """Test the report without a wallet."""
        content = await wallet_status_action(None).handler(_context())
        assert "No wallet is configured" in content.text


class TestMessageService:
    """Tests for MessageService."""

    def test_system_prompt_mentions_persona_and_actions(self, fake_llm):
        """Test system prompt assembly."""
        service = MessageService(fake_llm, actions=ActionRegistry([wallet_status_action(None)]))
        assert ELIZA.name in service.system_prompt
        assert "WALLET_STATUS" in service.system_prompt
        assert "<response>" in service.system_prompt

    @pytest.mark.asyncio
    async def test_plain_reply(self, fake_llm):
        """Test chunks, parsed content, usage and history."""
        chunks: list[str] = []
        contents: list[AgentContent] = []
        service = MessageService(fake_llm)

        result = await service.handle_message("hello", chunks.append, contents.append)

        assert "".join(chunks) == result.raw
        assert result.content.text == "Hello!"
        assert result.outcomes == []
        assert result.usage == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}
        assert [c.text for c in contents] == ["Hello!"]
        assert [(m.role, m.content) for m in service.history] == [("user", "hello"), ("assistant", "Hello!")]

        sent = fake_llm.calls[0]
        assert sent[0].role == "system"
        assert sent[-1].content == "hello"

    @pytest.mark.asyncio
    async def test_history_is_replayed_and_bounded(self):
        """Test that earlier turns are sent and old ones dropped."""
        llm = FakeLLMProvider()
        service = MessageService(llm, max_history=2)
        await service.handle_message("one")
        await service.handle_message("two")

        assert [m.content for m in llm.calls[1][1:]] == ["one", "Hello!", "two"]
        assert [m.content for m in service.history] == ["two", "Hello!"]

        service.clear_history()
        assert service.history == []

    @pytest.mark.asyncio
    async def test_actions_publish_events(self, wallet_values):
        """Test that non pass-through actions run and publish progress."""
        llm = FakeLLMProvider([
            "<actions>REPLY, WALLET_", "STATUS</actions><text>Checking your wallet.</text>"
        ])
        events: list[ActionEvent] = []
        channel: EventChannel[ActionEvent] = EventChannel("actions")
        channel.subscribe(events.append)
        contents: list[AgentContent] = []
        wallet = load_wallet_config(getter_for(wallet_values))
        service = MessageService(
            llm,
            actions=ActionRegistry([wallet_status_action(wallet)]),
            action_events=channel,
        )

        result = await service.handle_message("wallet?", on_content=contents.append)

        assert [(e.action, e.phase, e.status) for e in events] == [
            ("WALLET_STATUS", "started", ""),
            ("WALLET_STATUS", "completed", "completed"),
        ]
        assert events[0].action_id == events[1].action_id
        assert [c.source for c in contents] == ["model", "WALLET_STATUS"]
        assert len(result.action_contents) == 1

    @pytest.mark.asyncio
    async def test_unknown_action_reports_unsupported(self):
        """Test that an unknown action still completes with a status."""
        llm = FakeLLMProvider(["<actions>PLACE_ORDER</actions><text>Placing.</text>"])
        events: list[ActionEvent] = []
        channel: EventChannel[ActionEvent] = EventChannel("actions")
        channel.subscribe(events.append)

        result = await MessageService(llm, action_events=channel).handle_message("buy")

        assert result.outcomes[0].status == STATUS_UNSUPPORTED
        assert events[-1].status == STATUS_UNSUPPORTED

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self):
        """Test that a failing provider raises and leaves history alone."""
        service = MessageService(FakeLLMProvider(error=ConnectionError("network down")))
        with pytest.raises(ConnectionError):
            await service.handle_message("hi")
        assert service.history == []
