"""Agent actions.

Hides how action names chosen by the model map onto code. Pass-through
actions (REPLY and friends) have no handler: the model's own text is the
result. Everything else runs a handler that may add content of its own.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from ..config import WalletConfig
from .content import AgentContent

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
STATUS_UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ActionContext:
    """What a handler gets to see."""

    message: str
    content: AgentContent


ActionHandler = Callable[[ActionContext], Awaitable[AgentContent | None]]


@dataclass(frozen=True)
class Action:
    """A named capability the model may ask for."""

    name: str
    description: str
    handler: ActionHandler | None = None

    @property
    def pass_through(self) -> bool:
        return self.handler is None


@dataclass(frozen=True)
class ActionOutcome:
    """Result of running one action."""

    action: str
    status: str
    content: AgentContent | None = None


BUILTIN_ACTIONS = (
    Action("REPLY", "Answer the user directly with the text of the reply."),
    Action("NONE", "Acknowledge without doing anything else."),
    Action("IGNORE", "Do not respond; use for messages that need no answer."),
)


class ActionRegistry:
    """Registry of the actions the agent can take.

    Usage:
        registry = ActionRegistry([wallet_status_action(wallet)])
        outcome = await registry.run("WALLET_STATUS", context)
    """

    def __init__(self, actions: Iterable[Action] = ()) -> None:
        self._actions: dict[str, Action] = {}
        for action in (*BUILTIN_ACTIONS, *actions):
            self.register(action)

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._actions

    @property
    def names(self) -> list[str]:
        return list(self._actions)

    @property
    def pass_through(self) -> list[str]:
        return [name for name, action in self._actions.items() if action.pass_through]

    def register(self, action: Action) -> None:
        """Add an action.

        Raises:
            ValueError: If an action with the same name is registered
        """
        name = action.name.upper()
        if name in self._actions:
            raise ValueError(f"Action already registered: {name}")
        self._actions[name] = action

    def get(self, name: str) -> Action | None:
        return self._actions.get(name.upper())

    def describe(self) -> str:
        """One line per action, for the system prompt."""
        return "\n".join(f"- {name}: {action.description}" for name, action in self._actions.items())

    async def run(self, name: str, context: ActionContext) -> ActionOutcome:
        """Run one action.

        Unknown names complete with status 'unsupported'. A handler that
        raises is logged and reported with status 'failed' and an error
        message as content, so the conversation can go on.
        """
        action = self.get(name)
        if action is None:
            logger.warning("Model asked for unknown action %s", name)
            return ActionOutcome(action=name, status=STATUS_UNSUPPORTED)
        if action.handler is None:
            return ActionOutcome(action=action.name, status=STATUS_COMPLETED)

        try:
            result = await action.handler(context)
        except Exception as e:
            logger.exception("Action %s failed", action.name)
            return ActionOutcome(
                action=action.name,
                status=STATUS_FAILED,
                content=AgentContent(text=f"Action {action.name} failed: {e}", source=action.name),
            )
        if result is not None and result.source == "model":
            result = result.model_copy(update={"source": action.name})
        return ActionOutcome(action=action.name, status=STATUS_COMPLETED, content=result)


def wallet_status_action(wallet: WalletConfig | None, execute: bool = False) -> Action:
    """Action that reports the local wallet configuration.

    Nothing leaves the machine; the report is built from settings already
    validated at startup.
    """

    async def handler(context: ActionContext) -> AgentContent:
        if wallet is None:
            return AgentContent(text="No wallet is configured. Run `marketchat settings` to add one.")

        lines = [
            f"Wallet: {wallet.masked_key}",
            f"CLOB API: {wallet.clob_api_url}",
            f"API credentials: {'set' if wallet.creds else 'not set'}",
            f"Order execution: {'enabled' if execute else 'disabled'}",
        ]
        if wallet.signature_type is not None:
            lines.append(f"Signature type: {wallet.signature_type}")
        if wallet.funder_address:
            lines.append(f"Funder: {wallet.funder_address}")
        return AgentContent(text="\n".join(lines))

    return Action(
        "WALLET_STATUS",
        "Show the configured wallet, order-book endpoint and whether order execution is enabled.",
        handler,
    )
