"""Chat agent: persona, reply parsing, actions and the message loop."""

from .actions import (
    BUILTIN_ACTIONS,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_UNSUPPORTED,
    Action,
    ActionContext,
    ActionOutcome,
    ActionRegistry,
    wallet_status_action,
)
from .character import ELIZA, Character
from .content import REPLY_ACTION, AgentContent, parse_response
from .service import MessageResult, MessageService, build_system_prompt

__all__ = [
    "BUILTIN_ACTIONS",
    "ELIZA",
    "REPLY_ACTION",
    "STATUS_COMPLETED",
    "STATUS_FAILED",
    "STATUS_UNSUPPORTED",
    "Action",
    "ActionContext",
    "ActionOutcome",
    "ActionRegistry",
    "AgentContent",
    "Character",
    "MessageResult",
    "MessageService",
    "build_system_prompt",
    "parse_response",
    "wallet_status_action",
]
