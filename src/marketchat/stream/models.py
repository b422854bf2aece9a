"""Chat and log data models.

Hides how messages and log lines are stored. Each panel owns its log and is
its only writer: messages are appended, the content of an existing message
is replaced by id, and the whole log is emptied by clear().
"""

import itertools
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .wrapping import clip

MAX_LOG_ENTRIES = 200
MAX_LOG_LINE_LENGTH = 400

_message_ids = itertools.count(1)


class ChatRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def next_message_id() -> str:
    return f"msg-{next(_message_ids)}"


@dataclass
class ChatMessage:
    """A chat message in the conversation."""

    role: ChatRole
    content: str
    id: str = field(default_factory=next_message_id)
    timestamp: datetime = field(default_factory=datetime.now)


class ChatLog:
    """Append-only ordered message sequence."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []
        self._index: dict[str, ChatMessage] = {}
        self._version = 0

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self._messages)

    @property
    def version(self) -> int:
        """Counter bumped on every change; lets views skip redundant redraws."""
        return self._version

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def append(self, role: ChatRole | str, content: str) -> ChatMessage:
        message = ChatMessage(role=ChatRole(role), content=content)
        self._messages.append(message)
        self._index[message.id] = message
        self._version += 1
        return message

    def update(self, message_id: str, content: str) -> bool:
        """Replace the content of an existing message.

        Returns:
            False if no message has that id
        """
        message = self._index.get(message_id)
        if message is None:
            return False
        message.content = content
        self._version += 1
        return True

    def get(self, message_id: str) -> ChatMessage | None:
        return self._index.get(message_id)

    def last(self, role: ChatRole | None = None) -> ChatMessage | None:
        for message in reversed(self._messages):
            if role is None or message.role is role:
                return message
        return None

    def clear(self) -> None:
        self._messages.clear()
        self._index.clear()
        self._version += 1


class LogBuffer:
    """Bounded log lines, oldest dropped first."""

    def __init__(self, max_entries: int = MAX_LOG_ENTRIES, max_length: int = MAX_LOG_LINE_LENGTH) -> None:
        self._lines: deque[str] = deque(maxlen=max_entries)
        self._max_length = max_length
        self._version = 0

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    @property
    def version(self) -> int:
        return self._version

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def append(self, line: str) -> None:
        self._lines.append(clip(line, self._max_length))
        self._version += 1

    def clear(self) -> None:
        self._lines.clear()
        self._version += 1
