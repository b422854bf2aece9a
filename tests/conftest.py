"""Pytest configuration and shared fixtures."""
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import pytest

from marketchat.llm import LLMProvider, LLMResponse, PromptMessage, StreamingResponse

WALLET_KEY = "0x" + "ab" * 32


class FakeLLMProvider(LLMProvider):
    """Provider that replays canned chunks and records what it was sent."""

    name = "fake"

    def __init__(self, chunks: list[str] | None = None, error: Exception | None = None):
        self.chunks = chunks if chunks is not None else ["<actions>REPLY</actions><text>Hello!</text>"]
        self.error = error
        self.calls: list[list[PromptMessage]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def chat_completion(self, messages, model=None, temperature=None, max_tokens=None, **kwargs: Any):
        self.calls.append(list(messages))
        return LLMResponse(content="".join(self.chunks), model=self.model)

    async def chat_completion_stream(self, messages, model=None, temperature=None, max_tokens=None, **kwargs: Any):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error

        async def _chunks() -> AsyncIterator[str]:
            for chunk in self.chunks:
                yield chunk
            stream.set_usage({"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5})

        stream = StreamingResponse(_chunks())
        return stream

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_llm():
    """Return a fake provider answering with a plain reply."""
    return FakeLLMProvider()


@pytest.fixture
def wallet_values():
    """Return environment values for a valid wallet."""
    return {
        "EVM_PRIVATE_KEY": WALLET_KEY,
        "CLOB_API_URL": "https://clob.example.com",
        "CLOB_API_KEY": "key",
        "CLOB_API_SECRET": "secret",
        "CLOB_API_PASSPHRASE": "pass",
    }


@pytest.fixture
def env_path(tmp_path) -> Path:
    """Return the path of a .env file with a comment and two keys."""
    path = tmp_path / ".env"
    path.write_text("# trading console\nOPENAI_API_KEY=sk-test\nCLOB_API_URL=https://clob.example.com\n")
    return path
