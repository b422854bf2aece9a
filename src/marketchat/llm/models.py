from collections.abc import AsyncIterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamingResponse:
    """Async iterator over reply chunks that also records token usage.

    Usage:
        stream = await provider.chat_completion_stream(messages)
        async for chunk in stream:
            handle(chunk)
        tokens = stream.usage  # available once the stream is exhausted
    """

    def __init__(self, chunks: AsyncIterator[str]):
        self._chunks = chunks
        self._usage: dict[str, int] | None = None
        self._text: list[str] = []

    @property
    def usage(self) -> dict[str, int] | None:
        return self._usage

    @property
    def text(self) -> str:
        """Everything yielded so far."""
        return "".join(self._text)

    def set_usage(self, usage: dict[str, int]) -> None:
        self._usage = usage

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        chunk = await self._chunks.__anext__()
        self._text.append(chunk)
        return chunk


class PromptMessage(BaseModel):
    """One turn of the conversation sent to a provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Message text")


class LLMResponse(BaseModel):
    """Complete (non-streamed) reply from a provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text")
    model: str = Field(description="Model that produced the reply")
    usage: dict[str, int] | None = Field(default=None, description="Token usage")


def usage_dict(prompt_tokens: Any, completion_tokens: Any, total_tokens: Any = None) -> dict[str, int]:
    """Normalize provider token counts into one shape."""
    prompt = int(prompt_tokens or 0)
    completion = int(completion_tokens or 0)
    total = int(total_tokens) if total_tokens else prompt + completion
    return {"prompt_tokens": prompt, "completion_tokens": completion, "total_tokens": total}
