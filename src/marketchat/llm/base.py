from abc import ABC, abstractmethod
from typing import Any

from .models import LLMResponse, PromptMessage, StreamingResponse


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides which vendor SDK produces the agent's replies.
    Implementations own client setup, message format conversion and the
    mapping of vendor stream events onto plain text chunks.

    Supports the async context manager protocol:
        async with provider:
            stream = await provider.chat_completion_stream(messages)
    """

    name: str = "llm"

    @property
    @abstractmethod
    def model(self) -> str:
        """Default model name."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a complete reply.

        Args:
            messages: Conversation so far, system prompt first
            model: Model override (None uses the provider default)
            temperature: Sampling temperature (None keeps the vendor default)
            max_tokens: Reply length limit
            **kwargs: Vendor-specific parameters

        Returns:
            LLMResponse with the generated text
        """

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Generate a reply as a stream of text chunks.

        Chunk boundaries are arbitrary; they may split words or tags.

        Returns:
            StreamingResponse yielding text chunks; usage is set when it ends
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the client, tolerating httpx's "Event loop is closed" race at shutdown.

        See https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
