"""OpenAI-compatible provider.

Serves OpenAI itself and the vendors that expose the same Chat Completions
API (Groq, xAI Grok) under a different base URL.
"""

from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ..base import LLMProvider
from ..models import LLMResponse, PromptMessage, StreamingResponse, usage_dict

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
XAI_BASE_URL = "https://api.x.ai/v1"


def _to_openai_messages(messages: list[PromptMessage]) -> list[dict[str, str]]:
    return [
        {"role": msg.role if msg.role in ("system", "user", "assistant") else "user", "content": msg.content}
        for msg in messages
    ]


class OpenAIProvider(LLMProvider):
    """Chat Completions provider.

    Hidden design decisions:
    - AsyncOpenAI client initialization and endpoint selection
    - Message format conversion
    - Extraction of text deltas and usage from stream chunks
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5",
        base_url: str | None = None,
        name: str = "openai",
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: API key for the endpoint
            model: Default model
            base_url: Endpoint override (Groq, xAI or a proxy)
            name: Provider label shown in the UI
            **client_kwargs: Additional kwargs for AsyncOpenAI
        """
        self.name = name
        self._model = model
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    def _request(
        self,
        messages: list[PromptMessage],
        model: str | None,
        temperature: float | None,
        max_tokens: int | None,
        **kwargs: Any
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": _to_openai_messages(messages),
            **kwargs,
        }
        # Only sent when set; reasoning models accept the default alone
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_completion_tokens"] = max_tokens
        return params

    async def chat_completion(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        params = self._request(messages, model, temperature, max_tokens, **kwargs)
        completion = await self._client.chat.completions.create(**params)

        usage = None
        if completion.usage:
            usage = usage_dict(
                completion.usage.prompt_tokens,
                completion.usage.completion_tokens,
                completion.usage.total_tokens,
            )

        return LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model,
            usage=usage,
        )

    async def chat_completion_stream(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        params = self._request(messages, model, temperature, max_tokens, **kwargs)
        params["stream"] = True
        params["stream_options"] = {"include_usage": True}

        holder: list[StreamingResponse] = []
        response = StreamingResponse(self._stream_chunks(params, holder))
        holder.append(response)
        return response

    async def _stream_chunks(
        self,
        params: dict[str, Any],
        holder: list[StreamingResponse],
    ) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(**params)
        async for chunk in stream:
            if chunk.usage is not None:
                holder[0].set_usage(usage_dict(
                    chunk.usage.prompt_tokens,
                    chunk.usage.completion_tokens,
                    chunk.usage.total_tokens,
                ))
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    async def close(self) -> None:
        await self._client.close()
