"""Anthropic Claude provider.

Uses the official Anthropic Python SDK.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ..base import LLMProvider
from ..models import LLMResponse, PromptMessage, StreamingResponse, usage_dict

DEFAULT_MAX_TOKENS = 4096


def _split_system(messages: list[PromptMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Anthropic takes the system prompt separately from the turns."""
    system_parts: list[str] = []
    turns: list[dict[str, str]] = []
    for msg in messages:
        if msg.role == "system":
            system_parts.append(msg.content)
        else:
            turns.append({"role": msg.role, "content": msg.content})
    return ("\n\n".join(system_parts) or None), turns


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider.

    Hidden design decisions:
    - AsyncAnthropic client initialization
    - System prompt handling
    - Mapping of stream events onto text chunks and usage
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        self._model = model
        self._client = AsyncAnthropic(api_key=api_key, base_url=base_url, **client_kwargs)

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
        system, turns = _split_system(messages)
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": turns,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,  # required by the API
            **kwargs,
        }
        if system:
            params["system"] = system
        if temperature is not None:
            params["temperature"] = temperature
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
        response = await self._client.messages.create(**params)

        usage = None
        if response.usage:
            usage = usage_dict(response.usage.input_tokens, response.usage.output_tokens)

        content = "".join(block.text for block in response.content if hasattr(block, "text"))
        return LLMResponse(content=content, model=response.model, usage=usage)

    async def chat_completion_stream(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        params = self._request(messages, model, temperature, max_tokens, **kwargs)
        holder: list[StreamingResponse] = []
        response = StreamingResponse(self._stream_chunks(params, holder))
        holder.append(response)
        return response

    async def _stream_chunks(
        self,
        params: dict[str, Any],
        holder: list[StreamingResponse],
    ) -> AsyncIterator[str]:
        input_tokens = 0
        output_tokens = 0

        async with self._client.messages.stream(**params) as stream:
            async for event in stream:
                event_type = getattr(event, "type", None)
                if event_type == "message_start":
                    input_tokens = event.message.usage.input_tokens
                elif event_type == "message_delta" and getattr(event, "usage", None) is not None:
                    # output_tokens is cumulative
                    output_tokens = event.usage.output_tokens
                elif event_type == "content_block_delta" and hasattr(event.delta, "text"):
                    yield event.delta.text

        holder[0].set_usage(usage_dict(input_tokens, output_tokens))

    async def close(self) -> None:
        await self._client.close()
