"""Google Gemini provider.

Uses the Google GenAI SDK.
Reference: https://github.com/googleapis/python-genai

Gemini occasionally returns empty candidates (safety filtering or service
hiccups); complete replies are retried a few times before giving up.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from ..base import LLMProvider
from ..models import LLMResponse, PromptMessage, StreamingResponse, usage_dict


class GeminiProvider(LLMProvider):
    """Google Gemini provider.

    Hidden design decisions:
    - GenAI client initialization
    - Conversion of turns to Content objects ('assistant' becomes 'model')
    - Retry on empty replies
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-pro-preview-03-25",
        max_retries: int = 3,
        **client_kwargs: Any
    ):
        self._model = model
        self._max_retries = max_retries
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    @staticmethod
    def _convert(messages: list[PromptMessage]) -> tuple[str | None, list[types.Content]]:
        system_parts: list[str] = []
        contents: list[types.Content] = []
        for msg in messages:
            if msg.role == "system":
                system_parts.append(msg.content)
                continue
            role = "model" if msg.role == "assistant" else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=msg.content)]))
        return ("\n\n".join(system_parts) or None), contents

    def _config(
        self,
        system_instruction: str | None,
        temperature: float | None,
        max_tokens: int | None,
        **kwargs: Any
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(system_instruction=system_instruction, **kwargs)
        if temperature is not None:
            config.temperature = temperature
        if max_tokens is not None:
            config.max_output_tokens = max_tokens
        return config

    @staticmethod
    def _text_of(response: Any) -> str:
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                return "".join(part.text for part in candidate.content.parts if getattr(part, "text", None))
        return ""

    @staticmethod
    def _usage_of(response: Any) -> dict[str, int] | None:
        meta = response.usage_metadata
        if not meta:
            return None
        return usage_dict(meta.prompt_token_count, meta.candidates_token_count, meta.total_token_count)

    async def chat_completion(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        model_to_use = model or self._model
        system, contents = self._convert(messages)
        config = self._config(system, temperature, max_tokens, **kwargs)

        content = ""
        usage = None
        for attempt in range(self._max_retries):
            response = await self._client.aio.models.generate_content(
                model=model_to_use, contents=contents, config=config
            )
            usage = self._usage_of(response) or usage
            content = self._text_of(response)
            if content:
                break
            if attempt < self._max_retries - 1:
                await asyncio.sleep(0.5 * (attempt + 1))

        return LLMResponse(content=content, model=model_to_use, usage=usage)

    async def chat_completion_stream(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        system, contents = self._convert(messages)
        config = self._config(system, temperature, max_tokens, **kwargs)
        holder: list[StreamingResponse] = []
        response = StreamingResponse(self._stream_chunks(model or self._model, contents, config, holder))
        holder.append(response)
        return response

    async def _stream_chunks(
        self,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
        holder: list[StreamingResponse],
    ) -> AsyncIterator[str]:
        usage = None
        stream = await self._client.aio.models.generate_content_stream(
            model=model, contents=contents, config=config
        )
        async for chunk in stream:
            usage = self._usage_of(chunk) or usage
            text = self._text_of(chunk)
            if text:
                yield text
        if usage:
            holder[0].set_usage(usage)

    async def close(self) -> None:
        """The GenAI client holds no connection that needs closing."""
