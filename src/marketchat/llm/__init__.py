from .base import LLMProvider
from .factory import create_llm_provider, provider_from_settings
from .models import LLMResponse, PromptMessage, StreamingResponse
from .providers import AnthropicProvider, GeminiProvider, OpenAIProvider

__all__ = [
    "LLMProvider",
    "create_llm_provider",
    "provider_from_settings",
    "LLMResponse",
    "PromptMessage",
    "StreamingResponse",
    "AnthropicProvider",
    "GeminiProvider",
    "OpenAIProvider",
]
