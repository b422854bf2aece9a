from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .openai import GROQ_BASE_URL, XAI_BASE_URL, OpenAIProvider

__all__ = ["GROQ_BASE_URL", "XAI_BASE_URL", "AnthropicProvider", "GeminiProvider", "OpenAIProvider"]
