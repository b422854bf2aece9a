from typing import Any

from ..config import DEFAULT_LLM_MODELS, LLMSettings, ProviderName
from .base import LLMProvider
from .providers import GROQ_BASE_URL, XAI_BASE_URL, AnthropicProvider, GeminiProvider, OpenAIProvider

_SUPPORTED = "'openai', 'anthropic', 'gemini', 'groq', 'grok'"


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('openai', 'anthropic', 'gemini', 'groq', 'grok')
        **config: Provider-specific configuration
            All providers:
                - api_key: str (required)
                - model: str (default: the provider's default model)
            OpenAI, Anthropic, Groq, Grok:
                - base_url: str | None

    Returns:
        Initialized LLM provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider("groq", api_key="gsk_...")
        >>> provider.model
        'llama-3.3-70b-versatile'
    """
    provider_lower = provider.lower()
    if provider_lower == "claude":
        provider_lower = ProviderName.ANTHROPIC.value
    if provider_lower == "xai":
        provider_lower = ProviderName.GROK.value

    try:
        name = ProviderName(provider_lower)
    except ValueError:
        raise ValueError(f"Unsupported provider: {provider}. Supported providers: {_SUPPORTED}") from None

    if "api_key" not in config:
        raise TypeError(f"{name.value} provider requires 'api_key' in config")

    config.setdefault("model", DEFAULT_LLM_MODELS[name])

    if name is ProviderName.ANTHROPIC:
        return AnthropicProvider(**config)
    if name is ProviderName.GEMINI:
        config.pop("base_url", None)
        return GeminiProvider(**config)
    if name is ProviderName.GROQ:
        config["base_url"] = config.get("base_url") or GROQ_BASE_URL
    elif name is ProviderName.GROK:
        config["base_url"] = config.get("base_url") or XAI_BASE_URL
    return OpenAIProvider(name=name.value, **config)


def provider_from_settings(settings: LLMSettings) -> LLMProvider:
    """Create the provider described by resolved settings."""
    config: dict[str, Any] = {"api_key": settings.api_key, "model": settings.model}
    if settings.base_url:
        config["base_url"] = settings.base_url
    return create_llm_provider(settings.provider.value, **config)
