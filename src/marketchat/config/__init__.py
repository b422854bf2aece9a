"""Configuration: the .env file and typed settings resolved from it."""

from .env_file import EnvFile, apply_env_values, collect_env_snapshot, resolve_env_path
from .settings import (
    DEFAULT_CLOB_API_URL,
    DEFAULT_LLM_MODELS,
    ApiCredentials,
    ProviderName,
    LLMSettings,
    SettingsField,
    WalletConfig,
    build_settings_fields,
    find_missing_required,
    getter_for,
    load_wallet_config,
    normalize_env_value,
    normalize_private_key,
    resolve_llm_model,
    resolve_llm_provider,
    settings_updates,
)

__all__ = [
    "DEFAULT_CLOB_API_URL",
    "DEFAULT_LLM_MODELS",
    "ApiCredentials",
    "EnvFile",
    "ProviderName",
    "LLMSettings",
    "SettingsField",
    "WalletConfig",
    "apply_env_values",
    "build_settings_fields",
    "collect_env_snapshot",
    "find_missing_required",
    "getter_for",
    "load_wallet_config",
    "normalize_env_value",
    "normalize_private_key",
    "resolve_env_path",
    "resolve_llm_model",
    "resolve_llm_provider",
    "settings_updates",
]
