"""Typed settings resolved from environment values.

Hides which environment variables configure the LLM provider and the
trading wallet, the order in which they are consulted, and how they are
validated.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigError

ValueGetter = Callable[[str], str | None]


class ProviderName(str, Enum):
    """Supported LLM providers, in auto-detection order."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    GROQ = "groq"
    GROK = "grok"


_PROVIDER_NAMES = frozenset(provider.value for provider in ProviderName)

PROVIDER_API_KEYS: dict[ProviderName, tuple[str, ...]] = {
    ProviderName.OPENAI: ("OPENAI_API_KEY",),
    ProviderName.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    ProviderName.GEMINI: ("GOOGLE_GENERATIVE_AI_API_KEY",),
    ProviderName.GROQ: ("GROQ_API_KEY",),
    ProviderName.GROK: ("XAI_API_KEY",),
}

PROVIDER_MODEL_KEYS: dict[ProviderName, tuple[str, ...]] = {
    ProviderName.OPENAI: ("OPENAI_LARGE_MODEL", "LARGE_MODEL"),
    ProviderName.ANTHROPIC: ("ANTHROPIC_LARGE_MODEL", "LARGE_MODEL"),
    ProviderName.GEMINI: ("GOOGLE_LARGE_MODEL", "LARGE_MODEL"),
    ProviderName.GROQ: ("GROQ_LARGE_MODEL", "LARGE_MODEL"),
    ProviderName.GROK: ("XAI_MODEL", "XAI_LARGE_MODEL", "LARGE_MODEL"),
}

PROVIDER_BASE_URL_KEYS: dict[ProviderName, str] = {
    ProviderName.OPENAI: "OPENAI_BASE_URL",
    ProviderName.ANTHROPIC: "ANTHROPIC_BASE_URL",
    ProviderName.GROQ: "GROQ_BASE_URL",
    ProviderName.GROK: "XAI_BASE_URL",
}

DEFAULT_LLM_MODELS: dict[ProviderName, str] = {
    ProviderName.OPENAI: "gpt-5",
    ProviderName.ANTHROPIC: "claude-sonnet-4-20250514",
    ProviderName.GEMINI: "gemini-2.5-pro-preview-03-25",
    ProviderName.GROQ: "llama-3.3-70b-versatile",
    ProviderName.GROK: "grok-3",
}

PROVIDER_KEY_VARIABLES = ("ELIZA_LLM_PROVIDER", "LLM_PROVIDER")
MODEL_KEY_VARIABLES = ("ELIZA_LLM_MODEL", "LLM_MODEL")

PRIVATE_KEY_VARIABLES = ("EVM_PRIVATE_KEY", "POLYMARKET_PRIVATE_KEY", "WALLET_PRIVATE_KEY", "PRIVATE_KEY")
SIGNATURE_TYPE_VARIABLES = ("POLYMARKET_SIGNATURE_TYPE", "CLOB_SIGNATURE_TYPE")
FUNDER_VARIABLES = ("POLYMARKET_FUNDER_ADDRESS", "POLYMARKET_FUNDER", "CLOB_FUNDER_ADDRESS")
DEFAULT_CLOB_API_URL = "https://clob.polymarket.com"

_PRIVATE_KEY_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_env_value(value: str | None) -> str | None:
    """Trim a raw value; blank, 'null' and 'undefined' become None."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed or trimmed.lower() in ("null", "undefined"):
        return None
    return trimmed


def first_value(get: ValueGetter, keys: Iterable[str]) -> str | None:
    """Return the first normalized, non-empty value among keys."""
    for key in keys:
        value = normalize_env_value(get(key))
        if value is not None:
            return value
    return None


def getter_for(values: Mapping[str, str]) -> ValueGetter:
    return values.get


def resolve_llm_provider(get: ValueGetter) -> ProviderName | None:
    """Pick the provider: an explicit setting, else the first one with an API key."""
    explicit = first_value(get, PROVIDER_KEY_VARIABLES)
    # An unknown explicit name falls through to key detection
    if explicit is not None and explicit.lower() in _PROVIDER_NAMES:
        return ProviderName(explicit.lower())

    for provider in ProviderName:
        if first_value(get, PROVIDER_API_KEYS[provider]) is not None:
            return provider
    return None


def resolve_llm_model(provider: ProviderName | None, get: ValueGetter) -> str | None:
    """Pick the model: an explicit setting, else the provider's model variables."""
    explicit = first_value(get, MODEL_KEY_VARIABLES)
    if explicit is not None:
        return explicit
    if provider is None:
        return None
    return first_value(get, PROVIDER_MODEL_KEYS[provider])


class LLMSettings(BaseModel):
    """Resolved LLM connection settings."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderName = Field(description="LLM provider")
    model: str = Field(min_length=1, description="Model name")
    api_key: str = Field(min_length=1, repr=False, description="Provider API key")
    base_url: str | None = Field(default=None, description="Override for the provider endpoint")

    @classmethod
    def from_values(cls, get: ValueGetter) -> "LLMSettings":
        """Resolve settings from environment-style values.

        Raises:
            ConfigError: If no provider is configured or its API key is missing
        """
        provider = resolve_llm_provider(get)
        if provider is None:
            raise ConfigError(
                "No LLM provider configured. Set ELIZA_LLM_PROVIDER or one of "
                + ", ".join(key for keys in PROVIDER_API_KEYS.values() for key in keys)
            )

        api_key = first_value(get, PROVIDER_API_KEYS[provider])
        if api_key is None:
            raise ConfigError(f"Missing API key for {provider.value}: set {PROVIDER_API_KEYS[provider][0]}")

        model = resolve_llm_model(provider, get) or DEFAULT_LLM_MODELS[provider]
        base_url_key = PROVIDER_BASE_URL_KEYS.get(provider)
        base_url = first_value(get, (base_url_key,)) if base_url_key else None
        return cls(provider=provider, model=model, api_key=api_key, base_url=base_url)


def normalize_private_key(value: str) -> str:
    """Add a missing 0x prefix and check for 32 bytes of hex.

    Raises:
        ValueError: If the key is not 64 hex characters
    """
    key = value.strip()
    if not key.startswith("0x"):
        key = f"0x{key}"
    if not _PRIVATE_KEY_PATTERN.match(key):
        raise ValueError("private key must be 32 bytes of hex (64 characters)")
    return key


class ApiCredentials(BaseModel):
    """Order-book API credentials."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, repr=False)
    secret: str = Field(min_length=1, repr=False)
    passphrase: str = Field(min_length=1, repr=False)


class WalletConfig(BaseModel):
    """Wallet and order-book settings, validated locally."""

    model_config = ConfigDict(frozen=True)

    private_key: str = Field(repr=False, description="0x-prefixed wallet private key")
    clob_api_url: str = Field(default=DEFAULT_CLOB_API_URL, description="Order-book API endpoint")
    creds: ApiCredentials | None = Field(default=None, description="API credentials, if all are set")
    signature_type: int | None = Field(default=None, description="Order signature scheme")
    funder_address: str | None = Field(default=None, description="Address that funds orders")

    @field_validator("private_key")
    @classmethod
    def _check_private_key(cls, value: str) -> str:
        return normalize_private_key(value)

    @field_validator("clob_api_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"not a valid URL: {value!r}")
        return value

    @property
    def masked_key(self) -> str:
        return f"{self.private_key[:6]}...{self.private_key[-4:]}"


def load_wallet_config(
    get: ValueGetter,
    execute: bool = False,
    private_key: str | None = None,
    clob_api_url: str | None = None,
) -> WalletConfig:
    """Build a WalletConfig from environment-style values.

    Args:
        get: Lookup for environment values
        execute: Whether live order execution is requested (requires API credentials)
        private_key: Override for the wallet key
        clob_api_url: Override for the order-book endpoint

    Raises:
        ConfigError: If the key is missing or any value is invalid
    """
    raw_key = normalize_env_value(private_key) or first_value(get, PRIVATE_KEY_VARIABLES)
    if raw_key is None:
        raise ConfigError("Missing private key. Set EVM_PRIVATE_KEY (recommended) or POLYMARKET_PRIVATE_KEY.")

    raw_signature = first_value(get, SIGNATURE_TYPE_VARIABLES)
    signature_type: int | None = None
    if raw_signature is not None:
        try:
            signature_type = int(raw_signature)
        except ValueError as e:
            raise ConfigError("POLYMARKET_SIGNATURE_TYPE must be a number.") from e

    key = first_value(get, ("CLOB_API_KEY",))
    secret = first_value(get, ("CLOB_API_SECRET", "CLOB_SECRET"))
    passphrase = first_value(get, ("CLOB_API_PASSPHRASE", "CLOB_PASS_PHRASE"))
    creds = None
    if key and secret and passphrase:
        creds = ApiCredentials(key=key, secret=secret, passphrase=passphrase)

    if execute and key is None:
        raise ConfigError("CLOB_API_KEY is missing or empty.")
    if execute and creds is None:
        raise ConfigError(
            "Missing CLOB API credentials for --execute. "
            "Set CLOB_API_KEY, CLOB_API_SECRET, CLOB_API_PASSPHRASE."
        )

    try:
        return WalletConfig(
            private_key=raw_key,
            clob_api_url=normalize_env_value(clob_api_url) or first_value(get, ("CLOB_API_URL",))
            or DEFAULT_CLOB_API_URL,
            creds=creds,
            signature_type=signature_type,
            funder_address=first_value(get, FUNDER_VARIABLES),
        )
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise ConfigError(f"Invalid wallet settings: {problems}") from e


class SettingsField(BaseModel):
    """One editable setting shown by the settings prompt."""

    key: str
    label: str
    value: str = ""
    secret: bool = False
    required: bool = False
    options: tuple[str, ...] = ()

    @property
    def missing(self) -> bool:
        return self.required and not self.value.strip()


def build_settings_fields(
    snapshot: Mapping[str, str],
    execute: bool = False,
    include_provider: bool = True,
) -> list[SettingsField]:
    """List the settings a user can edit, pre-filled from the snapshot."""
    get = getter_for(snapshot)
    provider = resolve_llm_provider(get) or ProviderName.OPENAI
    model = resolve_llm_model(provider, get) or DEFAULT_LLM_MODELS[provider]

    def current(*keys: str, default: str = "") -> str:
        return first_value(get, keys) or default

    fields: list[SettingsField] = []
    if include_provider:
        fields.append(SettingsField(
            key="ELIZA_LLM_PROVIDER",
            label="LLM Provider",
            value=provider.value,
            options=tuple(p.value for p in ProviderName),
        ))

    fields.append(SettingsField(key="ELIZA_LLM_MODEL", label="LLM Model", value=model, required=True))

    key_labels = {
        ProviderName.OPENAI: "OpenAI API Key",
        ProviderName.ANTHROPIC: "Anthropic API Key",
        ProviderName.GEMINI: "Gemini API Key",
        ProviderName.GROQ: "Groq API Key",
        ProviderName.GROK: "Grok API Key",
    }
    for key_provider, label in key_labels.items():
        env_key = PROVIDER_API_KEYS[key_provider][0]
        fields.append(SettingsField(
            key=env_key,
            label=label,
            value=current(env_key),
            secret=True,
            required=provider is key_provider,
        ))

    fields.extend([
        SettingsField(
            key="EVM_PRIVATE_KEY",
            label="Polymarket Wallet Private Key",
            value=current("EVM_PRIVATE_KEY", "POLYMARKET_PRIVATE_KEY"),
            secret=True,
            required=True,
        ),
        SettingsField(key="CLOB_API_URL", label="CLOB API URL", value=current("CLOB_API_URL", default=DEFAULT_CLOB_API_URL)),
        SettingsField(key="CLOB_API_KEY", label="CLOB API Key", value=current("CLOB_API_KEY"),
                      secret=True, required=execute),
        SettingsField(key="CLOB_API_SECRET", label="CLOB API Secret", value=current("CLOB_API_SECRET"),
                      secret=True, required=execute),
        SettingsField(key="CLOB_API_PASSPHRASE", label="CLOB API Passphrase",
                      value=current("CLOB_API_PASSPHRASE"), secret=True, required=execute),
        SettingsField(key="POLYMARKET_SIGNATURE_TYPE", label="Polymarket Signature Type",
                      value=current("POLYMARKET_SIGNATURE_TYPE")),
        SettingsField(key="POLYMARKET_FUNDER_ADDRESS", label="Polymarket Funder Address",
                      value=current("POLYMARKET_FUNDER_ADDRESS")),
    ])
    return fields


def find_missing_required(fields: Iterable[SettingsField]) -> list[str]:
    """Labels of required fields that have no value."""
    return [field.label for field in fields if field.missing]


def settings_updates(values: Mapping[str, str]) -> dict[str, str]:
    """Keep only non-empty submitted values, trimmed."""
    return {key: value.strip() for key, value in values.items() if value.strip()}
