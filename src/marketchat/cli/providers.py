"""Provider factory functions for CLI.

Centralizes creation of the LLM provider and wallet settings from the
environment, and the interactive prompt that fills in missing settings.
Hides configuration details from command implementations.
"""

import os

import typer
from rich.console import Console

from ..config import (
    EnvFile,
    LLMSettings,
    SettingsField,
    WalletConfig,
    apply_env_values,
    build_settings_fields,
    collect_env_snapshot,
    find_missing_required,
    load_wallet_config,
    resolve_env_path,
    resolve_llm_provider,
    settings_updates,
)
from ..errors import ConfigError, SetupCancelled
from ..llm import LLMProvider, provider_from_settings

# Default console for output
_console = Console()


def get_llm_settings(console: Console | None = None) -> LLMSettings:
    """Resolve LLM settings from the process environment.

    Raises:
        typer.Exit: If no provider or API key is configured
    """
    con = console or _console
    try:
        return LLMSettings.from_values(os.environ.get)
    except ConfigError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


def get_llm(console: Console | None = None) -> LLMProvider:
    """Create the LLM provider described by the environment.

    Environment variables:
        ELIZA_LLM_PROVIDER / LLM_PROVIDER: openai, anthropic, gemini, groq or grok
            (default: the first provider with an API key)
        ELIZA_LLM_MODEL / LLM_MODEL: Model override
        OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_GENERATIVE_AI_API_KEY,
        GROQ_API_KEY, XAI_API_KEY: Provider API keys
    """
    con = console or _console
    settings = get_llm_settings(con)
    try:
        return provider_from_settings(settings)
    except (ValueError, TypeError) as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


def get_wallet(console: Console | None = None, execute: bool = False) -> WalletConfig:
    """Validate wallet settings from the environment.

    Raises:
        typer.Exit: If the wallet key is missing or a value is invalid
    """
    con = console or _console
    try:
        return load_wallet_config(os.environ.get, execute=execute)
    except ConfigError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


def prompt_fields(fields: list[SettingsField], console: Console | None = None) -> dict[str, str]:
    """Ask for each field in turn; Enter keeps the current value.

    Raises:
        SetupCancelled: If the user aborts with Ctrl+C or Ctrl+D
    """
    con = console or _console
    values: dict[str, str] = {}
    try:
        for settings_field in fields:
            label = settings_field.label + (" (required)" if settings_field.required else "")
            if settings_field.options:
                label += f" [{'/'.join(settings_field.options)}]"
            shown_default = settings_field.value
            if settings_field.secret and shown_default:
                shown_default = "(keep current)"
            answer = typer.prompt(
                label,
                default=shown_default,
                hide_input=settings_field.secret,
                show_default=bool(shown_default),
            )
            if answer == "(keep current)":
                answer = settings_field.value
            while settings_field.required and not answer.strip():
                con.print(f"[yellow]{settings_field.label} is required.[/yellow]")
                answer = typer.prompt(label, hide_input=settings_field.secret)
            values[settings_field.key] = answer
    except typer.Abort as e:
        raise SetupCancelled("Setup cancelled.") from e
    return values


def ensure_env_config(console: Console | None = None, execute: bool = False, force: bool = False) -> EnvFile:
    """Prompt for missing required settings and save them to the .env file.

    Args:
        console: Optional Rich console for output
        execute: Whether order-book credentials are required
        force: Prompt for every setting even when nothing is missing

    Returns:
        The .env file as written

    Raises:
        SetupCancelled: If the user aborts the prompt
    """
    con = console or _console
    env_file = EnvFile.read(resolve_env_path())
    snapshot = collect_env_snapshot(env_file.values)
    provider = resolve_llm_provider(snapshot.get)
    fields = build_settings_fields(snapshot, execute=execute, include_provider=force or provider is None)
    missing = find_missing_required(fields)
    if not force and not missing:
        return env_file

    con.print("[bold]MarketChat Setup[/bold]")
    if missing:
        con.print(f"[yellow]Missing required: {', '.join(missing)}[/yellow]")
    else:
        con.print("[dim]Enter required secrets to continue.[/dim]")

    updates = settings_updates(prompt_fields(fields, con))
    env_file.update(updates)
    apply_env_values(updates)
    return env_file
