"""Main CLI application using Typer."""
import asyncio
import logging
import os

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..agent import ActionRegistry, MessageService, wallet_status_action
from ..config import LLMSettings, load_wallet_config, resolve_env_path
from ..errors import ConfigError, MarketChatError, SetupCancelled, append_error_log, error_hints, fatal_from_exception
from ..events import ActionEvent, EventChannel, FatalError
from ..ui.config import LogLevel
from .input_probe import run_input_probe
from .providers import ensure_env_config, get_llm, get_wallet

# Load environment variables
load_dotenv(resolve_env_path())

# Create Typer app
app = typer.Typer(
    name="marketchat",
    help="Terminal chat console for a prediction-market trading agent",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str = "warning") -> None:
    """Send package logs to stderr through Rich for commands without a TUI."""
    logging.basicConfig(
        level=LogLevel.from_string(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _check_log_level(value: str) -> str:
    if value.lower() not in LogLevel.choices():
        raise typer.BadParameter(f"choose from {', '.join(LogLevel.choices())}")
    return value.lower()


@app.command()
def chat(
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        callback=_check_log_level,
        help="Lowest level shown in the log view: debug, info, warning or error"
    ),
    execute: bool = typer.Option(
        False,
        "--execute",
        "-x",
        help="Enable order execution (requires CLOB API credentials)"
    ),
):
    """Launch the interactive chat console."""
    async def _chat() -> int:
        from ..ui import run_tui

        action_events: EventChannel[ActionEvent] = EventChannel("actions")
        fatal_errors: EventChannel[FatalError] = EventChannel("fatal")
        actions = ActionRegistry([wallet_status_action(wallet, execute=execute)])
        service = MessageService(llm, actions=actions, action_events=action_events)

        async with llm:
            return await run_tui(
                service,
                action_events=action_events,
                fatal_errors=fatal_errors,
                log_level=log_level,
                wallet=wallet,
                execute=execute,
            )

    try:
        ensure_env_config(console, execute=execute)
    except SetupCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1) from e

    wallet = get_wallet(console, execute=execute)
    llm = get_llm(console)
    console.print("[green]+[/green] runtime initialized")
    console.print(f"[dim]execute: {'enabled' if execute else 'disabled'}[/dim]")

    code = asyncio.run(_chat())
    console.print("\n[dim]Goodbye![/dim]")
    if code:
        raise typer.Exit(code=code)


@app.command()
def verify():
    """Check settings without starting the console."""
    configure_logging()
    all_ok = True

    env_path = resolve_env_path()
    if env_path.exists():
        console.print(f"[green]+[/green] Env file: {env_path}")
    else:
        console.print(f"[yellow]![/yellow] Env file: NOT FOUND ({env_path})")

    try:
        llm_settings = LLMSettings.from_values(os.environ.get)
        console.print(f"[green]+[/green] LLM provider: {llm_settings.provider.value}")
        console.print(f"[green]+[/green] LLM model: {llm_settings.model}")
    except ConfigError as e:
        console.print(f"[red]x[/red] LLM provider: FAILED ({e})")
        all_ok = False

    try:
        wallet = load_wallet_config(os.environ.get)
    except ConfigError as e:
        console.print(f"[red]x[/red] Wallet: FAILED ({e})")
        all_ok = False
    else:
        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="bold cyan", width=15)
        table.add_column("Value")
        table.add_row("Wallet key", wallet.masked_key)
        table.add_row("CLOB API URL", wallet.clob_api_url)
        table.add_row("API creds", "present" if wallet.creds else "not set")
        table.add_row("Signature type", str(wallet.signature_type) if wallet.signature_type is not None else "default")
        table.add_row("Funder", wallet.funder_address or "(none)")
        console.print("[green]+[/green] Wallet: OK")
        console.print(table)

    if not all_ok:
        raise typer.Exit(code=1)


@app.command()
def settings(
    execute: bool = typer.Option(
        False,
        "--execute",
        "-x",
        help="Also require the CLOB API credentials"
    ),
):
    """Edit every setting and save the answers to the .env file."""
    try:
        env_file = ensure_env_config(console, execute=execute, force=True)
    except SetupCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Settings saved to {env_file.path}[/green]")


@app.command(name="input-test")
def input_test():
    """Show how raw terminal input is decoded (keys, wheel, escapes)."""
    try:
        run_input_probe(console)
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


def report_fatal(error: BaseException, context: str = "") -> None:
    """Print a fatal error banner and append it to the error log."""
    fatal = fatal_from_exception(error, context)
    path = append_error_log(fatal)
    rule = "=" * 60
    err_console.print(rule, style="red", markup=False)
    err_console.print(f"FATAL ERROR{f' [{context}]' if context else ''}", style="bold red", markup=False)
    err_console.print(rule, style="red", markup=False)
    err_console.print(fatal.message, markup=False, highlight=False)
    for hint in error_hints(fatal.message):
        err_console.print(f"  {hint}", style="yellow", markup=False)
    err_console.print(rule, style="red", markup=False)
    err_console.print(f"Error log saved to: {path}", markup=False)


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except MarketChatError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None
    except Exception as e:
        report_fatal(e, "cli")
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
