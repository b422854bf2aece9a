"""Agent prompt files.

Hides where the system prompt text lives. The bundled ``system.txt``
describes the persona and the tagged reply format the console parses
(``<thought>``, ``<actions>``, ``<text>``); its ``{name}``, ``{bio}``,
``{adjectives}``, ``{style}`` and ``{actions}`` placeholders are filled
from the active Character and ActionRegistry. A ``./prompts/system.txt``
in the working directory replaces the bundled file.
"""

from functools import lru_cache
from pathlib import Path

_PROMPTS_DIR = Path(__file__).parent


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Read a raw prompt template, local override first.

    Raises:
        FileNotFoundError: If neither ./prompts/<name>.txt nor the bundled
            file exists
    """
    filename = f"{name}.txt"
    candidates = (Path.cwd() / "prompts" / filename, _PROMPTS_DIR / filename)
    for path in candidates:
        if path.exists():
            return path.read_text(encoding="utf-8")

    searched = "\n".join(f"  - {path}" for path in candidates)
    raise FileNotFoundError(f"Prompt '{name}' not found. Searched:\n{searched}")


def get_system_prompt(**values: str) -> str:
    """Prediction-market agent system prompt with persona and action list filled in.

    Args:
        **values: name, bio, adjectives, style and actions

    Returns:
        The prompt sent as the first message of every request
    """
    return load_prompt("system").format(**values)


def clear_cache() -> None:
    """Forget loaded templates so an edited system.txt is picked up."""
    load_prompt.cache_clear()


__all__ = [
    "clear_cache",
    "get_system_prompt",
    "load_prompt",
]
