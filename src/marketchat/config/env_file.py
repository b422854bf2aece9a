"""The .env file and process environment.

Hides where settings live on disk and how updates are written back. Reading
and writing go through python-dotenv, which keeps comments and unrelated
lines intact when a key is updated.
"""

import logging
import os
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values, set_key

logger = logging.getLogger(__name__)

ENV_FILE_VARIABLE = "MARKETCHAT_ENV_FILE"
DEFAULT_ENV_FILENAME = ".env"


def resolve_env_path() -> Path:
    """Locate the .env file: $MARKETCHAT_ENV_FILE, else ./.env."""
    override = os.getenv(ENV_FILE_VARIABLE)
    if override and override.strip():
        return Path(override.strip()).expanduser()
    return Path.cwd() / DEFAULT_ENV_FILENAME


@dataclass
class EnvFile:
    """Contents of one .env file."""

    path: Path
    values: dict[str, str] = field(default_factory=dict)
    exists: bool = False

    @classmethod
    def read(cls, path: Path) -> "EnvFile":
        """Load a .env file; a missing file reads as empty."""
        if not path.exists():
            return cls(path=path)
        raw = dotenv_values(path)
        values = {key: value for key, value in raw.items() if value is not None}
        return cls(path=path, values=values, exists=True)

    def update(self, updates: Mapping[str, str]) -> None:
        """Write keys back, replacing existing entries in place and appending new ones."""
        if not updates:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        for key, value in updates.items():
            set_key(self.path, key, value, quote_mode="auto")
        self.values.update(updates)
        self.exists = True
        logger.info("Updated %d key(s) in %s", len(updates), self.path)


def collect_env_snapshot(
    file_values: Mapping[str, str],
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge .env values with the process environment.

    Non-empty process variables win over file values.
    """
    snapshot = dict(file_values)
    source = os.environ if environ is None else environ
    for key, value in source.items():
        if isinstance(value, str) and value.strip():
            snapshot[key] = value.strip()
    return snapshot


def apply_env_values(values: Mapping[str, str], environ: MutableMapping[str, str] | None = None) -> None:
    """Copy values into the process environment."""
    target = os.environ if environ is None else environ
    for key, value in values.items():
        target[key] = value
