from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.logging import RichHandler

DEFAULT_VAULT_PATH = Path("~/.vaultkeep/vault.json")
PATH_ENV = "VAULTKEEP_PATH"
LOG_LEVEL_ENV = "VAULTKEEP_LOG_LEVEL"


def resolve_vault_path(explicit: str | os.PathLike | None = None) -> Path:
    """--vault flag, then $VAULTKEEP_PATH, then ~/.vaultkeep/vault.json."""
    if explicit:
        return Path(explicit).expanduser()
    from_env = os.environ.get(PATH_ENV)
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_VAULT_PATH.expanduser()


def configure_logging(level: str | int | None = None) -> None:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )
