"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path

import typer

CONFIG_SUFFIXES = (".json", ".toml", ".yaml", ".yml")


def parse_config_path(value: str) -> Path:
    """Parse the policy configuration path, checking its format is supported."""
    path = Path(value)
    if path.suffix.lower() not in CONFIG_SUFFIXES:
        raise typer.BadParameter(
            f"Unsupported config format {path.suffix!r}; expected one of {', '.join(CONFIG_SUFFIXES)}"
        )
    return path


def parse_workers(value: int) -> int:
    """Validate the store worker count."""
    if value < 1:
        raise typer.BadParameter(f"Must be at least 1, got: {value}")
    return value
