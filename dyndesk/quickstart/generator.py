"""Configuration file generation for the quickstart wizard."""

from __future__ import annotations

import json
import shutil
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Any

from .. import constants


def get_config_path() -> Path:
    """Return the default configuration path."""
    return Path(constants.CONFIG_FILE)


def load_existing_config(path: Path) -> dict | None:
    """Load the configuration at `path`.

    Returns:
        The parsed TOML, or None if the file is missing or invalid
    """
    if not path.exists():
        return None
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError:
        return None


def backup_config(path: Path) -> Path | None:
    """Copy `path` next to itself with a timestamp suffix.

    Returns:
        The backup path, or None if there was nothing to back up
    """
    if not path.exists():
        return None
    backup_path = path.with_name(f"{path.name}.{datetime.now():%Y%m%d-%H%M%S}.bak")
    shutil.copy2(path, backup_path)
    return backup_path


def _format_value(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    # JSON strings are valid TOML basic strings
    return json.dumps(str(value))


def generate_toml(config: dict[str, dict[str, Any]]) -> str:
    """Render a configuration made of flat sections as TOML."""
    blocks = []
    for section, values in config.items():
        lines = [f"[{section}]"]
        lines.extend(f"{key} = {_format_value(value)}" for key, value in values.items())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def write_config(config: dict[str, dict[str, Any]], output: Path | None = None) -> tuple[Path, str]:
    """Write `config` to `output` (default path if not set).

    Returns:
        The written path and its content
    """
    path = output or get_config_path()
    content = generate_toml(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path, content
