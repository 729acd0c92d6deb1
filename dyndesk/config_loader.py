"""Configuration file loading."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles
import aiofiles.os

from . import constants
from .models import DyndeskError

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader"]


class ConfigLoader:
    """Loads the TOML configuration file.

    A missing file is not an error: the daemon then runs with the schema
    defaults.
    """

    def __init__(self, log: logging.Logger) -> None:
        """Initialize the config loader.

        Args:
            log: Logger instance for status and error messages
        """
        self.log = log
        self._config: dict[str, Any] = {}

    @property
    def config(self) -> dict[str, Any]:
        """Return the last loaded configuration."""
        return self._config

    @staticmethod
    def resolve_path(config_filename: str | Path = "") -> Path:
        """Return the configuration path, expanding `~` and environment variables."""
        fname = str(config_filename or constants.CONFIG_FILE)
        return Path(os.path.expanduser(os.path.expandvars(fname)))

    async def load(self, config_filename: str | Path = "") -> dict[str, Any]:
        """Load the configuration file.

        Args:
            config_filename: Path to the config file, defaults to `CONFIG_FILE`

        Returns:
            The parsed configuration (empty if the file doesn't exist)

        Raises:
            DyndeskError: If the file has syntax errors
        """
        fname = self.resolve_path(config_filename)
        if not await aiofiles.os.path.exists(fname):
            self.log.info("No config file at %s, using defaults", fname)
            self._config = {}
            return self._config

        self.log.info("Loading %s", fname)
        async with aiofiles.open(fname, "rb") as f:
            data = await f.read()
        try:
            self._config = tomllib.loads(data.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            self.log.critical("Problem reading %s: %s", fname, e)
            raise DyndeskError from e
        return self._config
