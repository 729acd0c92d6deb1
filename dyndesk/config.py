"""The `[dyndesk]` section as a dict with typed getters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import logging

    from .validation import ConfigItems

__all__ = ["FALSY_WORDS", "TRUTHY_WORDS", "Configuration", "to_bool"]

ConfigValue = int | float | bool | str

TRUTHY_WORDS = frozenset({"true", "yes", "on", "1", "enabled"})
FALSY_WORDS = frozenset({"false", "no", "off", "0", "disabled"})


def to_bool(value: ConfigValue | None, default: bool = False) -> bool:
    """Interpret `value` as a boolean.

    Strings are read as words: blank and `FALSY_WORDS` are False, anything
    else is True. None gives `default`.
    """
    if value is None:
        return default
    if isinstance(value, str):
        word = value.strip().lower()
        return bool(word) and word not in FALSY_WORDS
    return bool(value)


class Configuration(dict):
    """Raw option values, falling back to the schema defaults on read."""

    def __init__(self, *args: Any, logger: logging.Logger, schema: ConfigItems | None = None, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(*args, **kwargs)
        self.log = logger
        self.defaults: dict[str, ConfigValue] = {}
        if schema:
            self.defaults = {f.name: f.default for f in schema if f.default is not None}

    def get(self, name: str, default: ConfigValue | None = None) -> ConfigValue | None:  # type: ignore[override]
        """Return the configured value, else the schema default, else `default`."""
        if name in self:
            return self[name]
        return self.defaults.get(name, default)

    def get_bool(self, name: str, default: bool = False) -> bool:
        return to_bool(self.get(name), default)

    def get_int(self, name: str, default: int = 0) -> int:
        """Return an integer, `default` if the value is missing or not a number."""
        value = self.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            self.log.warning("%s should be a number, not %r", name, value)
            return default

    def get_str(self, name: str, default: str = "") -> str:
        value = self.get(name)
        return default if value is None else str(value)
