"""Declarative option schema and its validator.

A schema (`ConfigItems`) lists the `ConfigField` of a section. It provides the
defaults read by `Configuration`, the checks run by `ConfigValidator` when the
file is loaded, and the questions of the quickstart wizard.
"""

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import FALSY_WORDS, TRUTHY_WORDS

__all__ = ["ConfigField", "ConfigItems", "ConfigValidator", "format_config_error"]


@dataclass
class ConfigField:
    """One option of a section.

    Attributes:
        name: The option key
        field_type: Expected type (str, int or bool)
        required: Whether the option must be set
        default: Value used when the option is not set
        description: Short help, used as the wizard question
        choices: Accepted values, if restricted
        validator: Extra check returning a list of problems
    """

    name: str
    field_type: type = str
    required: bool = False
    default: Any = None
    description: str = ""
    choices: list | None = None
    validator: Callable[[Any], list[str]] | None = None


class ConfigItems(list):
    """The fields of a section."""

    def __init__(self, *fields: ConfigField) -> None:
        super().__init__(fields)

    def get(self, name: str) -> ConfigField | None:
        return next((f for f in self if f.name == name), None)


def _find_similar_key(unknown_key: str, known_keys: list[str]) -> str | None:
    """Return the known key closest to `unknown_key`, if any is close enough."""
    return next(iter(difflib.get_close_matches(unknown_key, known_keys, n=1)), None)


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Build the message reported for an invalid option."""
    text = f"[{section}] Config error for '{field}': {message}"
    return f"{text} -> {suggestion}" if suggestion else text


def _type_hint(field_def: ConfigField) -> str:
    if field_def.field_type is bool:
        return "Use true/false (without quotes)"
    if field_def.field_type is int:
        return f"Use {field_def.name} = 42 (without quotes)"
    return f'Use {field_def.name} = "value"'


def _has_type(field_def: ConfigField, value: Any) -> bool:  # noqa: ANN401
    expected = field_def.field_type
    if expected is bool:
        return isinstance(value, bool) or (isinstance(value, str) and value.lower() in TRUTHY_WORDS | FALSY_WORDS)
    if expected is int:
        if isinstance(value, bool):
            return False
        try:
            int(value)
        except (TypeError, ValueError):
            return False
        return True
    if expected is str:
        return isinstance(value, str)
    return True


class ConfigValidator:
    """Checks one section against its schema."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger

    def _error(self, field_def: ConfigField, message: str, suggestion: str = "") -> str:
        return format_config_error(self.section, field_def.name, message, suggestion)

    def check_field(self, field_def: ConfigField) -> list[str]:
        """Return the problems of one option (empty when valid or unset)."""
        value = self.config.get(field_def.name)
        if value is None:
            return [self._error(field_def, "Missing required field")] if field_def.required else []

        if not _has_type(field_def, value):
            expected = field_def.field_type.__name__
            return [self._error(field_def, f"Expected {expected}, got {type(value).__name__}", _type_hint(field_def))]

        errors = []
        if field_def.choices is not None and value not in field_def.choices:
            options = ", ".join(repr(c) for c in field_def.choices)
            errors.append(self._error(field_def, f"Invalid value {value!r}", f"Valid options: {options}"))
        if field_def.validator:
            errors.extend(self._error(field_def, problem) for problem in field_def.validator(value))
        return errors

    def validate(self, schema: ConfigItems) -> list[str]:
        """Return every problem found in the section."""
        return [error for field_def in schema for error in self.check_field(field_def)]

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log a warning for each option the schema doesn't know.

        Returns:
            The warnings
        """
        known_keys = [f.name for f in schema]
        warnings = []
        for key in self.config:
            if key in known_keys:
                continue
            similar = _find_similar_key(key, known_keys)
            if similar:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{similar}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}' - will be ignored"
            self.log.warning(msg)
            warnings.append(msg)
        return warnings
