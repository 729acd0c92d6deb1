"""Ask the schema fields with questionary prompts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import questionary
from questionary import Choice

if TYPE_CHECKING:
    from ..validation import ConfigField, ConfigItems


def field_to_question(field: ConfigField, current_value: Any = None) -> Any | None:  # noqa: ANN401
    """Prompt for `field`, proposing `current_value` or the field default.

    Returns:
        The answer, None when the user cancels or leaves it blank
    """
    default = field.default if current_value is None else current_value
    prompt = field.description or f"Enter {field.name}"

    if field.choices:
        return questionary.select(
            prompt,
            choices=[Choice(title=str(choice), value=choice) for choice in field.choices],
            default=default if default in field.choices else None,
        ).ask()
    if field.field_type is bool:
        answer = questionary.confirm(prompt, default=bool(default)).ask()
        return None if answer is None else bool(answer)
    if field.field_type is int:
        return _ask_int(prompt, default, field)
    answer = questionary.text(prompt, default="" if default is None else str(default)).ask()
    return answer or None


def _ask_int(question: str, default: Any, field: ConfigField) -> int | None:  # noqa: ANN401
    """Prompt until the answer is an integer accepted by the field validator."""
    proposal = "" if default is None else str(default)
    while True:
        answer = questionary.text(question, default=proposal).ask()
        if not answer:
            return None
        try:
            value = int(answer)
        except ValueError:
            questionary.print("Please enter a valid integer.", style="fg:red")
            continue
        problems = field.validator(value) if field.validator else []
        if not problems:
            return value
        questionary.print(f"{field.name} {problems[0]}.", style="fg:red")


def ask_options(schema: ConfigItems, current: dict | None = None) -> dict:
    """Ask every field of `schema`.

    Args:
        schema: The section schema
        current: Values of the existing configuration, proposed as defaults

    Returns:
        The answers which differ from the schema defaults
    """
    current = current or {}
    answers = {}
    for field in schema:
        value = field_to_question(field, current.get(field.name))
        if value is not None and value != field.default:
            answers[field.name] = value
    return answers
