"""Main wizard flow for `dyndesk quickstart`."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

import questionary
from questionary import Choice

from ..adapters.ewmh import is_x11_session
from ..constants import KWIN_DESKTOP_INTERFACE, KWIN_DESKTOP_PATH, KWIN_SERVICE
from ..models import BackendName
from ..schema import DYNDESK_CONFIG_SCHEMA, SECTION
from .generator import backup_config, generate_toml, get_config_path, load_existing_config, write_config
from .questions import ask_options

if TYPE_CHECKING:
    from pathlib import Path

DETECTION_COMMANDS = {
    BackendName.KWIN: ["busctl", "--user", "introspect", KWIN_SERVICE, KWIN_DESKTOP_PATH, KWIN_DESKTOP_INTERFACE],
    BackendName.EWMH: ["wmctrl", "-m"],
}


def print_banner() -> None:
    """Print the wizard banner."""
    questionary.print("\n╭─────────────────────────────────────╮", style="bold fg:cyan")
    questionary.print("│      Dyndesk Quickstart Wizard      │", style="bold fg:cyan")
    questionary.print("╰─────────────────────────────────────╯\n", style="bold fg:cyan")


def detect_backend() -> BackendName | None:
    """Return the first backend whose tools answer in this session, None outside X11."""
    if not is_x11_session():
        return None
    for backend, command in DETECTION_COMMANDS.items():
        try:
            result = subprocess.run(command, capture_output=True, timeout=2, check=False)  # noqa: S603
        except (FileNotFoundError, subprocess.TimeoutExpired):
            continue
        if result.returncode == 0:
            return backend
    return None


def handle_existing_config(config_path: Path) -> dict | None:
    """Handle existing configuration file.

    Args:
        config_path: Path to check

    Returns:
        The current `[dyndesk]` values, or None to abort
    """
    existing = load_existing_config(config_path)
    if not existing:
        return {}

    questionary.print(f"\nExisting config found at: {config_path}", style="fg:yellow")
    action = questionary.select(
        "What would you like to do?",
        choices=[
            Choice(title="Create backup and overwrite", value="overwrite"),
            Choice(title="Cancel", value="cancel"),
        ],
    ).ask()

    if action == "cancel" or action is None:
        return None

    backup_path = backup_config(config_path)
    if backup_path:
        questionary.print(f"Backup created: {backup_path}", style="fg:green")
    return dict(existing.get(SECTION, {}))


def run_wizard(dry_run: bool = False, output: Path | None = None) -> None:
    """Run the configuration wizard.

    Args:
        dry_run: If True, only preview config without writing
        output: Custom output path
    """
    print_banner()

    detected = detect_backend()
    if detected:
        questionary.print(f"Detected: {detected}", style="fg:green")
    else:
        questionary.print("No supported window manager detected, dyndesk needs KWin or wmctrl.", style="fg:yellow")

    config_path = output or get_config_path()
    current = {} if dry_run else handle_existing_config(config_path)
    if current is None:
        return

    config = {SECTION: ask_options(DYNDESK_CONFIG_SCHEMA, current)}

    if dry_run:
        questionary.print("\n── Generated Configuration (dry-run) ──", style="bold")
        print(generate_toml(config))
        return

    path, _content = write_config(config, output)
    questionary.print(f"\n✓ Configuration written to: {path}", style="fg:green bold")
    questionary.print("\nTo start dyndesk, run:", style="bold")
    questionary.print("  dyndesk", style="fg:cyan")
