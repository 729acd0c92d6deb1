"""`dyndesk quickstart`: interactive creation of the configuration file."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

USAGE = """Usage: dyndesk quickstart [--dry-run] [--output PATH]

Asks a few questions and writes the dyndesk configuration file.

  --dry-run        print the configuration instead of writing it
  --output PATH    write to PATH instead of the default location
"""


@dataclass
class Args:
    """Wizard options."""

    dry_run: bool = False
    output: Path | None = None


def parse_args(argv: list[str]) -> Args:
    """Read the wizard options from `argv` (the arguments after "quickstart")."""
    args = Args(dry_run="--dry-run" in argv)
    if "--output" in argv:
        position = argv.index("--output") + 1
        if position < len(argv):
            args.output = Path(argv[position])
    return args


def main(argv: list[str]) -> None:
    """Run the wizard."""
    if "--help" in argv or "-h" in argv:
        print(USAGE, end="")
        sys.exit(0)

    from .wizard import run_wizard  # noqa: PLC0415  # pylint: disable=import-outside-toplevel

    args = parse_args(argv)
    try:
        run_wizard(dry_run=args.dry_run, output=args.output)
    except KeyboardInterrupt:
        print("\n\nWizard cancelled.")
        sys.exit(1)
