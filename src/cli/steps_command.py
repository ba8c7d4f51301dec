"""CLI command listing registered step handlers."""

from __future__ import annotations

from typing import Any

from steps.catalog import build_default_registry


def add_steps_command(subparsers: Any) -> None:
    """Register steps subcommand."""
    subparsers.add_parser("steps", help="List registered step handler names")


def run_steps_command() -> int:
    """Print every registered step name in sorted order.

    Returns:
        Process exit code.
    """
    for name in build_default_registry().available():
        print(name)
    return 0
