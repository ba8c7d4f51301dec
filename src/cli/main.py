"""fwprep CLI entry points.

This module exposes the run, plan and steps commands.
It maps argparse commands onto the pipeline engine.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from cli.plan_command import add_plan_command, run_plan_command
from cli.run_command import add_run_command, run_run_command
from cli.steps_command import add_steps_command, run_steps_command
from core.config import PrepConfig


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="fwprep", description="Prepare an ImmortalWrt/OpenWrt source tree for a custom build"
    )
    parser.add_argument("--log-dir", help="Override FWPREP_LOG_DIR for this command")
    parser.add_argument("--patches-dir", help="Override FWPREP_PATCHES_DIR for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    add_run_command(subparsers)
    add_plan_command(subparsers)
    add_steps_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the fwprep CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.log_dir, args.patches_dir)
    if args.command == "run":
        return run_run_command(config, args)
    if args.command == "plan":
        return run_plan_command(config, args)
    if args.command == "steps":
        return run_steps_command()
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(log_dir: str | None, patches_dir: str | None) -> PrepConfig:
    """Build runtime config with optional directory overrides."""
    config = PrepConfig.from_env()
    if log_dir:
        config = replace(config, log_dir=Path(log_dir).expanduser().resolve())
    if patches_dir:
        config = replace(config, patches_dir=Path(patches_dir).expanduser().resolve())
    return config
