"""CLI command printing per-step dispositions without executing anything."""

from __future__ import annotations

import argparse
from typing import Any

from cli.run_command import add_run_parameters, build_context_from_args, load_pipeline
from core.config import PrepConfig
from core.pipeline import plan_pipeline
from steps.catalog import build_default_registry


def add_plan_command(subparsers: Any) -> None:
    """Register plan subcommand."""
    parser = subparsers.add_parser(
        "plan",
        help="Show which steps a run with these parameters would execute",
    )
    add_run_parameters(parser)


def run_plan_command(config: PrepConfig, args: argparse.Namespace) -> int:
    """Print ``disposition<TAB>step`` rows in pipeline order."""
    context = build_context_from_args(config, args)
    pipeline = load_pipeline(args.pipeline_file)
    registry = build_default_registry()
    for name, disposition in plan_pipeline(pipeline, context):
        marker = "" if name in registry else "\t(no handler)"
        print(f"{disposition.value}\t{name}{marker}")
    return 0
