"""Run command wiring.

This module registers the positional run parameters shared by the run and
plan subcommands and executes a full pipeline run inside the fatal error
trap.
"""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
from typing import Any

from core.config import ExecutionContext, PrepConfig, build_execution_context
from core.constants import (
    DEFAULT_BUILD_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_REPO_BRANCH,
    DEFAULT_REPO_URL,
    UNSET_COMMIT_LITERAL,
)
from core.fatal_trap import FatalErrorTrap
from core.logging_config import build_log_path, configure_run_logging, get_logger
from core.pipeline import PipelineDriver, PipelineRunResult
from core.pipeline_spec import Pipeline, build_pipeline, load_pipeline_file
from core.progress import ProgressReporter
from steps.catalog import DEFAULT_PIPELINE, build_default_registry

_LOGGER = get_logger(__name__)


def add_run_parameters(parser: argparse.ArgumentParser) -> None:
    """Register the positional run parameters, each with a default."""
    parser.add_argument("repo_url", nargs="?", default=DEFAULT_REPO_URL, help="Source repository URL")
    parser.add_argument("repo_branch", nargs="?", default=DEFAULT_REPO_BRANCH, help="Branch name")
    parser.add_argument("build_dir", nargs="?", default=DEFAULT_BUILD_DIR, help="Working directory")
    parser.add_argument(
        "commit_hash",
        nargs="?",
        default=UNSET_COMMIT_LITERAL,
        help=f"Commit pin, '{UNSET_COMMIT_LITERAL}' leaves the branch head",
    )
    parser.add_argument(
        "config_file", nargs="?", default=DEFAULT_CONFIG_FILE, help="Build configuration file"
    )
    parser.add_argument(
        "disabled_steps", nargs="?", default="", help="Default steps to skip (names or globs)"
    )
    parser.add_argument(
        "enabled_steps", nargs="?", default="", help="Optional steps to force (names or globs)"
    )
    parser.add_argument("kernel_vermagic", nargs="?", default="", help="Kernel vermagic hash")
    parser.add_argument("kernel_modules", nargs="?", default="", help="Kernel module packages")
    parser.add_argument("--pipeline-file", help="YAML pipeline declaration replacing the default")


def add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    parser = subparsers.add_parser("run", help="Prepare the firmware tree by running the pipeline")
    add_run_parameters(parser)
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")


def build_context_from_args(config: PrepConfig, args: argparse.Namespace) -> ExecutionContext:
    """Build the execution context from parsed run arguments.

    Args:
        config: Runtime config supplying directories and site defaults.
        args: Parsed run or plan arguments.

    Returns:
        Validated execution context.

    Raises:
        PrepConfigError: If a required parameter is blank.
    """
    return build_execution_context(
        config,
        repo_url=args.repo_url,
        repo_branch=args.repo_branch,
        build_dir=args.build_dir,
        commit_hash=args.commit_hash,
        config_file=args.config_file,
        disabled_steps=args.disabled_steps,
        enabled_steps=args.enabled_steps,
        kernel_vermagic=args.kernel_vermagic,
        kernel_modules=args.kernel_modules,
    )


def load_pipeline(pipeline_file: str | None) -> Pipeline:
    """Load the declared pipeline, defaulting to the built-in catalog order.

    Args:
        pipeline_file: Optional YAML pipeline path.

    Returns:
        Ordered step declarations.
    """
    if pipeline_file:
        return load_pipeline_file(pipeline_file)
    return build_pipeline(DEFAULT_PIPELINE)


def run_run_command(config: PrepConfig, args: argparse.Namespace) -> int:
    """Execute the pipeline and return the process exit code."""
    color = False if args.no_color else None
    log_path = build_log_path(config.log_dir, Path(args.build_dir).name, datetime.now())
    try:
        sink = configure_run_logging(log_path, color=color)
    except OSError as error:
        sink = configure_run_logging(None, color=color)
        try:
            return FatalErrorTrap().handle(error)
        finally:
            sink.close()
    trap = FatalErrorTrap(log_path)
    driver = PipelineDriver(
        build_default_registry(),
        ProgressReporter(color=color),
        on_step=trap.record_step,
    )

    def _run() -> PipelineRunResult:
        context = build_context_from_args(config, args)
        pipeline = load_pipeline(args.pipeline_file)
        _LOGGER.info(
            "run_started",
            repo=context.repo_url,
            branch=context.repo_branch,
            build_dir=context.build_dir,
            commit=context.commit_hash or UNSET_COMMIT_LITERAL,
            log_file=log_path,
        )
        return driver.run(pipeline, context)

    try:
        return trap.guard(_run)
    finally:
        sink.close()
