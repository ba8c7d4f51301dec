"""Top-level failure boundary for pipeline runs.

The trap wraps the whole run once. Any exception that escapes the driver
is summarized in a single ERROR line and converted into the process exit
status: external operation failures pass their own status through, every
other failure maps to 1.
"""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import Callable

from core.errors import ExternalOperationError
from core.logging_config import get_logger

GENERIC_FAILURE_EXIT_CODE = 1

_LOGGER = get_logger(__name__)


class FatalErrorTrap:
    """Record the last-known step and halt deterministically on failure."""

    def __init__(self, log_path: Path | None = None) -> None:
        self.log_path = log_path
        self.current_step: str | None = None

    def record_step(self, step_name: str) -> None:
        """Remember ``step_name`` as the last step entered."""
        self.current_step = step_name

    def guard(self, run: Callable[[], object]) -> int:
        """Invoke ``run`` and return the process exit code."""
        try:
            run()
        except Exception as error:
            return self.handle(error)
        return 0

    def handle(self, error: Exception) -> int:
        """Log the single fatal line for ``error`` and return its exit code."""
        exit_code = exit_code_for(error)
        _LOGGER.error(
            "pipeline_failed",
            step=self.current_step or "-",
            operation=describe_operation(error),
            location=describe_location(error),
            exit_code=exit_code,
            log_file=self.log_path or "-",
        )
        return exit_code


def exit_code_for(error: BaseException) -> int:
    """Map a fatal error onto the process exit status.

    Args:
        error: Exception that escaped the pipeline.

    Returns:
        Operation status, shell-style signal status, or the generic failure code.
    """
    if isinstance(error, ExternalOperationError) and error.returncode != 0:
        # negative statuses come from signals; report them the way shells do
        if error.returncode < 0:
            return 128 - error.returncode
        return error.returncode
    return GENERIC_FAILURE_EXIT_CODE


def describe_operation(error: BaseException) -> str:
    """Name the failing operation for the fatal log line."""
    if isinstance(error, ExternalOperationError):
        return error.operation
    return f"{type(error).__name__}: {error}"


def describe_location(error: BaseException) -> str:
    """Return ``file:line (function)`` of the innermost traceback frame."""
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return "-"
    frame = frames[-1]
    return f"{frame.filename}:{frame.lineno} ({frame.name})"
