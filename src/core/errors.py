"""fwprep exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class PrepError(Exception):
    """Base exception for all fwprep failures."""


class PrepConfigError(PrepError):
    """Raised for invalid runtime configuration or pipeline declarations."""


class StepError(PrepError):
    """Raised when a step handler cannot complete its own work."""


class ExternalOperationError(PrepError):
    """Raised when an external command or fetch reports failure.

    Attributes:
        operation: Human-readable identity of the failed operation.
        returncode: Status reported by the operation, passed through as
            the process exit code.
    """

    def __init__(self, operation: str, returncode: int, detail: str | None = None) -> None:
        self.operation = operation
        self.returncode = returncode
        self.detail = detail
        message = f"Operation '{operation}' failed with status {returncode}."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
