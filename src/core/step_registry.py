"""Name-to-handler registry and dispatcher for pipeline steps.

The registry is built once at startup and is read-only during a run.
Dispatching an unregistered name is the one non-fatal failure in a run:
it logs a warning and reports ``NOT_FOUND`` so the pipeline can continue.
"""

from __future__ import annotations

import difflib
import enum
from typing import Callable, Iterable, Mapping

from core.config import ExecutionContext
from core.errors import PrepConfigError
from core.logging_config import get_logger

StepHandler = Callable[[ExecutionContext], None]

_LOGGER = get_logger(__name__)


class DispatchOutcome(enum.Enum):
    """Result of dispatching one step name."""

    EXECUTED = "executed"
    NOT_FOUND = "not_found"


class StepRegistry:
    """Mapping from bare step names to handler callables."""

    def __init__(self) -> None:
        self._handlers: dict[str, StepHandler] = {}

    @classmethod
    def from_mapping(cls, handlers: Mapping[str, StepHandler]) -> "StepRegistry":
        registry = cls()
        for name, handler in handlers.items():
            registry.register(name, handler)
        return registry

    def register(self, name: str, handler: StepHandler) -> None:
        """Register one handler under its exact bare name.

        Raises:
            PrepConfigError: If the name is blank, already registered, or
                the handler is not callable.
        """
        key = name.strip() if isinstance(name, str) else ""
        if not key:
            raise PrepConfigError("Step handler name must be a non-empty string.")
        if key in self._handlers:
            raise PrepConfigError(f"Duplicate step handler registration: {key}")
        if not callable(handler):
            raise PrepConfigError(f"Step handler for '{key}' is not callable.")
        self._handlers[key] = handler

    def get(self, name: str) -> StepHandler | None:
        """Return the handler for ``name``, or None when unregistered."""
        return self._handlers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def available(self) -> tuple[str, ...]:
        """Return registered step names in sorted order."""
        return tuple(sorted(self._handlers))

    def suggest(self, name: str, *, limit: int = 3) -> tuple[str, ...]:
        """Return registered names close to ``name``.

        Args:
            name: Unknown step name.
            limit: Maximum number of suggestions.

        Returns:
            Close matches, best first.
        """
        return tuple(difflib.get_close_matches(name, list(self._handlers), n=limit))

    def dispatch(self, name: str, context: ExecutionContext) -> DispatchOutcome:
        """Invoke the handler registered for ``name``.

        Handler exceptions propagate untouched to the caller.
        """
        handler = self._handlers.get(name)
        if handler is None:
            suggestions = self.suggest(name)
            _LOGGER.warning(
                "step_handler_missing",
                step=name,
                suggestions=",".join(suggestions) or "-",
            )
            return DispatchOutcome.NOT_FOUND
        handler(context)
        return DispatchOutcome.EXECUTED

    def missing(self, names: Iterable[str]) -> tuple[str, ...]:
        """Return names with no registered handler, preserving order."""
        return tuple(name for name in names if name not in self._handlers)
