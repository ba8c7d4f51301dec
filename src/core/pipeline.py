"""Sequential pipeline execution engine.

This module walks declared steps in order, resolves each step's
disposition, and dispatches the ones that run. It never catches handler
failures; they propagate to the fatal error trap installed by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from core.config import ExecutionContext
from core.logging_config import get_logger
from core.overrides import Disposition, resolve_disposition
from core.pipeline_spec import Pipeline
from core.progress import ProgressReporter
from core.step_registry import DispatchOutcome, StepRegistry

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class PipelineRunResult:
    """Ordered outcome of one completed pipeline run."""

    executed: tuple[str, ...]
    skipped: tuple[str, ...]
    missing: tuple[str, ...]


def plan_pipeline(
    pipeline: Pipeline, context: ExecutionContext
) -> tuple[tuple[str, Disposition], ...]:
    """Resolve every declaration's disposition without executing anything."""
    return tuple(
        (
            declaration.bare_name,
            resolve_disposition(declaration, context.disabled_steps, context.enabled_steps),
        )
        for declaration in pipeline
    )


class PipelineDriver:
    """Drive one pass over a pipeline declaration."""

    def __init__(
        self,
        registry: StepRegistry,
        progress: ProgressReporter | None = None,
        on_step: Callable[[str], None] | None = None,
    ) -> None:
        self._registry = registry
        self._progress = progress if progress is not None else ProgressReporter()
        self._on_step = on_step

    def run(self, pipeline: Pipeline, context: ExecutionContext) -> PipelineRunResult:
        total = len(pipeline)
        executed: list[str] = []
        skipped: list[str] = []
        missing: list[str] = []
        _LOGGER.info("pipeline_started", steps=total, build_dir=context.build_dir)
        for index, declaration in enumerate(pipeline, start=1):
            name = declaration.bare_name
            self._progress.report(index, total, name)
            if self._on_step is not None:
                self._on_step(name)
            disposition = resolve_disposition(
                declaration, context.disabled_steps, context.enabled_steps
            )
            if disposition is Disposition.SKIP:
                _LOGGER.info("step_skipped", step=name, optional=declaration.optional)
                skipped.append(name)
                continue
            _LOGGER.info("step_executing", step=name, disposition=disposition.value)
            outcome = self._registry.dispatch(name, context)
            if outcome is DispatchOutcome.NOT_FOUND:
                missing.append(name)
            else:
                executed.append(name)
        _LOGGER.success(
            "pipeline_completed",
            executed=len(executed),
            skipped=len(skipped),
            missing=len(missing),
        )
        return PipelineRunResult(
            executed=tuple(executed),
            skipped=tuple(skipped),
            missing=tuple(missing),
        )
