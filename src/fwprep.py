"""Public SDK surface for fwprep.

This module provides a stable import path for embedding the pipeline
engine. It re-exports the context, registry, driver and trap types.
"""

from __future__ import annotations

from core.config import ExecutionContext, PrepConfig, build_execution_context
from core.errors import ExternalOperationError, PrepConfigError, PrepError, StepError
from core.fatal_trap import FatalErrorTrap
from core.logging_config import configure_run_logging
from core.overrides import Disposition, StepDeclaration, resolve_disposition
from core.pipeline import PipelineDriver, PipelineRunResult, plan_pipeline
from core.pipeline_spec import build_pipeline, load_pipeline_file
from core.progress import ProgressReporter
from core.step_registry import DispatchOutcome, StepRegistry
from steps.catalog import DEFAULT_PIPELINE, build_default_registry

__all__ = [
    "DEFAULT_PIPELINE",
    "DispatchOutcome",
    "Disposition",
    "ExecutionContext",
    "ExternalOperationError",
    "FatalErrorTrap",
    "PipelineDriver",
    "PipelineRunResult",
    "PrepConfig",
    "PrepConfigError",
    "PrepError",
    "ProgressReporter",
    "StepDeclaration",
    "StepError",
    "StepRegistry",
    "build_default_registry",
    "build_execution_context",
    "build_pipeline",
    "configure_run_logging",
    "load_pipeline_file",
    "plan_pipeline",
    "resolve_disposition",
]
