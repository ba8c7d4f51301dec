"""Typed pipeline declaration parsing.

This module turns step-name lists, either built in or loaded from a YAML
pipeline file, into validated step declarations for the pipeline driver.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Sequence, cast

import yaml

from core.constants import PIPELINE_FILE_VERSION
from core.errors import PrepConfigError
from core.overrides import StepDeclaration

Pipeline = tuple[StepDeclaration, ...]


def build_pipeline(step_names: Iterable[str]) -> Pipeline:
    """Validate an ordered sequence of declared step names.

    Raises:
        PrepConfigError: If any declaration is malformed.
    """
    return tuple(StepDeclaration(name) for name in step_names)


def load_pipeline_file(pipeline_path: str | Path) -> Pipeline:
    """Load and validate a YAML pipeline declaration from disk.

    Args:
        pipeline_path: File path to the YAML declaration.

    Returns:
        Ordered, validated step declarations.

    Raises:
        PrepConfigError: If the file is unreadable or fails schema checks.
    """
    payload = _load_yaml_payload(Path(pipeline_path))
    root_mapping = _expect_mapping(payload, "pipeline file root")
    _validate_root_keys(root_mapping)
    _parse_version(root_mapping)
    return _parse_steps(root_mapping)


def _load_yaml_payload(pipeline_file: Path) -> object:
    resolved = pipeline_file.expanduser().resolve()
    if not resolved.exists():
        raise PrepConfigError(
            f"Pipeline file does not exist at {resolved}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(resolved.read_text(encoding="utf-8")))
    except OSError as error:
        raise PrepConfigError(
            f"Failed to read pipeline file at {resolved}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise PrepConfigError(
            f"Failed to parse YAML pipeline file at {resolved}: {error}. Fix YAML syntax."
        ) from error
    if payload is None:
        raise PrepConfigError(f"Pipeline file at {resolved} is empty. Define 'version' and 'steps'.")
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        for key in value:
            if not isinstance(key, str):
                raise PrepConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
        return cast(Mapping[str, object], value)
    raise PrepConfigError(f"Invalid {context}: expected object mapping, got {type(value).__name__}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise PrepConfigError(
            f"Pipeline field 'version' must be an integer. Set version: {PIPELINE_FILE_VERSION}."
        )
    if raw_version != PIPELINE_FILE_VERSION:
        raise PrepConfigError(
            f"Unsupported pipeline version {raw_version}. Use version: {PIPELINE_FILE_VERSION}."
        )
    return raw_version


def _parse_steps(root_mapping: Mapping[str, object]) -> Pipeline:
    raw_steps = root_mapping.get("steps")
    if raw_steps is None:
        raise PrepConfigError("Pipeline file missing required field 'steps'.")
    if not isinstance(raw_steps, Sequence) or isinstance(raw_steps, (str, bytes)):
        raise PrepConfigError(
            f"Invalid pipeline steps: expected list, got {type(raw_steps).__name__}."
        )
    if len(raw_steps) == 0:
        raise PrepConfigError("Pipeline field 'steps' must include at least one step.")
    for index, raw_step in enumerate(raw_steps):
        if not isinstance(raw_step, str):
            raise PrepConfigError(
                f"Invalid pipeline step #{index + 1}: expected string, "
                f"got {type(raw_step).__name__}."
            )
    return build_pipeline(cast(Sequence[str], raw_steps))


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    allowed_keys = {"version", "steps"}
    unknown_keys = sorted(set(root_mapping) - allowed_keys)
    if unknown_keys:
        raise PrepConfigError(f"Pipeline file contains unknown root fields: {', '.join(unknown_keys)}.")
