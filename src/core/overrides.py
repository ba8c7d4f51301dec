"""Per-run step disposition resolution.

A declaration is either a default step or an optional step (declared with a
leading ``~``). Default steps run unless the disabled pattern names them;
optional steps are skipped unless the enabled pattern names them. The two
levers are independent: the disabled pattern never touches optional steps
and the enabled pattern never touches default steps.

Patterns are whitespace or comma separated name tokens. A token matches a
step when it equals the bare step name or, when it contains glob wildcards,
when it matches as a shell-style glob. Empty patterns match nothing.
"""

from __future__ import annotations

import enum
import fnmatch
import re
from dataclasses import dataclass

from core.constants import OPTIONAL_STEP_MARKER
from core.errors import PrepConfigError

_PATTERN_SEPARATORS = re.compile(r"[\s,]+")
_GLOB_CHARACTERS = frozenset("*?[")


class Disposition(enum.Enum):
    """Resolved decision for one declared step in a given run."""

    RUN = "run"
    SKIP = "skip"
    FORCE_RUN = "force-run"

    @property
    def executes(self) -> bool:
        return self is not Disposition.SKIP


@dataclass(frozen=True)
class StepDeclaration:
    """One declared pipeline step, as written in the pipeline."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise PrepConfigError(
                f"Step declaration must be a string, got {type(self.name).__name__}."
            )
        name = self.name.strip()
        bare = name[len(OPTIONAL_STEP_MARKER) :] if name.startswith(OPTIONAL_STEP_MARKER) else name
        if not bare or bare.startswith(OPTIONAL_STEP_MARKER):
            raise PrepConfigError(
                f"Malformed step declaration '{self.name}'. "
                f"Use 'name' or '{OPTIONAL_STEP_MARKER}name'."
            )
        if any(char.isspace() for char in bare):
            raise PrepConfigError(
                f"Step declaration '{self.name}' contains whitespace. Use one name per step."
            )
        object.__setattr__(self, "name", name)

    @property
    def optional(self) -> bool:
        return self.name.startswith(OPTIONAL_STEP_MARKER)

    @property
    def bare_name(self) -> str:
        return self.name[len(OPTIONAL_STEP_MARKER) :] if self.optional else self.name


def parse_pattern(pattern: str | None) -> tuple[str, ...]:
    """Split override pattern text into name tokens."""
    if not pattern:
        return ()
    return tuple(token for token in _PATTERN_SEPARATORS.split(pattern.strip()) if token)


def pattern_matches(step_name: str, pattern: str | None) -> bool:
    """Return True when any pattern token names ``step_name``."""
    for token in parse_pattern(pattern):
        if token == step_name:
            return True
        if _GLOB_CHARACTERS.intersection(token) and fnmatch.fnmatchcase(step_name, token):
            return True
    return False


def resolve_disposition(
    declaration: StepDeclaration,
    disabled_pattern: str | None,
    enabled_pattern: str | None,
) -> Disposition:
    """Classify one declaration as run, skip, or force-run."""
    if declaration.optional:
        if pattern_matches(declaration.bare_name, enabled_pattern):
            return Disposition.FORCE_RUN
        return Disposition.SKIP
    if pattern_matches(declaration.bare_name, disabled_pattern):
        return Disposition.SKIP
    return Disposition.RUN
