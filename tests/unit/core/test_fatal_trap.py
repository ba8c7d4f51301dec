"""Unit tests for the top-level fatal error trap."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import ExternalOperationError, PrepConfigError, StepError
from core.fatal_trap import FatalErrorTrap, describe_location, exit_code_for


class _FakeLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def error(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))


def _raise_external() -> None:
    raise ExternalOperationError("git clone --depth 1 -b main repo build", 128)


def test_guard_returns_zero_on_success() -> None:
    """A run without failures should exit cleanly."""
    assert FatalErrorTrap().guard(lambda: None) == 0


def test_guard_passes_operation_status_through(monkeypatch: pytest.MonkeyPatch) -> None:
    """External failures should exit with the operation's own status."""
    fake_logger = _FakeLogger()
    monkeypatch.setattr("core.fatal_trap._LOGGER", fake_logger)
    trap = FatalErrorTrap(Path("/tmp/run.log"))
    trap.record_step("clone_main_repo")

    exit_code = trap.guard(_raise_external)

    assert exit_code == 128
    event, fields = fake_logger.events[0]
    assert (
        len(fake_logger.events) == 1
        and event == "pipeline_failed"
        and fields["step"] == "clone_main_repo"
        and fields["operation"] == "git clone --depth 1 -b main repo build"
        and fields["exit_code"] == 128
        and fields["log_file"] == Path("/tmp/run.log")
        and "_raise_external" in str(fields["location"])
    )


@pytest.mark.parametrize(
    "error",
    [PrepConfigError("bad declaration"), StepError("empty download"), RuntimeError("boom")],
)
def test_non_external_failures_map_to_generic_status(error: Exception) -> None:
    """Failures without their own status should exit with 1."""
    assert exit_code_for(error) == 1


def test_signal_statuses_follow_shell_convention() -> None:
    """Negative subprocess statuses should map to 128 plus the signal."""
    assert exit_code_for(ExternalOperationError("git pull", -9)) == 137


def test_guard_does_not_intercept_keyboard_interrupt() -> None:
    """Operator interrupts should terminate the process directly."""

    def _interrupt() -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        FatalErrorTrap().guard(_interrupt)


def test_describe_location_without_traceback() -> None:
    """Errors that were never raised have no location."""
    assert describe_location(RuntimeError("unraised")) == "-"
