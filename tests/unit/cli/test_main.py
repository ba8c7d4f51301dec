"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from cli.main import build_parser, main
from core.constants import DEFAULT_BUILD_DIR, DEFAULT_REPO_BRANCH, UNSET_COMMIT_LITERAL
from steps.catalog import BUILTIN_HANDLERS, DEFAULT_PIPELINE
from tests.fixture_paths import pipeline_fixture


def test_cli_steps_lists_registered_handlers(capsys: pytest.CaptureFixture[str]) -> None:
    """Steps command should print every handler name in sorted order."""
    exit_code = main(["steps"])
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0 and output == sorted(BUILTIN_HANDLERS)


def test_cli_plan_prints_default_dispositions(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Plan command should list every default step with its disposition."""
    exit_code = main(["plan", "https://example.invalid/r.git", "main", str(tmp_path)])
    rows = [line.split("\t") for line in capsys.readouterr().out.strip().splitlines()]

    assert exit_code == 0 and len(rows) == len(DEFAULT_PIPELINE)
    assert rows[0] == ["run", "clone_main_repo"]
    assert ["skip", "set_kernel_vermagic"] in rows


def test_cli_plan_applies_override_patterns(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Plan should reflect both disabled and force-enabled steps."""
    main(
        [
            "plan",
            "https://example.invalid/r.git",
            "main",
            str(tmp_path),
            "none",
            "default.config",
            "update_golang,update_lucky",
            "set_kernel_vermagic",
        ]
    )
    rows = {}
    for line in capsys.readouterr().out.strip().splitlines():
        disposition, name = line.split("\t")[:2]
        rows[name] = disposition

    assert (
        rows["update_golang"] == "skip"
        and rows["update_lucky"] == "skip"
        and rows["set_kernel_vermagic"] == "force-run"
        and rows["add_kernel_modules"] == "skip"
    )


def test_cli_plan_marks_steps_without_handlers(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Plan should flag declarations the registry cannot dispatch."""
    main(["plan", "--pipeline-file", str(pipeline_fixture("unknown_step.yaml"))])
    output = capsys.readouterr().out.strip().splitlines()

    assert output == ["run\tclean_workspace", "run\trenamed_step\t(no handler)"]


def test_run_parameters_have_documented_defaults() -> None:
    """Every positional run parameter should fall back to a default."""
    args = build_parser().parse_args(["run"])

    assert (
        args.repo_branch == DEFAULT_REPO_BRANCH
        and args.build_dir == DEFAULT_BUILD_DIR
        and args.commit_hash == UNSET_COMMIT_LITERAL
        and args.disabled_steps == ""
        and args.enabled_steps == ""
        and args.kernel_vermagic == ""
        and args.kernel_modules == ""
    )
