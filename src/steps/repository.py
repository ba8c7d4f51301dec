"""Main repository checkout and workspace reset steps."""

from __future__ import annotations

import shutil

from core.config import ExecutionContext
from core.logging_config import get_logger
from steps.commands import capture_command, clone_repo, run_command

_LOGGER = get_logger(__name__)


def clone_main_repo(context: ExecutionContext) -> None:
    """Clone the firmware tree unless the build directory already exists."""
    if context.build_dir.is_dir():
        _LOGGER.info("main_repo_present", build_dir=context.build_dir)
        return
    clone_repo(context.build_dir, context.repo_url, context.repo_branch)


def clean_workspace(context: ExecutionContext) -> None:
    """Remove stale build config, temp files and logs from the tree."""
    build_dir = context.build_dir
    (build_dir / ".config").unlink(missing_ok=True)
    tmp_dir = build_dir / "tmp"
    if tmp_dir.exists():
        shutil.rmtree(tmp_dir)
    tmp_dir.mkdir(parents=True)
    (tmp_dir / ".build").write_text("1\n", encoding="utf-8")
    logs_dir = build_dir / "logs"
    if logs_dir.is_dir():
        for entry in logs_dir.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()


def reset_repo_state(context: ExecutionContext) -> None:
    """Hard reset the tree, pull, and check out the pinned commit if any."""
    build_dir = context.build_dir
    status, _ = capture_command(["git", "symbolic-ref", "-q", "HEAD"], cwd=build_dir)
    if status != 0:
        _LOGGER.info("repo_detached_head_reset")
        run_command(["git", "reset", "--hard", "HEAD"], cwd=build_dir)
    else:
        _LOGGER.info("repo_branch_reset", branch=context.repo_branch)
        run_command(["git", "reset", "--hard", f"origin/{context.repo_branch}"], cwd=build_dir)
    run_command(["git", "clean", "-f", "-d"], cwd=build_dir)
    run_command(["git", "pull"], cwd=build_dir)
    if context.commit_hash:
        _LOGGER.info("repo_commit_checkout", commit=context.commit_hash)
        run_command(["git", "checkout", context.commit_hash], cwd=build_dir)
