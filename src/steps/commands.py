"""External command and fetch helpers shared by step handlers.

Every helper raises ExternalOperationError carrying the failed operation's
own status so the fatal error trap can pass it through as the exit code.
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
import time
from pathlib import Path
from typing import Sequence

import requests

from core.constants import (
    DOWNLOAD_CONNECT_TIMEOUT_SECONDS,
    DOWNLOAD_READ_TIMEOUT_SECONDS,
    DOWNLOAD_RETRIES,
    DOWNLOAD_RETRY_DELAY_SECONDS,
)
from core.errors import ExternalOperationError
from core.logging_config import get_logger

DOWNLOAD_FAILURE_STATUS = 22

_LOGGER = get_logger(__name__)


def run_command(args: Sequence[str], cwd: Path | None = None) -> None:
    """Run one external command, raising on nonzero status.

    Args:
        args: Command vector.
        cwd: Optional working directory.

    Raises:
        ExternalOperationError: If the command exits nonzero or cannot start.
    """
    command = shlex.join(args)
    _LOGGER.info("command_started", command=command, cwd=cwd or "-")
    try:
        completed = subprocess.run(list(args), cwd=cwd, check=False)
    except OSError as error:
        raise ExternalOperationError(command, 127, str(error)) from error
    if completed.returncode != 0:
        raise ExternalOperationError(command, completed.returncode)


def capture_command(args: Sequence[str], cwd: Path | None = None) -> tuple[int, str]:
    """Run a query command and return its status and stripped stdout."""
    try:
        completed = subprocess.run(
            list(args), cwd=cwd, check=False, capture_output=True, text=True
        )
    except OSError as error:
        raise ExternalOperationError(shlex.join(args), 127, str(error)) from error
    return completed.returncode, completed.stdout.strip()


def clone_repo(target_dir: Path, repo_url: str, branch: str = "main", depth: int = 1) -> None:
    """Replace ``target_dir`` with a fresh shallow clone."""
    if target_dir.exists():
        _LOGGER.info("clone_target_removed", path=target_dir)
        shutil.rmtree(target_dir)
    _LOGGER.info("repo_cloning", repo=repo_url, branch=branch)
    run_command(
        ["git", "clone", "--depth", str(depth), "-b", branch, repo_url, str(target_dir)]
    )


def download_with_retry(
    url: str,
    dest: Path,
    retries: int = DOWNLOAD_RETRIES,
    session: requests.Session | None = None,
) -> None:
    """Download ``url`` into ``dest`` with bounded retries.

    Raises:
        ExternalOperationError: When every attempt fails.
    """
    if session is None:
        with requests.Session() as http:
            _download(http, url, dest, retries)
        return
    _download(session, url, dest, retries)


def _download(http: requests.Session, url: str, dest: Path, retries: int) -> None:
    """Run the retry loop against an open session."""
    last_error = "no attempts made"
    for attempt in range(1, retries + 1):
        try:
            response = http.get(
                url,
                timeout=(DOWNLOAD_CONNECT_TIMEOUT_SECONDS, DOWNLOAD_READ_TIMEOUT_SECONDS),
            )
            response.raise_for_status()
        except requests.RequestException as error:
            last_error = str(error)
            _LOGGER.warning(
                "download_retry", url=url, attempt=attempt, retries=retries, error=last_error
            )
            if attempt < retries:
                time.sleep(DOWNLOAD_RETRY_DELAY_SECONDS)
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response.content)
        return
    raise ExternalOperationError(f"download {url}", DOWNLOAD_FAILURE_STATUS, last_error)
