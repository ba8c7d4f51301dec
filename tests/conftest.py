"""Pytest configuration for repository test runs."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Iterator

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[io.StringIO]:
    """Route log output to an in-memory terminal sink for each test."""
    from core.logging_config import configure_run_logging

    terminal = io.StringIO()
    sink = configure_run_logging(None, terminal=terminal, color=False)
    yield terminal
    sink.close()
