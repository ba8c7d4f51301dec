"""Structured logging configuration.

This module initializes structlog with a stable line format and two sinks:
a level-colored terminal stream and a run-scoped plain-text log file.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, MutableMapping, TextIO

import structlog

from core.constants import LOG_FILE_TIMESTAMP_FORMAT, LOG_TIMESTAMP_FORMAT

LEVEL_COLORS = {
    "info": "\033[36m",
    "warning": "\033[33m",
    "error": "\033[31m",
    "success": "\033[32m",
}
COLOR_RESET = "\033[0m"


class DualSinkLogger:
    """Final structlog logger writing each rendered line to both sinks."""

    def __init__(self, terminal: TextIO, log_file: TextIO | None, color: bool) -> None:
        self._terminal = terminal
        self._log_file = log_file
        self._color = color

    @property
    def log_file(self) -> TextIO | None:
        return self._log_file

    def debug(self, line: str) -> None:
        self._write("debug", line)

    def info(self, line: str) -> None:
        self._write("info", line)

    def warning(self, line: str) -> None:
        self._write("warning", line)

    def error(self, line: str) -> None:
        self._write("error", line)

    def success(self, line: str) -> None:
        self._write("success", line)

    msg = info

    def close(self) -> None:
        """Close the file sink; the terminal sink is owned by the caller."""
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    def _write(self, level: str, line: str) -> None:
        color = LEVEL_COLORS.get(level) if self._color else None
        terminal_line = f"{color}{line}{COLOR_RESET}" if color else line
        print(terminal_line, file=self._terminal, flush=True)
        if self._log_file is None:
            return
        try:
            self._log_file.write(line + "\n")
            self._log_file.flush()
        except OSError as error:
            self._log_file = None
            print(
                f"[WARNING] log file sink disabled after write failure: {error}",
                file=self._terminal,
                flush=True,
            )


def configure_run_logging(
    log_path: Path | None,
    terminal: TextIO | None = None,
    color: bool | None = None,
) -> DualSinkLogger:
    """Configure structlog for one pipeline run.

    Args:
        log_path: Run log file, opened in append mode and kept open.
            None configures the terminal sink only.
        terminal: Terminal stream, defaults to stdout.
        color: Force ANSI colors on or off; defaults to TTY detection.

    Returns:
        The shared sink, so callers can close the file at shutdown.
    """
    stream = terminal if terminal is not None else sys.stdout
    use_color = _stream_supports_color(stream) if color is None else color
    log_file = None
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_file = log_path.open("a", encoding="utf-8")
    sink = DualSinkLogger(stream, log_file, use_color)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt=LOG_TIMESTAMP_FORMAT, utc=False),
            structlog.processors.add_log_level,
            render_log_line,
        ],
        wrapper_class=structlog.BoundLogger,
        logger_factory=lambda *args: sink,
        cache_logger_on_first_use=False,
    )
    return sink


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger that supports info, warning, error and success.
    """
    if not structlog.is_configured():
        configure_run_logging(None)
    return structlog.get_logger(name)


def build_log_path(log_dir: Path, run_name: str, started_at: datetime) -> Path:
    """Derive the run log path from the run identity and start time."""
    safe_name = "".join(char if char.isalnum() or char in "-_." else "_" for char in run_name)
    stamp = started_at.strftime(LOG_FILE_TIMESTAMP_FORMAT)
    return log_dir / f"{safe_name or 'run'}_{stamp}.log"


def render_log_line(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> str:
    """Render an event dict as ``[timestamp] [LEVEL] event key=value``."""
    timestamp = event_dict.pop("timestamp", "")
    level = str(event_dict.pop("level", "info")).upper()
    event = event_dict.pop("event", "")
    fields = " ".join(f"{key}={event_dict[key]}" for key in sorted(event_dict))
    line = f"[{timestamp}] [{level}] {event}"
    return f"{line} {fields}" if fields else line


def _stream_supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(callable(isatty) and isatty())
