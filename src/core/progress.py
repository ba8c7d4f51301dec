"""Terminal progress reporting for pipeline runs.

The bar is written to its own stream (stderr by default), separate from the
log sinks, and is redrawn in place until the final step finalizes the line.
"""

from __future__ import annotations

import sys
from typing import TextIO

from core.constants import PROGRESS_BAR_WIDTH

COLOR_RESET = "\033[0m"
COLOR_CYAN = "\033[36m"
COLOR_GREEN = "\033[32m"


def progress_fraction(current: int, total: int) -> float:
    """Compute bounded completion; an empty sequence counts as complete."""
    if total <= 0:
        return 1.0
    return min(1.0, max(0.0, current / total))


class ProgressReporter:
    """Render a fixed-width bar for a bounded sequence of steps."""

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        width: int = PROGRESS_BAR_WIDTH,
        color: bool | None = None,
    ) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.width = width
        if color is None:
            isatty = getattr(self.stream, "isatty", None)
            color = bool(callable(isatty) and isatty())
        self.color = color
        self._last_render_len = 0

    def render(self, current: int, total: int, label: str) -> str:
        """Format one progress line with an integer floor percentage."""
        if total <= 0:
            filled, percent = self.width, 100
        else:
            done = max(0, current)
            filled = min(self.width, done * self.width // total)
            percent = min(100, done * 100 // total)
        bar = "#" * filled + "-" * (self.width - filled)
        if self.color:
            label = f"{COLOR_CYAN}{label}{COLOR_RESET}"
            bar = f"{COLOR_GREEN}{bar}{COLOR_RESET}"
        return f"[{bar}] {current}/{max(total, 0)} ({percent:3d}%) {label}"

    def report(self, current: int, total: int, label: str) -> None:
        """Redraw the bar; the line is finalized once current reaches total."""
        line = self.render(current, total, label)
        padding = " " * max(0, self._last_render_len - len(line))
        self._last_render_len = max(self._last_render_len, len(line))
        print(f"\r{line}{padding}", end="", file=self.stream, flush=True)
        if current >= total:
            print(file=self.stream, flush=True)
            self._last_render_len = 0
