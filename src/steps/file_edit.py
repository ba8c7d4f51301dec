"""In-place text edits on build tree files.

Helpers here treat files as opaque text: literal or regex substitutions,
line deletion, and ``KEY=value`` config updates.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Callable

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def replace_in_file(path: Path, old: str, new: str) -> bool:
    """Replace every literal occurrence; return True when the file changed."""
    text = path.read_text(encoding="utf-8")
    updated = text.replace(old, new)
    if updated == text:
        return False
    path.write_text(updated, encoding="utf-8")
    return True


def regex_replace_in_file(
    path: Path, pattern: str, replacement: str | Callable[[re.Match[str]], str]
) -> bool:
    """Apply a multiline regex substitution; return True when the file changed."""
    text = path.read_text(encoding="utf-8")
    updated = re.sub(pattern, replacement, text, flags=re.MULTILINE)
    if updated == text:
        return False
    path.write_text(updated, encoding="utf-8")
    return True


def delete_matching_lines(path: Path, needle: str) -> int:
    """Drop lines containing ``needle``; return the number removed."""
    lines = path.read_text(encoding="utf-8").splitlines(keepends=True)
    kept = [line for line in lines if needle not in line]
    removed = len(lines) - len(kept)
    if removed:
        path.write_text("".join(kept), encoding="utf-8")
    return removed


def ensure_trailing_newline(path: Path) -> None:
    text = path.read_text(encoding="utf-8")
    if text and not text.endswith("\n"):
        path.write_text(text + "\n", encoding="utf-8")


def set_config_value(path: Path, key: str, value: str) -> None:
    """Set ``key=value`` in a config file, appending when the key is absent."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = path.read_text(encoding="utf-8") if path.exists() else ""
    pattern = re.compile(rf"^({re.escape(key)}\s*=\s*).*$", re.MULTILINE)
    match = pattern.search(text)
    if match is None:
        _LOGGER.info("config_value_added", key=key, value=value)
        if text and not text.endswith("\n"):
            text += "\n"
        path.write_text(f"{text}{key}={value}\n", encoding="utf-8")
        return
    _LOGGER.info("config_value_changed", key=key, old=match.group(0).split("=", 1)[1], new=value)
    path.write_text(pattern.sub(lambda m: f"{m.group(1)}{value}", text), encoding="utf-8")


def get_config_value(path: Path, key: str) -> str | None:
    """Read ``key`` from a config file, stripping surrounding quotes."""
    if not path.exists():
        return None
    for line in path.read_text(encoding="utf-8").splitlines():
        if line.startswith(f"{key}="):
            return line.split("=", 1)[1].strip().strip('"')
    return None


def install_file(source: Path, dest: Path, mode: int = 0o755) -> None:
    """Copy ``source`` to ``dest`` with ``mode``, creating parent directories."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, dest)
    dest.chmod(mode)
