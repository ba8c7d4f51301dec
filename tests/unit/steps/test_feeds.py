"""Unit tests for feed configuration steps."""

from __future__ import annotations

from pathlib import Path

import pytest

from steps import feeds
from tests.step_context import step_context, write_file


def test_configure_feeds_strips_comments_and_appends_feeds(tmp_path: Path) -> None:
    """Third-party feeds should be appended once, after comment removal."""
    feeds_file = write_file(
        tmp_path / "feeds.conf.default",
        "src-git packages https://example.invalid/packages.git\n#src-git old x\nsrc-git luci y",
    )

    feeds.configure_feeds(step_context(tmp_path))
    feeds.configure_feeds(step_context(tmp_path))

    assert feeds_file.read_text(encoding="utf-8").splitlines() == [
        "src-git packages https://example.invalid/packages.git",
        "src-git luci y",
        "src-git small8 https://github.com/kenzok8/small-package",
        "src-git kiddin9 https://github.com/kiddin9/kwrt-packages.git",
    ]
    assert (tmp_path / "include" / "bpf.mk").is_file()


def test_update_and_install_feeds_routes_each_feed(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Known feeds get curated installs; others install everything."""
    for name in ("kiddin9", "packages", "small8", "luci.tmp"):
        (tmp_path / "feeds" / name).mkdir(parents=True)
    write_file(tmp_path / "feeds" / "packages.index")
    (tmp_path / "package" / "network" / "utils" / "fullconenat").mkdir(parents=True)
    captured: list[list[str]] = []
    monkeypatch.setattr(feeds, "run_command", lambda args, cwd=None: captured.append(list(args)))

    feeds.update_and_install_feeds(step_context(tmp_path))

    assert captured[:3] == [
        ["./scripts/feeds", "clean"],
        ["./scripts/feeds", "update", "-a"],
        ["./scripts/feeds", "update", "-i"],
    ]
    installs = [args[2:5] for args in captured[3:]]
    assert installs == [
        ["-p", "kiddin9", "-f"],
        ["-f", "-ap", "packages"],
        ["-p", "small8", "-f"],
        ["-p", "small8", "-f"],
    ]
    assert captured[-1][-1] == "fullconenat-nft"
