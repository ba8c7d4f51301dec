"""Unit tests for package metadata fixes and first-boot tasks."""

from __future__ import annotations

from pathlib import Path

from steps import fixes
from tests.step_context import step_context, write_file


def test_fix_package_hashes_swaps_smartdns_hashes(tmp_path: Path) -> None:
    old_hash, new_hash = fixes.SMARTDNS_HASHES[0]
    makefile = write_file(
        tmp_path / "package" / "feeds" / "packages" / "smartdns" / "Makefile",
        f"PKG_MIRROR_HASH:={old_hash}\n",
    )

    fixes.fix_package_hashes(step_context(tmp_path))

    assert makefile.read_text(encoding="utf-8") == f"PKG_MIRROR_HASH:={new_hash}\n"


def test_fix_package_format_only_runs_for_nss_builds(tmp_path: Path) -> None:
    """Version strings should only be normalized inside NSS build trees."""
    relative = "feeds/small8/luci-app-store/Makefile"
    original = "PKG_VERSION:=0.1.27-1\nPKG_RELEASE:=\n"
    plain_tree = tmp_path / "immortalwrt"
    nss_tree = tmp_path / "imm-nss"
    plain_mk = write_file(plain_tree / relative, original)
    nss_mk = write_file(nss_tree / relative, original)

    fixes.fix_package_format(step_context(plain_tree))
    fixes.fix_package_format(step_context(nss_tree))

    assert plain_mk.read_text(encoding="utf-8") == original
    assert nss_mk.read_text(encoding="utf-8") == "PKG_VERSION:=0.1.27\nPKG_RELEASE:=1\n"


def test_set_custom_crontab_writes_executable_script(tmp_path: Path) -> None:
    fixes.set_custom_crontab(step_context(tmp_path))

    script = tmp_path / "package" / "base-files" / "files" / "etc" / "init.d" / "custom_task"
    assert script.read_text(encoding="utf-8") == fixes.CUSTOM_TASK_SCRIPT
    assert script.stat().st_mode & 0o777 == 0o755


def test_fix_package_format_warns_on_undecodable_makefile(tmp_path: Path) -> None:
    """A Makefile that is not UTF-8 should be skipped while the rest are fixed."""
    nss_tree = tmp_path / "imm-nss"
    broken_mk = nss_tree / "feeds/small8/v2ray-geodata/Makefile"
    broken_mk.parent.mkdir(parents=True)
    broken_mk.write_bytes(b"PKG_VERSION:=\xff\xfe\n")
    store_mk = write_file(
        nss_tree / "feeds/small8/luci-app-store/Makefile", "PKG_VERSION:=0.1.27-1\n"
    )

    fixes.fix_package_format(step_context(nss_tree))

    assert broken_mk.read_bytes() == b"PKG_VERSION:=\xff\xfe\n"
    assert store_mk.read_text(encoding="utf-8") == "PKG_VERSION:=0.1.27\n"
