"""Package metadata fixes and first-boot tasks."""

from __future__ import annotations

import re

from core.config import ExecutionContext
from core.logging_config import get_logger
from steps.file_edit import regex_replace_in_file, replace_in_file

SMARTDNS_HASHES = (
    (
        "a7edb052fea61418c91c7a052f7eb1478fe6d844aec5e3eda0f2fcf82de29a10",
        "b11e175970e08115fe3b0d7a543fa8d3a6239d3c24eeecfd8cfd2fef3f52c6c9",
    ),
    (
        "a1c084dcc4fb7f87641d706b70168fc3c159f60f37d4b7eac6089ae68f0a18a1",
        "ab7d303a538871ae4a70ead2e90d35e24fcc36bc20f5b6c5d963a3e283ea43b1",
    ),
)
PACKAGE_FORMAT_BUILD_MARKER = "imm-nss"
PACKAGE_FORMAT_FIXES = (
    (
        "feeds/small8/v2ray-geodata/Makefile",
        ((re.escape("VER)-$(PKG_RELEASE)"), "VER)-r$(PKG_RELEASE)"),),
    ),
    ("feeds/small8/luci-lib-taskd/Makefile", ((re.escape(">=1.0.3-1"), ">=1.0.3-r1"),)),
    ("feeds/small8/luci-app-openclash/Makefile", ((re.escape("PKG_RELEASE:=beta"), "PKG_RELEASE:=1"),)),
    (
        "feeds/small8/luci-app-quickstart/Makefile",
        ((re.escape("PKG_VERSION:=0.8.16-1"), "PKG_VERSION:=0.8.16"), (r"PKG_RELEASE:=$", "PKG_RELEASE:=1")),
    ),
    (
        "feeds/small8/luci-app-store/Makefile",
        ((re.escape("PKG_VERSION:=0.1.27-1"), "PKG_VERSION:=0.1.27"), (r"PKG_RELEASE:=$", "PKG_RELEASE:=1")),
    ),
)
CUSTOM_TASK_SCRIPT = """#!/bin/sh /etc/rc.common
# start priority
START=99

boot() {
    # re-add the page cache drop job
    sed -i '/drop_caches/d' /etc/crontabs/root
    echo "15 3 * * * sync && echo 3 > /proc/sys/vm/drop_caches" >>/etc/crontabs/root

    # drop the existing wireguard_watchdog job
    sed -i '/wireguard_watchdog/d' /etc/crontabs/root
}
"""

_LOGGER = get_logger(__name__)


def fix_package_hashes(context: ExecutionContext) -> None:
    """Swap stale smartdns source hashes for the current ones."""
    smartdns_mk = context.build_dir / "package" / "feeds" / "packages" / "smartdns" / "Makefile"
    if not smartdns_mk.is_file():
        return
    for old_hash, new_hash in SMARTDNS_HASHES:
        replace_in_file(smartdns_mk, old_hash, new_hash)


def fix_package_format(context: ExecutionContext) -> None:
    """Normalize package version strings rejected by the NSS build's apk."""
    if PACKAGE_FORMAT_BUILD_MARKER not in str(context.build_dir):
        return
    for relative_path, rules in PACKAGE_FORMAT_FIXES:
        makefile = context.build_dir / relative_path
        if not makefile.is_file():
            continue
        try:
            for pattern, replacement in rules:
                regex_replace_in_file(makefile, pattern, replacement)
        except (OSError, UnicodeDecodeError) as error:
            _LOGGER.warning("package_format_fix_failed", path=relative_path, error=str(error))


def set_custom_crontab(context: ExecutionContext) -> None:
    """Write the first-boot init script that maintains root crontab jobs."""
    init_script = (
        context.build_dir / "package" / "base-files" / "files" / "etc" / "init.d" / "custom_task"
    )
    init_script.parent.mkdir(parents=True, exist_ok=True)
    init_script.write_text(CUSTOM_TASK_SCRIPT, encoding="utf-8")
    init_script.chmod(0o755)
