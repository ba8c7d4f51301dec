"""Package removal and replacement steps."""

from __future__ import annotations

import shutil

from core.config import ExecutionContext
from core.logging_config import get_logger
from steps.commands import clone_repo, download_with_retry

GOLANG_REPO = "https://github.com/sbwml/packages_lang_golang"
GOLANG_BRANCH = "25.x"
LUCKY_REPO = "https://github.com/sirpdboy/luci-app-lucky.git"
LUCKY_DIRS = ("lucky", "luci-app-lucky")
TCPING_MAKEFILE_URL = (
    "https://raw.githubusercontent.com/xiaorouji/openwrt-passwall-packages/"
    "refs/heads/main/tcping/Makefile"
)

# category -> path under the build dir
REMOVE_PACKAGE_ROOTS = {
    "luci/applications": "feeds/luci/applications",
    "luci/themes": "feeds/luci/themes",
    "packages/net": "feeds/packages/net",
    "packages/utils": "feeds/packages/utils",
    "small8": "feeds/small8",
}
REMOVE_PACKAGES = (
    (
        "luci/applications",
        (
            "luci-app-passwall", "luci-app-ddns-go", "luci-app-rclone", "luci-app-ssr-plus",
            "luci-app-vssr", "luci-app-daed", "luci-app-dae", "luci-app-alist",
            "luci-app-homeproxy", "luci-app-haproxy-tcp", "luci-app-openclash",
            "luci-app-mihomo", "luci-app-appfilter", "luci-app-msd_lite",
        ),
    ),
    ("luci/themes", ("luci-app-passwall", "luci-app-ddns-go")),
    (
        "packages/net",
        (
            "haproxy", "xray-core", "xray-plugin", "dns2socks", "alist", "hysteria", "mosdns",
            "adguardhome", "ddns-go", "naiveproxy", "shadowsocks-rust", "sing-box",
            "v2ray-core", "v2ray-geodata", "v2ray-plugin", "tuic-client", "chinadns-ng",
            "ipt2socks", "tcping", "trojan-plus", "simple-obfs", "shadowsocksr-libev", "dae",
            "daed", "mihomo", "geoview", "tailscale", "open-app-filter", "msd_lite",
        ),
    ),
    ("packages/utils", ("cups",)),
    (
        "small8",
        (
            "ppp", "firewall", "dae", "daed", "daed-next", "libnftnl", "nftables", "dnsmasq",
            "luci-theme-argon", "luci-app-argon-config", "alist", "opkg", "smartdns",
            "luci-app-smartdns",
        ),
    ),
)

_LOGGER = get_logger(__name__)


def remove_unwanted_packages(context: ExecutionContext) -> None:
    """Delete feed packages that conflict with the replacements we install."""
    targets = [
        context.build_dir / REMOVE_PACKAGE_ROOTS[category] / package
        for category, packages in REMOVE_PACKAGES
        for package in packages
    ]
    targets.append(context.build_dir / "package" / "istore")
    for target in targets:
        if not target.is_dir():
            continue
        _LOGGER.info("package_removed", path=target)
        try:
            shutil.rmtree(target)
        except OSError as error:
            _LOGGER.warning("package_remove_failed", path=target, error=str(error))


def update_lucky(context: ExecutionContext) -> None:
    """Replace the lucky packages in small8 with the upstream sources."""
    target_dir = context.build_dir / "feeds" / "small8"
    temp_dir = context.build_dir / "tmp" / "lucky_temp"
    for name in LUCKY_DIRS:
        shutil.rmtree(target_dir / name, ignore_errors=True)
    clone_repo(temp_dir, LUCKY_REPO, "main")
    try:
        for name in LUCKY_DIRS:
            source = temp_dir / name
            if not source.is_dir():
                _LOGGER.warning("lucky_dir_missing", dir=name)
                continue
            shutil.copytree(source, target_dir / name)
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def update_golang(context: ExecutionContext) -> None:
    """Swap the bundled golang toolchain package for the pinned branch."""
    target_dir = context.build_dir / "feeds" / "packages" / "lang" / "golang"
    clone_repo(target_dir, GOLANG_REPO, GOLANG_BRANCH)


def update_tcping(context: ExecutionContext) -> None:
    """Refresh the tcping Makefile when small8 ships the package."""
    makefile = context.build_dir / "feeds" / "small8" / "tcping" / "Makefile"
    if makefile.parent.is_dir():
        download_with_retry(TCPING_MAKEFILE_URL, makefile)
