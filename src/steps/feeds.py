"""Feed list configuration and feed package installation steps."""

from __future__ import annotations

from pathlib import Path

from core.config import ExecutionContext
from core.logging_config import get_logger
from steps.commands import run_command
from steps.file_edit import ensure_trailing_newline

FEEDS_CONF = "feeds.conf.default"
THIRD_PARTY_FEEDS = (
    ("small8", "https://github.com/kenzok8/small-package"),
    ("kiddin9", "https://github.com/kiddin9/kwrt-packages.git"),
)
SMALL8_PACKAGES = (
    "xray-core", "xray-plugin", "dns2tcp", "dns2socks", "haproxy", "hysteria",
    "naiveproxy", "shadowsocks-rust", "sing-box", "v2ray-core", "v2ray-geodata",
    "v2ray-geoview", "v2ray-plugin", "tuic-client", "chinadns-ng", "ipt2socks",
    "tcping", "trojan-plus", "simple-obfs", "shadowsocksr-libev", "luci-app-passwall",
    "v2dat", "mosdns", "luci-app-mosdns", "adguardhome", "luci-app-adguardhome",
    "ddns-go", "luci-app-ddns-go", "taskd", "luci-lib-xterm", "luci-lib-taskd",
    "luci-app-store", "quickstart", "luci-app-quickstart", "luci-app-istorex",
    "luci-app-cloudflarespeedtest", "netdata", "luci-app-netdata", "lucky",
    "luci-app-lucky", "luci-app-openclash", "luci-app-homeproxy", "luci-app-amlogic",
    "nikki", "luci-app-nikki", "tailscale", "luci-app-tailscale", "oaf", "open-app-filter",
    "luci-app-oaf", "easytier", "luci-app-easytier", "msd_lite", "luci-app-msd_lite",
    "cups", "luci-app-cupsd", "luci-app-timecontrol",
)
FULLCONENAT_PACKAGES = ("fullconenat-nft", "fullconenat")
KIDDIN9_PACKAGES = (
    "luci-app-control-weburl",
    "luci-app-control-timewol",
    "luci-app-control-webrestriction",
    "luci-app-parentcontrol",
    "luci-app-turboacc",
)

_LOGGER = get_logger(__name__)


def configure_feeds(context: ExecutionContext) -> None:
    """Strip comments from the feed list and append third-party feeds."""
    feeds_file = context.build_dir / FEEDS_CONF
    lines = feeds_file.read_text(encoding="utf-8").splitlines(keepends=True)
    feeds_file.write_text(
        "".join(line for line in lines if not line.startswith("#")), encoding="utf-8"
    )
    for name, url in THIRD_PARTY_FEEDS:
        if name in feeds_file.read_text(encoding="utf-8"):
            continue
        ensure_trailing_newline(feeds_file)
        _LOGGER.info("feed_added", feed=name, url=url)
        with feeds_file.open("a", encoding="utf-8") as handle:
            handle.write(f"src-git {name} {url}\n")
    bpf_mk = context.build_dir / "include" / "bpf.mk"
    if not bpf_mk.exists():
        _LOGGER.info("bpf_mk_created", path=bpf_mk)
        bpf_mk.parent.mkdir(parents=True, exist_ok=True)
        bpf_mk.touch()


def update_and_install_feeds(context: ExecutionContext) -> None:
    """Refresh every feed and install its packages into the tree."""
    build_dir = context.build_dir
    feeds_script = "./scripts/feeds"
    run_command([feeds_script, "clean"], cwd=build_dir)
    run_command([feeds_script, "update", "-a"], cwd=build_dir)
    run_command([feeds_script, "update", "-i"], cwd=build_dir)
    for feed_dir in _installable_feed_dirs(build_dir):
        feed_name = feed_dir.name
        if feed_name == "small8":
            install_small8_feeds(build_dir)
            install_fullconenat(build_dir)
        elif feed_name == "kiddin9":
            install_kiddin9_feeds(build_dir)
        else:
            _LOGGER.info("feed_installing", feed=feed_name)
            run_command([feeds_script, "install", "-f", "-ap", feed_name], cwd=build_dir)


def install_small8_feeds(build_dir: Path) -> None:
    """Install the curated small8 package set."""
    _LOGGER.info("feed_installing", feed="small8", packages=len(SMALL8_PACKAGES))
    run_command(["./scripts/feeds", "install", "-p", "small8", "-f", *SMALL8_PACKAGES], cwd=build_dir)


def install_fullconenat(build_dir: Path) -> None:
    for package in FULLCONENAT_PACKAGES:
        if (build_dir / "package" / "network" / "utils" / package).is_dir():
            continue
        run_command(["./scripts/feeds", "install", "-p", "small8", "-f", package], cwd=build_dir)


def install_kiddin9_feeds(build_dir: Path) -> None:
    """Install the curated kiddin9 package set."""
    _LOGGER.info("feed_installing", feed="kiddin9", packages=len(KIDDIN9_PACKAGES))
    run_command(
        ["./scripts/feeds", "install", "-p", "kiddin9", "-f", *KIDDIN9_PACKAGES], cwd=build_dir
    )


def _installable_feed_dirs(build_dir: Path) -> list[Path]:
    feeds_root = build_dir / "feeds"
    if not feeds_root.is_dir():
        return []
    return [
        entry
        for entry in sorted(feeds_root.iterdir())
        if entry.is_dir() and not entry.is_symlink() and not entry.name.endswith(".tmp")
    ]
