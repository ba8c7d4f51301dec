"""Default system settings and dependency fixes applied to the tree."""

from __future__ import annotations

import shutil

from core.config import ExecutionContext
from core.logging_config import get_logger
from steps.file_edit import install_file, regex_replace_in_file, replace_in_file

UCI_DEFAULTS_SCRIPTS = ("990_set_argon_primary", "991_custom_settings")
MINIUPNPD_PATCH = "999-chanage-default-leaseduration.patch"
WIFI_UCI_SCRIPT = "992_set-wifi-uci.sh"
WIFI_UCI_DIRS = (
    "target/linux/qualcommax/base-files/etc/uci-defaults",
    "target/linux/mediatek/filogic/base-files/etc/uci-defaults",
)

_LOGGER = get_logger(__name__)


def fix_default_settings(context: ExecutionContext) -> None:
    """Select the default theme and install first-boot settings scripts."""
    build_dir = context.build_dir
    collections = build_dir / "feeds" / "luci" / "collections"
    if collections.is_dir():
        for makefile in sorted(collections.rglob("Makefile")):
            replace_in_file(makefile, "luci-theme-bootstrap", f"luci-theme-{context.theme}")
    uci_defaults = build_dir / "package" / "base-files" / "files" / "etc" / "uci-defaults"
    for script in UCI_DEFAULTS_SCRIPTS:
        install_file(context.patches_dir / script, uci_defaults / script)
    tempinfo = build_dir / "package" / "emortal" / "autocore" / "files" / "tempinfo"
    patched_tempinfo = context.patches_dir / "tempinfo"
    if tempinfo.is_file() and patched_tempinfo.is_file():
        shutil.copyfile(patched_tempinfo, tempinfo)


def fix_miniupnpd(context: ExecutionContext) -> None:
    """Install the miniupnpd lease duration patch when the package exists."""
    miniupnpd_dir = context.build_dir / "feeds" / "packages" / "net" / "miniupnpd"
    patch = context.patches_dir / MINIUPNPD_PATCH
    if miniupnpd_dir.is_dir() and patch.is_file():
        install_file(patch, miniupnpd_dir / "patches" / MINIUPNPD_PATCH, mode=0o644)


def replace_dnsmasq_with_full(context: ExecutionContext) -> None:
    """Switch default packages from dnsmasq to dnsmasq-full once."""
    target_mk = context.build_dir / "include" / "target.mk"
    if "dnsmasq-full" not in target_mk.read_text(encoding="utf-8"):
        replace_in_file(target_mk, "dnsmasq", "dnsmasq-full")


def fix_dependency(context: ExecutionContext) -> None:
    """Prefer OpenSSL variants of the SSL stream and wpad packages."""
    target_mk = context.build_dir / "include" / "target.mk"
    if target_mk.is_file():
        replace_in_file(target_mk, "libustream-mbedtls", "libustream-openssl")
    qualcommax_mk = context.build_dir / "target" / "linux" / "qualcommax" / "Makefile"
    if qualcommax_mk.is_file():
        replace_in_file(qualcommax_mk, "wpad-openssl", "wpad-mesh-openssl")


def add_wifi_defaults(context: ExecutionContext) -> None:
    """Install the wifi uci-defaults script on supported targets."""
    for relative_dir in WIFI_UCI_DIRS:
        uci_dir = context.build_dir / relative_dir
        if uci_dir.is_dir():
            install_file(context.patches_dir / WIFI_UCI_SCRIPT, uci_dir / WIFI_UCI_SCRIPT)


def update_lan_address(context: ExecutionContext) -> None:
    """Rewrite the default LAN address in config_generate."""
    config_generate = (
        context.build_dir / "package" / "base-files" / "files" / "bin" / "config_generate"
    )
    if not config_generate.is_file():
        return
    _LOGGER.info("lan_address_set", lan_addr=context.lan_addr)
    regex_replace_in_file(config_generate, r"192\.168\.[0-9]*\.[0-9]*", context.lan_addr)
