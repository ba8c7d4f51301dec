"""Target hardware tuning steps for qualcommax and mediatek platforms."""

from __future__ import annotations

import stat

from core.config import ExecutionContext
from core.errors import StepError
from core.logging_config import get_logger
from steps.commands import clone_repo, download_with_retry
from steps.file_edit import delete_matching_lines, install_file, replace_in_file

NSS_TARGET_MKS = ("ipq60xx/target.mk", "ipq807x/target.mk")
NSS_MODULES = (
    "kmod-qca-nss-drv-eogremgr",
    "kmod-qca-nss-drv-gre",
    "kmod-qca-nss-drv-map-t",
    "kmod-qca-nss-drv-match",
    "kmod-qca-nss-drv-mirror",
    "kmod-qca-nss-drv-tun6rd",
    "kmod-qca-nss-drv-tunipip6",
    "kmod-qca-nss-drv-vxlanmgr",
    "kmod-qca-nss-drv-wifi-meshmgr",
    "kmod-qca-nss-macsec",
)
ATH11K_MAKEFILE_URL = (
    "https://raw.githubusercontent.com/VIKINGYFY/immortalwrt/refs/heads/main/"
    "package/firmware/ath11k-firmware/Makefile"
)
ATHENA_LED_REPO = "https://github.com/NONGFAH/luci-app-athena-led.git"
ATHENA_LED_EXECUTABLES = ("root/usr/sbin/athena-led", "root/etc/init.d/athena_led")
LUCI_CPU_USAGE_COMMAND = r"""const fd = popen('top -n1 | awk \'/^CPU/ {printf("%d%", 100 - $8)}\'')"""
LUCI_CPU_USAGE_REPLACEMENT = (
    r"""const cpuUsageCommand = access('/sbin/cpuusage') ? '/sbin/cpuusage' : """
    r"""'top -n1 | awk \'/^CPU/ {printf("%d%", 100 - $8)}\''"""
    "\n\t\t\tconst fd = popen(cpuUsageCommand);"
)

_LOGGER = get_logger(__name__)


def clean_nss_kmods(context: ExecutionContext) -> None:
    """Drop NSS offload kernel modules that break qualcommax images."""
    qualcommax = context.build_dir / "target" / "linux" / "qualcommax"
    for relative_mk in NSS_TARGET_MKS:
        target_mk = qualcommax / relative_mk
        if target_mk.is_file():
            replace_in_file(target_mk, "kmod-qca-nss-crypto", "")
    platform_mk = qualcommax / "Makefile"
    if not platform_mk.is_file():
        return
    for module in NSS_MODULES:
        delete_matching_lines(platform_mk, module)
    replace_in_file(platform_mk, "automount ", "")
    replace_in_file(platform_mk, "cpufreq ", "")


def update_affinity_script(context: ExecutionContext) -> None:
    """Replace stock IRQ affinity scripts with the bundled one."""
    base_dir = context.build_dir / "target" / "linux" / "qualcommax"
    if not base_dir.is_dir():
        return
    for stale_name in ("set-irq-affinity", "smp_affinity"):
        for stale in base_dir.rglob(stale_name):
            if stale.is_file():
                stale.unlink()
    install_file(
        context.patches_dir / "smp_affinity",
        base_dir / "base-files" / "etc" / "init.d" / "smp_affinity",
    )


def update_ath11k_firmware(context: ExecutionContext) -> None:
    """Fetch the ath11k firmware Makefile, refusing an empty download."""
    makefile = context.build_dir / "package" / "firmware" / "ath11k-firmware" / "Makefile"
    if not makefile.parent.is_dir():
        return
    temp_mk = context.build_dir / "tmp" / "ath11k_fw.mk"
    download_with_retry(ATH11K_MAKEFILE_URL, temp_mk)
    if temp_mk.stat().st_size == 0:
        raise StepError(
            f"Downloaded ath11k firmware Makefile is empty ({ATH11K_MAKEFILE_URL}). "
            "Retry later or disable update_ath11k_firmware."
        )
    temp_mk.replace(makefile)


def add_ax6600_led_control(context: ExecutionContext) -> None:
    """Clone the athena LED control app and mark its scripts executable."""
    target_dir = context.build_dir / "package" / "emortal" / "luci-app-athena-led"
    clone_repo(target_dir, ATHENA_LED_REPO, "main")
    for relative_path in ATHENA_LED_EXECUTABLES:
        executable = target_dir / relative_path
        if executable.is_file():
            executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def optimize_cpu_usage_monitor(context: ExecutionContext) -> None:
    """Point the LuCI CPU gauge at platform-specific usage scripts."""
    build_dir = context.build_dir
    luci_rpc = (
        build_dir / "feeds" / "luci" / "modules" / "luci-base" / "root"
        / "usr" / "share" / "rpcd" / "ucode" / "luci"
    )
    if luci_rpc.is_file():
        replace_in_file(luci_rpc, LUCI_CPU_USAGE_COMMAND, LUCI_CPU_USAGE_REPLACEMENT)
    (build_dir / "package" / "base-files" / "files" / "sbin" / "cpuusage").unlink(missing_ok=True)
    install_file(
        context.patches_dir / "cpuusage",
        build_dir / "target" / "linux" / "qualcommax" / "base-files" / "sbin" / "cpuusage",
    )
    install_file(
        context.patches_dir / "hnatusage",
        build_dir / "target" / "linux" / "mediatek" / "filogic" / "base-files" / "sbin" / "cpuusage",
    )
    _LOGGER.info("cpu_usage_scripts_installed")
