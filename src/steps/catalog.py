"""Built-in step catalog and default pipeline order.

Optional steps carry a leading ``~`` and only run when force-enabled.
"""

from __future__ import annotations

from core.step_registry import StepHandler, StepRegistry
from steps import feeds, fixes, hardware, kernel, packages, repository, system_settings

DEFAULT_PIPELINE: tuple[str, ...] = (
    # repository
    "clone_main_repo",
    "clean_workspace",
    "reset_repo_state",
    # feeds
    "configure_feeds",
    "update_and_install_feeds",
    # packages
    "remove_unwanted_packages",
    "update_lucky",
    "update_golang",
    "update_tcping",
    # system settings
    "fix_default_settings",
    "fix_miniupnpd",
    "replace_dnsmasq_with_full",
    "fix_dependency",
    "add_wifi_defaults",
    "update_lan_address",
    # hardware
    "clean_nss_kmods",
    "update_affinity_script",
    "update_ath11k_firmware",
    "add_ax6600_led_control",
    "optimize_cpu_usage_monitor",
    # fixes
    "fix_package_hashes",
    "fix_package_format",
    "set_custom_crontab",
    # kernel
    "~set_kernel_vermagic",
    "~add_kernel_modules",
)

BUILTIN_HANDLERS: dict[str, StepHandler] = {
    "clone_main_repo": repository.clone_main_repo,
    "clean_workspace": repository.clean_workspace,
    "reset_repo_state": repository.reset_repo_state,
    "configure_feeds": feeds.configure_feeds,
    "update_and_install_feeds": feeds.update_and_install_feeds,
    "remove_unwanted_packages": packages.remove_unwanted_packages,
    "update_lucky": packages.update_lucky,
    "update_golang": packages.update_golang,
    "update_tcping": packages.update_tcping,
    "fix_default_settings": system_settings.fix_default_settings,
    "fix_miniupnpd": system_settings.fix_miniupnpd,
    "replace_dnsmasq_with_full": system_settings.replace_dnsmasq_with_full,
    "fix_dependency": system_settings.fix_dependency,
    "add_wifi_defaults": system_settings.add_wifi_defaults,
    "update_lan_address": system_settings.update_lan_address,
    "clean_nss_kmods": hardware.clean_nss_kmods,
    "update_affinity_script": hardware.update_affinity_script,
    "update_ath11k_firmware": hardware.update_ath11k_firmware,
    "add_ax6600_led_control": hardware.add_ax6600_led_control,
    "optimize_cpu_usage_monitor": hardware.optimize_cpu_usage_monitor,
    "fix_package_hashes": fixes.fix_package_hashes,
    "fix_package_format": fixes.fix_package_format,
    "set_custom_crontab": fixes.set_custom_crontab,
    "set_kernel_vermagic": kernel.set_kernel_vermagic,
    "add_kernel_modules": kernel.add_kernel_modules,
}


def build_default_registry() -> StepRegistry:
    """Build a registry holding every built-in step handler."""
    return StepRegistry.from_mapping(BUILTIN_HANDLERS)
