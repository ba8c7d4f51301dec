"""Optional kernel build tweaks driven by the kernel run parameters."""

from __future__ import annotations

import re

from core.config import ExecutionContext
from core.errors import StepError
from core.logging_config import get_logger
from steps.file_edit import regex_replace_in_file, set_config_value

VERMAGIC_HASH_LINE = re.compile(
    r"^(\s*)grep '=\[ym\]' \$\(LINUX_DIR\)/\.config\.set .*> ?\$\(LINUX_DIR\)/\.vermagic\s*$"
)
_VERMAGIC_VALUE = re.compile(r"[0-9A-Za-z]+")
_MODULE_SEPARATORS = re.compile(r"[\s,]+")

_LOGGER = get_logger(__name__)


def set_kernel_vermagic(context: ExecutionContext) -> None:
    """Pin the kernel vermagic so prebuilt kmods stay installable."""
    vermagic = context.kernel_vermagic
    if not vermagic or not _VERMAGIC_VALUE.fullmatch(vermagic):
        raise StepError(
            f"Kernel vermagic '{vermagic or ''}' is missing or not alphanumeric. "
            "Pass the vermagic hash as the kernel vermagic parameter."
        )
    defaults_mk = context.build_dir / "include" / "kernel-defaults.mk"
    pinned_line = f"echo {vermagic} > $(LINUX_DIR)/.vermagic"
    if pinned_line in defaults_mk.read_text(encoding="utf-8"):
        _LOGGER.info("kernel_vermagic_already_pinned", vermagic=vermagic)
        return
    changed = regex_replace_in_file(
        defaults_mk,
        VERMAGIC_HASH_LINE.pattern,
        lambda match: f"{match.group(1)}{pinned_line}",
    )
    if not changed:
        raise StepError(
            f"No vermagic hash rule found in {defaults_mk}. The kernel build layout changed."
        )
    _LOGGER.info("kernel_vermagic_pinned", vermagic=vermagic)


def add_kernel_modules(context: ExecutionContext) -> None:
    """Enable each requested kernel module package in the build config."""
    modules = [name for name in _MODULE_SEPARATORS.split(context.kernel_modules or "") if name]
    if not modules:
        raise StepError(
            "No kernel modules given. Pass space separated module package names "
            "as the kernel modules parameter."
        )
    for module in modules:
        set_config_value(context.config_file, f"CONFIG_PACKAGE_{module}", "y")
    _LOGGER.info("kernel_modules_enabled", modules=",".join(modules), config=context.config_file)
