"""Unit tests for optional kernel build steps."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import StepError
from steps import kernel
from tests.step_context import step_context, write_file

KERNEL_DEFAULTS = (
    "define Kernel/Configure/Default\n"
    "\tgrep '=[ym]' $(LINUX_DIR)/.config.set | LC_ALL=C sort | $(MKHASH) md5 > $(LINUX_DIR)/.vermagic\n"
    "endef\n"
)


def test_set_kernel_vermagic_pins_hash(tmp_path: Path) -> None:
    """The computed vermagic hash should be replaced by the pinned value."""
    defaults_mk = write_file(tmp_path / "include" / "kernel-defaults.mk", KERNEL_DEFAULTS)
    context = step_context(tmp_path, kernel_vermagic="a1b2c3")

    kernel.set_kernel_vermagic(context)
    kernel.set_kernel_vermagic(context)

    assert defaults_mk.read_text(encoding="utf-8") == (
        "define Kernel/Configure/Default\n"
        "\techo a1b2c3 > $(LINUX_DIR)/.vermagic\n"
        "endef\n"
    )


@pytest.mark.parametrize("vermagic", [None, "", "abc-123"])
def test_set_kernel_vermagic_rejects_bad_value(tmp_path: Path, vermagic: str | None) -> None:
    write_file(tmp_path / "include" / "kernel-defaults.mk", KERNEL_DEFAULTS)

    with pytest.raises(StepError, match="vermagic"):
        kernel.set_kernel_vermagic(step_context(tmp_path, kernel_vermagic=vermagic))


def test_set_kernel_vermagic_requires_hash_rule(tmp_path: Path) -> None:
    write_file(tmp_path / "include" / "kernel-defaults.mk", "define Kernel/Configure/Default\nendef\n")

    with pytest.raises(StepError, match="No vermagic hash rule"):
        kernel.set_kernel_vermagic(step_context(tmp_path, kernel_vermagic="abc"))


def test_add_kernel_modules_enables_each_module(tmp_path: Path) -> None:
    """Each listed module should be switched on in the build config."""
    context = step_context(tmp_path / "build", kernel_modules="kmod-tun kmod-wireguard,kmod-tun")
    write_file(context.config_file, "CONFIG_PACKAGE_kmod-tun=n\n")

    kernel.add_kernel_modules(context)

    assert context.config_file.read_text(encoding="utf-8") == (
        "CONFIG_PACKAGE_kmod-tun=y\nCONFIG_PACKAGE_kmod-wireguard=y\n"
    )


def test_add_kernel_modules_requires_names(tmp_path: Path) -> None:
    with pytest.raises(StepError, match="No kernel modules"):
        kernel.add_kernel_modules(step_context(tmp_path, kernel_modules="  "))
