"""Runtime configuration model for fwprep.

This module owns all environment variable parsing and validation, and the
read-only execution context threaded into every pipeline step.
Other modules consume typed objects instead of raw env reads.
"""

from __future__ import annotations

import ipaddress
import os
from dataclasses import dataclass
from pathlib import Path

from core.constants import (
    DEFAULT_LAN_ADDR,
    DEFAULT_LOG_DIR,
    DEFAULT_PATCHES_DIR,
    DEFAULT_THEME,
    UNSET_COMMIT_LITERAL,
)
from core.errors import PrepConfigError


@dataclass(frozen=True)
class PrepConfig:
    """Validated runtime configuration.

    Attributes:
        log_dir: Directory receiving one log file per run.
        patches_dir: Directory holding patch and script artifacts.
        lan_addr: Default LAN address written into the firmware.
        theme: Default LuCI theme name.
    """

    log_dir: Path
    patches_dir: Path
    lan_addr: str
    theme: str

    @classmethod
    def from_env(cls) -> "PrepConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            PrepConfigError: If environment values are invalid.
        """
        log_dir_value = os.getenv("FWPREP_LOG_DIR", str(DEFAULT_LOG_DIR))
        patches_dir_value = os.getenv("FWPREP_PATCHES_DIR", str(DEFAULT_PATCHES_DIR))
        lan_addr = _parse_lan_addr(os.getenv("FWPREP_LAN_ADDR", DEFAULT_LAN_ADDR))
        theme = _parse_theme(os.getenv("FWPREP_THEME", DEFAULT_THEME))
        return cls(
            log_dir=Path(log_dir_value).expanduser().resolve(),
            patches_dir=Path(patches_dir_value).expanduser().resolve(),
            lan_addr=lan_addr,
            theme=theme,
        )


@dataclass(frozen=True)
class ExecutionContext:
    """Read-only run parameters shared by every step handler.

    Attributes:
        repo_url: Source repository of the firmware tree.
        repo_branch: Branch to clone and reset against.
        build_dir: Working directory holding the firmware tree.
        commit_hash: Optional commit pin, None when unset.
        config_file: Build configuration file path.
        disabled_steps: Pattern text naming default steps to skip.
        enabled_steps: Pattern text naming optional steps to force.
        kernel_vermagic: Optional kernel vermagic hash.
        kernel_modules: Optional space separated kernel module names.
        patches_dir: Directory holding patch and script artifacts.
        lan_addr: Default LAN address written into the firmware.
        theme: Default LuCI theme name.
    """

    repo_url: str
    repo_branch: str
    build_dir: Path
    commit_hash: str | None
    config_file: Path
    disabled_steps: str = ""
    enabled_steps: str = ""
    kernel_vermagic: str | None = None
    kernel_modules: str | None = None
    patches_dir: Path = DEFAULT_PATCHES_DIR
    lan_addr: str = DEFAULT_LAN_ADDR
    theme: str = DEFAULT_THEME


def build_execution_context(
    config: PrepConfig,
    repo_url: str,
    repo_branch: str,
    build_dir: str,
    commit_hash: str,
    config_file: str,
    disabled_steps: str = "",
    enabled_steps: str = "",
    kernel_vermagic: str = "",
    kernel_modules: str = "",
) -> ExecutionContext:
    """Normalize raw entry parameters into one execution context.

    Args:
        config: Validated runtime configuration.
        repo_url: Source repository location.
        repo_branch: Branch name.
        build_dir: Working directory path.
        commit_hash: Commit pin, or the literal ``none``.
        config_file: Build configuration file path.
        disabled_steps: Disabled-step pattern text.
        enabled_steps: Enabled-override pattern text.
        kernel_vermagic: Optional kernel vermagic.
        kernel_modules: Optional kernel module list.

    Returns:
        Immutable execution context.

    Raises:
        PrepConfigError: If a required parameter is blank.
    """
    if not repo_url.strip():
        raise PrepConfigError("Repository URL must not be empty. Pass a git clone URL.")
    if not repo_branch.strip():
        raise PrepConfigError("Repository branch must not be empty. Pass a branch name.")
    if not build_dir.strip():
        raise PrepConfigError("Build directory must not be empty. Pass a working path.")
    return ExecutionContext(
        repo_url=repo_url.strip(),
        repo_branch=repo_branch.strip(),
        build_dir=Path(build_dir).expanduser().resolve(),
        commit_hash=_normalize_commit(commit_hash),
        config_file=Path(config_file).expanduser().resolve(),
        disabled_steps=disabled_steps,
        enabled_steps=enabled_steps,
        kernel_vermagic=kernel_vermagic.strip() or None,
        kernel_modules=kernel_modules.strip() or None,
        patches_dir=config.patches_dir,
        lan_addr=config.lan_addr,
        theme=config.theme,
    )


def _normalize_commit(raw_value: str) -> str | None:
    value = raw_value.strip()
    if not value or value.lower() == UNSET_COMMIT_LITERAL:
        return None
    return value


def _parse_lan_addr(raw_value: str) -> str:
    """Parse the LAN address environment value.

    Raises:
        PrepConfigError: If value is not an IPv4 address.
    """
    try:
        return str(ipaddress.IPv4Address(raw_value.strip()))
    except ValueError as error:
        raise PrepConfigError(
            "Invalid FWPREP_LAN_ADDR value: "
            f"expected IPv4 address, got '{raw_value}'. "
            "Set FWPREP_LAN_ADDR to a dotted-quad address."
        ) from error


def _parse_theme(raw_value: str) -> str:
    theme = raw_value.strip()
    if not theme or not theme.replace("-", "").replace("_", "").isalnum():
        raise PrepConfigError(
            f"Invalid FWPREP_THEME value '{raw_value}'. Use a LuCI theme name such as 'argon'."
        )
    return theme
