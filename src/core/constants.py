"""Core constants used across fwprep modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

OPTIONAL_STEP_MARKER = "~"
UNSET_COMMIT_LITERAL = "none"
PIPELINE_FILE_VERSION = 1

DEFAULT_REPO_URL = "https://github.com/immortalwrt/immortalwrt.git"
DEFAULT_REPO_BRANCH = "master"
DEFAULT_BUILD_DIR = "immortalwrt"
DEFAULT_CONFIG_FILE = "deconfig/default.config"
DEFAULT_LOG_DIR = Path("logs")
DEFAULT_PATCHES_DIR = Path("patches")
DEFAULT_LAN_ADDR = "192.168.2.1"
DEFAULT_THEME = "argon"

LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
PROGRESS_BAR_WIDTH = 30

DOWNLOAD_RETRIES = 3
DOWNLOAD_CONNECT_TIMEOUT_SECONDS = 10
DOWNLOAD_READ_TIMEOUT_SECONDS = 60
DOWNLOAD_RETRY_DELAY_SECONDS = 2.0
