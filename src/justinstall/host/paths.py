"""Path management for justinstall state and install destinations.

Handles the config home directory (config file, installation records) and
the default locations binaries and app bundles are installed to.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

APP_DIR_NAME = "justinstall"

# Environment variable to override the config home directory
JUSTINSTALL_HOME_ENV = "JUSTINSTALL_HOME"


def get_justinstall_home() -> Path:
    """Get the justinstall config home directory path.

    Resolution order:
    1. JUSTINSTALL_HOME environment variable (if set)
    2. $XDG_CONFIG_HOME/justinstall (if XDG_CONFIG_HOME is set)
    3. ~/.config/justinstall (default)

    Returns:
        Path to the justinstall home directory.
    """
    env_home = os.environ.get(JUSTINSTALL_HOME_ENV)
    if env_home:
        return Path(env_home)
    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_home:
        return Path(xdg_home) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def default_bin_dir() -> Path:
    """Directory standalone binaries are installed into (~/.local/bin)."""
    return Path.home() / ".local" / "bin"


@dataclass
class JustInstallPaths:
    """Manages paths within the justinstall home directory.

    Directory structure:
        ~/.config/justinstall/
            config.yml          - Global configuration
            installations.json  - Installation records
    """

    home: Path

    _CONFIG_FILE: ClassVar[str] = "config.yml"
    _RECORDS_FILE: ClassVar[str] = "installations.json"

    @classmethod
    def default(cls, home: Optional[Path] = None) -> "JustInstallPaths":
        """Create paths from the default justinstall home."""
        return cls(home if home is not None else get_justinstall_home())

    @property
    def config_file(self) -> Path:
        return self.home / self._CONFIG_FILE

    @property
    def records_file(self) -> Path:
        """File holding the persisted installation records."""
        return self.home / self._RECORDS_FILE

    def ensure_directories(self) -> None:
        """Create the home directory if it doesn't exist."""
        self.home.mkdir(parents=True, exist_ok=True)
