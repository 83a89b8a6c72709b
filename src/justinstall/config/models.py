"""Typed configuration models.

The YAML file mirrors these dataclasses section by section:

    assume_yes: false
    network:
      timeout: 30
      parallel_fetch: true
    install:
      bin_dir: ~/.local/bin
    scoring:
      preferred_extension_boost: 100
    scripts:
      max_lines: 10
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from justinstall import __version__
from justinstall.host.paths import default_bin_dir
from justinstall.resolution.scoring import ScoringConfig
from justinstall.resolution.scripts import ScriptRules

DEFAULT_USER_AGENT = f"justinstall/{__version__}"


@dataclass
class NetworkConfig:
    """Network settings for metadata fetches and downloads."""

    timeout: float = 30.0
    download_timeout: float = 300.0
    parallel_fetch: bool = True
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class InstallConfig:
    """Install destinations."""

    bin_dir: Optional[str] = None
    applications_dir: str = "/Applications"

    @property
    def bin_path(self) -> Path:
        if self.bin_dir:
            return Path(self.bin_dir).expanduser()
        return default_bin_dir()

    @property
    def applications_path(self) -> Path:
        return Path(self.applications_dir).expanduser()


@dataclass
class JustInstallConfig:
    """Complete justinstall configuration."""

    assume_yes: bool = False
    network: NetworkConfig = field(default_factory=NetworkConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    scripts: ScriptRules = field(default_factory=ScriptRules)

    # Track config sources for debugging
    _config_sources: List[str] = field(default_factory=list)
