"""Configuration loading for justinstall."""

from justinstall.config.loader import ConfigError, load_config
from justinstall.config.models import (
    InstallConfig,
    JustInstallConfig,
    NetworkConfig,
)

__all__ = [
    "ConfigError",
    "InstallConfig",
    "JustInstallConfig",
    "NetworkConfig",
    "load_config",
]
