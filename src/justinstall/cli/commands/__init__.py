"""CLI commands package.

This module provides the base Command class and exports all command implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import Namespace
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from justinstall.config.models import JustInstallConfig


class Command(ABC):
    """Base class for CLI commands."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Command identifier."""

    @abstractmethod
    def execute(self, args: Namespace, config: Optional["JustInstallConfig"] = None) -> int:
        """Execute the command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded configuration.

        Returns:
            Exit code (0 for success, non-zero for error).
        """


# ruff: noqa: E402
from justinstall.cli.commands.install import InstallCommand
from justinstall.cli.commands.list_installed import ListCommand
from justinstall.cli.commands.status import StatusCommand
from justinstall.cli.commands.uninstall import UninstallCommand
from justinstall.cli.commands.update import UpdateCommand

__all__ = [
    "Command",
    "InstallCommand",
    "ListCommand",
    "StatusCommand",
    "UninstallCommand",
    "UpdateCommand",
]
