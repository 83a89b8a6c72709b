"""Uninstall command implementation."""

from __future__ import annotations

import shutil
from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from justinstall.cli.commands import Command
from justinstall.cli.exit_codes import (
    EXIT_ABORTED,
    EXIT_INSTALL_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SUCCESS,
    exit_code_for,
)
from justinstall.core import prompts
from justinstall.core.logging import get_logger
from justinstall.core.models import SYSTEM_INSTALL
from justinstall.host.paths import JustInstallPaths
from justinstall.records.store import InstallationStore, RecordStoreError

if TYPE_CHECKING:
    from justinstall.config.models import JustInstallConfig

LOGGER = get_logger(__name__)


def remove_paths(destinations: List[str]) -> List[str]:
    """Delete recorded files and bundles.

    Returns:
        Destinations that could not be removed.
    """
    failed = []
    for destination in destinations:
        if destination == SYSTEM_INSTALL:
            continue
        path = Path(destination)
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
            else:
                LOGGER.debug(f"{path} is already gone")
                continue
            print(f"Removed {path}")
        except OSError as e:
            LOGGER.warning(f"Could not remove {path}: {e}")
            failed.append(destination)
    return failed


class UninstallCommand(Command):
    """Removes installed files and forgets the record."""

    @property
    def name(self) -> str:
        return "uninstall"

    def execute(self, args: Namespace, config: Optional["JustInstallConfig"] = None) -> int:
        paths = JustInstallPaths.default()
        store = InstallationStore(paths.records_file)
        try:
            record = store.get(args.name)
            if record is None:
                LOGGER.error(f"No installation named '{args.name}'. See 'justinstall list'.")
                return EXIT_INVALID_USAGE

            destinations = record.installation.destinations
            assume_yes = args.yes or (config is not None and config.assume_yes)
            if not prompts.confirm(f"Uninstall {record.name}?", assume_yes=assume_yes):
                return EXIT_ABORTED

            if SYSTEM_INSTALL in destinations:
                LOGGER.warning(
                    f"{record.name} was installed by the system installer "
                    f"({record.installation.method}); remove it with that package manager"
                )
            failed = remove_paths(destinations)
            if failed:
                LOGGER.error(f"Kept the record of {record.name}: {len(failed)} path(s) could not be removed")
                return EXIT_INSTALL_FAILURE
            store.remove(record.name)
        except RecordStoreError as e:
            LOGGER.error(str(e))
            return exit_code_for(e)

        print(f"Uninstalled {record.name}.")
        return EXIT_SUCCESS
