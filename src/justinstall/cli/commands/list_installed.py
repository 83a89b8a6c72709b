"""List command implementation."""

from __future__ import annotations

import json
from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from justinstall.cli.commands import Command
from justinstall.cli.exit_codes import EXIT_SUCCESS, exit_code_for
from justinstall.core.logging import get_logger
from justinstall.core.models import SYSTEM_INSTALL
from justinstall.host.capabilities import ToolStatus, validate_tool
from justinstall.host.paths import JustInstallPaths
from justinstall.records.store import InstallationRecord, InstallationStore, RecordStoreError

if TYPE_CHECKING:
    from justinstall.config.models import JustInstallConfig

LOGGER = get_logger(__name__)


def installed_state(record: InstallationRecord) -> str:
    """Summarize whether the recorded files are still in place."""
    destinations = record.installation.destinations
    if not destinations or SYSTEM_INSTALL in destinations:
        return "system"
    statuses = [validate_tool(Path(d)) for d in destinations]
    if all(s == ToolStatus.PRESENT for s in statuses):
        return "ok"
    if all(s == ToolStatus.MISSING for s in statuses):
        return "missing"
    return "damaged"


class ListCommand(Command):
    """Shows the installation records."""

    @property
    def name(self) -> str:
        return "list"

    def execute(self, args: Namespace, config: Optional["JustInstallConfig"] = None) -> int:
        paths = JustInstallPaths.default()
        try:
            records = InstallationStore(paths.records_file).list()
        except RecordStoreError as e:
            LOGGER.error(str(e))
            return exit_code_for(e)

        if getattr(args, "format", "table") == "json":
            print(json.dumps([r.to_dict() for r in records], indent=2))
            return EXIT_SUCCESS

        if not records:
            print("Nothing installed with justinstall yet.")
            return EXIT_SUCCESS

        width = max(len(r.name) for r in records)
        for record in records:
            version = record.version or "-"
            print(
                f"{record.name:<{width}}  {version:<14} {record.installation.method:<12} "
                f"{installed_state(record)}"
            )
        return EXIT_SUCCESS
