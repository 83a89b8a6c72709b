"""Update command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING, Optional

from justinstall.cli.commands import Command
from justinstall.cli.commands.install import run_install
from justinstall.cli.exit_codes import EXIT_INVALID_USAGE, exit_code_for
from justinstall.core.logging import get_logger
from justinstall.core.models import ResolutionOptions
from justinstall.host.paths import JustInstallPaths
from justinstall.records.store import InstallationRecord, InstallationStore, RecordStoreError

if TYPE_CHECKING:
    from justinstall.config.models import JustInstallConfig

LOGGER = get_logger(__name__)


def source_of(record: InstallationRecord) -> Optional[str]:
    """Raw input that reproduces the recorded source."""
    source = record.source
    if source.owner and source.repo:
        return f"{source.owner}/{source.repo}"
    return source.url


class UpdateCommand(Command):
    """Re-resolves a recorded installation, preferring its previous method."""

    @property
    def name(self) -> str:
        return "update"

    def execute(self, args: Namespace, config: Optional["JustInstallConfig"] = None) -> int:
        paths = JustInstallPaths.default()
        try:
            record = InstallationStore(paths.records_file).get(args.name)
        except RecordStoreError as e:
            LOGGER.error(str(e))
            return exit_code_for(e)

        if record is None:
            LOGGER.error(f"No installation named '{args.name}'. See 'justinstall list'.")
            return EXIT_INVALID_USAGE

        raw_input = source_of(record)
        if not raw_input:
            LOGGER.error(f"Installation record '{record.name}' has no source to update from")
            return EXIT_INVALID_USAGE

        details = record.installation
        LOGGER.info(
            f"Updating {record.name} from {raw_input} "
            f"(current {record.version or 'unknown version'}, method {details.preferred_method})"
        )
        options = ResolutionOptions(
            assume_yes=args.yes,
            preferred_method=details.preferred_method or details.method,
            stored_script=details.script,
            original_args=record.source.original_args,
        )
        return run_install(raw_input, options, config, paths)
