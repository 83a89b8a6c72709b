"""Install command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING, Optional

from justinstall.cli.commands import Command
from justinstall.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS, exit_code_for
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import JustInstallError
from justinstall.core.logging import get_logger
from justinstall.core.models import ResolutionOptions
from justinstall.host.paths import JustInstallPaths
from justinstall.host.platform import get_platform_profile
from justinstall.pipeline.defaults import resolve
from justinstall.records.store import InstallationStore

if TYPE_CHECKING:
    from justinstall.config.models import JustInstallConfig

LOGGER = get_logger(__name__)


def report(context: ResolutionContext) -> None:
    """Print what was installed and where."""
    result = context.install_result
    if result.system_install:
        print(f"Installed {context.selected.name} with the system installer ({result.method}).")
    elif result.script is not None:
        print("Install script completed.")
    else:
        for destination in result.destinations:
            print(f"Installed {destination}")


def run_install(
    raw_input: str,
    options: ResolutionOptions,
    config: "JustInstallConfig",
    paths: Optional[JustInstallPaths] = None,
) -> int:
    """Resolve, install and record one request, mapping failures to exit codes."""
    try:
        profile = get_platform_profile()
    except ValueError as e:
        LOGGER.error(str(e))
        return EXIT_INVALID_USAGE

    paths = paths or JustInstallPaths.default()
    try:
        context = resolve(raw_input, config=config, options=options, profile=profile)
        report(context)
        if context.record is not None:
            paths.ensure_directories()
            InstallationStore(paths.records_file).save(context.record)
            print(f"Recorded as '{context.record.name}'.")
    except KeyboardInterrupt as e:
        LOGGER.error("Interrupted")
        return exit_code_for(e)
    except JustInstallError as e:
        LOGGER.error(str(e))
        return exit_code_for(e)
    return EXIT_SUCCESS


class InstallCommand(Command):
    """Resolves a source to one artifact and installs it."""

    @property
    def name(self) -> str:
        return "install"

    def execute(self, args: Namespace, config: Optional["JustInstallConfig"] = None) -> int:
        options = ResolutionOptions(
            assume_yes=args.yes,
            original_args=list(getattr(args, "original_args", [])),
        )
        return run_install(args.source, options, config)
