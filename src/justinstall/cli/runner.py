"""CLI runner orchestration.

This module handles command dispatch and execution for the justinstall CLI.
"""

from __future__ import annotations

import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Iterable, Optional

from justinstall.cli.arguments import build_parser
from justinstall.cli.commands import (
    Command,
    InstallCommand,
    ListCommand,
    StatusCommand,
    UninstallCommand,
    UpdateCommand,
)
from justinstall.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS, exit_code_for
from justinstall.config import load_config
from justinstall.config.loader import ConfigError
from justinstall.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get justinstall version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("justinstall")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from justinstall import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.commands = {
            command.name: command
            for command in (
                InstallCommand(),
                UpdateCommand(),
                ListCommand(),
                UninstallCommand(),
                StatusCommand(version=self._version),
            )
        }

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        argv_list = list(argv) if argv is not None else sys.argv[1:]
        try:
            args = self.parser.parse_args(argv_list)
        except SystemExit as e:
            # argparse exits on --help (0) and on usage errors (2)
            return e.code if isinstance(e.code, int) else EXIT_INVALID_USAGE
        args.original_args = argv_list

        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command: Optional[Command] = self.commands.get(getattr(args, "command", None))
        if command is None:
            self.parser.print_help()
            return EXIT_SUCCESS

        cli_overrides = {"assume_yes": True} if args.yes else None
        try:
            config = load_config(cli_config_path=args.config, cli_overrides=cli_overrides)
        except ConfigError as e:
            LOGGER.error(str(e))
            return exit_code_for(e)

        return command.execute(args, config)
