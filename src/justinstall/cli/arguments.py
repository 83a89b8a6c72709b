"""Argument parser construction for the justinstall CLI.

Subcommands:
- justinstall install SOURCE  - Resolve and install a program
- justinstall update NAME     - Re-install from a stored record
- justinstall list            - Show installed programs
- justinstall uninstall NAME  - Remove an installed program
- justinstall status          - Show platform, helper tools and paths
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show justinstall version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging, including scoring decisions.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Config file merged over the global config.yml.",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Answer yes to every confirmation prompt.",
    )


def _build_install_parser(subparsers: argparse._SubParsersAction) -> None:
    install_parser = subparsers.add_parser(
        "install",
        help="Install a program from GitHub, a URL or a local file.",
        description=(
            "Resolve SOURCE to the one artifact that fits this machine "
            "and install it."
        ),
    )
    install_parser.add_argument(
        "source",
        help="owner/repo[@tag], a GitHub URL, a download or website URL, or a local file.",
    )


def _build_update_parser(subparsers: argparse._SubParsersAction) -> None:
    update_parser = subparsers.add_parser(
        "update",
        help="Re-install a program from its installation record.",
    )
    update_parser.add_argument("name", help="Name shown by 'justinstall list'.")


def _build_list_parser(subparsers: argparse._SubParsersAction) -> None:
    list_parser = subparsers.add_parser("list", help="List installed programs.")
    list_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table).",
    )


def _build_uninstall_parser(subparsers: argparse._SubParsersAction) -> None:
    uninstall_parser = subparsers.add_parser(
        "uninstall",
        help="Remove an installed program and its record.",
    )
    uninstall_parser.add_argument("name", help="Name shown by 'justinstall list'.")


def _build_status_parser(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser(
        "status",
        help="Show platform, helper tool status and configuration paths.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the complete argument parser."""
    parser = argparse.ArgumentParser(
        prog="justinstall",
        description="justinstall - install the right release artifact for this machine.",
    )
    _add_global_options(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    _build_install_parser(subparsers)
    _build_update_parser(subparsers)
    _build_list_parser(subparsers)
    _build_uninstall_parser(subparsers)
    _build_status_parser(subparsers)

    return parser
