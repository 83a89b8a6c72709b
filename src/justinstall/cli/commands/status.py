"""Status command implementation."""

from __future__ import annotations

from argparse import Namespace
from typing import TYPE_CHECKING, Optional

from justinstall.cli.commands import Command
from justinstall.cli.exit_codes import EXIT_SUCCESS
from justinstall.host.capabilities import CapabilityProbe, ToolStatus
from justinstall.host.paths import JustInstallPaths
from justinstall.host.platform import get_platform_profile

if TYPE_CHECKING:
    from justinstall.config.models import JustInstallConfig


class StatusCommand(Command):
    """Shows platform, helper tool status and configuration paths."""

    def __init__(self, version: str):
        self._version = version

    @property
    def name(self) -> str:
        return "status"

    def execute(self, args: Namespace, config: Optional["JustInstallConfig"] = None) -> int:
        paths = JustInstallPaths.default()

        print(f"justinstall version: {self._version}")
        try:
            profile = get_platform_profile()
        except ValueError as e:
            print(f"Platform: unsupported ({e})")
            profile = None
        else:
            print(f"Platform: {profile.label}")
        print(f"Config home: {paths.home}")
        print(f"Config file: {paths.config_file}{'' if paths.config_file.exists() else ' (not present)'}")
        print(f"Installation records: {paths.records_file}")
        if config is not None:
            print(f"Binary directory: {config.install.bin_path}")
            if config._config_sources:
                print(f"Loaded config: {', '.join(config._config_sources)}")

        if profile is None:
            return EXIT_SUCCESS

        probe = CapabilityProbe()
        print()
        print("Helper tools:")
        statuses = probe.tool_statuses(profile)
        if statuses:
            for tool, status in sorted(statuses.items()):
                marker = "found" if status == ToolStatus.PRESENT else "missing"
                print(f"  {tool}: {marker}")
        else:
            print("  None needed on this platform.")

        capabilities = probe.probe(profile)
        formats = ", ".join(sorted(capabilities.supported_extensions))
        print(f"\nInstallable formats: {formats}")
        return EXIT_SUCCESS
