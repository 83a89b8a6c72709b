"""Capability probe for locally available helper tools.

Formats whose installer or decompressor is missing on the host are excluded
before selection, so the selector never picks something it cannot act on.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from justinstall.core.logging import get_logger
from justinstall.host.platform import PlatformProfile

LOGGER = get_logger(__name__)


class ToolStatus(str, Enum):
    """Status of a tool binary."""

    PRESENT = "present"
    MISSING = "missing"
    NOT_EXECUTABLE = "not_executable"


# extension -> (required OS or None, helper commands of which any one suffices)
EXTENSION_REQUIREMENTS: Dict[str, Tuple[Optional[str], Tuple[str, ...]]] = {
    "tar.gz": (None, ()),
    "tgz": (None, ()),
    "tar.xz": (None, ()),
    "tar.bz2": (None, ()),
    "zip": (None, ()),
    "tar.zst": (None, ("zstd", "unzstd")),
    "7z": (None, ("7z", "7za")),
    "sh": (None, ("sh",)),
    "dmg": ("darwin", ("hdiutil",)),
    "pkg": ("darwin", ("installer",)),
    "app": ("darwin", ()),
    "deb": ("linux", ("dpkg",)),
    "rpm": ("linux", ("rpm",)),
    "appimage": ("linux", ()),
    "exe": ("windows", ()),
    "msi": ("windows", ("msiexec",)),
}


def command_available(command: str) -> bool:
    """Default probe backend: report whether a command is on PATH."""
    return shutil.which(command) is not None


def validate_tool(path: Path) -> ToolStatus:
    """Validate a single tool binary.

    Args:
        path: Path to the tool binary.

    Returns:
        ToolStatus indicating whether the tool is present and executable.
    """
    if not path.exists():
        return ToolStatus.MISSING

    if not os.access(path, os.X_OK):
        return ToolStatus.NOT_EXECUTABLE

    return ToolStatus.PRESENT


@dataclass(frozen=True)
class Capabilities:
    """Installable formats the host can act on.

    Attributes:
        supported_extensions: Extensions from EXTENSION_REQUIREMENTS the host supports.
        tools: Availability of every helper command that was probed.
    """

    supported_extensions: FrozenSet[str]
    tools: Dict[str, bool] = field(default_factory=dict)

    def supports(self, extension: str) -> bool:
        """Check an extension against the probe.

        Extensions without a recorded requirement are not gated here.
        """
        if extension not in EXTENSION_REQUIREMENTS:
            return True
        return extension in self.supported_extensions

    def has_tool(self, command: str) -> bool:
        return self.tools.get(command, False)


class CapabilityProbe:
    """Derives host capabilities from a command-availability backend."""

    def __init__(self, backend: Callable[[str], bool] = command_available) -> None:
        self._backend = backend
        self._cache: Dict[str, bool] = {}

    def has_command(self, command: str) -> bool:
        if command not in self._cache:
            self._cache[command] = bool(self._backend(command))
        return self._cache[command]

    def probe(self, profile: PlatformProfile) -> Capabilities:
        """Probe every helper relevant to the host OS.

        Args:
            profile: Host platform; formats bound to other OSes are never supported.

        Returns:
            Capabilities for the host.
        """
        supported = set()
        tools: Dict[str, bool] = {}

        for extension, (required_os, commands) in EXTENSION_REQUIREMENTS.items():
            if required_os is not None and required_os != profile.os:
                continue
            if not commands:
                supported.add(extension)
                continue
            found = False
            for command in commands:
                available = self.has_command(command)
                tools[command] = available
                found = found or available
            if found:
                supported.add(extension)
            else:
                LOGGER.debug(f"No helper for .{extension} (looked for {', '.join(commands)})")

        LOGGER.debug(f"Supported formats on {profile.label}: {sorted(supported)}")
        return Capabilities(supported_extensions=frozenset(supported), tools=tools)

    def tool_statuses(self, profile: PlatformProfile) -> Dict[str, ToolStatus]:
        """Report the status of each helper command for the host OS."""
        statuses: Dict[str, ToolStatus] = {}
        for required_os, commands in EXTENSION_REQUIREMENTS.values():
            if required_os is not None and required_os != profile.os:
                continue
            for command in commands:
                statuses[command] = (
                    ToolStatus.PRESENT if self.has_command(command) else ToolStatus.MISSING
                )
        return statuses
