"""Platform detection and the filename vocabularies used to match assets.

Detects OS and architecture of the running host and exposes the alias
families that map a canonical id to the tokens release assets use for it.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

# Supported operating systems (lowercase)
SUPPORTED_OS = frozenset({"darwin", "linux", "windows"})

# Supported architectures (normalized)
SUPPORTED_ARCH = frozenset({"amd64", "arm64"})

# Architecture normalization map
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

# Filename tokens recognised for each platform. Tokens are compared after
# case-folding and splitting on [_ .-], with x86_64 and x86-64 read as amd64.
PLATFORM_ALIASES: Dict[str, FrozenSet[str]] = {
    "darwin": frozenset({"darwin", "macos", "mac", "osx", "macosx", "apple"}),
    "linux": frozenset({"linux", "gnu", "musl", "ubuntu", "debian"}),
    "windows": frozenset({"windows", "win", "win32", "win64", "msvc", "mingw"}),
    "freebsd": frozenset({"freebsd"}),
    "openbsd": frozenset({"openbsd"}),
    "netbsd": frozenset({"netbsd"}),
}

ARCH_ALIASES: Dict[str, FrozenSet[str]] = {
    "arm64": frozenset({"arm64", "aarch64", "arm", "silicon", "m1", "m2", "m3", "m4"}),
    "amd64": frozenset({"amd64", "x64", "intel"}),
    "386": frozenset({"386", "i386", "i686", "x86", "32bit"}),
    "armv7": frozenset({"armv7", "armv7l", "armhf", "armv6", "armel"}),
    "ppc64le": frozenset({"ppc64le", "ppc64"}),
    "s390x": frozenset({"s390x"}),
    "riscv64": frozenset({"riscv64"}),
}

# Tokens marking a build usable on every architecture of its platform.
UNIVERSAL_ARCH_TOKENS: FrozenSet[str] = frozenset({"universal", "universal2", "fat"})

# Package formats a platform prefers over plain archives, most preferred first.
PREFERRED_EXTENSIONS: Dict[str, Tuple[str, ...]] = {
    "darwin": ("dmg", "pkg", "app"),
    "linux": ("appimage", "deb", "rpm"),
    "windows": ("msi", "exe"),
}


def normalize_arch(machine: str) -> Optional[str]:
    """Normalize architecture string to standard form.

    Args:
        machine: Raw architecture string from platform.machine()

    Returns:
        Normalized architecture string or None if unknown.
    """
    return _ARCH_MAP.get(machine.lower())


def detect_os() -> str:
    """Detect the current operating system.

    Returns:
        Lowercase OS name (darwin, linux, windows).

    Raises:
        ValueError: If the OS is not supported.
    """
    system = platform.system().lower()
    if system not in SUPPORTED_OS:
        raise ValueError(
            f"Unsupported operating system: {platform.system()}. "
            f"Supported: {', '.join(sorted(SUPPORTED_OS))}"
        )
    return system


def detect_arch() -> str:
    """Detect the current CPU architecture.

    Returns:
        Normalized architecture string (amd64 or arm64).

    Raises:
        ValueError: If the architecture is not supported.
    """
    machine = platform.machine()
    normalized = normalize_arch(machine)
    if normalized is None:
        raise ValueError(
            f"Unsupported architecture: {machine}. "
            f"Supported: {', '.join(sorted(SUPPORTED_ARCH))}"
        )
    return normalized


@dataclass(frozen=True)
class PlatformProfile:
    """The host platform together with its filename vocabularies.

    Attributes:
        os: Operating system (darwin, linux, windows).
        arch: CPU architecture (amd64, arm64).
    """

    os: str
    arch: str

    @property
    def platform_tokens(self) -> FrozenSet[str]:
        """Filename tokens naming the host platform."""
        return PLATFORM_ALIASES.get(self.os, frozenset({self.os}))

    @property
    def arch_tokens(self) -> FrozenSet[str]:
        """Filename tokens naming the host architecture."""
        return ARCH_ALIASES.get(self.arch, frozenset({self.arch}))

    @property
    def compatible_arch_tokens(self) -> FrozenSet[str]:
        """Architecture tokens acceptable on this host, universal builds included."""
        return self.arch_tokens | UNIVERSAL_ARCH_TOKENS

    @property
    def preferred_extensions(self) -> Tuple[str, ...]:
        return PREFERRED_EXTENSIONS.get(self.os, ())

    @property
    def label(self) -> str:
        """Return a display label such as "darwin/arm64"."""
        return f"{self.os}/{self.arch}"

    def is_supported(self) -> bool:
        """Check if this platform is supported."""
        return self.os in SUPPORTED_OS and self.arch in SUPPORTED_ARCH


def get_platform_profile() -> PlatformProfile:
    """Detect and return the current platform profile.

    Raises:
        ValueError: If the platform is not supported.
    """
    return PlatformProfile(os=detect_os(), arch=detect_arch())
