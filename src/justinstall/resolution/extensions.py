"""File extension rules for release assets and downloaded files."""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, Optional

# Compound extensions that must be kept as a single unit.
COMPOUND_EXTENSIONS: FrozenSet[str] = frozenset({"tar.gz", "tar.xz", "tar.bz2", "tar.zst"})

ARCHIVE_EXTENSIONS: FrozenSet[str] = frozenset(
    {"tar.gz", "tgz", "tar.xz", "tar.bz2", "tar.zst", "zip", "7z"}
)

# Packages handled by an OS-level installer, mapped to the OS that owns them.
PACKAGE_PLATFORMS: Dict[str, str] = {
    "dmg": "darwin",
    "pkg": "darwin",
    "app": "darwin",
    "deb": "linux",
    "rpm": "linux",
    "appimage": "linux",
    "exe": "windows",
    "msi": "windows",
}

SCRIPT_EXTENSIONS: FrozenSet[str] = frozenset({"sh"})

INSTALLABLE_EXTENSIONS: FrozenSet[str] = (
    ARCHIVE_EXTENSIONS | frozenset(PACKAGE_PLATFORMS) | SCRIPT_EXTENSIONS
)

_SIMPLE_EXTENSION = re.compile(r"^[a-z0-9]{1,10}$")


def get_extension(filename: str) -> str:
    """Return the normalized extension of a file name.

    Compound extensions such as ``tar.gz`` are returned whole. A trailing
    segment that does not look like an extension (version numbers, platform
    suffixes) yields an empty string.

    >>> get_extension("x.tar.gz")
    'tar.gz'
    >>> get_extension("a.b.c")
    'c'
    >>> get_extension("binary")
    ''
    """
    name = filename.rsplit("/", 1)[-1].lower()
    parts = name.split(".")
    if len(parts) < 2:
        return ""

    if len(parts) >= 3:
        compound = f"{parts[-2]}.{parts[-1]}"
        if compound in COMPOUND_EXTENSIONS:
            return compound

    last = parts[-1]
    if not _SIMPLE_EXTENSION.match(last) or last.isdigit():
        return ""
    return last


def is_archive(extension: str) -> bool:
    return extension in ARCHIVE_EXTENSIONS


def is_installable(extension: str) -> bool:
    """Whether a file with this extension can be installed.

    Files without an extension are treated as candidate standalone binaries.
    """
    return extension == "" or extension in INSTALLABLE_EXTENSIONS


def package_platform(extension: str) -> Optional[str]:
    """Return the OS an installer package belongs to, if it is OS-bound."""
    return PACKAGE_PLATFORMS.get(extension)
