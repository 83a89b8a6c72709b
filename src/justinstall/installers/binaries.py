"""Locating executables inside extracted archives and disk images."""

from __future__ import annotations

import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from justinstall.core.logging import get_logger
from justinstall.resolution.extensions import get_extension
from justinstall.resolution.scoring import find_arch_tokens, find_platform_tokens, tokenize

LOGGER = get_logger(__name__)

# Leading bytes of executable formats: ELF, Mach-O (32/64, both endians, fat), PE.
EXECUTABLE_MAGIC = (
    b"\x7fELF",
    b"\xfe\xed\xfa\xce",
    b"\xfe\xed\xfa\xcf",
    b"\xce\xfa\xed\xfe",
    b"\xcf\xfa\xed\xfe",
    b"\xca\xfe\xba\xbe",
    b"MZ",
)

# Files that are never the installable executable even when marked executable.
NON_BINARY_EXTENSIONS = frozenset({
    "txt", "md", "json", "yml", "yaml", "toml", "html", "1", "so", "dylib", "a", "h",
})

_VERSION_TOKEN = re.compile(r"^v?\d")


def is_executable_file(path: Path) -> bool:
    """Detect an executable by its permission bits, magic bytes or shebang."""
    if not path.is_file() or path.is_symlink():
        return False
    if get_extension(path.name) in NON_BINARY_EXTENSIONS:
        return False
    if os.name != "nt" and path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
        return True
    try:
        with open(path, "rb") as f:
            head = f.read(4)
    except OSError:
        return False
    return head.startswith(EXECUTABLE_MAGIC) or head.startswith(b"#!")


@dataclass
class BinaryMatch:
    path: Path
    score: int


def find_binaries(root: Path) -> List[Path]:
    """Return executable files below root, skipping macOS metadata folders."""
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d != "__MACOSX" and not d.endswith(".app")]
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if is_executable_file(path):
                found.append(path)
    return found


def rank_binaries(binaries: List[Path], root: Path, package_name: Optional[str]) -> List[BinaryMatch]:
    """Order binaries by how likely each is the package's main executable.

    Names equal to the package name rank highest; files in bin/ directories
    and shallow files come next.
    """
    wanted = package_name.lower() if package_name else None
    matches = []
    for path in binaries:
        name = path.name.lower()
        stem = name[: -len(".exe")] if name.endswith(".exe") else name
        relative = path.relative_to(root)
        score = 0
        if wanted:
            if stem == wanted:
                score += 100
            elif stem.startswith(wanted):
                score += 50
        if "bin" in relative.parts[:-1]:
            score += 20
        score -= 5 * (len(relative.parts) - 1)
        matches.append(BinaryMatch(path=path, score=score))
    matches.sort(key=lambda m: (-m.score, str(m.path)))
    return matches


def binary_target_name(filename: str, package_name: Optional[str] = None) -> str:
    """Name a standalone binary is installed under.

    ``yt-dlp_macos`` becomes ``yt-dlp``; when nothing is left after removing
    platform, architecture and version tokens the package name is used.
    """
    extension = get_extension(filename)
    base = filename[: -(len(extension) + 1)] if extension and extension != "exe" else filename
    kept = []
    for part in re.split(r"([_.-])", base):
        tokens = tokenize(part)
        if tokens and (
            find_platform_tokens(tokens) or find_arch_tokens(tokens) or _VERSION_TOKEN.match(part)
        ):
            break
        kept.append(part)
    name = "".join(kept).strip("_.-")
    if name:
        return name
    return package_name or base
