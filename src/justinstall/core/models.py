"""Core data models shared by the resolution pipeline.

Defines:
- InputKind / CandidateKind / ScriptSource enums
- Candidate: one possible thing to install
- ReleaseInfo / ReleaseAsset: metadata returned by a release source
- RepositoryRef: a parsed owner/repo[@tag] reference
- ResolutionOptions / InstallResult: per-run options and the install outcome
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Union

from justinstall.core.errors import ExclusionReason


class InputKind(str, Enum):
    """Shape of the raw install request."""

    REPOSITORY = "repository"
    DIRECT = "direct"
    WEBSITE = "website"
    FILE = "file"


class CandidateKind(str, Enum):
    ASSET = "asset"
    SCRIPT = "script"


class ScriptSource(str, Enum):
    """Document an install script was extracted from."""

    RELEASE_NOTES = "release_notes"
    README = "readme"
    STORED = "stored"


# Sentinel returned by executors when an OS-level installer owns file placement.
SYSTEM_INSTALL = "system"


@dataclass
class Candidate:
    """One possible artifact to install.

    Exactly one of {url, local_path} or script_code is set. A negative
    priority excludes the candidate from selection without removing it,
    so exclusions stay visible in debug output.
    """

    name: str
    provider: str
    kind: CandidateKind = CandidateKind.ASSET
    url: Optional[str] = None
    local_path: Optional[Path] = None
    script_code: Optional[str] = None
    script_source: Optional[ScriptSource] = None
    size: Optional[int] = None
    extension: str = ""
    priority: int = 0
    confidence: int = 50
    prerelease: bool = False
    platform_tokens: FrozenSet[str] = frozenset()
    arch_tokens: FrozenSet[str] = frozenset()
    exclusion_reason: Optional[ExclusionReason] = None

    def __post_init__(self) -> None:
        has_location = self.url is not None or self.local_path is not None
        has_script = self.script_code is not None
        if has_location == has_script:
            raise ValueError(
                f"Candidate '{self.name}' needs exactly one of a location or script code"
            )
        if self.url is not None and self.local_path is not None:
            raise ValueError(f"Candidate '{self.name}' cannot have both url and local path")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Confidence must be within 0-100, got {self.confidence}")

    @property
    def is_script(self) -> bool:
        return self.kind == CandidateKind.SCRIPT

    @property
    def excluded(self) -> bool:
        return self.priority < 0

    @property
    def platform_qualified(self) -> bool:
        """Whether the name explicitly names a platform."""
        return bool(self.platform_tokens)

    def exclude(self, reason: ExclusionReason) -> None:
        """Mark the candidate incompatible, keeping the first recorded reason."""
        if self.exclusion_reason is None:
            self.exclusion_reason = reason
        if self.priority >= 0:
            self.priority = -1

    def describe(self) -> str:
        """Return a human-readable label with size when known."""
        if self.size:
            return f"{self.name} ({format_size(self.size)})"
        return self.name


@dataclass
class ReleaseAsset:
    name: str
    download_url: str
    size: Optional[int] = None


@dataclass
class ReleaseInfo:
    """Release metadata for a repository."""

    tag: str
    name: str = ""
    body: str = ""
    prerelease: bool = False
    published_at: Optional[str] = None
    commit: Optional[str] = None
    assets: List[ReleaseAsset] = field(default_factory=list)


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    repo: str
    tag: Optional[str] = None

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"


@dataclass
class ResolutionOptions:
    """Per-run options supplied by the caller.

    Attributes:
        assume_yes: Skip confirmation prompts.
        preferred_method: Install method recorded by a previous installation.
        stored_script: Script recorded by a previous script installation.
        original_args: Command-line arguments, stored in the record.
    """

    assume_yes: bool = False
    preferred_method: Optional[str] = None
    stored_script: Optional[str] = None
    original_args: List[str] = field(default_factory=list)

    @property
    def is_update(self) -> bool:
        return self.preferred_method is not None


@dataclass
class InstallResult:
    """Outcome of the install phase.

    Attributes:
        method: Installer that handled the candidate (binary, archive, dmg, ...).
        destinations: Installed paths, or [SYSTEM_INSTALL] when the OS owns placement.
        binaries: Names of installed executables.
        script: Script text that was run, for script installs.
    """

    method: str
    destinations: List[Union[Path, str]] = field(default_factory=list)
    binaries: List[str] = field(default_factory=list)
    script: Optional[str] = None

    @property
    def system_install(self) -> bool:
        return SYSTEM_INSTALL in self.destinations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "destinations": [str(d) for d in self.destinations],
            "binaries": list(self.binaries),
            "script": self.script,
        }


def format_size(size: int) -> str:
    """Format a byte count for display (e.g. "12.3 MB")."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"
