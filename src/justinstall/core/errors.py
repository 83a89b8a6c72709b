"""Error taxonomy for a resolution run.

Every error here is terminal for the current run; nothing is retried.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional


class JustInstallError(Exception):
    """Base class for all resolution and installation failures."""

    pass


class InvalidSource(JustInstallError):
    """The raw input matches no known source shape."""

    pass


class NoReleaseFound(JustInstallError):
    """A repository has no usable release."""

    pass


class ExclusionReason(str, Enum):
    """Why a candidate was excluded from selection."""

    PLATFORM = "platform"
    ARCHITECTURE = "architecture"
    EXTENSION = "extension"
    CAPABILITY = "capability"


class NoCompatibleAsset(JustInstallError):
    """Candidates existed but every one of them was filtered out."""

    def __init__(self, message: str, reason: Optional[ExclusionReason] = None):
        super().__init__(message)
        self.reason = reason


class UserAborted(JustInstallError):
    """The user declined at a confirmation point."""

    pass


class DownloadFailed(JustInstallError):
    """A network fetch or download did not complete."""

    pass


class InstallFailed(JustInstallError):
    """An installer step failed, usually a subprocess with non-zero exit."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = command
        self.returncode = returncode


class RegistryError(JustInstallError):
    """The unit registry is misconfigured (unknown phase, missing dependency)."""

    pass
