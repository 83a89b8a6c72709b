"""Exit codes for the justinstall CLI."""

from __future__ import annotations

from justinstall.config.loader import ConfigError
from justinstall.core.errors import (
    DownloadFailed,
    InstallFailed,
    RegistryError,
    UserAborted,
)
from justinstall.records.store import RecordStoreError

EXIT_SUCCESS = 0
EXIT_RESOLUTION_FAILURE = 1
EXIT_INVALID_USAGE = 2
EXIT_INSTALL_FAILURE = 3
EXIT_CONFIG_ERROR = 4
EXIT_ABORTED = 130


def exit_code_for(error: BaseException) -> int:
    """Map an error that ended a run to its exit code.

    Anything not listed is a resolution failure (bad input, no release,
    no compatible asset).
    """
    if isinstance(error, (UserAborted, KeyboardInterrupt)):
        return EXIT_ABORTED
    if isinstance(error, (ConfigError, RegistryError)):
        return EXIT_CONFIG_ERROR
    if isinstance(error, (DownloadFailed, InstallFailed, RecordStoreError)):
        return EXIT_INSTALL_FAILURE
    return EXIT_RESOLUTION_FAILURE
