from __future__ import annotations

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "justinstall"

LOG_FORMAT = "%(levelname)s: %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr currently is."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def configure_logging(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """Configure the justinstall logger from CLI flags.

    Precedence:
    - quiet → ERROR
    - debug → DEBUG (timestamps and module names included)
    - verbose → INFO
    - default → WARNING

    Resolution decisions are logged at INFO, per-candidate scoring at DEBUG.
    Calling it again replaces the previous handler.
    """

    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, _StderrHandler):
            logger.removeHandler(handler)

    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter(DEBUG_LOG_FORMAT if debug else LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger under the justinstall namespace."""

    return logging.getLogger(name if name is not None else ROOT_LOGGER_NAME)
