"""Temporary working directory owned by a single resolution run."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Optional

from justinstall.core.logging import get_logger

LOGGER = get_logger(__name__)


class Workspace:
    """Lazily created temporary directory.

    Downloads and extracted archives live here until the run ends, when
    release() removes it.
    """

    def __init__(self, prefix: str = "justinstall-") -> None:
        self._prefix = prefix
        self._path: Optional[Path] = None

    @property
    def created(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = Path(tempfile.mkdtemp(prefix=self._prefix))
            LOGGER.debug(f"Created workspace {self._path}")
        return self._path

    def subdir(self, name: str) -> Path:
        directory = self.path / name
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def release(self) -> bool:
        """Remove the directory, falling back to forcing permissions.

        Returns:
            True if nothing is left behind. Leftovers are logged as a warning,
            never raised, so they cannot mask the error that ended the run.
        """
        if self._path is None:
            return True

        path = self._path
        self._path = None
        if not path.exists():
            return True

        try:
            shutil.rmtree(path)
            return True
        except OSError as e:
            LOGGER.debug(f"Removing {path} failed ({e}), retrying with write permissions")

        _make_writable(path)
        failures = _remove_tree(path)
        if failures:
            LOGGER.warning(
                f"Could not fully remove temporary directory {path}: "
                f"{len(failures)} entries left ({failures[0]})"
            )
            return False
        return True


def _make_writable(root: Path) -> None:
    """Add owner write permission throughout a tree (chmod -R u+w)."""
    for dirpath, dirnames, filenames in os.walk(root):
        for name in [dirpath, *(os.path.join(dirpath, n) for n in dirnames + filenames)]:
            try:
                mode = os.lstat(name).st_mode
                if not stat.S_ISLNK(mode):
                    os.chmod(name, mode | stat.S_IWUSR | stat.S_IRUSR | stat.S_IXUSR)
            except OSError as e:
                LOGGER.debug(f"chmod failed for {name}: {e}")


def _remove_tree(root: Path) -> list:
    """Remove a tree entry by entry; return the entries that could not be removed."""
    failures = []
    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        for name in filenames:
            target = os.path.join(dirpath, name)
            try:
                os.remove(target)
            except OSError as e:
                failures.append(f"{target}: {e}")
        for name in dirnames:
            target = os.path.join(dirpath, name)
            try:
                if os.path.islink(target):
                    os.remove(target)
                else:
                    os.rmdir(target)
            except OSError as e:
                failures.append(f"{target}: {e}")
    try:
        os.rmdir(root)
    except OSError as e:
        failures.append(f"{root}: {e}")
    return failures
