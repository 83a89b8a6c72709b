"""Subprocess runner for installer helpers.

Every helper invocation goes through run_command so failures surface as
InstallFailed with the command and exit code attached.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Union

from justinstall.core.errors import InstallFailed
from justinstall.core.logging import get_logger

LOGGER = get_logger(__name__)


def run_command(
    cmd: List[str],
    tool_name: Optional[str] = None,
    cwd: Optional[Union[str, Path]] = None,
    timeout: Optional[int] = None,
    capture_output: bool = True,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a helper command to completion.

    Args:
        cmd: Command and arguments to run.
        tool_name: Name used in error messages (defaults to cmd[0]).
        cwd: Working directory for the command.
        timeout: Timeout in seconds, or None to wait indefinitely.
        capture_output: Capture stdout/stderr. Interactive steps (sudo
            prompts, install scripts) pass False so the user sees them.
        check: Raise InstallFailed on a non-zero exit code.

    Returns:
        The CompletedProcess.

    Raises:
        InstallFailed: If the command is missing, times out or fails.
    """
    name = tool_name or cmd[0]
    LOGGER.debug(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=str(cwd) if cwd is not None else None,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise InstallFailed(f"{name} is not available: {cmd[0]} not found", command=cmd) from e
    except subprocess.TimeoutExpired as e:
        raise InstallFailed(f"{name} timed out after {timeout}s", command=cmd) from e

    if check and result.returncode != 0:
        detail = ((result.stderr or "") or (result.stdout or "")).strip()
        message = f"{name} exited with code {result.returncode}"
        if detail:
            message = f"{message}: {detail}"
        raise InstallFailed(message, command=cmd, returncode=result.returncode)

    return result
