"""Command-line interface for justinstall."""

from __future__ import annotations

import sys
from typing import Iterable, Optional

from justinstall.cli.runner import CLIRunner, get_version

__all__ = ["CLIRunner", "get_version", "main"]


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the ``justinstall`` console script."""
    return CLIRunner().run(argv)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
