"""Base class for pipeline units.

Detectors, providers, filters, selectors, the downloader and installers
all implement this contract. Phase, priority and dependencies are not
declared here; they are given when the unit is registered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from justinstall.core.context import ResolutionContext


class Phase(str, Enum):
    """Pipeline phases, in execution order."""

    DETECT = "detect"
    SOURCE = "source"
    FILTER = "filter"
    SELECT = "select"
    DOWNLOAD = "download"
    INSTALL = "install"


PHASE_ORDER: Tuple[Phase, ...] = (
    Phase.DETECT,
    Phase.SOURCE,
    Phase.FILTER,
    Phase.SELECT,
    Phase.DOWNLOAD,
    Phase.INSTALL,
)


class Unit(ABC):
    """Abstract base class for pipeline units."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique unit identifier used for registration and dependencies."""

    @abstractmethod
    def should_run(self, context: "ResolutionContext") -> bool:
        """Pure predicate over the current context state."""

    @abstractmethod
    def execute(self, context: "ResolutionContext") -> None:
        """Perform the unit's effect, mutating the context."""

    def cleanup(self, context: "ResolutionContext") -> None:
        """Release resources acquired in execute().

        Called for every unit that executed, even when the run failed.
        """
        return None
