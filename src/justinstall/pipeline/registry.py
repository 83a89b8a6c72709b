"""Unit registry with explicit registration and eager dependency validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple, Union

from justinstall.core.errors import RegistryError
from justinstall.core.logging import get_logger
from justinstall.pipeline.unit import Phase, Unit

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class UnitHandle:
    """Opaque handle returned by UnitRegistry.register()."""

    name: str
    phase: Phase
    priority: int
    dependencies: Tuple[str, ...]
    order: int


class UnitRegistry:
    """Holds units and their phase, priority and dependencies."""

    def __init__(self) -> None:
        self._units: Dict[str, Unit] = {}
        self._handles: Dict[str, UnitHandle] = {}

    def register(
        self,
        unit: Unit,
        *,
        phase: Union[Phase, str],
        priority: int = 0,
        dependencies: Iterable[str] = (),
    ) -> UnitHandle:
        """Register a unit.

        Args:
            unit: The unit instance.
            phase: Phase the unit runs in.
            priority: Higher runs first within the phase.
            dependencies: Names of units that must also be registered.

        Returns:
            Handle identifying the registration.

        Raises:
            RegistryError: On an unknown phase or a duplicate unit name.
        """
        try:
            phase = Phase(phase)
        except ValueError as e:
            raise RegistryError(f"Unknown phase '{phase}' for unit '{unit.name}'") from e

        if unit.name in self._units:
            raise RegistryError(f"Unit '{unit.name}' is already registered")

        handle = UnitHandle(
            name=unit.name,
            phase=phase,
            priority=priority,
            dependencies=tuple(dependencies),
            order=len(self._handles),
        )
        self._units[unit.name] = unit
        self._handles[unit.name] = handle
        LOGGER.debug(f"Registered unit {unit.name} ({phase.value}, priority {priority})")
        return handle

    def validate(self) -> None:
        """Check that every declared dependency is registered.

        Raises:
            RegistryError: Listing every missing dependency.
        """
        missing: List[str] = []
        for handle in self._handles.values():
            for dependency in handle.dependencies:
                if dependency not in self._units:
                    missing.append(f"{handle.name} -> {dependency}")
        if missing:
            raise RegistryError(f"Missing unit dependencies: {', '.join(missing)}")

    def unit(self, handle: UnitHandle) -> Unit:
        return self._units[handle.name]

    def handles(self) -> List[UnitHandle]:
        """All handles in registration order."""
        return sorted(self._handles.values(), key=lambda h: h.order)

    def for_phase(self, phase: Phase) -> List[UnitHandle]:
        """Handles of a phase, highest priority first, ties in registration order."""
        handles = [h for h in self._handles.values() if h.phase == phase]
        return sorted(handles, key=lambda h: (-h.priority, h.order))

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)
