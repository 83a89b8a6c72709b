"""Discovery of third-party units via Python entry points.

Packages contribute units in their pyproject.toml:

    [project.entry-points."justinstall.units"]
    mytool = "mypackage.units:register"

Each entry point loads a callable that receives the UnitRegistry and
registers its units with their phase, priority and dependencies.
"""

from __future__ import annotations

from importlib.metadata import entry_points
from typing import Callable, Dict

from justinstall.core.logging import get_logger
from justinstall.pipeline.registry import UnitRegistry

LOGGER = get_logger(__name__)

UNIT_ENTRY_POINT_GROUP = "justinstall.units"

Registrar = Callable[[UnitRegistry], None]


def discover_registrars(group: str = UNIT_ENTRY_POINT_GROUP) -> Dict[str, Registrar]:
    """Discover all installed unit registrars for an entry point group.

    Returns:
        Dictionary mapping entry point names to registrar callables.
    """
    registrars: Dict[str, Registrar] = {}

    for ep in entry_points(group=group):
        try:
            registrar = ep.load()
            if not callable(registrar):
                LOGGER.warning(f"Unit entry point '{ep.name}' is not callable, skipping")
                continue
            registrars[ep.name] = registrar
            LOGGER.debug(f"Discovered unit registrar: {ep.name} (group: {group})")
        except Exception as e:
            LOGGER.warning(f"Failed to load unit entry point '{ep.name}': {e}")

    return registrars


def register_discovered_units(registry: UnitRegistry, group: str = UNIT_ENTRY_POINT_GROUP) -> int:
    """Let every discovered registrar add its units.

    Returns:
        Number of registrars applied.
    """
    applied = 0
    for name, registrar in discover_registrars(group).items():
        registrar(registry)
        applied += 1
        LOGGER.debug(f"Applied unit registrar {name}")
    return applied
