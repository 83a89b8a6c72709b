"""Tests for entry-point unit discovery."""

from __future__ import annotations

from typing import Optional
from unittest.mock import MagicMock, patch

from justinstall.pipeline.discovery import discover_registrars, register_discovered_units
from justinstall.pipeline.registry import UnitRegistry


def entry_point(name: str, loaded=None, error: Optional[Exception] = None) -> MagicMock:
    ep = MagicMock()
    ep.name = name
    if error is not None:
        ep.load.side_effect = error
    else:
        ep.load.return_value = loaded
    return ep


class TestDiscovery:
    """Tests for registrar discovery."""

    def test_broken_entry_points_are_skipped(self) -> None:
        registrar = MagicMock()
        eps = [
            entry_point("good", registrar),
            entry_point("not-callable", "text"),
            entry_point("broken", error=ImportError("missing module")),
        ]
        with patch("justinstall.pipeline.discovery.entry_points", return_value=eps) as found:
            registrars = discover_registrars()

        found.assert_called_once_with(group="justinstall.units")
        assert registrars == {"good": registrar}

    def test_registrars_receive_registry(self) -> None:
        registrar = MagicMock()
        registry = UnitRegistry()
        with patch(
            "justinstall.pipeline.discovery.entry_points",
            return_value=[entry_point("extra", registrar)],
        ):
            assert register_discovered_units(registry) == 1
        registrar.assert_called_once_with(registry)
