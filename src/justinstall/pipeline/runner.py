"""Pipeline runner: fixed phase order, priority order within a phase."""

from __future__ import annotations

from typing import List, Optional

from justinstall.core.context import ResolutionContext
from justinstall.core.logging import get_logger
from justinstall.core.models import InstallResult
from justinstall.pipeline.registry import UnitHandle, UnitRegistry
from justinstall.pipeline.unit import PHASE_ORDER

LOGGER = get_logger(__name__)


class PipelineRunner:
    """Executes registered units against a resolution context.

    Each unit's predicate is evaluated immediately before it would run, so
    it sees every change made by the units before it. A unit that raises
    aborts the run; cleanup still runs for every unit that executed, in
    registration order, and then the context's workspace is released.
    """

    def __init__(self, registry: UnitRegistry) -> None:
        registry.validate()
        self._registry = registry

    def run(self, context: ResolutionContext) -> Optional[InstallResult]:
        """Run all phases.

        Returns:
            The install result, or None if no installer ran.
        """
        executed: List[UnitHandle] = []
        try:
            for phase in PHASE_ORDER:
                LOGGER.debug(f"Phase {phase.value}")
                for handle in self._registry.for_phase(phase):
                    unit = self._registry.unit(handle)
                    if not unit.should_run(context):
                        continue
                    LOGGER.debug(f"Running {handle.name}")
                    executed.append(handle)
                    unit.execute(context)
            return context.install_result
        finally:
            self._cleanup(executed, context)

    def _cleanup(self, executed: List[UnitHandle], context: ResolutionContext) -> None:
        for handle in sorted(executed, key=lambda h: h.order):
            try:
                self._registry.unit(handle).cleanup(context)
            except Exception as e:
                LOGGER.warning(f"Cleanup of {handle.name} failed: {e}")
        context.release_resources()
