"""Phase-ordered pipeline of resolution units."""

from justinstall.pipeline.registry import UnitHandle, UnitRegistry
from justinstall.pipeline.runner import PipelineRunner
from justinstall.pipeline.unit import PHASE_ORDER, Phase, Unit

__all__ = [
    "PHASE_ORDER",
    "Phase",
    "PipelineRunner",
    "Unit",
    "UnitHandle",
    "UnitRegistry",
]
