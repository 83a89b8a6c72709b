"""Builds the installation record once an installer has run."""

from __future__ import annotations

from justinstall.core.context import ResolutionContext
from justinstall.core.logging import get_logger
from justinstall.pipeline.unit import Unit
from justinstall.records.store import build_record

LOGGER = get_logger(__name__)


class InstallationRecordUnit(Unit):
    """Reads ``selected``, ``release`` and ``install_result``; writes ``record``.

    The record is only built here. Persisting it is left to the caller.
    """

    @property
    def name(self) -> str:
        return "installation-record"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.install_result is not None and context.record is None

    def execute(self, context: ResolutionContext) -> None:
        context.record = build_record(context)
        LOGGER.debug(f"Built installation record for {context.record.name}")
