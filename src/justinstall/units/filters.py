"""Filter-phase units: mark incompatible candidates and adjust priorities.

Filters read ``profile``, ``capabilities`` and ``candidates`` and only
mutate candidate priorities. Excluded candidates stay in the list.
Script candidates are judged by the script heuristics instead and pass
through the asset checks untouched.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional

from justinstall.core.context import ResolutionContext
from justinstall.core.errors import ExclusionReason
from justinstall.core.logging import get_logger
from justinstall.core.models import Candidate
from justinstall.pipeline.unit import Unit
from justinstall.resolution.scoring import (
    apply_prerelease_penalty,
    check_architecture,
    check_capability,
    check_extension,
    check_platform,
    compatibility_boost,
)

LOGGER = get_logger(__name__)


class CandidateFilter(Unit):
    """Excludes active asset candidates that fail check()."""

    def should_run(self, context: ResolutionContext) -> bool:
        return any(not c.excluded and not c.is_script for c in context.candidates)

    @abstractmethod
    def check(self, candidate: Candidate, context: ResolutionContext) -> Optional[ExclusionReason]:
        """Return why the candidate is incompatible, or None."""

    def execute(self, context: ResolutionContext) -> None:
        for candidate in context.candidates:
            if candidate.excluded or candidate.is_script:
                continue
            reason = self.check(candidate, context)
            if reason is not None:
                candidate.exclude(reason)
                LOGGER.debug(f"{self.name}: excluded {candidate.name} ({reason.value})")


class PlatformFilter(CandidateFilter):
    @property
    def name(self) -> str:
        return "platform-filter"

    def check(self, candidate: Candidate, context: ResolutionContext) -> Optional[ExclusionReason]:
        return check_platform(candidate, context.profile)


class ArchitectureFilter(CandidateFilter):
    @property
    def name(self) -> str:
        return "architecture-filter"

    def check(self, candidate: Candidate, context: ResolutionContext) -> Optional[ExclusionReason]:
        return check_architecture(candidate, context.profile)


class ExtensionFilter(CandidateFilter):
    """Drops non-installable files and packages that belong to another OS."""

    @property
    def name(self) -> str:
        return "extension-filter"

    def check(self, candidate: Candidate, context: ResolutionContext) -> Optional[ExclusionReason]:
        return check_extension(candidate, context.profile)


class CapabilityFilter(CandidateFilter):
    @property
    def name(self) -> str:
        return "capability-filter"

    def check(self, candidate: Candidate, context: ResolutionContext) -> Optional[ExclusionReason]:
        return check_capability(candidate, context.capabilities)


class CompatibilityBoost(Unit):
    """Boosts preferred formats and names that match the host."""

    @property
    def name(self) -> str:
        return "compatibility-boost"

    def should_run(self, context: ResolutionContext) -> bool:
        return any(not c.excluded and not c.is_script for c in context.candidates)

    def execute(self, context: ResolutionContext) -> None:
        for candidate in context.candidates:
            if candidate.excluded or candidate.is_script:
                continue
            boost = compatibility_boost(candidate, context.profile, context.config.scoring)
            if boost:
                candidate.priority += boost
                LOGGER.debug(f"Boosted {candidate.name} by {boost} to {candidate.priority}")


class PrereleaseFilter(Unit):
    """Demotes prereleases when a stable candidate survives."""

    @property
    def name(self) -> str:
        return "prerelease-filter"

    def should_run(self, context: ResolutionContext) -> bool:
        return any(c.prerelease and not c.excluded for c in context.candidates)

    def execute(self, context: ResolutionContext) -> None:
        demoted = apply_prerelease_penalty(context.candidates, context.config.scoring)
        if demoted:
            LOGGER.debug(f"Demoted {demoted} prerelease candidate(s)")
