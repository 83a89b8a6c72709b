"""Resolution context threaded through every pipeline phase."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from justinstall.config.models import JustInstallConfig
from justinstall.core.errors import NoReleaseFound
from justinstall.core.logging import get_logger
from justinstall.core.models import (
    Candidate,
    InputKind,
    InstallResult,
    ReleaseInfo,
    RepositoryRef,
    ResolutionOptions,
)
from justinstall.core.workspace import Workspace
from justinstall.host.capabilities import Capabilities, CapabilityProbe
from justinstall.host.platform import PlatformProfile, get_platform_profile

LOGGER = get_logger(__name__)


@dataclass
class ResolutionContext:
    """Mutable state of one resolution run.

    Created at invocation start and discarded at run end. Each unit
    documents which fields it reads and writes.
    """

    raw_input: str
    profile: PlatformProfile
    capabilities: Capabilities
    config: JustInstallConfig = field(default_factory=JustInstallConfig)
    options: ResolutionOptions = field(default_factory=ResolutionOptions)

    # detect
    input_kind: Optional[InputKind] = None
    repository: Optional[RepositoryRef] = None
    source_url: Optional[str] = None
    local_path: Optional[Path] = None

    # source
    release: Optional[ReleaseInfo] = None
    release_error: Optional[NoReleaseFound] = None
    readme: Optional[str] = None
    readme_fetched: bool = False
    candidates: List[Candidate] = field(default_factory=list)

    # select / download / install
    selected: Optional[Candidate] = None
    alternatives: List[Candidate] = field(default_factory=list)
    download_path: Optional[Path] = None
    install_result: Optional[InstallResult] = None
    record: Optional[Any] = None

    workspace: Workspace = field(default_factory=Workspace)

    @classmethod
    def create(
        cls,
        raw_input: str,
        config: Optional[JustInstallConfig] = None,
        options: Optional[ResolutionOptions] = None,
        profile: Optional[PlatformProfile] = None,
        probe: Optional[CapabilityProbe] = None,
    ) -> "ResolutionContext":
        """Detect the host and build a fresh context for one run."""
        profile = profile or get_platform_profile()
        capabilities = (probe or CapabilityProbe()).probe(profile)
        return cls(
            raw_input=raw_input.strip(),
            profile=profile,
            capabilities=capabilities,
            config=config or JustInstallConfig(),
            options=options or ResolutionOptions(),
        )

    @property
    def active_candidates(self) -> List[Candidate]:
        """Candidates not excluded by any filter."""
        return [c for c in self.candidates if not c.excluded]

    @property
    def assume_yes(self) -> bool:
        return self.options.assume_yes or self.config.assume_yes

    def add_candidate(self, candidate: Candidate) -> None:
        self.candidates.append(candidate)
        LOGGER.debug(
            f"Candidate from {candidate.provider}: {candidate.name} "
            f"(priority {candidate.priority}, confidence {candidate.confidence})"
        )

    def release_resources(self) -> None:
        """Release the run's temporary workspace."""
        self.workspace.release()
