"""Candidate compatibility scoring.

Pure functions over candidates and the host profile. The filter units in
``justinstall.units.filters`` apply them in order; nothing here touches the
network or the resolution context.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence

from justinstall.core.errors import ExclusionReason
from justinstall.core.models import Candidate
from justinstall.host.capabilities import Capabilities
from justinstall.host.platform import (
    ARCH_ALIASES,
    PLATFORM_ALIASES,
    UNIVERSAL_ARCH_TOKENS,
    PlatformProfile,
)
from justinstall.resolution.extensions import is_archive, is_installable, package_platform

TOKEN_SEPARATORS = re.compile(r"[_ .\-]+")
# x86_64 and x86-64 are one amd64 token; a bare x86 is 32-bit.
AMD64_SPELLINGS = re.compile(r"x86[_-]64")

_ALL_PLATFORM_TOKENS: FrozenSet[str] = frozenset().union(*PLATFORM_ALIASES.values())
_ALL_ARCH_TOKENS: FrozenSet[str] = frozenset().union(*ARCH_ALIASES.values()) | UNIVERSAL_ARCH_TOKENS

# Name tokens marking release assets that are never installable artifacts.
IGNORED_NAME_TOKENS: FrozenSet[str] = frozenset({
    "checksum",
    "checksums",
    "sha256sum",
    "sha256sums",
    "sha512sums",
    "sbom",
    "license",
    "readme",
    "changelog",
    "src",
    "source",
    "symbols",
    "dsym",
    "pdb",
})

# Order used to pick the reported cause when several exclusions coexist.
EXCLUSION_PRECEDENCE = (
    ExclusionReason.PLATFORM,
    ExclusionReason.ARCHITECTURE,
    ExclusionReason.CAPABILITY,
    ExclusionReason.EXTENSION,
)


@dataclass
class ScoringConfig:
    """Tunable priority magnitudes.

    Only the relative behaviour matters: a platform-qualified binary must
    outrank a medium-confidence install script.
    """

    release_asset_priority: int = 400
    direct_download_priority: int = 600
    scraped_link_priority: int = 300
    local_file_priority: int = 700
    stored_script_priority: int = 1000
    archive_boost: int = 50
    bare_binary_boost: int = 80
    preferred_extension_boost: int = 100
    platform_token_boost: int = 15
    arch_token_boost: int = 10
    universal_boost: int = 5
    prerelease_penalty: int = 1000
    script_priority_base: int = 150
    script_confidence_weight: int = 3


def tokenize(name: str) -> List[str]:
    """Split a file name into case-folded tokens on ``[_ .-]``."""
    folded = AMD64_SPELLINGS.sub("amd64", name.casefold())
    return [token for token in TOKEN_SEPARATORS.split(folded) if token]


def find_platform_tokens(tokens: Iterable[str]) -> FrozenSet[str]:
    return frozenset(token for token in tokens if token in _ALL_PLATFORM_TOKENS)


def find_arch_tokens(tokens: Iterable[str]) -> FrozenSet[str]:
    return frozenset(token for token in tokens if token in _ALL_ARCH_TOKENS)


def annotate(candidate: Candidate) -> Candidate:
    """Record the platform and architecture tokens found in the candidate name."""
    tokens = tokenize(candidate.name)
    candidate.platform_tokens = find_platform_tokens(tokens)
    candidate.arch_tokens = find_arch_tokens(tokens)
    return candidate


def base_asset_priority(extension: str, base: int, config: ScoringConfig) -> int:
    """Provisional priority for an asset before any filter runs."""
    if extension == "":
        return base + config.bare_binary_boost
    if is_archive(extension):
        return base + config.archive_boost
    return base


def script_priority(confidence: int, config: ScoringConfig) -> int:
    return config.script_priority_base + confidence * config.script_confidence_weight


def check_platform(candidate: Candidate, profile: PlatformProfile) -> Optional[ExclusionReason]:
    """Platform tokens disjoint from the host family make a candidate incompatible.

    A name without any platform token is unknown and stays eligible.
    """
    if candidate.platform_tokens and not candidate.platform_tokens & profile.platform_tokens:
        return ExclusionReason.PLATFORM
    return None


def check_architecture(
    candidate: Candidate, profile: PlatformProfile
) -> Optional[ExclusionReason]:
    if candidate.arch_tokens and not candidate.arch_tokens & profile.compatible_arch_tokens:
        return ExclusionReason.ARCHITECTURE
    return None


def check_extension(candidate: Candidate, profile: PlatformProfile) -> Optional[ExclusionReason]:
    """Reject non-installable files and packages that belong to another OS."""
    if not is_installable(candidate.extension):
        return ExclusionReason.EXTENSION
    if IGNORED_NAME_TOKENS.intersection(tokenize(candidate.name)):
        return ExclusionReason.EXTENSION
    owner = package_platform(candidate.extension)
    if owner is not None and owner != profile.os:
        return ExclusionReason.PLATFORM
    return None


def check_capability(candidate: Candidate, capabilities: Capabilities) -> Optional[ExclusionReason]:
    if candidate.extension and not capabilities.supports(candidate.extension):
        return ExclusionReason.CAPABILITY
    return None


def compatibility_boost(
    candidate: Candidate, profile: PlatformProfile, config: ScoringConfig
) -> int:
    """Priority boost from preferred formats and host-matching name tokens.

    Every OS-preferred extension gets the same flat boost. Architecture
    tokens add a boost per distinct token matching the host.
    """
    boost = 0
    if candidate.extension in profile.preferred_extensions:
        boost += config.preferred_extension_boost
    if candidate.platform_tokens & profile.platform_tokens:
        boost += config.platform_token_boost
    boost += config.arch_token_boost * len(candidate.arch_tokens & profile.arch_tokens)
    if candidate.arch_tokens & UNIVERSAL_ARCH_TOKENS:
        boost += config.universal_boost
    return boost


def apply_prerelease_penalty(candidates: Sequence[Candidate], config: ScoringConfig) -> int:
    """Demote prereleases when a stable candidate survives.

    The penalty is floored at zero, so demotion never excludes a candidate.
    Sorting puts stable candidates first on equal priority.

    Returns:
        Number of candidates demoted.
    """
    has_stable = any(not c.prerelease and not c.excluded for c in candidates)
    if not has_stable:
        return 0

    demoted = 0
    for candidate in candidates:
        if candidate.prerelease and not candidate.excluded:
            candidate.priority = max(0, candidate.priority - config.prerelease_penalty)
            demoted += 1
    return demoted


def ranking_key(candidate: Candidate):
    return (
        -candidate.priority,
        candidate.prerelease,
        not candidate.platform_qualified,
        candidate.is_script,
    )


def rank_candidates(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Return surviving candidates, best first.

    Ties on priority prefer stable releases, then platform-qualified names,
    then assets over scripts; remaining ties keep provider order.
    """
    survivors = [c for c in candidates if not c.excluded]
    return sorted(survivors, key=ranking_key)


def dominant_exclusion(candidates: Sequence[Candidate]) -> Optional[ExclusionReason]:
    """Return the most frequent exclusion reason among excluded candidates."""
    counts = Counter(c.exclusion_reason for c in candidates if c.exclusion_reason is not None)
    if not counts:
        return None
    return max(
        EXCLUSION_PRECEDENCE,
        key=lambda reason: (counts.get(reason, 0), -EXCLUSION_PRECEDENCE.index(reason)),
    )
