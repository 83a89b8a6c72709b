"""Tests for candidate compatibility scoring."""

from __future__ import annotations

from typing import List

import pytest

from justinstall.core.errors import ExclusionReason
from justinstall.core.models import Candidate, CandidateKind
from justinstall.host.capabilities import Capabilities
from justinstall.host.platform import PlatformProfile
from justinstall.resolution.extensions import get_extension
from justinstall.resolution.scoring import (
    ScoringConfig,
    annotate,
    apply_prerelease_penalty,
    base_asset_priority,
    check_architecture,
    check_capability,
    check_extension,
    check_platform,
    compatibility_boost,
    dominant_exclusion,
    rank_candidates,
    script_priority,
    tokenize,
)

DARWIN_ARM64 = PlatformProfile(os="darwin", arch="arm64")
LINUX_AMD64 = PlatformProfile(os="linux", arch="amd64")


def asset(name: str, priority: int = 400, prerelease: bool = False) -> Candidate:
    return annotate(
        Candidate(
            name=name,
            provider="test",
            url=f"https://example.com/{name}",
            extension=get_extension(name),
            priority=priority,
            prerelease=prerelease,
        )
    )


def script(priority: int) -> Candidate:
    return Candidate(
        name="Install script",
        provider="test",
        kind=CandidateKind.SCRIPT,
        script_code="brew install tool",
        priority=priority,
    )


class TestTokenize:
    """Tests for file name tokenization."""

    def test_splits_on_separators(self) -> None:
        assert tokenize("fzf-0.54.0-darwin_arm64.tar.gz") == [
            "fzf", "0", "54", "0", "darwin", "arm64", "tar", "gz",
        ]

    def test_case_folds(self) -> None:
        assert tokenize("Tool-MacOS-Universal") == ["tool", "macos", "universal"]

    @pytest.mark.parametrize("name", ["tool-x86_64.tar.gz", "tool-X86-64.tar.gz"])
    def test_x86_64_is_one_amd64_token(self, name: str) -> None:
        assert tokenize(name) == ["tool", "amd64", "tar", "gz"]


class TestPlatformCheck:
    """Platform tokens outside the host family exclude a candidate."""

    @pytest.mark.parametrize(
        "name",
        ["tool-linux-x64.tar.gz", "tool-windows-x64.exe", "tool_freebsd_arm64.tar.gz"],
    )
    def test_foreign_platform_is_excluded(self, name: str) -> None:
        assert check_platform(asset(name), DARWIN_ARM64) == ExclusionReason.PLATFORM

    @pytest.mark.parametrize("name", ["tool-darwin-arm64.zip", "tool-macos.zip", "Tool-apple.zip"])
    def test_host_aliases_are_accepted(self, name: str) -> None:
        assert check_platform(asset(name), DARWIN_ARM64) is None

    def test_name_without_platform_stays_eligible(self) -> None:
        assert check_platform(asset("tool.tar.gz"), DARWIN_ARM64) is None

    def test_never_both_excluded_and_matching(self) -> None:
        names = [
            "a-darwin.zip", "a-linux.zip", "a-windows.zip", "a-osx-linux.zip", "a.zip",
        ]
        for name in names:
            candidate = asset(name)
            matches = bool(candidate.platform_tokens & DARWIN_ARM64.platform_tokens)
            excluded = check_platform(candidate, DARWIN_ARM64) is not None
            assert not (matches and excluded)


class TestArchitectureCheck:
    """Tests for architecture compatibility."""

    def test_foreign_arch_is_excluded(self) -> None:
        assert check_architecture(asset("tool-darwin-x86_64.tar.gz"), DARWIN_ARM64) == (
            ExclusionReason.ARCHITECTURE
        )

    def test_aarch64_alias_matches_arm64(self) -> None:
        assert check_architecture(asset("tool-aarch64-apple-darwin.tar.gz"), DARWIN_ARM64) is None

    def test_universal_build_is_accepted(self) -> None:
        assert check_architecture(asset("tool-macos-universal.zip"), DARWIN_ARM64) is None

    def test_x64_alias_matches_amd64(self) -> None:
        assert check_architecture(asset("tool-linux-x64.tar.gz"), LINUX_AMD64) is None

    def test_x86_64_matches_amd64(self) -> None:
        assert check_architecture(asset("tool-linux-x86_64.tar.gz"), LINUX_AMD64) is None

    @pytest.mark.parametrize("name", ["tool-linux-x86.tar.gz", "tool-linux-i686.tar.gz"])
    def test_32bit_build_is_excluded_on_amd64(self, name: str) -> None:
        assert check_architecture(asset(name), LINUX_AMD64) == ExclusionReason.ARCHITECTURE


class TestExtensionCheck:
    """Tests for installability and package ownership."""

    def test_checksums_are_excluded(self) -> None:
        assert check_extension(asset("tool_checksums.txt"), DARWIN_ARM64) == ExclusionReason.EXTENSION

    def test_signature_next_to_archive_is_excluded(self) -> None:
        assert check_extension(asset("tool.tar.gz.sha256"), DARWIN_ARM64) == ExclusionReason.EXTENSION

    def test_ignored_name_tokens(self) -> None:
        assert check_extension(asset("tool-src.tar.gz"), DARWIN_ARM64) == ExclusionReason.EXTENSION

    def test_foreign_package_is_a_platform_exclusion(self) -> None:
        assert check_extension(asset("tool_1.0_arm64.deb"), DARWIN_ARM64) == ExclusionReason.PLATFORM

    def test_host_package_is_accepted(self) -> None:
        assert check_extension(asset("Tool.dmg"), DARWIN_ARM64) is None


class TestCapabilityCheck:
    """Tests for helper-tool gating."""

    def test_missing_helper_excludes(self) -> None:
        capabilities = Capabilities(supported_extensions=frozenset({"tar.gz", "zip"}))
        assert check_capability(asset("tool.tar.zst"), capabilities) == ExclusionReason.CAPABILITY

    def test_bare_binary_is_not_gated(self) -> None:
        capabilities = Capabilities(supported_extensions=frozenset())
        assert check_capability(asset("tool-darwin-arm64"), capabilities) is None


class TestCompatibilityBoost:
    """Tests for preferred-format and token boosts."""

    def test_preferred_extension_gets_flat_boost(self) -> None:
        config = ScoringConfig()
        assert compatibility_boost(asset("Tool.dmg"), DARWIN_ARM64, config) == 100
        assert compatibility_boost(asset("Tool.pkg"), DARWIN_ARM64, config) == 100

    def test_platform_and_arch_tokens(self) -> None:
        config = ScoringConfig()
        assert compatibility_boost(asset("tool-darwin-arm64.zip"), DARWIN_ARM64, config) == 25

    def test_arch_boost_is_monotonic(self) -> None:
        """More matching architecture tokens never lower the boost."""
        config = ScoringConfig()
        none = compatibility_boost(asset("tool-darwin.zip"), DARWIN_ARM64, config)
        one = compatibility_boost(asset("tool-darwin-arm64.zip"), DARWIN_ARM64, config)
        two = compatibility_boost(asset("tool-darwin-arm64-aarch64.zip"), DARWIN_ARM64, config)
        assert none < one < two

    def test_universal_boost(self) -> None:
        config = ScoringConfig()
        assert compatibility_boost(asset("tool-universal.zip"), DARWIN_ARM64, config) == 5


class TestPrereleasePenalty:
    """Prereleases are demoted only when a stable candidate survives."""

    def test_demoted_when_stable_exists(self) -> None:
        stable = asset("tool-stable.zip", priority=450)
        beta = asset("tool-beta.zip", priority=500, prerelease=True)
        demoted = apply_prerelease_penalty([stable, beta], ScoringConfig())

        assert demoted == 1
        assert beta.priority == 0
        assert not beta.excluded
        assert rank_candidates([stable, beta])[0] is stable

    def test_untouched_when_only_prereleases(self) -> None:
        beta = asset("tool-beta.zip", priority=500, prerelease=True)
        assert apply_prerelease_penalty([beta], ScoringConfig()) == 0
        assert beta.priority == 500

    def test_excluded_stable_does_not_count(self) -> None:
        stable = asset("tool-linux.zip", priority=450)
        stable.exclude(ExclusionReason.PLATFORM)
        beta = asset("tool-beta.zip", priority=500, prerelease=True)
        assert apply_prerelease_penalty([stable, beta], ScoringConfig()) == 0
        assert beta.priority == 500


class TestRanking:
    """Tests for ranking and exclusion summaries."""

    def test_excluded_candidates_are_dropped(self) -> None:
        kept = asset("a.zip")
        dropped = asset("b.zip")
        dropped.exclude(ExclusionReason.EXTENSION)
        assert rank_candidates([dropped, kept]) == [kept]

    def test_ties_prefer_platform_qualified_then_assets(self) -> None:
        generic = asset("tool.zip", priority=450)
        qualified = asset("tool-darwin.zip", priority=450)
        snippet = script(450)
        assert rank_candidates([snippet, generic, qualified]) == [qualified, generic, snippet]

    def test_strong_binary_outranks_best_script(self) -> None:
        config = ScoringConfig()
        binary = asset("tool-darwin-arm64.tar.gz")
        binary.priority = base_asset_priority("tar.gz", config.release_asset_priority, config)
        binary.priority += compatibility_boost(binary, DARWIN_ARM64, config)
        best_script = script(script_priority(100, config))
        assert rank_candidates([best_script, binary])[0] is binary

    def test_dominant_exclusion_is_most_common(self) -> None:
        candidates: List[Candidate] = [asset(f"t{i}.zip") for i in range(3)]
        candidates[0].exclude(ExclusionReason.ARCHITECTURE)
        candidates[1].exclude(ExclusionReason.ARCHITECTURE)
        candidates[2].exclude(ExclusionReason.PLATFORM)
        assert dominant_exclusion(candidates) == ExclusionReason.ARCHITECTURE

    def test_dominant_exclusion_tie_prefers_platform(self) -> None:
        candidates = [asset("a.zip"), asset("b.zip")]
        candidates[0].exclude(ExclusionReason.EXTENSION)
        candidates[1].exclude(ExclusionReason.PLATFORM)
        assert dominant_exclusion(candidates) == ExclusionReason.PLATFORM
