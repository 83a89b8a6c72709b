"""Shared fixtures for justinstall tests."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

import pytest

from justinstall.config.models import JustInstallConfig
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import NoReleaseFound
from justinstall.core.models import ReleaseAsset, ReleaseInfo, ResolutionOptions
from justinstall.host.capabilities import Capabilities, CapabilityProbe
from justinstall.host.platform import PlatformProfile


class FakeGitHub:
    """Stands in for GitHubClient with canned releases and READMEs."""

    def __init__(
        self,
        releases: Optional[Dict[str, ReleaseInfo]] = None,
        readmes: Optional[Dict[str, str]] = None,
    ) -> None:
        self.releases = releases or {}
        self.readmes = readmes or {}
        self.calls: List[str] = []

    def fetch_release(self, owner: str, repo: str, tag: Optional[str] = None) -> ReleaseInfo:
        self.calls.append(f"release:{owner}/{repo}")
        release = self.releases.get(f"{owner}/{repo}")
        if release is None:
            raise NoReleaseFound(f"No releases found for {owner}/{repo}")
        return release

    def fetch_readme(self, owner: str, repo: str) -> Optional[str]:
        self.calls.append(f"readme:{owner}/{repo}")
        return self.readmes.get(f"{owner}/{repo}")


def release_of(
    names: Iterable[str],
    tag: str = "v1.0.0",
    prerelease: bool = False,
    body: str = "",
) -> ReleaseInfo:
    """Build a release whose assets have the given file names."""
    return ReleaseInfo(
        tag=tag,
        name=tag,
        body=body,
        prerelease=prerelease,
        assets=[
            ReleaseAsset(name=name, download_url=f"https://example.com/{tag}/{name}", size=1024)
            for name in names
        ],
    )


@pytest.fixture
def darwin_arm64() -> PlatformProfile:
    return PlatformProfile(os="darwin", arch="arm64")


@pytest.fixture
def linux_amd64() -> PlatformProfile:
    return PlatformProfile(os="linux", arch="amd64")


@pytest.fixture
def full_capabilities() -> Callable[[PlatformProfile], Capabilities]:
    """Capabilities of a host where every helper tool is installed."""

    def _probe(profile: PlatformProfile) -> Capabilities:
        return CapabilityProbe(backend=lambda command: True).probe(profile)

    return _probe


@pytest.fixture
def make_context(
    darwin_arm64: PlatformProfile,
    full_capabilities: Callable[[PlatformProfile], Capabilities],
) -> Callable[..., ResolutionContext]:
    """Factory for resolution contexts on a fully equipped host (darwin/arm64 by default)."""

    def _make(
        raw_input: str = "owner/repo",
        profile: Optional[PlatformProfile] = None,
        capabilities: Optional[Capabilities] = None,
        config: Optional[JustInstallConfig] = None,
        options: Optional[ResolutionOptions] = None,
    ) -> ResolutionContext:
        profile = profile or darwin_arm64
        return ResolutionContext(
            raw_input=raw_input,
            profile=profile,
            capabilities=capabilities or full_capabilities(profile),
            config=config or JustInstallConfig(),
            options=options or ResolutionOptions(assume_yes=True),
        )

    return _make


@pytest.fixture
def fake_github() -> Callable[..., FakeGitHub]:
    return FakeGitHub


@pytest.fixture
def make_release() -> Callable[..., ReleaseInfo]:
    return release_of
