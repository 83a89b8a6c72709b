"""The built-in unit set and its wiring."""

from __future__ import annotations

from typing import Optional

from justinstall.clients.github import GitHubClient
from justinstall.clients.http import HttpClient
from justinstall.config.models import JustInstallConfig
from justinstall.core.context import ResolutionContext
from justinstall.core.models import ResolutionOptions
from justinstall.host.capabilities import CapabilityProbe
from justinstall.host.platform import PlatformProfile
from justinstall.pipeline.discovery import register_discovered_units
from justinstall.pipeline.registry import UnitRegistry
from justinstall.pipeline.runner import PipelineRunner
from justinstall.pipeline.unit import Phase
from justinstall.units.detectors import (
    LinkDetector,
    LocalFileDetector,
    RepositoryDetector,
    UnrecognizedInput,
)
from justinstall.units.downloader import Downloader
from justinstall.units.filters import (
    ArchitectureFilter,
    CapabilityFilter,
    CompatibilityBoost,
    ExtensionFilter,
    PlatformFilter,
    PrereleaseFilter,
)
from justinstall.units.installers import (
    AppBundleInstaller,
    ArchiveInstaller,
    BinaryInstaller,
    DebInstaller,
    DmgInstaller,
    InstallGuard,
    PkgInstaller,
    RpmInstaller,
    ScriptInstaller,
    ShellScriptInstaller,
    WindowsInstaller,
)
from justinstall.units.records import InstallationRecordUnit
from justinstall.units.selectors import AssetSelector, UserConfirmation
from justinstall.units.sources import (
    DirectDownloadProvider,
    GitHubReleasesProvider,
    InstallScriptProvider,
    LocalFileProvider,
    StoredScriptProvider,
    WebScraperProvider,
)


def build_default_registry(
    github: Optional[GitHubClient] = None,
    http: Optional[HttpClient] = None,
    discover: bool = True,
) -> UnitRegistry:
    """Register the built-in units, then any contributed through entry points.

    Args:
        github: Client shared by the GitHub units; built from config when None.
        http: Client for scraping and downloads; built from config when None.
        discover: Whether to apply registrars from installed packages.

    Raises:
        RegistryError: If a registration conflicts or a dependency is missing.
    """
    registry = UnitRegistry()

    registry.register(RepositoryDetector(), phase=Phase.DETECT, priority=100)
    registry.register(LocalFileDetector(), phase=Phase.DETECT, priority=90)
    registry.register(LinkDetector(), phase=Phase.DETECT, priority=80)
    registry.register(UnrecognizedInput(), phase=Phase.DETECT, priority=-100)

    registry.register(StoredScriptProvider(), phase=Phase.SOURCE, priority=110)
    registry.register(
        GitHubReleasesProvider(github), phase=Phase.SOURCE, priority=100,
        dependencies=["github-detector"],
    )
    registry.register(
        InstallScriptProvider(github), phase=Phase.SOURCE, priority=90,
        dependencies=["github-detector"],
    )
    registry.register(
        DirectDownloadProvider(), phase=Phase.SOURCE, priority=80,
        dependencies=["link-detector"],
    )
    registry.register(
        WebScraperProvider(http), phase=Phase.SOURCE, priority=70,
        dependencies=["link-detector"],
    )
    registry.register(
        LocalFileProvider(), phase=Phase.SOURCE, priority=60,
        dependencies=["local-file-detector"],
    )

    registry.register(PlatformFilter(), phase=Phase.FILTER, priority=100)
    registry.register(ArchitectureFilter(), phase=Phase.FILTER, priority=95)
    registry.register(ExtensionFilter(), phase=Phase.FILTER, priority=90)
    registry.register(CapabilityFilter(), phase=Phase.FILTER, priority=80)
    registry.register(CompatibilityBoost(), phase=Phase.FILTER, priority=75)
    registry.register(PrereleaseFilter(), phase=Phase.FILTER, priority=70)

    registry.register(AssetSelector(), phase=Phase.SELECT, priority=100)
    registry.register(
        UserConfirmation(), phase=Phase.SELECT, priority=50,
        dependencies=["asset-selector"],
    )

    registry.register(
        Downloader(http), phase=Phase.DOWNLOAD, priority=100,
        dependencies=["asset-selector"],
    )

    registry.register(ScriptInstaller(), phase=Phase.INSTALL, priority=100)
    registry.register(ShellScriptInstaller(), phase=Phase.INSTALL, priority=95)
    registry.register(DmgInstaller(), phase=Phase.INSTALL, priority=90)
    registry.register(AppBundleInstaller(), phase=Phase.INSTALL, priority=88)
    registry.register(PkgInstaller(), phase=Phase.INSTALL, priority=85)
    registry.register(DebInstaller(), phase=Phase.INSTALL, priority=80)
    registry.register(RpmInstaller(), phase=Phase.INSTALL, priority=78)
    registry.register(ArchiveInstaller(), phase=Phase.INSTALL, priority=75)
    registry.register(WindowsInstaller(), phase=Phase.INSTALL, priority=72)
    registry.register(BinaryInstaller(), phase=Phase.INSTALL, priority=70)
    registry.register(InstallGuard(), phase=Phase.INSTALL, priority=-50)
    registry.register(InstallationRecordUnit(), phase=Phase.INSTALL, priority=-100)

    if discover:
        register_discovered_units(registry)

    registry.validate()
    return registry


def resolve(
    raw_input: str,
    config: Optional[JustInstallConfig] = None,
    options: Optional[ResolutionOptions] = None,
    registry: Optional[UnitRegistry] = None,
    profile: Optional[PlatformProfile] = None,
    probe: Optional[CapabilityProbe] = None,
) -> ResolutionContext:
    """Resolve and install one request with the default units.

    Returns:
        The finished context; ``install_result`` and ``record`` are set.
    """
    context = ResolutionContext.create(raw_input, config=config, options=options, profile=profile, probe=probe)
    PipelineRunner(registry or build_default_registry()).run(context)
    return context
