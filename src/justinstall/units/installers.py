"""Install-phase units.

Exactly one installer handles the selected candidate: each checks that no
install result exists yet and that the candidate's extension is its own.
All of them read ``selected``, ``download_path`` and ``config.install``
and write ``install_result``.
"""

from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, List, Optional

from justinstall.core import prompts
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import InstallFailed, UserAborted
from justinstall.core.logging import get_logger
from justinstall.core.models import InstallResult
from justinstall.installers import executors
from justinstall.installers.binaries import (
    BinaryMatch,
    binary_target_name,
    find_binaries,
    rank_binaries,
)
from justinstall.pipeline.unit import Unit
from justinstall.resolution.extensions import ARCHIVE_EXTENSIONS
from justinstall.resolution.scripts import prepare_script

LOGGER = get_logger(__name__)


def package_name(context: ResolutionContext) -> Optional[str]:
    """Name the installed program is expected to carry."""
    if context.repository is not None:
        return context.repository.repo
    if context.selected is not None and not context.selected.is_script:
        return binary_target_name(context.selected.name)
    return None


def _find_bundles(root: Path, suffix: str) -> List[Path]:
    """Bundles or packages at the top two levels of root."""
    found = sorted(p for p in root.glob(f"*{suffix}") if not p.name.startswith("."))
    if not found:
        found = sorted(
            p for p in root.glob(f"*/*{suffix}")
            if not p.name.startswith(".") and "__MACOSX" not in p.parts
        )
    return found


def choose_binaries(matches: List[BinaryMatch], root: Path, context: ResolutionContext) -> List[Path]:
    """Decide which executables of an unpacked tree get installed.

    A single candidate, or one that clearly outranks the rest, is taken
    directly. Otherwise the user picks; with --yes the top match wins.
    """
    if len(matches) == 1 or matches[0].score > matches[1].score or context.assume_yes:
        return [matches[0].path]

    labels = {str(m.path.relative_to(root)): m.path for m in matches}
    picked = prompts.choose_many(
        "Several executables were found. Which should be installed?",
        list(labels),
        checked=[next(iter(labels))],
    )
    if not picked:
        raise UserAborted("No executables selected")
    return [labels[label] for label in picked]


def install_tree(root: Path, context: ResolutionContext, method: str) -> InstallResult:
    """Install the contents of an unpacked archive or mounted image.

    An app bundle wins over a pkg, which wins over loose executables.
    """
    install = context.config.install
    if context.profile.os == "darwin":
        apps = _find_bundles(root, ".app")
        if apps:
            destination = executors.install_app_bundle(apps[0], install.applications_path)
            return InstallResult(
                method=f"{method}_app",
                destinations=[destination],
                binaries=[apps[0].name[: -len(".app")]],
            )
        pkgs = _find_bundles(root, ".pkg")
        if pkgs:
            return InstallResult(method=f"{method}_pkg", destinations=executors.install_pkg(pkgs[0]))

    binaries = find_binaries(root)
    if not binaries:
        raise InstallFailed(f"No executables found in {context.selected.name}")
    matches = rank_binaries(binaries, root, package_name(context))
    for match in matches:
        LOGGER.debug(f"Executable {match.path.relative_to(root)} (score {match.score})")

    chosen = choose_binaries(matches, root, context)
    names = [binary_target_name(path.name, package_name(context)) for path in chosen]
    destinations = executors.install_binaries(chosen, install.bin_path, names)
    return InstallResult(method="binary", destinations=destinations, binaries=names)


class InstallerUnit(Unit):
    """Base for installers that handle a fixed set of extensions."""

    extensions: FrozenSet[str] = frozenset()

    def should_run(self, context: ResolutionContext) -> bool:
        selected = context.selected
        if context.install_result is not None or selected is None or selected.is_script:
            return False
        return selected.extension in self.extensions

    def source_path(self, context: ResolutionContext) -> Path:
        if context.download_path is None:
            raise InstallFailed(f"{context.selected.name} has not been downloaded")
        return context.download_path


class ScriptInstaller(Unit):
    """Runs a selected install script with the host shell."""

    @property
    def name(self) -> str:
        return "script-installer"

    def should_run(self, context: ResolutionContext) -> bool:
        selected = context.selected
        return context.install_result is None and selected is not None and selected.is_script

    def execute(self, context: ResolutionContext) -> None:
        code = prepare_script(context.selected.script_code)
        LOGGER.info("Running install script")
        destinations = executors.run_script(code, context.profile.os)
        context.install_result = InstallResult(method="script", destinations=destinations, script=code)
        LOGGER.info("Install script finished")


class ShellScriptInstaller(InstallerUnit):
    extensions = frozenset({"sh"})

    @property
    def name(self) -> str:
        return "shell-script-installer"

    def execute(self, context: ResolutionContext) -> None:
        path = self.source_path(context)
        context.install_result = InstallResult(
            method="shell_script",
            destinations=executors.run_shell_file(path),
        )


class DmgInstaller(InstallerUnit):
    """Mounts a disk image and installs what it holds.

    The image stays attached until cleanup, which detaches it whatever
    happened during install.
    """

    extensions = frozenset({"dmg"})

    def __init__(self) -> None:
        self._mount_point: Optional[Path] = None

    @property
    def name(self) -> str:
        return "dmg-installer"

    def execute(self, context: ResolutionContext) -> None:
        image = self.source_path(context)
        mount_point = context.workspace.path / "dmg-mount"
        executors.mount_disk_image(image, mount_point)
        self._mount_point = mount_point
        context.install_result = install_tree(mount_point, context, "dmg")

    def cleanup(self, context: ResolutionContext) -> None:
        if self._mount_point is None:
            return
        mount_point = self._mount_point
        self._mount_point = None
        executors.detach_disk_image(mount_point)
        LOGGER.debug(f"Detached {mount_point}")


class AppBundleInstaller(InstallerUnit):
    extensions = frozenset({"app"})

    @property
    def name(self) -> str:
        return "app-installer"

    def execute(self, context: ResolutionContext) -> None:
        bundle = self.source_path(context)
        destination = executors.install_app_bundle(bundle, context.config.install.applications_path)
        context.install_result = InstallResult(
            method="app",
            destinations=[destination],
            binaries=[bundle.name[: -len(".app")]],
        )


class PkgInstaller(InstallerUnit):
    extensions = frozenset({"pkg"})

    @property
    def name(self) -> str:
        return "pkg-installer"

    def execute(self, context: ResolutionContext) -> None:
        context.install_result = InstallResult(
            method="pkg",
            destinations=executors.install_pkg(self.source_path(context)),
        )


class DebInstaller(InstallerUnit):
    extensions = frozenset({"deb"})

    @property
    def name(self) -> str:
        return "deb-installer"

    def execute(self, context: ResolutionContext) -> None:
        context.install_result = InstallResult(
            method="deb",
            destinations=executors.install_deb(self.source_path(context)),
        )


class RpmInstaller(InstallerUnit):
    extensions = frozenset({"rpm"})

    @property
    def name(self) -> str:
        return "rpm-installer"

    def execute(self, context: ResolutionContext) -> None:
        context.install_result = InstallResult(
            method="rpm",
            destinations=executors.install_rpm(self.source_path(context)),
        )


class ArchiveInstaller(InstallerUnit):
    """Extracts an archive into the workspace and installs its contents."""

    extensions = ARCHIVE_EXTENSIONS

    @property
    def name(self) -> str:
        return "archive-installer"

    def execute(self, context: ResolutionContext) -> None:
        selected = context.selected
        root = executors.extract_archive(
            self.source_path(context),
            context.workspace.subdir("extracted"),
            selected.extension,
        )
        context.install_result = install_tree(root, context, "archive")


class WindowsInstaller(InstallerUnit):
    extensions = frozenset({"msi", "exe"})

    @property
    def name(self) -> str:
        return "windows-installer"

    def execute(self, context: ResolutionContext) -> None:
        context.install_result = InstallResult(
            method=context.selected.extension,
            destinations=executors.run_windows_installer(
                self.source_path(context), context.selected.extension
            ),
        )


class BinaryInstaller(InstallerUnit):
    """Copies a standalone executable (or AppImage) into the bin directory."""

    extensions = frozenset({"", "appimage"})

    @property
    def name(self) -> str:
        return "binary-installer"

    def execute(self, context: ResolutionContext) -> None:
        target = binary_target_name(context.selected.name, package_name(context))
        destinations = executors.install_binaries(
            [self.source_path(context)], context.config.install.bin_path, [target]
        )
        context.install_result = InstallResult(method="binary", destinations=destinations, binaries=[target])


class InstallGuard(Unit):
    """Fails the run when no installer accepted the selected candidate."""

    @property
    def name(self) -> str:
        return "install-guard"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.selected is not None and context.install_result is None

    def execute(self, context: ResolutionContext) -> None:
        selected = context.selected
        raise InstallFailed(f"No installer handles {selected.name} (.{selected.extension or 'binary'})")
