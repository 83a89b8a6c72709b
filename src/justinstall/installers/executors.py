"""Archive, disk-image and package executors.

Each executor takes a local file and returns the installed paths, or
[SYSTEM_INSTALL] when an OS-level installer decides where files go.
Helper failures raise InstallFailed.
"""

from __future__ import annotations

import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import List, Union

from justinstall.core.errors import InstallFailed
from justinstall.core.logging import get_logger
from justinstall.core.models import SYSTEM_INSTALL
from justinstall.core.subprocess_runner import run_command

LOGGER = get_logger(__name__)

TAR_MODES = {
    "tar.gz": "r:gz",
    "tgz": "r:gz",
    "tar.xz": "r:xz",
    "tar.bz2": "r:bz2",
}

InstallOutcome = List[Union[Path, str]]


def _check_member(dest_dir: Path, member_name: str) -> None:
    """Reject archive members that would land outside dest_dir."""
    member_path = (dest_dir / member_name).resolve()
    if not member_path.is_relative_to(dest_dir.resolve()):
        raise InstallFailed(f"Path traversal detected in archive: {member_name}")


def _extract_tarball(archive_path: Path, dest_dir: Path, mode: str) -> None:
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _check_member(dest_dir, member.name)
            if member.issym() or member.islnk():
                _check_member(dest_dir, str(Path(member.name).parent / member.linkname))
        tar.extractall(path=dest_dir, filter="data")


def _extract_zip(archive_path: Path, dest_dir: Path) -> None:
    with zipfile.ZipFile(archive_path, "r") as zf:
        for name in zf.namelist():
            _check_member(dest_dir, name)
        zf.extractall(dest_dir)
        # zipfile drops permission bits; restore the executable ones
        for info in zf.infolist():
            mode = (info.external_attr >> 16) & 0o777
            if mode & 0o111 and not info.is_dir():
                target = dest_dir / info.filename
                target.chmod(target.stat().st_mode | mode)


def extract_archive(archive_path: Path, dest_dir: Path, extension: str) -> Path:
    """Extract an archive into dest_dir.

    Returns:
        dest_dir, now holding the archive contents.

    Raises:
        InstallFailed: On unsupported formats, unsafe paths or helper failures.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    LOGGER.info(f"Extracting {archive_path.name}")
    try:
        if extension in TAR_MODES:
            _extract_tarball(archive_path, dest_dir, TAR_MODES[extension])
        elif extension == "zip":
            _extract_zip(archive_path, dest_dir)
        elif extension == "tar.zst":
            tar_path = dest_dir.parent / f"{archive_path.name[:-len('.zst')]}"
            run_command(["zstd", "-d", "-f", "-o", str(tar_path), str(archive_path)], tool_name="zstd")
            _extract_tarball(tar_path, dest_dir, "r:")
            tar_path.unlink()
        elif extension == "7z":
            seven_zip = shutil.which("7z") or shutil.which("7za") or "7z"
            run_command([seven_zip, "x", "-y", f"-o{dest_dir}", str(archive_path)], tool_name="7z")
        else:
            raise InstallFailed(f"Unsupported archive format: .{extension}")
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise InstallFailed(f"Failed to extract {archive_path.name}: {e}") from e
    return dest_dir


def mount_disk_image(image_path: Path, mount_point: Path) -> Path:
    """Attach a disk image read-only at mount_point without opening Finder."""
    mount_point.mkdir(parents=True, exist_ok=True)
    LOGGER.info(f"Mounting {image_path.name}")
    run_command(
        ["hdiutil", "attach", "-nobrowse", "-readonly", "-mountpoint", str(mount_point), str(image_path)],
        tool_name="hdiutil",
    )
    return mount_point


def detach_disk_image(mount_point: Path) -> None:
    """Detach a mounted disk image, forcing the detach if the first attempt fails."""
    try:
        run_command(["hdiutil", "detach", str(mount_point)], tool_name="hdiutil")
    except InstallFailed as e:
        LOGGER.debug(f"Detach failed ({e}), forcing")
        run_command(["hdiutil", "detach", "-force", str(mount_point)], tool_name="hdiutil")


def install_app_bundle(app_path: Path, applications_dir: Path) -> Path:
    """Copy an .app bundle into the applications folder and clear quarantine.

    Re-signing and quarantine removal failures are logged, not raised; the
    bundle is already in place at that point.
    """
    destination = applications_dir / app_path.name
    if destination.exists():
        LOGGER.info(f"Replacing existing {destination}")
        shutil.rmtree(destination)
    LOGGER.info(f"Copying {app_path.name} to {applications_dir}")
    try:
        shutil.copytree(app_path, destination, symlinks=True)
    except OSError as e:
        raise InstallFailed(f"Failed to copy {app_path.name} to {applications_dir}: {e}") from e

    for cmd in (
        ["codesign", "--force", "--deep", "--sign", "-", str(destination)],
        ["xattr", "-rd", "com.apple.quarantine", str(destination)],
    ):
        try:
            run_command(cmd, tool_name=cmd[0])
        except InstallFailed as e:
            LOGGER.warning(f"{cmd[0]} on {destination.name} failed: {e}")
    return destination


def install_pkg(pkg_path: Path) -> InstallOutcome:
    LOGGER.info(f"Running macOS installer for {pkg_path.name}")
    run_command(
        ["sudo", "installer", "-pkg", str(pkg_path), "-target", "/"],
        tool_name="installer",
        capture_output=False,
    )
    return [SYSTEM_INSTALL]


def install_deb(deb_path: Path) -> InstallOutcome:
    LOGGER.info(f"System-wide deb installation of {deb_path.name}")
    run_command(["sudo", "dpkg", "-i", str(deb_path)], tool_name="dpkg", capture_output=False)
    return [SYSTEM_INSTALL]


def install_rpm(rpm_path: Path) -> InstallOutcome:
    LOGGER.info(f"System-wide rpm installation of {rpm_path.name}")
    run_command(["sudo", "rpm", "-i", str(rpm_path)], tool_name="rpm", capture_output=False)
    return [SYSTEM_INSTALL]


def run_windows_installer(installer_path: Path, extension: str) -> InstallOutcome:
    if extension == "msi":
        cmd = ["msiexec", "/i", str(installer_path)]
    else:
        cmd = [str(installer_path)]
    LOGGER.info(f"Running installer {installer_path.name}")
    run_command(cmd, tool_name=installer_path.name, capture_output=False)
    return [SYSTEM_INSTALL]


def run_shell_file(script_path: Path) -> InstallOutcome:
    run_command(["sh", str(script_path)], tool_name=script_path.name, capture_output=False)
    return [SYSTEM_INSTALL]


def run_script(code: str, host_os: str) -> InstallOutcome:
    """Run install script text with the host's shell."""
    if host_os == "windows":
        cmd = ["powershell", "-NoProfile", "-Command", code]
    else:
        cmd = ["sh", "-c", code]
    run_command(cmd, tool_name="install script", capture_output=False)
    return [SYSTEM_INSTALL]


def install_binaries(binaries: List[Path], bin_dir: Path, names: List[str]) -> List[Path]:
    """Copy binaries into bin_dir under the given names and make them executable.

    Args:
        binaries: Source files.
        bin_dir: Destination directory, created when missing.
        names: Target file name for each binary, in the same order.
    """
    bin_dir.mkdir(parents=True, exist_ok=True)
    installed = []
    for source, name in zip(binaries, names):
        destination = bin_dir / name
        try:
            if destination.exists() or destination.is_symlink():
                destination.unlink()
            shutil.copy2(source, destination)
            destination.chmod(0o755)
        except OSError as e:
            raise InstallFailed(f"Failed to install {name} into {bin_dir}: {e}") from e
        LOGGER.info(f"Installed {name} to {destination}")
        installed.append(destination)
    return installed
