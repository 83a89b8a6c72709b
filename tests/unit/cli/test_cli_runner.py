"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from justinstall.cli import main
from justinstall.cli.arguments import build_parser
from justinstall.cli.commands.install import run_install
from justinstall.cli.exit_codes import (
    EXIT_ABORTED,
    EXIT_CONFIG_ERROR,
    EXIT_INSTALL_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_RESOLUTION_FAILURE,
    EXIT_SUCCESS,
    exit_code_for,
)
from justinstall.config.loader import ConfigError
from justinstall.config.models import JustInstallConfig
from justinstall.core.errors import (
    DownloadFailed,
    InstallFailed,
    InvalidSource,
    NoCompatibleAsset,
    NoReleaseFound,
    RegistryError,
    UserAborted,
)
from justinstall.core.models import ResolutionOptions
from justinstall.host.paths import JustInstallPaths
from justinstall.host.platform import PlatformProfile
from justinstall.records.store import (
    InstallationDetails,
    InstallationRecord,
    InstallationStore,
    RecordStoreError,
    SelectedArtifact,
    SourceDescriptor,
)


@pytest.fixture
def home(monkeypatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("JUSTINSTALL_HOME", str(home))
    return home


def store_record(home: Path, name: str, destinations) -> None:
    InstallationStore(home / "installations.json").save(
        InstallationRecord(
            name=name,
            date="2026-01-01T00:00:00+00:00",
            source=SourceDescriptor(type="repository", url=f"https://github.com/acme/{name}", owner="acme", repo=name),
            selected=SelectedArtifact(name=f"{name}.tar.gz", extension="tar.gz"),
            installation=InstallationDetails(
                method="binary",
                binaries=[name],
                destinations=[str(d) for d in destinations],
                preferred_method="binary",
            ),
            version="v1.0.0",
        )
    )


class TestArguments:
    """Tests for argument parsing."""

    def test_install(self) -> None:
        args = build_parser().parse_args(["-y", "--debug", "install", "junegunn/fzf"])
        assert args.command == "install"
        assert args.source == "junegunn/fzf"
        assert args.yes and args.debug

    def test_list_format(self) -> None:
        assert build_parser().parse_args(["list", "--format", "json"]).format == "json"


class TestExitCodes:
    @pytest.mark.parametrize(
        "error, code",
        [
            (InvalidSource("x"), EXIT_RESOLUTION_FAILURE),
            (NoReleaseFound("x"), EXIT_RESOLUTION_FAILURE),
            (NoCompatibleAsset("x"), EXIT_RESOLUTION_FAILURE),
            (DownloadFailed("x"), EXIT_INSTALL_FAILURE),
            (InstallFailed("x"), EXIT_INSTALL_FAILURE),
            (RecordStoreError("x"), EXIT_INSTALL_FAILURE),
            (ConfigError("x"), EXIT_CONFIG_ERROR),
            (RegistryError("x"), EXIT_CONFIG_ERROR),
            (UserAborted("x"), EXIT_ABORTED),
            (KeyboardInterrupt(), EXIT_ABORTED),
        ],
    )
    def test_mapping(self, error: BaseException, code: int) -> None:
        assert exit_code_for(error) == code


class TestMain:
    """Tests for main()."""

    def test_version(self, capsys) -> None:
        assert main(["--version"]) == EXIT_SUCCESS
        assert capsys.readouterr().out.strip()

    def test_no_command_prints_help(self, capsys) -> None:
        assert main([]) == EXIT_SUCCESS
        assert "COMMAND" in capsys.readouterr().out

    def test_usage_error(self) -> None:
        assert main(["install"]) == EXIT_INVALID_USAGE

    def test_bad_config(self, home: Path, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "missing.yml"), "list"]) == EXIT_CONFIG_ERROR

    def test_list_json(self, home: Path, tmp_path: Path, capsys) -> None:
        store_record(home, "tool", [tmp_path / "bin" / "tool"])

        assert main(["list", "--format", "json"]) == EXIT_SUCCESS

        (entry,) = json.loads(capsys.readouterr().out)
        assert entry["name"] == "tool"
        assert entry["installation"]["method"] == "binary"

    def test_list_table_shows_missing_files(self, home: Path, tmp_path: Path, capsys) -> None:
        store_record(home, "tool", [tmp_path / "bin" / "tool"])
        assert main(["list"]) == EXIT_SUCCESS
        assert "missing" in capsys.readouterr().out

    def test_uninstall(self, home: Path, tmp_path: Path) -> None:
        binary = tmp_path / "bin" / "tool"
        binary.parent.mkdir()
        binary.write_bytes(b"\x7fELF")
        store_record(home, "tool", [binary])

        assert main(["-y", "uninstall", "tool"]) == EXIT_SUCCESS

        assert not binary.exists()
        assert InstallationStore(home / "installations.json").get("tool") is None

    def test_uninstall_declined(self, home: Path, tmp_path: Path) -> None:
        store_record(home, "tool", [tmp_path / "tool"])
        with patch("justinstall.core.prompts.confirm", return_value=False):
            assert main(["uninstall", "tool"]) == EXIT_ABORTED
        assert InstallationStore(home / "installations.json").get("tool") is not None

    def test_status(self, home: Path, capsys) -> None:
        assert main(["status"]) == EXIT_SUCCESS
        output = capsys.readouterr().out
        assert "Platform:" in output
        assert str(home) in output

    def test_update_unknown_name(self, home: Path) -> None:
        assert main(["update", "nothing"]) == EXIT_INVALID_USAGE

    def test_update_prefers_recorded_method(self, home: Path, tmp_path: Path) -> None:
        store_record(home, "tool", [tmp_path / "tool"])
        with patch("justinstall.cli.commands.update.run_install", return_value=EXIT_SUCCESS) as run:
            assert main(["-y", "update", "tool"]) == EXIT_SUCCESS

        raw_input, options = run.call_args.args[:2]
        assert raw_input == "acme/tool"
        assert options.preferred_method == "binary"
        assert options.assume_yes


class TestRunInstall:
    """Failures of a run map to exit codes."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (NoCompatibleAsset("none"), EXIT_RESOLUTION_FAILURE),
            (InstallFailed("boom"), EXIT_INSTALL_FAILURE),
            (UserAborted("no"), EXIT_ABORTED),
            (KeyboardInterrupt(), EXIT_ABORTED),
        ],
    )
    def test_errors(self, error: BaseException, code: int, tmp_path: Path) -> None:
        with patch(
            "justinstall.cli.commands.install.get_platform_profile",
            return_value=PlatformProfile(os="linux", arch="amd64"),
        ), patch("justinstall.cli.commands.install.resolve", side_effect=error):
            result = run_install(
                "acme/tool", ResolutionOptions(assume_yes=True), JustInstallConfig(), JustInstallPaths(tmp_path)
            )
        assert result == code

    def test_unsupported_platform(self, tmp_path: Path) -> None:
        with patch(
            "justinstall.cli.commands.install.get_platform_profile",
            side_effect=ValueError("Unsupported operating system: SunOS"),
        ):
            assert run_install("acme/tool", ResolutionOptions(), JustInstallConfig()) == EXIT_INVALID_USAGE
