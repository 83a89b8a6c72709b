"""Tests for justinstall paths."""

from __future__ import annotations

from pathlib import Path

from justinstall.host.paths import JustInstallPaths, get_justinstall_home


class TestJustInstallHome:
    """Tests for home directory resolution."""

    def test_env_override(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("JUSTINSTALL_HOME", str(tmp_path))
        assert get_justinstall_home() == tmp_path

    def test_xdg_config_home(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.delenv("JUSTINSTALL_HOME", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_justinstall_home() == tmp_path / "justinstall"

    def test_default(self, monkeypatch) -> None:
        monkeypatch.delenv("JUSTINSTALL_HOME", raising=False)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert get_justinstall_home() == Path.home() / ".config" / "justinstall"


class TestJustInstallPaths:
    def test_layout(self, tmp_path: Path) -> None:
        paths = JustInstallPaths.default(tmp_path / "home")
        assert paths.config_file == tmp_path / "home" / "config.yml"
        assert paths.records_file == tmp_path / "home" / "installations.json"

        paths.ensure_directories()
        assert paths.home.is_dir()
