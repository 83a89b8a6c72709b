"""Tests for file extension rules."""

from __future__ import annotations

import pytest

from justinstall.resolution.extensions import (
    get_extension,
    is_archive,
    is_installable,
    package_platform,
)


class TestGetExtension:
    """Tests for get_extension."""

    def test_compound_tar_gz(self) -> None:
        assert get_extension("x.tar.gz") == "tar.gz"

    def test_compound_tar_xz(self) -> None:
        assert get_extension("x.tar.xz") == "tar.xz"

    def test_no_extension(self) -> None:
        assert get_extension("binary") == ""

    def test_trailing_extension_wins_over_lookalikes(self) -> None:
        assert get_extension("a.b.c") == "c"

    def test_version_suffix_is_not_an_extension(self) -> None:
        assert get_extension("tool-1.2.3") == ""

    def test_platform_suffix_is_not_an_extension(self) -> None:
        assert get_extension("fzf-0.54.0-darwin_arm64") == ""

    def test_case_is_normalized(self) -> None:
        assert get_extension("Tool-x86_64.AppImage") == "appimage"

    def test_url_path_uses_last_segment(self) -> None:
        assert get_extension("downloads/v1.2/tool.tar.zst") == "tar.zst"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("ripgrep-14.1.0-aarch64-apple-darwin.tar.gz", "tar.gz"),
            ("fzf-0.54.0-windows_amd64.zip", "zip"),
            ("Tool.dmg", "dmg"),
            ("checksums.txt", "txt"),
            ("tool.tgz", "tgz"),
        ],
    )
    def test_release_asset_names(self, name: str, expected: str) -> None:
        assert get_extension(name) == expected


class TestExtensionClasses:
    """Tests for archive, installability and package ownership checks."""

    def test_archives(self) -> None:
        assert is_archive("tar.gz")
        assert is_archive("zip")
        assert not is_archive("dmg")

    def test_bare_binary_is_installable(self) -> None:
        assert is_installable("")

    def test_text_is_not_installable(self) -> None:
        assert not is_installable("txt")
        assert not is_installable("sha256")

    def test_package_platforms(self) -> None:
        assert package_platform("dmg") == "darwin"
        assert package_platform("deb") == "linux"
        assert package_platform("msi") == "windows"
        assert package_platform("tar.gz") is None
