"""Tests for input detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from justinstall.core.errors import InvalidSource
from justinstall.core.models import InputKind, RepositoryRef
from justinstall.units.detectors import (
    LinkDetector,
    LocalFileDetector,
    RepositoryDetector,
    UnrecognizedInput,
    parse_github_url,
    parse_shorthand,
)


class TestParseGitHubUrl:
    """Tests for GitHub URL parsing."""

    def test_repository_url(self) -> None:
        assert parse_github_url("https://github.com/junegunn/fzf") == RepositoryRef("junegunn", "fzf")

    def test_trailing_git_suffix(self) -> None:
        assert parse_github_url("https://github.com/junegunn/fzf.git") == RepositoryRef("junegunn", "fzf")

    def test_without_scheme(self) -> None:
        assert parse_github_url("github.com/junegunn/fzf/") == RepositoryRef("junegunn", "fzf")

    def test_release_tag_url(self) -> None:
        ref = parse_github_url("https://github.com/BurntSushi/ripgrep/releases/tag/14.1.0")
        assert ref == RepositoryRef("BurntSushi", "ripgrep", "14.1.0")

    def test_release_download_url(self) -> None:
        ref = parse_github_url(
            "https://github.com/sharkdp/bat/releases/download/v0.24.0/bat-v0.24.0-aarch64-apple-darwin.tar.gz"
        )
        assert ref.tag == "v0.24.0"

    def test_other_host(self) -> None:
        assert parse_github_url("https://gitlab.com/owner/repo") is None


class TestParseShorthand:
    """Tests for owner/repo shorthands."""

    def test_owner_repo(self) -> None:
        assert parse_shorthand("junegunn/fzf") == RepositoryRef("junegunn", "fzf")

    def test_with_tag(self) -> None:
        assert parse_shorthand("junegunn/fzf@v0.54.0") == RepositoryRef("junegunn", "fzf", "v0.54.0")

    def test_installable_file_is_not_a_repository(self) -> None:
        assert parse_shorthand("dist/tool.tar.gz") is None

    @pytest.mark.parametrize("raw", ["fzf", "a/b/c", "https://example.com/x"])
    def test_other_shapes(self, raw: str) -> None:
        assert parse_shorthand(raw) is None


class TestDetectorUnits:
    """Tests for the detect-phase units."""

    def test_repository_detector(self, make_context) -> None:
        context = make_context("junegunn/fzf@v0.54.0")
        RepositoryDetector().execute(context)
        assert context.input_kind == InputKind.REPOSITORY
        assert context.repository.slug == "junegunn/fzf"
        assert context.repository.tag == "v0.54.0"

    def test_existing_path_is_not_a_shorthand(self, make_context, tmp_path: Path, monkeypatch) -> None:
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "tool").write_bytes(b"\x7fELF")
        monkeypatch.chdir(tmp_path)

        context = make_context("dist/tool")
        RepositoryDetector().execute(context)
        assert context.input_kind is None

        LocalFileDetector().execute(context)
        assert context.input_kind == InputKind.FILE
        assert context.local_path == (tmp_path / "dist" / "tool").resolve()

    def test_plain_directory_is_not_a_file(self, make_context, tmp_path: Path) -> None:
        context = make_context(str(tmp_path))
        LocalFileDetector().execute(context)
        assert context.input_kind is None

    def test_direct_link(self, make_context) -> None:
        context = make_context("https://example.com/downloads/tool-1.0-linux-amd64.tar.gz")
        detector = LinkDetector()
        assert detector.should_run(context)
        detector.execute(context)
        assert context.input_kind == InputKind.DIRECT
        assert context.source_url.endswith(".tar.gz")

    def test_website_link(self, make_context) -> None:
        context = make_context("https://example.com/downloads/")
        LinkDetector().execute(context)
        assert context.input_kind == InputKind.WEBSITE

    def test_unrecognized_input(self, make_context) -> None:
        context = make_context("not a thing")
        unit = UnrecognizedInput()
        assert unit.should_run(context)
        with pytest.raises(InvalidSource, match="not a thing"):
            unit.execute(context)
