"""Tests for installation records."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from justinstall.core.models import (
    Candidate,
    InputKind,
    InstallResult,
    RepositoryRef,
    ResolutionOptions,
)
from justinstall.records.store import (
    InstallationStore,
    RecordStoreError,
    build_record,
    extract_name,
    hash_file,
)


@pytest.fixture
def repository_context(make_context, make_release, tmp_path: Path):
    download = tmp_path / "fzf-0.54.0-darwin_arm64.tar.gz"
    download.write_bytes(b"archive bytes")
    context = make_context(
        "junegunn/fzf",
        options=ResolutionOptions(assume_yes=True, original_args=["install", "junegunn/fzf"]),
    )
    context.input_kind = InputKind.REPOSITORY
    context.repository = RepositoryRef("junegunn", "fzf")
    context.release = make_release([download.name], tag="v0.54.0")
    context.selected = Candidate(
        name=download.name,
        provider="github-releases",
        url=f"https://example.com/v0.54.0/{download.name}",
        size=13,
        extension="tar.gz",
    )
    context.download_path = download
    context.install_result = InstallResult(
        method="binary", destinations=[tmp_path / "bin" / "fzf"], binaries=["fzf"]
    )
    return context


class TestBuildRecord:
    """Tests for build_record."""

    def test_repository_install(self, repository_context, tmp_path: Path) -> None:
        record = build_record(repository_context)

        assert record.name == "fzf"
        assert record.version == "v0.54.0"
        assert record.source.type == "repository"
        assert record.source.url == "https://github.com/junegunn/fzf"
        assert record.source.original_args == ["install", "junegunn/fzf"]
        assert record.selected.hash == hash_file(repository_context.download_path)
        assert record.installation.destinations == [str(tmp_path / "bin" / "fzf")]
        assert record.installation.preferred_method == "binary"

    def test_requires_install_result(self, make_context) -> None:
        with pytest.raises(ValueError):
            build_record(make_context())


class TestExtractName:
    def test_named_after_selected_file(self, make_context) -> None:
        context = make_context("https://example.com/dl/yt-dlp_macos")
        context.selected = Candidate(name="yt-dlp_macos", provider="direct-download", url=context.raw_input)
        assert extract_name(context) == "yt-dlp"

    def test_script_from_website(self, make_context) -> None:
        context = make_context("https://Tool.example.com/install")
        context.source_url = context.raw_input
        assert extract_name(context) == "tool.example.com"


class TestInstallationStore:
    """Tests for the JSON record store."""

    def test_save_and_get(self, repository_context, tmp_path: Path) -> None:
        store = InstallationStore(tmp_path / "home" / "installations.json")
        store.save(build_record(repository_context))

        record = store.get("FZF")

        assert record is not None
        assert record.version == "v0.54.0"
        data = json.loads(store.path.read_text())
        assert "downloadUrl" in data["installations"]["fzf"]["selected"]

    def test_save_replaces(self, repository_context, tmp_path: Path) -> None:
        store = InstallationStore(tmp_path / "installations.json")
        store.save(build_record(repository_context))
        repository_context.release = None
        store.save(build_record(repository_context))

        (record,) = store.list()
        assert record.version is None

    def test_remove(self, repository_context, tmp_path: Path) -> None:
        store = InstallationStore(tmp_path / "installations.json")
        store.save(build_record(repository_context))

        assert store.remove("fzf")
        assert not store.remove("fzf")
        assert store.list() == []

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert InstallationStore(tmp_path / "none.json").list() == []

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "installations.json"
        path.write_text("{not json")
        with pytest.raises(RecordStoreError):
            InstallationStore(path).list()
