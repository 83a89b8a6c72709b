"""Installation record model and its JSON store.

Records are written after a successful install and read back only by
update and uninstall. Keys are camelCase on disk.
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from urllib.parse import urlparse

from justinstall.core.errors import JustInstallError
from justinstall.core.logging import get_logger
from justinstall.installers.binaries import binary_target_name

if TYPE_CHECKING:
    from justinstall.core.context import ResolutionContext

LOGGER = get_logger(__name__)

HASH_CHUNK_SIZE = 1024 * 1024


class RecordStoreError(JustInstallError):
    """The installation record store cannot be read or written."""

    pass


@dataclass
class SourceDescriptor:
    type: str
    url: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    original_args: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "url": self.url,
            "owner": self.owner,
            "repo": self.repo,
            "originalArgs": list(self.original_args),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceDescriptor":
        return cls(
            type=data.get("type", ""),
            url=data.get("url"),
            owner=data.get("owner"),
            repo=data.get("repo"),
            original_args=list(data.get("originalArgs", [])),
        )


@dataclass
class SelectedArtifact:
    name: str
    size: Optional[int] = None
    extension: str = ""
    download_url: Optional[str] = None
    hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "extension": self.extension,
            "downloadUrl": self.download_url,
            "hash": self.hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectedArtifact":
        return cls(
            name=data.get("name", ""),
            size=data.get("size"),
            extension=data.get("extension", ""),
            download_url=data.get("downloadUrl"),
            hash=data.get("hash"),
        )


@dataclass
class InstallationDetails:
    method: str
    binaries: List[str] = field(default_factory=list)
    destinations: List[str] = field(default_factory=list)
    preferred_method: Optional[str] = None
    script: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "binaries": list(self.binaries),
            "destinations": list(self.destinations),
            "preferredMethod": self.preferred_method,
            "script": self.script,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallationDetails":
        return cls(
            method=data.get("method", ""),
            binaries=list(data.get("binaries", [])),
            destinations=list(data.get("destinations", [])),
            preferred_method=data.get("preferredMethod"),
            script=data.get("script"),
        )


@dataclass
class InstallationRecord:
    """Everything needed to update or uninstall a previous installation."""

    name: str
    date: str
    source: SourceDescriptor
    selected: SelectedArtifact
    installation: InstallationDetails
    version: Optional[str] = None
    commit: Optional[str] = None
    prerelease: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "date": self.date,
            "source": self.source.to_dict(),
            "selected": self.selected.to_dict(),
            "installation": self.installation.to_dict(),
            "version": self.version,
            "commit": self.commit,
            "prerelease": self.prerelease,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallationRecord":
        return cls(
            name=data["name"],
            date=data.get("date", ""),
            source=SourceDescriptor.from_dict(data.get("source", {})),
            selected=SelectedArtifact.from_dict(data.get("selected", {})),
            installation=InstallationDetails.from_dict(data.get("installation", {})),
            version=data.get("version"),
            commit=data.get("commit"),
            prerelease=bool(data.get("prerelease", False)),
        )


def hash_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def extract_name(context: "ResolutionContext") -> str:
    """Derive the name an installation is recorded under.

    Repository installs use the repository name; everything else is named
    after the selected file, with platform and version suffixes removed.
    """
    if context.repository is not None:
        return context.repository.repo.lower()
    selected = context.selected
    if selected is not None and not selected.is_script:
        return binary_target_name(selected.name).lower()
    if context.source_url:
        return (urlparse(context.source_url).hostname or context.source_url).lower()
    return context.raw_input.lower()


def build_record(context: "ResolutionContext") -> InstallationRecord:
    """Build the record of a completed run."""
    selected = context.selected
    result = context.install_result
    if selected is None or result is None:
        raise ValueError("Cannot build an installation record before install completes")

    source_url = context.source_url
    if context.repository is not None:
        source_url = context.repository.url
    elif context.local_path is not None:
        source_url = str(context.local_path)

    file_hash = None
    if context.download_path is not None and context.download_path.is_file():
        file_hash = hash_file(context.download_path)

    release = context.release
    return InstallationRecord(
        name=extract_name(context),
        date=datetime.now(timezone.utc).isoformat(),
        source=SourceDescriptor(
            type=context.input_kind.value if context.input_kind else "unknown",
            url=source_url,
            owner=context.repository.owner if context.repository else None,
            repo=context.repository.repo if context.repository else None,
            original_args=list(context.options.original_args),
        ),
        selected=SelectedArtifact(
            name=selected.name,
            size=selected.size,
            extension=selected.extension,
            download_url=selected.url,
            hash=file_hash,
        ),
        installation=InstallationDetails(
            method=result.method,
            binaries=list(result.binaries),
            destinations=[str(d) for d in result.destinations],
            preferred_method=result.method,
            script=result.script,
        ),
        version=release.tag if release else None,
        commit=release.commit if release else None,
        prerelease=release.prerelease if release else False,
    )


class InstallationStore:
    """JSON file of installation records keyed by name."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordStoreError(f"Cannot read installation records {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise RecordStoreError(f"Installation records {self.path} must be a JSON object")
        return data.get("installations", {})

    def _write(self, records: Dict[str, Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"installations": records}, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise RecordStoreError(f"Cannot write installation records {self.path}: {e}") from e

    def list(self) -> List[InstallationRecord]:
        records = self._read()
        return [InstallationRecord.from_dict(records[name]) for name in sorted(records)]

    def get(self, name: str) -> Optional[InstallationRecord]:
        data = self._read().get(name.lower())
        return InstallationRecord.from_dict(data) if data is not None else None

    def save(self, record: InstallationRecord) -> None:
        """Insert or replace the record stored under record.name."""
        records = self._read()
        records[record.name.lower()] = record.to_dict()
        self._write(records)
        LOGGER.debug(f"Saved installation record for {record.name}")

    def remove(self, name: str) -> bool:
        records = self._read()
        if records.pop(name.lower(), None) is None:
            return False
        self._write(records)
        return True
