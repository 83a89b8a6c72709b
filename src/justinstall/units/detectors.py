"""Detect-phase units: classify the raw input into a typed source.

Every detector reads ``raw_input`` and writes ``input_kind`` plus the
matching location field (``repository``, ``source_url`` or ``local_path``).
The first detector to set ``input_kind`` wins; later ones no longer run.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from justinstall.clients.web import link_filename
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import InvalidSource
from justinstall.core.logging import get_logger
from justinstall.core.models import InputKind, RepositoryRef
from justinstall.pipeline.unit import Unit
from justinstall.resolution.extensions import INSTALLABLE_EXTENSIONS, get_extension

LOGGER = get_logger(__name__)

GITHUB_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[A-Za-z0-9][\w.-]*)/(?P<repo>[\w.-]+?)(?:\.git)?"
    r"(?P<rest>/[^?#]*)?(?:[?#].*)?$",
    re.IGNORECASE,
)
RELEASE_TAG_PATTERN = re.compile(r"^/releases/(?:tag|download)/(?P<tag>[^/]+)")
SHORTHAND_PATTERN = re.compile(
    r"^(?P<owner>[A-Za-z0-9][\w.-]*)/(?P<repo>[\w.-]+?)(?:@(?P<tag>[^\s@/]+))?$"
)
LINK_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def parse_github_url(raw: str) -> Optional[RepositoryRef]:
    """Parse a github.com URL, including release tag and download links."""
    match = GITHUB_URL_PATTERN.match(raw.strip())
    if not match:
        return None
    tag = None
    rest = match.group("rest") or ""
    tag_match = RELEASE_TAG_PATTERN.match(rest)
    if tag_match:
        tag = unquote(tag_match.group("tag"))
    return RepositoryRef(owner=match.group("owner"), repo=match.group("repo"), tag=tag)


def parse_shorthand(raw: str) -> Optional[RepositoryRef]:
    """Parse ``owner/repo`` or ``owner/repo@tag``.

    A name ending in an installable extension (``dist/tool.tar.gz``) is a
    path, not a repository.
    """
    match = SHORTHAND_PATTERN.match(raw.strip())
    if not match:
        return None
    if get_extension(match.group("repo")) in INSTALLABLE_EXTENSIONS:
        return None
    return RepositoryRef(
        owner=match.group("owner"), repo=match.group("repo"), tag=match.group("tag")
    )


def _existing_path(raw: str) -> Optional[Path]:
    try:
        path = Path(raw).expanduser()
        return path if path.exists() else None
    except (OSError, ValueError):
        return None


class RepositoryDetector(Unit):
    """Recognizes GitHub URLs and owner/repo shorthands."""

    @property
    def name(self) -> str:
        return "github-detector"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind is None

    def execute(self, context: ResolutionContext) -> None:
        raw = context.raw_input
        ref = parse_github_url(raw)
        if ref is None and not LINK_PATTERN.match(raw) and _existing_path(raw) is None:
            ref = parse_shorthand(raw)
        if ref is None:
            return
        context.input_kind = InputKind.REPOSITORY
        context.repository = ref
        suffix = f" at {ref.tag}" if ref.tag else ""
        LOGGER.info(f"Detected GitHub repository {ref.slug}{suffix}")


class LinkDetector(Unit):
    """Classifies http(s) links as direct downloads or websites to scrape."""

    @property
    def name(self) -> str:
        return "link-detector"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind is None and bool(LINK_PATTERN.match(context.raw_input))

    def execute(self, context: ResolutionContext) -> None:
        url = context.raw_input
        context.source_url = url
        extension = get_extension(link_filename(url))
        if extension in INSTALLABLE_EXTENSIONS:
            context.input_kind = InputKind.DIRECT
            LOGGER.info(f"Detected direct download link (.{extension})")
        else:
            context.input_kind = InputKind.WEBSITE
            LOGGER.info(f"Detected website {url}")


class LocalFileDetector(Unit):
    """Accepts paths to existing local files and app bundles."""

    @property
    def name(self) -> str:
        return "local-file-detector"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind is None

    def execute(self, context: ResolutionContext) -> None:
        path = _existing_path(context.raw_input)
        if path is None:
            return
        if path.is_dir() and get_extension(path.name) != "app":
            return
        context.input_kind = InputKind.FILE
        context.local_path = path.resolve()
        LOGGER.info(f"Detected local file {context.local_path}")


class UnrecognizedInput(Unit):
    """Fails the run when no detector recognized the input."""

    @property
    def name(self) -> str:
        return "unrecognized-input"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind is None

    def execute(self, context: ResolutionContext) -> None:
        raise InvalidSource(
            f"Cannot interpret '{context.raw_input}': expected owner/repo, a URL or a local file"
        )
