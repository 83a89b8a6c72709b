"""Source-phase units: turn a classified input into candidate records.

Providers append to ``candidates``; they never remove or reorder them.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from justinstall.clients.github import GitHubClient
from justinstall.clients.http import HttpClient
from justinstall.clients.web import extract_links, fetch_page, link_filename
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import NoReleaseFound
from justinstall.core.logging import get_logger
from justinstall.core.models import Candidate, CandidateKind, InputKind, ScriptSource
from justinstall.pipeline.unit import Unit
from justinstall.resolution.extensions import INSTALLABLE_EXTENSIONS, get_extension
from justinstall.resolution.scoring import annotate, base_asset_priority, script_priority
from justinstall.resolution.scripts import detect_install_scripts

LOGGER = get_logger(__name__)

SCRIPT_METHOD = "script"

_SOURCE_LABELS = {
    ScriptSource.RELEASE_NOTES: "release notes",
    ScriptSource.README: "README",
    ScriptSource.STORED: "previous installation",
}


def scripts_wanted(context: ResolutionContext) -> bool:
    """Script detection is skipped when an update hints at a non-script method."""
    preferred = context.options.preferred_method
    return preferred is None or preferred == SCRIPT_METHOD


class GitHubReleasesProvider(Unit):
    """Adds the assets of a repository release.

    Reads ``repository``; writes ``release``, ``release_error``, ``candidates``
    and, when fetching in parallel, ``readme``/``readme_fetched``. A missing
    release is recorded instead of raised so install scripts can still be
    found.
    """

    def __init__(self, client: Optional[GitHubClient] = None) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "github-releases"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind == InputKind.REPOSITORY and context.repository is not None

    def _github(self, context: ResolutionContext) -> GitHubClient:
        return self._client or GitHubClient(network=context.config.network)

    def execute(self, context: ResolutionContext) -> None:
        ref = context.repository
        client = self._github(context)

        if context.config.network.parallel_fetch and scripts_wanted(context):
            # README is independent of the release; both are joined before returning.
            with ThreadPoolExecutor(max_workers=2) as executor:
                readme_future = executor.submit(client.fetch_readme, ref.owner, ref.repo)
                release_future = executor.submit(client.fetch_release, ref.owner, ref.repo, ref.tag)
                try:
                    context.release = release_future.result()
                except NoReleaseFound as e:
                    context.release_error = e
                context.readme = readme_future.result()
                context.readme_fetched = True
        else:
            try:
                context.release = client.fetch_release(ref.owner, ref.repo, ref.tag)
            except NoReleaseFound as e:
                context.release_error = e

        if context.release is None:
            LOGGER.info(f"{context.release_error}; looking for install scripts instead")
            return

        release = context.release
        scoring = context.config.scoring
        for asset in release.assets:
            extension = get_extension(asset.name)
            candidate = Candidate(
                name=asset.name,
                provider=self.name,
                url=asset.download_url,
                size=asset.size,
                extension=extension,
                priority=base_asset_priority(extension, scoring.release_asset_priority, scoring),
                confidence=80,
                prerelease=release.prerelease,
            )
            context.add_candidate(annotate(candidate))

        kind = "prerelease" if release.prerelease else "release"
        LOGGER.info(f"Found {kind} {release.tag} of {ref.slug} with {len(release.assets)} assets")


class InstallScriptProvider(Unit):
    """Adds install scripts found in the release notes and README.

    Reads ``release``, ``readme`` and ``profile``; writes ``candidates``
    and ``readme`` when it had not been prefetched.
    """

    def __init__(self, client: Optional[GitHubClient] = None) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "install-scripts"

    def should_run(self, context: ResolutionContext) -> bool:
        return (
            context.input_kind == InputKind.REPOSITORY
            and context.repository is not None
            and scripts_wanted(context)
        )

    def execute(self, context: ResolutionContext) -> None:
        if not context.readme_fetched:
            client = self._client or GitHubClient(network=context.config.network)
            context.readme = client.fetch_readme(context.repository.owner, context.repository.repo)
            context.readme_fetched = True

        documents: List[Tuple[ScriptSource, str]] = []
        if context.release is not None and context.release.body:
            documents.append((ScriptSource.RELEASE_NOTES, context.release.body))
        if context.readme:
            documents.append((ScriptSource.README, context.readme))

        snippets = detect_install_scripts(documents, context.profile.os, context.config.scripts)
        scoring = context.config.scoring
        for snippet in snippets:
            confidence = min(100, max(0, snippet.total))
            context.add_candidate(
                Candidate(
                    name=f"Install script from {_SOURCE_LABELS[snippet.source]}",
                    provider=self.name,
                    kind=CandidateKind.SCRIPT,
                    script_code=snippet.code,
                    script_source=snippet.source,
                    confidence=confidence,
                    priority=script_priority(confidence, scoring),
                )
            )
        if snippets:
            LOGGER.info(f"Found {len(snippets)} install script(s)")


class StoredScriptProvider(Unit):
    """Re-offers the script recorded by a previous script installation."""

    @property
    def name(self) -> str:
        return "stored-script"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.options.preferred_method == SCRIPT_METHOD and bool(
            context.options.stored_script
        )

    def execute(self, context: ResolutionContext) -> None:
        context.add_candidate(
            Candidate(
                name=f"Install script from {_SOURCE_LABELS[ScriptSource.STORED]}",
                provider=self.name,
                kind=CandidateKind.SCRIPT,
                script_code=context.options.stored_script,
                script_source=ScriptSource.STORED,
                confidence=100,
                priority=context.config.scoring.stored_script_priority,
            )
        )


class DirectDownloadProvider(Unit):
    """Adds the single file behind a direct download link."""

    @property
    def name(self) -> str:
        return "direct-download"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind == InputKind.DIRECT and context.source_url is not None

    def execute(self, context: ResolutionContext) -> None:
        url = context.source_url
        filename = link_filename(url) or "download"
        context.add_candidate(
            annotate(
                Candidate(
                    name=filename,
                    provider=self.name,
                    url=url,
                    extension=get_extension(filename),
                    priority=context.config.scoring.direct_download_priority,
                    confidence=95,
                )
            )
        )


class WebScraperProvider(Unit):
    """Adds installable links scraped from a web page.

    A URL that does not serve HTML is treated as a direct download.
    """

    def __init__(self, http: Optional[HttpClient] = None) -> None:
        self._http = http

    @property
    def name(self) -> str:
        return "web-scraper"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind == InputKind.WEBSITE and context.source_url is not None

    def execute(self, context: ResolutionContext) -> None:
        http = self._http or HttpClient(context.config.network)
        scoring = context.config.scoring
        page = fetch_page(http, context.source_url)

        if not page.is_html:
            filename = link_filename(page.url) or "download"
            LOGGER.info(f"{page.url} serves {page.content_type}, treating it as a download")
            context.add_candidate(
                annotate(
                    Candidate(
                        name=filename,
                        provider=self.name,
                        url=page.url,
                        extension=get_extension(filename),
                        priority=scoring.direct_download_priority,
                        confidence=90,
                    )
                )
            )
            return

        found = 0
        for link in extract_links(page.html, page.url):
            filename = link_filename(link)
            extension = get_extension(filename)
            if extension not in INSTALLABLE_EXTENSIONS:
                continue
            context.add_candidate(
                annotate(
                    Candidate(
                        name=filename,
                        provider=self.name,
                        url=link,
                        extension=extension,
                        priority=base_asset_priority(extension, scoring.scraped_link_priority, scoring),
                        confidence=60,
                    )
                )
            )
            found += 1
        LOGGER.info(f"Found {found} download link(s) on {page.url}")


class LocalFileProvider(Unit):
    """Adds the local file given on the command line."""

    @property
    def name(self) -> str:
        return "local-file"

    def should_run(self, context: ResolutionContext) -> bool:
        return context.input_kind == InputKind.FILE and context.local_path is not None

    def execute(self, context: ResolutionContext) -> None:
        path = context.local_path
        context.add_candidate(
            annotate(
                Candidate(
                    name=path.name,
                    provider=self.name,
                    local_path=path,
                    size=path.stat().st_size if path.is_file() else None,
                    extension=get_extension(path.name),
                    priority=context.config.scoring.local_file_priority,
                    confidence=100,
                )
            )
        )
