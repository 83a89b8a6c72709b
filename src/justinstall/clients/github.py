"""GitHub release metadata and README retrieval."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError

from justinstall.clients.http import HttpClient
from justinstall.config.models import NetworkConfig
from justinstall.core.errors import DownloadFailed, NoReleaseFound
from justinstall.core.logging import get_logger
from justinstall.core.models import ReleaseAsset, ReleaseInfo

LOGGER = get_logger(__name__)

GITHUB_TOKEN_ENV = "GITHUB_TOKEN"

# Default branches tried, in order, when fetching a README.
README_BRANCHES = ("main", "master")
README_NAME = "README.md"


def parse_release(data: Dict[str, Any]) -> ReleaseInfo:
    """Convert a GitHub release API payload to ReleaseInfo."""
    assets = [
        ReleaseAsset(
            name=asset["name"],
            download_url=asset["browser_download_url"],
            size=asset.get("size"),
        )
        for asset in data.get("assets", [])
    ]
    return ReleaseInfo(
        tag=data.get("tag_name", ""),
        name=data.get("name") or "",
        body=data.get("body") or "",
        prerelease=bool(data.get("prerelease", False)),
        published_at=data.get("published_at"),
        commit=data.get("target_commitish"),
        assets=assets,
    )


def pick_release(releases: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the newest non-draft release, preferring stable ones."""
    published = [r for r in releases if not r.get("draft", False)]
    for release in published:
        if not release.get("prerelease", False):
            return release
    return published[0] if published else None


class GitHubClient:
    """Reads releases and READMEs of public (or token-accessible) repositories."""

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        network: Optional[NetworkConfig] = None,
        token: Optional[str] = None,
    ) -> None:
        self._network = network or NetworkConfig()
        self._http = http or HttpClient(self._network)
        self._token = token if token is not None else os.environ.get(GITHUB_TOKEN_ENV)

    def _api_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _api_get(self, path: str) -> Any:
        url = f"{self._network.github_api_url.rstrip('/')}{path}"
        LOGGER.debug(f"GitHub API GET {url}")
        return self._http.get_json(url, headers=self._api_headers())

    def fetch_release(self, owner: str, repo: str, tag: Optional[str] = None) -> ReleaseInfo:
        """Fetch a release by tag, or the latest one.

        Without a tag, the latest endpoint is tried first; when it reports
        no release, the release list is used so repositories that only
        publish prereleases still resolve.

        Raises:
            NoReleaseFound: If the repository has no matching release.
            DownloadFailed: On any other API failure.
        """
        slug = f"{owner}/{repo}"
        try:
            if tag:
                try:
                    return parse_release(self._api_get(f"/repos/{slug}/releases/tags/{tag}"))
                except HTTPError as e:
                    if e.code == 404:
                        raise NoReleaseFound(f"No release tagged '{tag}' in {slug}") from e
                    raise

            try:
                return parse_release(self._api_get(f"/repos/{slug}/releases/latest"))
            except HTTPError as e:
                if e.code != 404:
                    raise
                LOGGER.debug(f"No latest release for {slug}, listing releases")

            try:
                releases = self._api_get(f"/repos/{slug}/releases?per_page=30")
            except HTTPError as e:
                if e.code == 404:
                    raise NoReleaseFound(f"Repository {slug} not found or has no releases") from e
                raise
            chosen = pick_release(releases or [])
            if chosen is None:
                raise NoReleaseFound(f"No releases found for {slug}")
            return parse_release(chosen)
        except HTTPError as e:
            hint = ""
            if e.code in (401, 403):
                hint = f" (set {GITHUB_TOKEN_ENV} to raise the API rate limit)"
            raise DownloadFailed(f"GitHub API request for {slug} failed: HTTP {e.code}{hint}") from e
        except URLError as e:
            raise DownloadFailed(f"GitHub API request for {slug} failed: {e.reason}") from e

    def fetch_readme(self, owner: str, repo: str) -> Optional[str]:
        """Fetch README.md from the main branch, then master.

        Returns:
            README text, or None when neither branch has one.

        Raises:
            DownloadFailed: On network failures other than a missing file.
        """
        base = self._network.github_raw_url.rstrip("/")
        for branch in README_BRANCHES:
            url = f"{base}/{owner}/{repo}/{branch}/{README_NAME}"
            try:
                text = self._http.get_text(url)
            except HTTPError as e:
                if e.code == 404:
                    LOGGER.debug(f"No README on branch {branch} of {owner}/{repo}")
                    continue
                raise DownloadFailed(f"Fetching README of {owner}/{repo} failed: HTTP {e.code}") from e
            except URLError as e:
                raise DownloadFailed(f"Fetching README of {owner}/{repo} failed: {e.reason}") from e
            LOGGER.debug(f"Fetched README of {owner}/{repo} from {branch}")
            return text
        return None
