"""Tests for the GitHub client."""

from __future__ import annotations

from typing import Any, Dict
from unittest.mock import MagicMock
from urllib.error import HTTPError

import pytest

from justinstall.clients.github import GitHubClient, pick_release
from justinstall.core.errors import DownloadFailed, NoReleaseFound


def http_error(code: int) -> HTTPError:
    return HTTPError("https://api.github.com", code, "error", {}, None)


def release_payload(tag: str, prerelease: bool = False, draft: bool = False) -> Dict[str, Any]:
    return {
        "tag_name": tag,
        "name": f"Release {tag}",
        "body": "notes",
        "prerelease": prerelease,
        "draft": draft,
        "target_commitish": "abc123",
        "assets": [
            {
                "name": "tool-linux-amd64.tar.gz",
                "browser_download_url": f"https://github.com/acme/tool/releases/download/{tag}/tool.tar.gz",
                "size": 2048,
            }
        ],
    }


def client_with(http: MagicMock) -> GitHubClient:
    return GitHubClient(http=http, token="")


class TestFetchRelease:
    """Tests for GitHubClient.fetch_release."""

    def test_latest_release(self) -> None:
        http = MagicMock()
        http.get_json.return_value = release_payload("v2.0.0")

        release = client_with(http).fetch_release("acme", "tool")

        assert release.tag == "v2.0.0"
        assert release.commit == "abc123"
        assert release.assets[0].size == 2048
        url = http.get_json.call_args.args[0]
        assert url == "https://api.github.com/repos/acme/tool/releases/latest"

    def test_prerelease_only_repository(self) -> None:
        http = MagicMock()
        http.get_json.side_effect = [
            http_error(404),
            [release_payload("v3.0.0-rc1", prerelease=True)],
        ]

        release = client_with(http).fetch_release("acme", "tool")

        assert release.tag == "v3.0.0-rc1"
        assert release.prerelease

    def test_missing_repository(self) -> None:
        http = MagicMock()
        http.get_json.side_effect = [http_error(404), http_error(404)]
        with pytest.raises(NoReleaseFound):
            client_with(http).fetch_release("acme", "nothing")

    def test_missing_tag(self) -> None:
        http = MagicMock()
        http.get_json.side_effect = http_error(404)
        with pytest.raises(NoReleaseFound, match="v9"):
            client_with(http).fetch_release("acme", "tool", tag="v9")

    def test_rate_limit_hint(self) -> None:
        http = MagicMock()
        http.get_json.side_effect = http_error(403)
        with pytest.raises(DownloadFailed, match="GITHUB_TOKEN"):
            client_with(http).fetch_release("acme", "tool")

    def test_token_header(self) -> None:
        http = MagicMock()
        http.get_json.return_value = release_payload("v1.0.0")
        GitHubClient(http=http, token="secret").fetch_release("acme", "tool")
        headers = http.get_json.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"


class TestPickRelease:
    def test_prefers_stable(self) -> None:
        releases = [
            release_payload("v2.0.0-beta", prerelease=True),
            release_payload("v1.9.0"),
        ]
        assert pick_release(releases)["tag_name"] == "v1.9.0"

    def test_skips_drafts(self) -> None:
        assert pick_release([release_payload("v2", draft=True)]) is None


class TestFetchReadme:
    def test_falls_back_to_master(self) -> None:
        http = MagicMock()
        http.get_text.side_effect = [http_error(404), "# tool"]

        assert client_with(http).fetch_readme("acme", "tool") == "# tool"
        assert http.get_text.call_args.args[0].endswith("/acme/tool/master/README.md")

    def test_no_readme(self) -> None:
        http = MagicMock()
        http.get_text.side_effect = http_error(404)
        assert client_with(http).fetch_readme("acme", "tool") is None

    def test_server_error(self) -> None:
        http = MagicMock()
        http.get_text.side_effect = http_error(500)
        with pytest.raises(DownloadFailed, match="HTTP 500"):
            client_with(http).fetch_readme("acme", "tool")
