"""Download-link scraping for opaque websites."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin, urlparse

from justinstall.clients.http import HttpClient
from justinstall.core.errors import DownloadFailed
from justinstall.core.logging import get_logger

LOGGER = get_logger(__name__)

ANCHOR_HREF_PATTERN = re.compile(r"""href\s*=\s*["']([^"']+)["']""", re.IGNORECASE)

HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})

_SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")


@dataclass
class PageFetch:
    """Result of fetching a website URL.

    Attributes:
        url: Final URL after redirects.
        content_type: MIME type reported by the server.
        html: Page body when the response is HTML, otherwise None.
    """

    url: str
    content_type: str
    html: Optional[str] = None

    @property
    def is_html(self) -> bool:
        return self.html is not None


def fetch_page(http: HttpClient, url: str) -> PageFetch:
    """Fetch a page, reading the body only when it is HTML.

    Raises:
        DownloadFailed: If the page cannot be fetched.
    """
    try:
        with http.open(url) as response:
            content_type = response.headers.get_content_type()
            final_url = response.geturl() or url
            if content_type not in HTML_CONTENT_TYPES:
                return PageFetch(url=final_url, content_type=content_type)
            charset = response.headers.get_content_charset() or "utf-8"
            html = response.read().decode(charset, errors="replace")
            return PageFetch(url=final_url, content_type=content_type, html=html)
    except HTTPError as e:
        raise DownloadFailed(f"Fetching {url} failed: HTTP {e.code}") from e
    except URLError as e:
        raise DownloadFailed(f"Fetching {url} failed: {e.reason}") from e
    except ValueError as e:
        raise DownloadFailed(str(e)) from e


def extract_links(html: str, base_url: str) -> List[str]:
    """Return absolute http(s) link targets of a page, deduplicated in page order."""
    links: List[str] = []
    seen = set()
    for match in ANCHOR_HREF_PATTERN.finditer(html):
        href = match.group(1).strip()
        if not href or href.startswith("#") or href.lower().startswith(_SKIPPED_SCHEMES):
            continue
        absolute = urljoin(base_url, href)
        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


def link_filename(url: str) -> str:
    """Return the last path segment of a URL."""
    path = urlparse(url).path.rstrip("/")
    return path.rsplit("/", 1)[-1] if path else ""
