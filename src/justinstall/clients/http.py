"""HTTPS transport with certifi-backed certificate verification.

Python builds that cannot reach the system certificate store (standalone
macOS builds in particular) still verify against certifi's CA bundle.
Transport errors are raised as urllib errors; callers translate them into
the domain error that fits their step.
"""

from __future__ import annotations

import json
import shutil
import ssl
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.request import Request, urlopen

import certifi

from justinstall.config.models import NetworkConfig
from justinstall.core.logging import get_logger

LOGGER = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


class HttpClient:
    """Minimal HTTPS client for metadata fetches and downloads."""

    def __init__(self, network: Optional[NetworkConfig] = None) -> None:
        self._network = network or NetworkConfig()
        self._ssl_context: Optional[ssl.SSLContext] = None

    @property
    def ssl_context(self) -> ssl.SSLContext:
        if self._ssl_context is None:
            self._ssl_context = get_ssl_context()
        return self._ssl_context

    def open(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        """Open a URL with proper SSL certificate verification.

        Raises:
            URLError / HTTPError: If the URL cannot be opened.
            ValueError: If the URL is not HTTPS.
        """
        if not url.startswith("https://"):
            raise ValueError(f"Only HTTPS URLs are supported: {url}")

        request_headers = {"User-Agent": self._network.user_agent}
        request_headers.update(headers or {})
        request = Request(url, headers=request_headers)
        return urlopen(  # nosec B310
            request,
            timeout=timeout if timeout is not None else self._network.timeout,
            context=self.ssl_context,
        )

    def get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        with self.open(url, headers=headers) as response:
            charset = response.headers.get_content_charset() or "utf-8"
            return response.read().decode(charset, errors="replace")

    def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        return json.loads(self.get_text(url, headers=headers))

    def download(self, url: str, dest_path: Path) -> int:
        """Stream a URL to a file.

        Returns:
            Number of bytes written.
        """
        LOGGER.info(f"Downloading {url}")
        with self.open(url, timeout=self._network.download_timeout) as response:
            with open(dest_path, "wb") as f:
                shutil.copyfileobj(response, f, CHUNK_SIZE)
        size = dest_path.stat().st_size
        LOGGER.debug(f"Wrote {size} bytes to {dest_path}")
        return size
