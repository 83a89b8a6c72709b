"""Download-phase unit: fetch the selected asset into the workspace."""

from __future__ import annotations

from typing import Optional
from urllib.error import HTTPError, URLError

from justinstall.clients.http import HttpClient
from justinstall.core.context import ResolutionContext
from justinstall.core.errors import DownloadFailed
from justinstall.core.logging import get_logger
from justinstall.pipeline.unit import Unit

LOGGER = get_logger(__name__)


class Downloader(Unit):
    """Makes the selected asset available as a local file.

    Reads ``selected`` and ``workspace``; writes ``download_path``. Local
    candidates are used in place. Scripts need no download.
    """

    def __init__(self, http: Optional[HttpClient] = None) -> None:
        self._http = http

    @property
    def name(self) -> str:
        return "downloader"

    def should_run(self, context: ResolutionContext) -> bool:
        selected = context.selected
        return selected is not None and not selected.is_script and context.download_path is None

    def execute(self, context: ResolutionContext) -> None:
        selected = context.selected
        if selected.local_path is not None:
            context.download_path = selected.local_path
            LOGGER.debug(f"Using local file {selected.local_path}")
            return

        http = self._http or HttpClient(context.config.network)
        destination = context.workspace.subdir("download") / selected.name
        try:
            http.download(selected.url, destination)
        except HTTPError as e:
            raise DownloadFailed(f"Failed to download {selected.name}: HTTP {e.code}") from e
        except (URLError, ValueError, OSError) as e:
            raise DownloadFailed(f"Failed to download {selected.name}: {e}") from e
        context.download_path = destination
