"""
Resource acquisition dispatcher.

Turns one descriptor value into a file inside the work directory by
matching its source kind explicitly.
"""

from pathlib import Path
from typing import Optional

import structlog

from sandbox_fetcher.domain.sources import (
    HadoopSource,
    HttpSource,
    LocalSource,
    basename_of,
    classify,
)
from sandbox_fetcher.errors import FetchError
from sandbox_fetcher.infrastructure.acquisition.hadoop import HadoopClient
from sandbox_fetcher.infrastructure.acquisition.http import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
    HttpDownloader,
)
from sandbox_fetcher.infrastructure.acquisition.local import copy_local, resolve_local_path

logger = structlog.get_logger(__name__)


class ResourceDispatcher:
    """
    Fetch resources of any supported scheme into a work directory.

    The destination file is always ``work_directory / <final component
    of the source>``.
    """

    def __init__(
        self,
        frameworks_home: Optional[str] = None,
        hadoop_home: Optional[str] = None,
        http_downloader: Optional[HttpDownloader] = None,
        hadoop_client: Optional[HadoopClient] = None,
        http_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.frameworks_home = frameworks_home
        self.http_timeout = http_timeout
        self.http_chunk_size = http_chunk_size
        self._http = http_downloader
        self._owns_http = http_downloader is None
        self._hadoop = hadoop_client or HadoopClient(hadoop_home)

    @property
    def http(self) -> HttpDownloader:
        if self._http is None:
            self._http = HttpDownloader(
                timeout=self.http_timeout,
                chunk_size=self.http_chunk_size,
            )
        return self._http

    def fetch(self, value: str, work_directory: Path) -> Path:
        """
        Fetch one resource.

        Args:
            value: Descriptor value (bare path or URI)
            work_directory: Directory receiving the artifact

        Returns:
            Path of the fetched file

        Raises:
            FetchError: On any acquisition failure
        """
        source = classify(value)
        destination = Path(work_directory) / basename_of(source)
        logger.debug("Dispatching fetch", uri=value, source=type(source).__name__)

        if isinstance(source, LocalSource):
            path = resolve_local_path(source.path, self.frameworks_home)
            return copy_local(path, destination)
        if isinstance(source, HttpSource):
            return self.http.download(source.url, destination)
        if isinstance(source, HadoopSource):
            return self._hadoop.copy_to_local(source.uri, destination)

        raise FetchError(
            "Unsupported resource source",
            detail=repr(source),
            reason="malformed",
            uri=value,
        )

    def close(self) -> None:
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def __enter__(self) -> "ResourceDispatcher":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
