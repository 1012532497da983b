"""
HTTP(S) acquisition.

Streams a response body to disk with httpx; nothing is held in memory
beyond one chunk. The body lands in a hidden ``.part`` sibling first and
only replaces the destination once complete.
"""

import os
from pathlib import Path
from typing import Optional

import httpx
import structlog

from sandbox_fetcher.errors import FetchError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0
DEFAULT_CHUNK_SIZE = 8192


class HttpDownloader:
    """Download URLs into files."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the downloader.

        Args:
            timeout: Per-request timeout in seconds
            chunk_size: Streaming chunk size in bytes
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.chunk_size = chunk_size
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 30.0)),
            follow_redirects=True,
            transport=transport,
        )

    def download(self, url: str, destination: Path) -> Path:
        """
        Stream ``url`` into ``destination``.

        A file already at ``destination`` is left untouched when the
        download fails; only the partial ``.part`` file is removed.

        Raises:
            FetchError: reason ``http_status`` for error responses,
                ``network`` for transport failures, ``destination`` when
                the file cannot be written
        """
        logger.info("Downloading resource", url=url, destination=str(destination))
        partial = destination.with_name(f".{destination.name}.part")
        downloaded = 0
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(partial, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                        f.write(chunk)
                        downloaded += len(chunk)
            os.replace(partial, destination)
        except httpx.HTTPStatusError as e:
            _discard(partial)
            raise FetchError(
                "HTTP request returned an error status",
                detail=str(e),
                reason="http_status",
                uri=url,
                status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            _discard(partial)
            raise FetchError(
                "HTTP download failed",
                detail=str(e),
                reason="network",
                uri=url,
            ) from e
        except OSError as e:
            _discard(partial)
            raise FetchError(
                "Cannot write downloaded resource",
                detail=str(e),
                reason="destination",
                uri=url,
            ) from e

        logger.info("Download completed", url=url, size=downloaded)
        return destination

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpDownloader":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove partial download", path=str(path), error=str(e))
