"""
Distributed filesystem acquisition through the hadoop command line client.

Anything that is neither local nor HTTP (``hdfs://``, ``s3://``,
``s3n://``, ...) is handed to ``hadoop fs -copyToLocal``.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

import structlog

from sandbox_fetcher.errors import FetchError

logger = structlog.get_logger(__name__)


class HadoopClient:
    """Thin wrapper over the hadoop executable."""

    def __init__(self, hadoop_home: Optional[str] = None):
        self.hadoop_home = hadoop_home
        self._available: Optional[bool] = None

    @property
    def command(self) -> str:
        if self.hadoop_home:
            return str(Path(self.hadoop_home) / "bin" / "hadoop")
        return "hadoop"

    def is_available(self) -> bool:
        """Check once whether ``hadoop version`` runs."""
        if self._available is None:
            try:
                completed = self._run(["version"])
                self._available = completed.returncode == 0
            except OSError as e:
                logger.warning("Hadoop client cannot be executed", command=self.command, error=str(e))
                self._available = False
        return self._available

    def copy_to_local(self, uri: str, destination: Path) -> Path:
        """
        Copy a remote object to ``destination``.

        Raises:
            FetchError: reason ``client_unavailable`` when no working
                client is found, ``client_failed`` when the copy fails
        """
        if not self.is_available():
            raise FetchError(
                "Hadoop client not available",
                detail=f"'{self.command} version' did not succeed; check HADOOP_HOME",
                reason="client_unavailable",
                uri=uri,
            )

        logger.info("Copying with hadoop client", uri=uri, destination=str(destination))
        try:
            completed = self._run(["fs", "-copyToLocal", uri, str(destination)])
        except OSError as e:
            raise FetchError(
                "Hadoop client could not be started",
                detail=str(e),
                reason="client_unavailable",
                uri=uri,
            ) from e

        if completed.returncode != 0:
            raise FetchError(
                "Hadoop copy failed",
                detail=completed.stderr.strip() or f"exit code {completed.returncode}",
                reason="client_failed",
                uri=uri,
            )
        return destination

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.command, *args],
            check=False,
            text=True,
            capture_output=True,
        )
