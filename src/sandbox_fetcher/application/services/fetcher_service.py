"""
Fetcher Service

Runs inside the fetcher process: fetches every descriptor of a request
in order, then optionally extracts it or marks it executable.
"""

from pathlib import Path
from typing import Optional

import structlog

from sandbox_fetcher.domain.value_objects import (
    FetchOutcome,
    FetchReport,
    FetchRequest,
    ResourceDescriptor,
)
from sandbox_fetcher.errors import ConfigurationError
from sandbox_fetcher.infrastructure.acquisition import HttpDownloader, ResourceDispatcher
from sandbox_fetcher.infrastructure.acquisition.http import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT_SECONDS,
)
from sandbox_fetcher.infrastructure.extraction import maybe_extract
from sandbox_fetcher.infrastructure.permissions import chown_tree, grant_execute

logger = structlog.get_logger(__name__)


class FetcherService:
    """
    Stage the resources of one FetchRequest into its work directory.

    Descriptors are processed strictly one after another. The first
    failure stops the run; artifacts fetched before it stay on disk.
    """

    def __init__(
        self,
        http_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_chunk_size: int = DEFAULT_CHUNK_SIZE,
        http_downloader: Optional[HttpDownloader] = None,
    ):
        """
        Initialize the fetcher service.

        Args:
            http_timeout: Timeout for HTTP downloads in seconds
            http_chunk_size: Streaming chunk size for HTTP downloads
            http_downloader: Pre-built downloader, mainly for tests
        """
        self.http_timeout = http_timeout
        self.http_chunk_size = http_chunk_size
        self._http_downloader = http_downloader

    def run(self, request: FetchRequest) -> FetchReport:
        """
        Fetch all descriptors of ``request``.

        Returns:
            FetchReport with one outcome per descriptor

        Raises:
            ConfigurationError: If the work directory is unusable
            FetcherError: The first fetch, extraction or permission failure
        """
        work_directory = Path(request.work_directory)
        if not work_directory.is_dir():
            raise ConfigurationError(
                "Work directory does not exist",
                detail=str(work_directory),
                path=str(work_directory),
            )

        logger.info(
            "Starting fetch",
            work_directory=str(work_directory),
            resources=len(request.descriptors),
        )

        report = FetchReport()
        with ResourceDispatcher(
            frameworks_home=request.frameworks_home,
            hadoop_home=request.hadoop_home,
            http_downloader=self._http_downloader,
            http_timeout=self.http_timeout,
            http_chunk_size=self.http_chunk_size,
        ) as dispatcher:
            for descriptor in request.descriptors:
                report.outcomes.append(self._fetch_one(dispatcher, descriptor, work_directory))

        if request.user:
            chown_tree(work_directory, request.user)

        return report

    def _fetch_one(
        self,
        dispatcher: ResourceDispatcher,
        descriptor: ResourceDescriptor,
        work_directory: Path,
    ) -> FetchOutcome:
        log = logger.bind(uri=descriptor.value)
        log.info("Fetching resource")

        path = dispatcher.fetch(descriptor.value, work_directory)
        outcome = FetchOutcome(descriptor=descriptor, path=path)

        # executable wins over extract: the fetched file itself is the artifact
        if descriptor.executable:
            grant_execute(path)
            outcome.executable = True
        elif descriptor.should_extract:
            outcome.extracted = maybe_extract(path, work_directory, extract=True)

        log.info("Fetched resource", **outcome.to_dict())
        return outcome
