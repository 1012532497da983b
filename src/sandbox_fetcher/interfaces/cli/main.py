"""
sandbox-fetcher entry point.

Takes no arguments: the whole request arrives through the environment
(see ``sandbox_fetcher.infrastructure.protocol``). Exit status is 0 when
every resource was staged, 1 when one of them failed and 2 when the
environment itself is unusable.
"""

import os
import sys
from typing import Mapping, Optional

from sandbox_fetcher.application.services import FetcherService
from sandbox_fetcher.errors import ConfigurationError, FetcherError
from sandbox_fetcher.infrastructure.logging import configure_logging, get_logger
from sandbox_fetcher.infrastructure.protocol import decode_environment
from sandbox_fetcher.settings import get_settings

logger = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_FETCH_FAILED = 1
EXIT_CONFIGURATION_ERROR = 2


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    """Run the fetcher against ``environ`` (``os.environ`` by default)."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    try:
        request = decode_environment(os.environ if environ is None else environ)
        report = FetcherService(
            http_timeout=settings.http_timeout,
            http_chunk_size=settings.http_chunk_size,
        ).run(request)
    except ConfigurationError as e:
        logger.error("Invalid fetcher configuration", **e.to_dict())
        return EXIT_CONFIGURATION_ERROR
    except FetcherError as e:
        logger.error("Fetch failed", **e.to_dict())
        return EXIT_FETCH_FAILED

    logger.info("All resources fetched", count=len(report.outcomes))
    return EXIT_SUCCESS


def entry_point():
    """CLI entry point"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    entry_point()
