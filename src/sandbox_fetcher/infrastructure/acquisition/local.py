"""
Local filesystem acquisition.

Copies a file that is already reachable on this host (bare path or
``file://`` URI) into the work directory.
"""

import os
import shutil
from pathlib import Path
from typing import Optional

import structlog

from sandbox_fetcher.errors import FetchError

logger = structlog.get_logger(__name__)


def resolve_local_path(path: str, frameworks_home: Optional[str] = None) -> Path:
    """
    Resolve a local resource path.

    Relative paths are taken relative to ``frameworks_home``; there is no
    implicit fallback to the current directory.

    Raises:
        FetchError: For a relative path without frameworks_home
    """
    if os.path.isabs(path):
        return Path(path)
    if not frameworks_home:
        raise FetchError(
            "A relative path was given but no frameworks home is configured",
            detail=f"cannot resolve '{path}'; set MESOS_FRAMEWORKS_HOME",
            reason="missing_source",
            uri=path,
        )
    return Path(frameworks_home) / path


def copy_local(source: Path, destination: Path) -> Path:
    """
    Copy ``source`` to ``destination``, keeping its mode bits like cp.

    Returns:
        The destination path

    Raises:
        FetchError: If the source is not a readable regular file or the
            destination cannot be written
    """
    if not source.is_file():
        raise FetchError(
            "Local resource does not exist or is not a regular file",
            detail=str(source),
            reason="missing_source",
            uri=str(source),
        )

    logger.info("Copying local resource", source=str(source), destination=str(destination))
    try:
        shutil.copy(source, destination)
    except shutil.SameFileError:
        logger.info("Resource already in place", path=str(destination))
    except PermissionError as e:
        if not os.access(source, os.R_OK):
            raise FetchError(
                "Local resource is not readable",
                detail=str(e),
                reason="missing_source",
                uri=str(source),
            ) from e
        raise FetchError(
            "Cannot write into the work directory",
            detail=str(e),
            reason="destination",
            uri=str(source),
        ) from e
    except OSError as e:
        raise FetchError(
            "Failed to copy local resource",
            detail=str(e),
            reason="destination",
            uri=str(source),
        ) from e

    return destination
