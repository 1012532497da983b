"""
Archive detection and extraction.

Archives are recognized by file name only. Tar and zip members are
unpacked into the work directory with their recorded relative paths;
single-stream compressed files are decompressed next to the original
and replace an existing file of the same name only on success.
The original archive is left in place.
"""

import bz2
import gzip
import lzma
import os
import posixpath
import shutil
import tarfile
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import structlog

from sandbox_fetcher.domain.value_objects import ArchiveFormat
from sandbox_fetcher.errors import ExtractionError
from sandbox_fetcher.utils.common import safe_join

logger = structlog.get_logger(__name__)

# Longest suffixes first so ".tar.gz" wins over ".gz".
ARCHIVE_SUFFIXES: Tuple[Tuple[str, ArchiveFormat], ...] = (
    (".tar.gz", ArchiveFormat.TAR),
    (".tar.bz2", ArchiveFormat.TAR),
    (".tar.xz", ArchiveFormat.TAR),
    (".tgz", ArchiveFormat.TAR),
    (".tbz2", ArchiveFormat.TAR),
    (".tbz", ArchiveFormat.TAR),
    (".txz", ArchiveFormat.TAR),
    (".tar", ArchiveFormat.TAR),
    (".zip", ArchiveFormat.ZIP),
    (".gz", ArchiveFormat.GZIP),
    (".bz2", ArchiveFormat.BZIP2),
    (".xz", ArchiveFormat.XZ),
)

_STREAM_OPENERS: Dict[ArchiveFormat, Callable] = {
    ArchiveFormat.GZIP: gzip.open,
    ArchiveFormat.BZIP2: bz2.open,
    ArchiveFormat.XZ: lzma.open,
}

# Interpreters with extraction filters get the "data" filter on top of
# the member checks below.
_TAR_FILTER = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}

_CORRUPTION_ERRORS = (
    tarfile.TarError,
    zipfile.BadZipFile,
    lzma.LZMAError,
    zlib.error,
    EOFError,
    OSError,
)


def detect_archive(path) -> Optional[ArchiveFormat]:
    """Classify a file by suffix, ``None`` when it is not an archive."""
    name = Path(path).name.lower()
    for suffix, archive_format in ARCHIVE_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            return archive_format
    return None


def maybe_extract(path: Path, work_directory: Path, extract: bool) -> bool:
    """
    Extract ``path`` into ``work_directory`` when asked and recognized.

    Returns:
        True if something was extracted, False if the file was left as is

    Raises:
        ExtractionError: For corrupt archives or members escaping the
            work directory
    """
    if not extract:
        return False

    archive_format = detect_archive(path)
    if archive_format is None:
        logger.debug("Not an archive, leaving in place", path=str(path))
        return False

    logger.info("Extracting archive", path=str(path), format=archive_format.value)
    try:
        if archive_format is ArchiveFormat.TAR:
            _extract_tar(path, work_directory)
        elif archive_format is ArchiveFormat.ZIP:
            _extract_zip(path, work_directory)
        else:
            _decompress(path, work_directory, archive_format)
    except ExtractionError:
        raise
    except _CORRUPTION_ERRORS as e:
        raise ExtractionError(
            "Failed to extract archive",
            detail=str(e),
            path=str(path),
            format=archive_format.value,
        ) from e

    return True


def _extract_tar(path: Path, work_directory: Path) -> None:
    with tarfile.open(path, "r:*") as tar:
        members = tar.getmembers()
        for member in members:
            _check_tar_member(member, work_directory, path)
        tar.extractall(work_directory, members=members, **_TAR_FILTER)


def _check_tar_member(member: tarfile.TarInfo, work_directory: Path, archive: Path) -> None:
    member.name = member.name.lstrip("/")
    _check_member_name(member.name, work_directory, archive)

    if member.issym():
        target = posixpath.join(posixpath.dirname(member.name), member.linkname)
        if posixpath.isabs(member.linkname) or not _within(work_directory, target):
            raise ExtractionError(
                "Archive symlink points outside the work directory",
                detail=f"{member.name} -> {member.linkname}",
                path=str(archive),
            )
    elif member.islnk():
        member.linkname = member.linkname.lstrip("/")
        _check_member_name(member.linkname, work_directory, archive)


def _extract_zip(path: Path, work_directory: Path) -> None:
    with zipfile.ZipFile(path) as archive:
        for info in archive.infolist():
            _check_member_name(info.filename, work_directory, path)
        archive.extractall(work_directory)


def _decompress(path: Path, work_directory: Path, archive_format: ArchiveFormat) -> None:
    name = Path(path).name
    target = Path(work_directory) / name[: name.rfind(".")]
    # target is only replaced once the whole stream decoded
    fd, scratch = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=work_directory)
    try:
        with os.fdopen(fd, "wb") as sink, _STREAM_OPENERS[archive_format](path, "rb") as source:
            shutil.copyfileobj(source, sink)
        shutil.copymode(path, scratch)
        os.replace(scratch, target)
    except BaseException:
        os.unlink(scratch)
        raise


def _check_member_name(name: str, work_directory: Path, archive: Path) -> None:
    try:
        safe_join(work_directory, name)
    except ValueError as e:
        raise ExtractionError(
            "Archive entry escapes the work directory",
            detail=f"{name}: {e}",
            path=str(archive),
        ) from e


def _within(work_directory: Path, relative: str) -> bool:
    root = os.path.realpath(work_directory)
    resolved = os.path.normpath(os.path.join(root, relative))
    return resolved == root or resolved.startswith(root + os.sep)
