"""
Resource sources.

A descriptor value is classified into exactly one source kind. The set
is closed: adding a scheme means adding a variant here and a branch in
the dispatcher.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Union
from urllib.parse import urlsplit

from sandbox_fetcher.errors import FetchError

HTTP_SCHEMES = ("http", "https")

FILE_SCHEME_PREFIX = "file://"

_SCHEME_PREFIX = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")


@dataclass(frozen=True)
class LocalSource:
    """A path on the local filesystem (bare or ``file://``)."""

    path: str


@dataclass(frozen=True)
class HttpSource:
    """An ``http://`` or ``https://`` URL."""

    url: str


@dataclass(frozen=True)
class HadoopSource:
    """Any other scheme, served through the hadoop client."""

    uri: str


Source = Union[LocalSource, HttpSource, HadoopSource]


def classify(value: str) -> Source:
    """
    Classify a descriptor value into its source kind.

    Args:
        value: Bare path or scheme-qualified URI

    Returns:
        One of LocalSource, HttpSource, HadoopSource

    Raises:
        FetchError: For ``file://`` URIs naming a remote host
    """
    match = _SCHEME_PREFIX.match(value)
    if match is None:
        return LocalSource(path=value)

    if value.startswith(FILE_SCHEME_PREFIX):
        return LocalSource(path=_strip_file_scheme(value))

    scheme = match.group(1).lower()
    if scheme in HTTP_SCHEMES:
        return HttpSource(url=value)

    return HadoopSource(uri=value)


def _strip_file_scheme(value: str) -> str:
    remainder = value[len(FILE_SCHEME_PREFIX):]
    if remainder.startswith("/"):
        return remainder
    host, sep, path = remainder.partition("/")
    if host == "localhost":
        return "/" + path if sep else "/"
    raise FetchError(
        "file:// URIs must refer to the local host",
        detail=f"host '{host}' is not local",
        reason="malformed",
        uri=value,
    )


def basename_of(source: Source) -> str:
    """
    Final path component of a source, used as the destination name.

    Raises:
        FetchError: If the source has no usable final component
    """
    if isinstance(source, LocalSource):
        raw = source.path
    elif isinstance(source, HttpSource):
        raw = urlsplit(source.url).path
    else:
        raw = urlsplit(source.uri).path

    name = PurePosixPath(raw).name if raw.rstrip("/") == raw else ""
    if name in ("", ".", ".."):
        raise FetchError(
            "Cannot determine a file name for the resource",
            detail=f"'{raw}' has no final path component",
            reason="malformed",
        )
    return name
