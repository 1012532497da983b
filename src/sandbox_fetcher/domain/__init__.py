"""
Fetcher Domain Layer

Descriptors, requests, source kinds and archive formats.
"""

from .sources import HadoopSource, HttpSource, LocalSource, Source, classify
from .value_objects import (
    ArchiveFormat,
    FetchOutcome,
    FetchReport,
    FetchRequest,
    ResourceDescriptor,
)

__all__ = [
    "ArchiveFormat",
    "FetchOutcome",
    "FetchReport",
    "FetchRequest",
    "ResourceDescriptor",
    "HadoopSource",
    "HttpSource",
    "LocalSource",
    "Source",
    "classify",
]
