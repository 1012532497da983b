"""
Fetch Value Objects

Immutable value objects describing what to fetch and where.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    One resource reference plus its post-fetch flags.

    Attributes:
        value: Scheme-qualified URI or bare filesystem path
        executable: Grant execute permission to the fetched file
        extract: Unpack recognized archives; ``None`` means unset,
            which behaves as ``True``
    """

    value: str
    executable: bool = False
    extract: Optional[bool] = None

    @property
    def should_extract(self) -> bool:
        return self.extract is None or self.extract


@dataclass(frozen=True)
class FetchRequest:
    """
    Everything one fetcher invocation needs.

    Attributes:
        descriptors: Resources to fetch, in order
        work_directory: Sandbox directory receiving the artifacts
        user: Owner of the work directory once fetching is done
        frameworks_home: Base directory for relative local paths
        hadoop_home: Hadoop installation for distributed filesystem URIs
    """

    descriptors: Tuple[ResourceDescriptor, ...]
    work_directory: Path
    user: Optional[str] = None
    frameworks_home: Optional[str] = None
    hadoop_home: Optional[str] = None


class ArchiveFormat(str, Enum):
    """Archive families the extractor understands."""

    TAR = "tar"
    ZIP = "zip"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    XZ = "xz"


@dataclass
class FetchOutcome:
    """Result of fetching a single descriptor."""

    descriptor: ResourceDescriptor
    path: Path
    extracted: bool = False
    executable: bool = False

    def to_dict(self) -> dict:
        return {
            "uri": self.descriptor.value,
            "path": str(self.path),
            "extracted": self.extracted,
            "executable": self.executable,
        }


@dataclass
class FetchReport:
    """Outcomes of a whole run, in descriptor order."""

    outcomes: list = field(default_factory=list)

    @property
    def paths(self) -> list:
        return [outcome.path for outcome in self.outcomes]
