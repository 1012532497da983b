"""
Sandbox Fetcher

Stages a task's input artifacts into its sandbox directory:

- an environment-variable wire protocol for resource descriptors
- an agent-side orchestrator launching the fetcher process
- the fetcher itself (local, HTTP and hadoop sources, archive
  extraction, permissions)
"""

__version__ = "0.1.0"

from sandbox_fetcher.domain.value_objects import FetchRequest, ResourceDescriptor
from sandbox_fetcher.errors import (
    ConfigurationError,
    ExtractionError,
    FetcherError,
    FetchError,
    PermissionSetError,
    SpawnError,
)

__all__ = [
    "FetchRequest",
    "ResourceDescriptor",
    "ConfigurationError",
    "ExtractionError",
    "FetcherError",
    "FetchError",
    "PermissionSetError",
    "SpawnError",
]
