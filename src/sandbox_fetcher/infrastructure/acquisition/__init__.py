"""
Acquisition Infrastructure

Scheme-specific fetch strategies and the dispatcher selecting them.
"""

from .dispatcher import ResourceDispatcher
from .hadoop import HadoopClient
from .http import HttpDownloader
from .local import copy_local, resolve_local_path

__all__ = [
    "ResourceDispatcher",
    "HadoopClient",
    "HttpDownloader",
    "copy_local",
    "resolve_local_path",
]
