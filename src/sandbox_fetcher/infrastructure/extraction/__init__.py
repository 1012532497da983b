"""
Extraction Infrastructure

Archive detection and in-place extraction.
"""

from .archive import ARCHIVE_SUFFIXES, detect_archive, maybe_extract

__all__ = ["ARCHIVE_SUFFIXES", "detect_archive", "maybe_extract"]
