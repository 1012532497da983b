"""
Application Layer

Orchestrates domain objects and infrastructure adapters.
"""

from .services import FetcherService, FetchHandle, FetchOrchestrator

__all__ = ["FetcherService", "FetchHandle", "FetchOrchestrator"]
