"""
Application Services

Use cases of the fetcher: staging resources inside the fetcher process
and launching that process from the agent.
"""

from .fetcher_service import FetcherService
from .orchestrator import FetchHandle, FetchOrchestrator

__all__ = ["FetcherService", "FetchHandle", "FetchOrchestrator"]
